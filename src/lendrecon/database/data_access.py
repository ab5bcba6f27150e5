"""
`DataAccess` implementation backed by the SQLite ledger.

SQLAlchemy sessions are synchronous, so every query runs in a worker thread via
`asyncio.to_thread` and returns detached, immutable records.
"""

import asyncio
from collections.abc import Callable

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from lendrecon.checksum_cache import normalize_address
from lendrecon.database.models import ReserveTable, UserPositionTable, UserTable
from lendrecon.types.records import (
    ReserveRecord,
    ReserveTokenField,
    UserPositionRecord,
    UserRecord,
)


def reserve_record_from_row(row: ReserveTable) -> ReserveRecord:
    return ReserveRecord(
        reserve_address=row.reserve_address,
        a_token_address=row.a_token_address,
        debt_token_address=row.debt_token_address,
        symbol=row.symbol,
        total_scaled_supply=row.total_scaled_supply,
        total_scaled_debt=row.total_scaled_debt,
        liquidity_rate=row.liquidity_rate,
        variable_borrow_rate=row.variable_borrow_rate,
        stable_borrow_rate=row.stable_borrow_rate,
        liquidity_index=row.liquidity_index,
        variable_borrow_index=row.variable_borrow_index,
        block_number=row.block_number,
    )


def user_record_from_row(row: UserTable) -> UserRecord:
    return UserRecord(
        user_address=row.user_address,
        positions=tuple(
            UserPositionRecord(
                reserve_address=position.reserve.reserve_address,
                a_token_balance=position.a_token_balance,
                debt_token_balance=position.debt_token_balance,
            )
            for position in row.positions
        ),
    )


class SqlDataAccess:
    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self.session_factory = session_factory

    def _get_reserve(self, reserve_address: str) -> ReserveRecord | None:
        with self.session_factory() as session:
            row = session.scalar(
                select(ReserveTable).where(
                    ReserveTable.reserve_address == normalize_address(reserve_address)
                )
            )
            return None if row is None else reserve_record_from_row(row)

    def _find_reserve_for_token(
        self,
        token_address: str,
        token_field: ReserveTokenField,
    ) -> ReserveRecord | None:
        column = getattr(ReserveTable, token_field.value)
        with self.session_factory() as session:
            row = session.scalar(
                select(ReserveTable).where(column == normalize_address(token_address))
            )
            return None if row is None else reserve_record_from_row(row)

    def _get_user_position(self, user_address: str) -> UserRecord | None:
        with self.session_factory() as session:
            row = session.scalar(
                select(UserTable)
                .where(UserTable.user_address == normalize_address(user_address))
                .options(selectinload(UserTable.positions).joinedload(UserPositionTable.reserve))
            )
            return None if row is None else user_record_from_row(row)

    def _list_all_reserves(self) -> list[ReserveRecord]:
        with self.session_factory() as session:
            return [
                reserve_record_from_row(row)
                for row in session.scalars(select(ReserveTable).order_by(ReserveTable.id))
            ]

    def _list_all_users(self) -> list[UserRecord]:
        with self.session_factory() as session:
            return [
                user_record_from_row(row)
                for row in session.scalars(
                    select(UserTable)
                    .order_by(UserTable.id)
                    .options(
                        selectinload(UserTable.positions).joinedload(UserPositionTable.reserve)
                    )
                )
            ]

    async def get_reserve(self, reserve_address: str) -> ReserveRecord | None:
        return await asyncio.to_thread(self._get_reserve, reserve_address)

    async def find_reserve_for_token(
        self,
        token_address: str,
        token_field: ReserveTokenField = ReserveTokenField.RESERVE,
    ) -> ReserveRecord | None:
        """
        Look up a reserve by its underlying asset, aToken or variable debt token address.
        """

        return await asyncio.to_thread(self._find_reserve_for_token, token_address, token_field)

    async def get_user_position(self, user_address: str) -> UserRecord | None:
        return await asyncio.to_thread(self._get_user_position, user_address)

    async def list_all_reserves(self) -> list[ReserveRecord]:
        return await asyncio.to_thread(self._list_all_reserves)

    async def list_all_users(self) -> list[UserRecord]:
        return await asyncio.to_thread(self._list_all_users)
