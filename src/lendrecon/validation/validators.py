"""
Reconciliation of stored scaled balances against on-chain token state.

Every single-value check is an instance of one routine, `ReserveValidator.reconcile`, selected by
a `ReconciliationTarget`:

    side:   SUPPLY (aToken, liquidity index) or BORROW (debt token, variable borrow index)
    scope:  USER (one holder's position) or RESERVE (the aggregate over all holders)
    mode:   REAL (project the stored balance through the current index and compare against
            `balanceOf` / `totalSupply`) or SCALED (compare the stored balance directly against
            `scaledBalanceOf` / `scaledTotalSupply`)

Composite checks (a reserve's supply and borrow, or every position held by a user) attempt each
sub-check independently. A failed sub-check is recorded in the result's `error` field and never
prevents its siblings from completing.
"""

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from enum import Enum

from lendrecon.exceptions.base import LendreconError
from lendrecon.exceptions.fetching import ReserveNotFound, UserNotFound
from lendrecon.libraries.token_math import parse_balance, project_real_balance
from lendrecon.logging import logger
from lendrecon.types.abstract import ChainAccess, DataAccess
from lendrecon.types.records import ReserveRecord, StoredAmount, UserPositionRecord, UserRecord
from lendrecon.validation.classifier import DEFAULT_POLICY, TolerancePolicy
from lendrecon.validation.types import (
    BORROW_ERROR_PREFIX,
    SUPPLY_ERROR_PREFIX,
    EntryState,
    PositionValidation,
    ReserveIndexValidation,
    ReserveValidation,
    UserValidation,
    join_errors,
)


class Side(Enum):
    SUPPLY = "supply"
    BORROW = "borrow"


class Scope(Enum):
    USER = "user"
    RESERVE = "reserve"


class BalanceMode(Enum):
    REAL = "real"
    SCALED = "scaled"


@dataclass(slots=True, frozen=True)
class ReconciliationTarget:
    side: Side
    scope: Scope
    mode: BalanceMode
    reserve_address: str
    user_address: str | None = None

    def __post_init__(self) -> None:
        if self.scope is Scope.USER and self.user_address is None:
            msg = "A user-scoped reconciliation requires a user address."
            raise ValueError(msg)

    @property
    def description(self) -> str:
        token = "aToken" if self.side is Side.SUPPLY else "debt token"
        kind = "scaled " if self.mode is BalanceMode.SCALED else ""
        if self.scope is Scope.USER:
            return (
                f"user {self.user_address} {kind}{self.side.value} "
                f"for reserve {self.reserve_address}"
            )
        return f"total {kind}{token} supply for reserve {self.reserve_address}"


async def _attempt[T](awaitable: Awaitable[T], prefix: str) -> tuple[T | None, str | None]:
    """
    Await a sub-check, converting a package exception into a labeled error message.
    """

    try:
        return await awaitable, None
    except LendreconError as exc:
        logger.warning(f"{prefix}: {exc}")
        return None, f"{prefix}: {exc}"


class ReserveValidator:
    """
    Compares the off-chain ledger held by a `DataAccess` collaborator against on-chain state read
    through a `ChainAccess` collaborator.

    The validator keeps no state between calls, so a single instance can serve any number of
    concurrent validations.
    """

    def __init__(
        self,
        data_access: DataAccess,
        chain_access: ChainAccess,
        policy: TolerancePolicy = DEFAULT_POLICY,
    ) -> None:
        self.data_access = data_access
        self.chain_access = chain_access
        self.policy = policy

    async def _get_reserve(self, reserve_address: str) -> ReserveRecord:
        reserve = await self.data_access.get_reserve(reserve_address)
        if reserve is None:
            raise ReserveNotFound(reserve_address)
        return reserve

    async def _get_user_position(
        self,
        user_address: str,
        reserve_address: str,
    ) -> UserPositionRecord | None:
        user = await self.data_access.get_user_position(user_address)
        if user is None:
            return None
        return user.get_position(reserve_address)

    async def _get_index(self, side: Side, reserve_address: str) -> int:
        match side:
            case Side.SUPPLY:
                return await self.chain_access.get_liquidity_index(reserve_address)
            case Side.BORROW:
                return await self.chain_access.get_variable_borrow_index(reserve_address)

    async def _get_on_chain_amount(
        self,
        target: ReconciliationTarget,
        reserve: ReserveRecord,
    ) -> int:
        token_address = (
            reserve.a_token_address if target.side is Side.SUPPLY else reserve.debt_token_address
        )

        match target.scope, target.mode:
            case Scope.USER, BalanceMode.REAL:
                assert target.user_address is not None
                return await self.chain_access.get_balance_of(token_address, target.user_address)
            case Scope.USER, BalanceMode.SCALED:
                assert target.user_address is not None
                return await self.chain_access.get_scaled_balance_of(
                    token_address, target.user_address
                )
            case Scope.RESERVE, BalanceMode.REAL:
                return await self.chain_access.get_total_supply(token_address)
            case Scope.RESERVE, BalanceMode.SCALED:
                return await self.chain_access.get_scaled_total_supply(token_address)

        msg = f"Unsupported reconciliation target {target}"
        raise ValueError(msg)

    @staticmethod
    def _get_stored_scaled_amount(
        target: ReconciliationTarget,
        reserve: ReserveRecord,
        position: UserPositionRecord | None,
    ) -> int:
        if target.scope is Scope.RESERVE:
            if target.side is Side.SUPPLY:
                return parse_balance(reserve.total_scaled_supply, "total_scaled_supply")
            return parse_balance(reserve.total_scaled_debt, "total_scaled_debt")

        # A user without a recorded position in this reserve holds nothing
        if position is None:
            return 0
        if target.side is Side.SUPPLY:
            return parse_balance(position.a_token_balance, "a_token_balance")
        return parse_balance(position.debt_token_balance, "debt_token_balance")

    async def reconcile(
        self,
        target: ReconciliationTarget,
        *,
        reserve: ReserveRecord | None = None,
        user: UserRecord | None = None,
    ) -> EntryState:
        """
        Compute the database amount for the target and compare it to the on-chain amount.

        Records that the caller has already fetched may be passed in to skip the lookup.
        """

        if reserve is None:
            reserve = await self._get_reserve(target.reserve_address)

        position: UserPositionRecord | None = None
        if target.scope is Scope.USER:
            assert target.user_address is not None
            position = (
                user.get_position(reserve.reserve_address)
                if user is not None
                else await self._get_user_position(target.user_address, reserve.reserve_address)
            )

        scaled_amount = self._get_stored_scaled_amount(target, reserve, position)

        match target.mode:
            case BalanceMode.REAL:
                index = await self._get_index(target.side, reserve.reserve_address)
                database_amount = project_real_balance(scaled_amount, index)
            case BalanceMode.SCALED:
                database_amount = scaled_amount

        on_chain_amount = await self._get_on_chain_amount(target, reserve)
        entry = EntryState.new(database_amount, on_chain_amount)

        logger.debug(
            f"Reconciled {target.description}: database={entry.database_amount}, "
            f"on-chain={entry.on_chain_amount}, diff={entry.difference} "
            f"({entry.percentage:.6f}%)"
        )
        return entry

    async def validate_user_supply(
        self,
        user_address: str,
        reserve_address: str,
        mode: BalanceMode = BalanceMode.REAL,
    ) -> EntryState:
        return await self.reconcile(
            ReconciliationTarget(
                side=Side.SUPPLY,
                scope=Scope.USER,
                mode=mode,
                reserve_address=reserve_address,
                user_address=user_address,
            )
        )

    async def validate_user_borrow(
        self,
        user_address: str,
        reserve_address: str,
        mode: BalanceMode = BalanceMode.REAL,
    ) -> EntryState:
        return await self.reconcile(
            ReconciliationTarget(
                side=Side.BORROW,
                scope=Scope.USER,
                mode=mode,
                reserve_address=reserve_address,
                user_address=user_address,
            )
        )

    async def validate_token_supply(
        self,
        reserve_address: str,
        mode: BalanceMode = BalanceMode.REAL,
    ) -> EntryState:
        return await self.reconcile(
            ReconciliationTarget(
                side=Side.SUPPLY,
                scope=Scope.RESERVE,
                mode=mode,
                reserve_address=reserve_address,
            )
        )

    async def validate_token_borrow(
        self,
        reserve_address: str,
        mode: BalanceMode = BalanceMode.REAL,
    ) -> EntryState:
        return await self.reconcile(
            ReconciliationTarget(
                side=Side.BORROW,
                scope=Scope.RESERVE,
                mode=mode,
                reserve_address=reserve_address,
            )
        )

    async def _validate_position(
        self,
        user: UserRecord,
        position: UserPositionRecord,
        mode: BalanceMode,
    ) -> PositionValidation:
        reserve, reserve_error = await _attempt(
            self._get_reserve(position.reserve_address),
            prefix="Position validation failed",
        )
        if reserve is None:
            return PositionValidation(
                reserve_address=position.reserve_address,
                error=reserve_error,
            )

        (supply, supply_error), (borrow, borrow_error) = await asyncio.gather(
            *(
                _attempt(
                    self.reconcile(
                        ReconciliationTarget(
                            side=side,
                            scope=Scope.USER,
                            mode=mode,
                            reserve_address=position.reserve_address,
                            user_address=user.user_address,
                        ),
                        reserve=reserve,
                        user=user,
                    ),
                    prefix=prefix,
                )
                for side, prefix in (
                    (Side.SUPPLY, SUPPLY_ERROR_PREFIX),
                    (Side.BORROW, BORROW_ERROR_PREFIX),
                )
            )
        )

        return PositionValidation(
            reserve_address=position.reserve_address,
            supply=supply,
            borrow=borrow,
            error=join_errors(supply_error, borrow_error),
        )

    async def validate_user_all_positions(
        self,
        user_address: str,
        mode: BalanceMode = BalanceMode.REAL,
    ) -> UserValidation:
        """
        Validate the supply and borrow balance of every position recorded for a user.

        Raises `UserNotFound` if the user has no record. Failures inside individual positions are
        reported on the corresponding `PositionValidation`.
        """

        user = await self.data_access.get_user_position(user_address)
        if user is None:
            raise UserNotFound(user_address)

        positions = await asyncio.gather(
            *(self._validate_position(user, position, mode) for position in user.positions)
        )
        return UserValidation(user_address=user.user_address, positions=tuple(positions))

    async def validate_reserve(
        self,
        reserve_address: str,
        mode: BalanceMode = BalanceMode.REAL,
    ) -> ReserveValidation:
        """
        Validate the total supply and total debt of a reserve.

        Raises `ReserveNotFound` if the reserve has no record. Otherwise both checks are always
        attempted, and a failure in either is reported in the `error` field of the result
        alongside the other check's values.
        """

        reserve = await self._get_reserve(reserve_address)

        (supply, supply_error), (borrow, borrow_error) = await asyncio.gather(
            *(
                _attempt(
                    self.reconcile(
                        ReconciliationTarget(
                            side=side,
                            scope=Scope.RESERVE,
                            mode=mode,
                            reserve_address=reserve_address,
                        ),
                        reserve=reserve,
                    ),
                    prefix=prefix,
                )
                for side, prefix in (
                    (Side.SUPPLY, SUPPLY_ERROR_PREFIX),
                    (Side.BORROW, BORROW_ERROR_PREFIX),
                )
            )
        )

        return ReserveValidation(
            reserve_address=reserve_address,
            supply=supply,
            borrow=borrow,
            error=join_errors(supply_error, borrow_error),
        )

    async def validate_reserve_indexes(self, reserve_address: str) -> ReserveIndexValidation:
        """
        Compare the index snapshots stored with a reserve against the current on-chain indices.

        Indices accrue continuously, so a stale snapshot shows up as a growing difference.
        """

        reserve = await self._get_reserve(reserve_address)

        async def _compare(
            stored: StoredAmount | None,
            field: str,
            fetch: Awaitable[int],
        ) -> EntryState:
            on_chain_index = await fetch
            return EntryState.new(parse_balance(stored, field), on_chain_index)

        (liquidity, liquidity_error), (borrow, borrow_error) = await asyncio.gather(
            _attempt(
                _compare(
                    reserve.liquidity_index,
                    "liquidity_index",
                    self.chain_access.get_liquidity_index(reserve.reserve_address),
                ),
                prefix="Liquidity index validation failed",
            ),
            _attempt(
                _compare(
                    reserve.variable_borrow_index,
                    "variable_borrow_index",
                    self.chain_access.get_variable_borrow_index(reserve.reserve_address),
                ),
                prefix="Variable borrow index validation failed",
            ),
        )

        return ReserveIndexValidation(
            reserve_address=reserve_address,
            liquidity_index=liquidity,
            variable_borrow_index=borrow,
            error=join_errors(liquidity_error, borrow_error),
        )
