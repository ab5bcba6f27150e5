"""
Off-chain ledger of lending reserves and user positions.

Amounts are stored as the raw decimal text of the integer value. EVM integers can be up to 32
bytes, so a 78 character VARCHAR holds every possible value. Addresses are stored lower-case.
"""

from sqlalchemy import Index
from sqlalchemy.orm import Mapped, relationship, validates

from lendrecon.checksum_cache import normalize_address

from .base import Address, Base
from .types import ForeignKeyReserveId, ForeignKeyUserId, PrimaryKeyInt, RawAmount


class ReserveTable(Base):
    __tablename__ = "reserves"

    id: Mapped[PrimaryKeyInt]
    reserve_address: Mapped[Address]
    a_token_address: Mapped[Address]
    debt_token_address: Mapped[Address]
    symbol: Mapped[str]

    total_scaled_supply: Mapped[RawAmount]
    total_scaled_debt: Mapped[RawAmount]

    liquidity_rate: Mapped[RawAmount | None]
    variable_borrow_rate: Mapped[RawAmount | None]
    stable_borrow_rate: Mapped[RawAmount | None]
    liquidity_index: Mapped[RawAmount | None]
    variable_borrow_index: Mapped[RawAmount | None]
    block_number: Mapped[int | None]

    # Relationships
    positions: Mapped[list["UserPositionTable"]] = relationship(
        "UserPositionTable",
        back_populates="reserve",
    )

    @validates("reserve_address", "a_token_address", "debt_token_address")
    def validate_address(self, key: str, address: str) -> str:  # noqa: ARG002
        return normalize_address(address)


Index(
    "ix_reserves_reserve_address",
    ReserveTable.reserve_address,
    unique=True,
)


class UserTable(Base):
    __tablename__ = "users"

    id: Mapped[PrimaryKeyInt]
    user_address: Mapped[Address]

    # Relationships
    positions: Mapped[list["UserPositionTable"]] = relationship(
        "UserPositionTable",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @validates("user_address")
    def validate_address(self, key: str, address: str) -> str:  # noqa: ARG002
        return normalize_address(address)


Index(
    "ix_users_user_address",
    UserTable.user_address,
    unique=True,
)


class UserPositionTable(Base):
    __tablename__ = "user_positions"

    id: Mapped[PrimaryKeyInt]
    user_id: Mapped[ForeignKeyUserId]
    reserve_id: Mapped[ForeignKeyReserveId]

    a_token_balance: Mapped[RawAmount]
    debt_token_balance: Mapped[RawAmount]

    # Relationships
    user: Mapped["UserTable"] = relationship(
        "UserTable",
        back_populates="positions",
    )
    reserve: Mapped["ReserveTable"] = relationship(
        "ReserveTable",
        back_populates="positions",
    )


Index(
    "ix_user_positions_user_reserve",
    UserPositionTable.user_id,
    UserPositionTable.reserve_id,
    unique=True,
)
