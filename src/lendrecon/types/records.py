"""
Read-only snapshots handed to the validators by the data-access collaborator.

Amount fields hold the stored value as-is (an integer, an integer string or an integral
`Decimal`). They are parsed by `lendrecon.libraries.token_math.parse_balance` at the point of use.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

StoredAmount = int | str | Decimal


class ReserveTokenField(Enum):
    """
    The reserve column matched when a reserve is looked up by one of its token addresses.
    """

    RESERVE = "reserve_address"
    A_TOKEN = "a_token_address"
    DEBT_TOKEN = "debt_token_address"


@dataclass(slots=True, frozen=True)
class UserPositionRecord:
    reserve_address: str
    a_token_balance: StoredAmount
    debt_token_balance: StoredAmount


@dataclass(slots=True, frozen=True)
class UserRecord:
    user_address: str
    positions: tuple[UserPositionRecord, ...] = field(default_factory=tuple)

    def get_position(self, reserve_address: str) -> UserPositionRecord | None:
        reserve_address = reserve_address.lower()
        for position in self.positions:
            if position.reserve_address.lower() == reserve_address:
                return position
        return None


@dataclass(slots=True, frozen=True)
class ReserveRecord:
    reserve_address: str
    a_token_address: str
    debt_token_address: str
    symbol: str
    total_scaled_supply: StoredAmount
    total_scaled_debt: StoredAmount

    # Snapshot fields, displayed and compared but never used to project balances
    liquidity_rate: StoredAmount | None = None
    variable_borrow_rate: StoredAmount | None = None
    stable_borrow_rate: StoredAmount | None = None
    liquidity_index: StoredAmount | None = None
    variable_borrow_index: StoredAmount | None = None
    block_number: int | None = None
