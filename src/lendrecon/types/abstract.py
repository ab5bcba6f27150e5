from typing import Protocol

from lendrecon.types.records import ReserveRecord, UserRecord


class DataAccess(Protocol):
    """
    Read access to the off-chain ledger of reserves and user positions.
    """

    async def get_reserve(self, reserve_address: str) -> ReserveRecord | None: ...

    async def get_user_position(self, user_address: str) -> UserRecord | None: ...

    async def list_all_reserves(self) -> list[ReserveRecord]: ...

    async def list_all_users(self) -> list[UserRecord]: ...


class ChainAccess(Protocol):
    """
    Read access to on-chain reserve indices and token balances.

    Implementations raise `ChainUnavailable` (or a subclass) for any failed read.
    """

    async def get_liquidity_index(self, reserve_address: str) -> int: ...

    async def get_variable_borrow_index(self, reserve_address: str) -> int: ...

    async def get_balance_of(self, token_address: str, owner_address: str) -> int: ...

    async def get_scaled_balance_of(self, token_address: str, owner_address: str) -> int: ...

    async def get_total_supply(self, token_address: str) -> int: ...

    async def get_scaled_total_supply(self, token_address: str) -> int: ...
