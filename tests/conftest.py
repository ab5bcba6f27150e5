import asyncio
import logging
import os
import pathlib
import tempfile
from collections.abc import Mapping
from typing import Any

# The package creates its config file and database on import, so point it at a scratch
# directory before anything imports it.
os.environ["LENDRECON_CONFIG_FILE"] = str(
    pathlib.Path(tempfile.mkdtemp(prefix="lendrecon-tests-")) / "config.toml"
)

import pytest  # noqa: E402

from lendrecon.exceptions import ChainUnavailable  # noqa: E402
from lendrecon.logging import logger  # noqa: E402
from lendrecon.types.records import ReserveRecord, UserPositionRecord, UserRecord  # noqa: E402
from lendrecon.validation import ReserveValidator  # noqa: E402

RAY = 10**27

USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
A_USDC = "0x98c23e9d8f34fefb1b7bd6a91b7ff122f4e16f5c"
VARIABLE_DEBT_USDC = "0x72e95b8931767c79ba4eee721354d6e99a61d004"

WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"
A_WETH = "0x4d5f47fa6a74757f35c14fd3a6ef8e3c9bc514e8"
VARIABLE_DEBT_WETH = "0xea51d7853eefb32b6ee06b1c12e6dcca88be0ffe"

ALICE = "0x00000000000000000000000000000000000a11ce"
BOB = "0x0000000000000000000000000000000000000b0b"

USDC_LIQUIDITY_INDEX = 1_050_000_000_000_000_000_000_000_000
USDC_BORROW_INDEX = 1_100_000_000_000_000_000_000_000_000
WETH_LIQUIDITY_INDEX = 1_020_000_000_000_000_000_000_000_000
WETH_BORROW_INDEX = 1_040_000_000_000_000_000_000_000_000


class FakeDataAccess:
    """
    In-memory ledger. Addresses listed in `failing` raise a non-package exception on lookup.
    """

    def __init__(self) -> None:
        self.reserves: dict[str, ReserveRecord] = {}
        self.users: dict[str, UserRecord] = {}
        self.failing: set[str] = set()

    def add_reserve(self, reserve: ReserveRecord) -> None:
        self.reserves[reserve.reserve_address.lower()] = reserve

    def add_user(self, user: UserRecord) -> None:
        self.users[user.user_address.lower()] = user

    def _check(self, address: str) -> None:
        if address.lower() in self.failing:
            msg = f"database read failed for {address}"
            raise RuntimeError(msg)

    async def get_reserve(self, reserve_address: str) -> ReserveRecord | None:
        await asyncio.sleep(0)
        self._check(reserve_address)
        return self.reserves.get(reserve_address.lower())

    async def get_user_position(self, user_address: str) -> UserRecord | None:
        await asyncio.sleep(0)
        self._check(user_address)
        return self.users.get(user_address.lower())

    async def list_all_reserves(self) -> list[ReserveRecord]:
        return list(self.reserves.values())

    async def list_all_users(self) -> list[UserRecord]:
        return list(self.users.values())


class FakeChainAccess:
    """
    In-memory chain state. Any read touching an address in `unavailable` raises
    `ChainUnavailable`. Unknown balances read as zero and unknown indices as one ray.
    """

    def __init__(self) -> None:
        self.liquidity_indexes: dict[str, int] = {}
        self.variable_borrow_indexes: dict[str, int] = {}
        self.balances: dict[tuple[str, str], int] = {}
        self.scaled_balances: dict[tuple[str, str], int] = {}
        self.total_supplies: dict[str, int] = {}
        self.scaled_total_supplies: dict[str, int] = {}
        self.unavailable: set[str] = set()
        self.delay = 0.0
        self.calls: list[str] = []
        self.block_number = 21_000_000

    async def _read(
        self,
        call: str,
        key: Any,
        table: Mapping[Any, int],
        default: int = 0,
    ) -> int:
        self.calls.append(call)
        await asyncio.sleep(self.delay)
        addresses = key if isinstance(key, tuple) else (key,)
        if any(address in self.unavailable for address in addresses):
            raise ChainUnavailable(error=f"{call} reverted")
        return table.get(key, default)

    async def get_liquidity_index(self, reserve_address: str) -> int:
        return await self._read(
            "getReserveNormalizedIncome", reserve_address.lower(), self.liquidity_indexes, RAY
        )

    async def get_variable_borrow_index(self, reserve_address: str) -> int:
        return await self._read(
            "getReserveNormalizedVariableDebt",
            reserve_address.lower(),
            self.variable_borrow_indexes,
            RAY,
        )

    async def get_balance_of(self, token_address: str, owner_address: str) -> int:
        return await self._read(
            "balanceOf", (token_address.lower(), owner_address.lower()), self.balances
        )

    async def get_scaled_balance_of(self, token_address: str, owner_address: str) -> int:
        return await self._read(
            "scaledBalanceOf", (token_address.lower(), owner_address.lower()), self.scaled_balances
        )

    async def get_total_supply(self, token_address: str) -> int:
        return await self._read("totalSupply", token_address.lower(), self.total_supplies)

    async def get_scaled_total_supply(self, token_address: str) -> int:
        return await self._read(
            "scaledTotalSupply", token_address.lower(), self.scaled_total_supplies
        )

    async def get_block_number(self) -> int:
        return self.block_number


@pytest.fixture(scope="session", autouse=True)
def _set_lendrecon_logging():
    """
    Set the logging level to DEBUG for the test run
    """
    logger.setLevel(logging.DEBUG)


@pytest.fixture
def data_access() -> FakeDataAccess:
    return FakeDataAccess()


@pytest.fixture
def chain_access() -> FakeChainAccess:
    return FakeChainAccess()


@pytest.fixture
def ledger(data_access: FakeDataAccess, chain_access: FakeChainAccess) -> FakeDataAccess:
    """
    Two reserves and two users whose stored state agrees exactly with the chain.

    USDC: 1,000,000,000 scaled supply at a 1.05 liquidity index, 500,000,000 scaled debt at a
    1.10 borrow index. WETH: 2,000,000 scaled supply at 1.02, 1,000,000 scaled debt at 1.04.
    Alice supplies 1,000,000 USDC (scaled) and borrows 100,000 WETH (scaled). Bob supplies
    500,000 WETH (scaled) and has no debt.
    """

    data_access.add_reserve(
        ReserveRecord(
            reserve_address=USDC,
            a_token_address=A_USDC,
            debt_token_address=VARIABLE_DEBT_USDC,
            symbol="USDC",
            total_scaled_supply="1000000000",
            total_scaled_debt="500000000",
            liquidity_index=str(USDC_LIQUIDITY_INDEX),
            variable_borrow_index=str(USDC_BORROW_INDEX),
        )
    )
    data_access.add_reserve(
        ReserveRecord(
            reserve_address=WETH,
            a_token_address=A_WETH,
            debt_token_address=VARIABLE_DEBT_WETH,
            symbol="WETH",
            total_scaled_supply=2_000_000,
            total_scaled_debt=1_000_000,
            liquidity_index=WETH_LIQUIDITY_INDEX,
            variable_borrow_index=WETH_BORROW_INDEX,
        )
    )
    data_access.add_user(
        UserRecord(
            user_address=ALICE,
            positions=(
                UserPositionRecord(
                    reserve_address=USDC, a_token_balance="1000000", debt_token_balance="0"
                ),
                UserPositionRecord(
                    reserve_address=WETH, a_token_balance="0", debt_token_balance="100000"
                ),
            ),
        )
    )
    data_access.add_user(
        UserRecord(
            user_address=BOB,
            positions=(
                UserPositionRecord(
                    reserve_address=WETH, a_token_balance=500_000, debt_token_balance=0
                ),
            ),
        )
    )

    chain_access.liquidity_indexes.update({USDC: USDC_LIQUIDITY_INDEX, WETH: WETH_LIQUIDITY_INDEX})
    chain_access.variable_borrow_indexes.update({USDC: USDC_BORROW_INDEX, WETH: WETH_BORROW_INDEX})
    chain_access.total_supplies.update(
        {
            A_USDC: 1_050_000_000,
            VARIABLE_DEBT_USDC: 550_000_000,
            A_WETH: 2_040_000,
            VARIABLE_DEBT_WETH: 1_040_000,
        }
    )
    chain_access.scaled_total_supplies.update(
        {
            A_USDC: 1_000_000_000,
            VARIABLE_DEBT_USDC: 500_000_000,
            A_WETH: 2_000_000,
            VARIABLE_DEBT_WETH: 1_000_000,
        }
    )
    chain_access.balances.update(
        {
            (A_USDC, ALICE): 1_050_000,
            (VARIABLE_DEBT_WETH, ALICE): 104_000,
            (A_WETH, BOB): 510_000,
        }
    )
    chain_access.scaled_balances.update(
        {
            (A_USDC, ALICE): 1_000_000,
            (VARIABLE_DEBT_WETH, ALICE): 100_000,
            (A_WETH, BOB): 500_000,
        }
    )
    return data_access


@pytest.fixture
def validator(data_access: FakeDataAccess, chain_access: FakeChainAccess) -> ReserveValidator:
    return ReserveValidator(data_access=data_access, chain_access=chain_access)
