"""
On-chain reads for reserve indices and scaled token balances.

`Web3ChainAccess` implements the `ChainAccess` protocol with raw `eth_call`s against an Aave V3
style Pool and its aToken / variable debt token contracts:

    liquidity index         Pool.getReserveNormalizedIncome(asset)
    variable borrow index   Pool.getReserveNormalizedVariableDebt(asset)
    real balances           token.balanceOf(owner), token.totalSupply()
    scaled balances         token.scaledBalanceOf(owner), token.scaledTotalSupply()

Each read is bounded by a per-call timeout and retried with jittered exponential backoff. A read
that still fails is raised as `ChainUnavailable`, so callers only ever see one exception type
from this layer.
"""

import asyncio
from collections.abc import Sequence
from typing import Any

import aiohttp
from eth_typing import ChecksumAddress
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)
from web3 import AsyncBaseProvider, AsyncWeb3
from web3.exceptions import ContractLogicError, Web3Exception

from lendrecon.checksum_cache import get_checksum_address
from lendrecon.exceptions.base import LendreconValueError
from lendrecon.exceptions.connection import ChainCallTimeout, ChainUnavailable
from lendrecon.functions import encode_function_calldata, raw_call
from lendrecon.logging import logger

DEFAULT_CALL_TIMEOUT = 10.0
DEFAULT_MAX_ATTEMPTS = 3

RETRYABLE_EXCEPTIONS = (TimeoutError, Web3Exception, OSError, aiohttp.ClientError)


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome is not None else None
    logger.debug(f"Attempt {retry_state.attempt_number} failed ({exc!r}), retrying...")


class Web3ChainAccess:
    def __init__(
        self,
        w3: AsyncWeb3[AsyncBaseProvider],
        pool_address: str | None,
        *,
        timeout: float = DEFAULT_CALL_TIMEOUT,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self.w3 = w3
        self.pool_address = (
            None if pool_address is None else self._checksum(pool_address, role="pool")
        )
        self.timeout = timeout
        self.max_attempts = max_attempts

    @staticmethod
    def _checksum(address: str, role: str) -> ChecksumAddress:
        try:
            return get_checksum_address(address)
        except (TypeError, ValueError):
            raise LendreconValueError(message=f"Invalid {role} address {address!r}") from None

    def _get_pool(self) -> ChecksumAddress:
        if self.pool_address is None:
            raise LendreconValueError(
                message="A pool address is required to read reserve indices."
            )
        return self.pool_address

    async def _call_uint256(
        self,
        address: ChecksumAddress,
        function_prototype: str,
        function_arguments: Sequence[Any] | None = None,
    ) -> int:
        description = f"{function_prototype} @ {address}"
        calldata = encode_function_calldata(
            function_prototype=function_prototype,
            function_arguments=function_arguments,
        )
        retrier = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(),
            retry=(
                retry_if_exception_type(RETRYABLE_EXCEPTIONS)
                & retry_if_not_exception_type(ContractLogicError)
            ),
            before_sleep=_log_retry,
        )

        try:
            async for attempt in retrier:
                with attempt:
                    (value,) = await asyncio.wait_for(
                        raw_call(
                            w3=self.w3,
                            address=address,
                            calldata=calldata,
                            return_types=["uint256"],
                        ),
                        timeout=self.timeout,
                    )
        except RetryError as exc:
            last_exception = exc.last_attempt.exception()
            if isinstance(last_exception, TimeoutError):
                raise ChainCallTimeout(call=description, timeout_seconds=self.timeout) from None
            raise ChainUnavailable(
                error=f"{description} failed after {self.max_attempts} attempts: {last_exception}"
            ) from last_exception
        except Exception as exc:
            # Reverts and undecodable responses are not retried
            raise ChainUnavailable(error=f"{description} failed: {exc}") from exc

        return int(value)

    async def get_liquidity_index(self, reserve_address: str) -> int:
        return await self._call_uint256(
            self._get_pool(),
            "getReserveNormalizedIncome(address)",
            [self._checksum(reserve_address, role="reserve")],
        )

    async def get_variable_borrow_index(self, reserve_address: str) -> int:
        return await self._call_uint256(
            self._get_pool(),
            "getReserveNormalizedVariableDebt(address)",
            [self._checksum(reserve_address, role="reserve")],
        )

    async def get_balance_of(self, token_address: str, owner_address: str) -> int:
        return await self._call_uint256(
            self._checksum(token_address, role="token"),
            "balanceOf(address)",
            [self._checksum(owner_address, role="owner")],
        )

    async def get_scaled_balance_of(self, token_address: str, owner_address: str) -> int:
        return await self._call_uint256(
            self._checksum(token_address, role="token"),
            "scaledBalanceOf(address)",
            [self._checksum(owner_address, role="owner")],
        )

    async def get_total_supply(self, token_address: str) -> int:
        return await self._call_uint256(
            self._checksum(token_address, role="token"),
            "totalSupply()",
        )

    async def get_scaled_total_supply(self, token_address: str) -> int:
        return await self._call_uint256(
            self._checksum(token_address, role="token"),
            "scaledTotalSupply()",
        )

    async def get_block_number(self) -> int:
        try:
            return int(await asyncio.wait_for(self.w3.eth.block_number, timeout=self.timeout))
        except TimeoutError:
            raise ChainCallTimeout(call="eth_blockNumber", timeout_seconds=self.timeout) from None
        except Exception as exc:
            raise ChainUnavailable(error=f"eth_blockNumber failed: {exc}") from exc
