from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from json import JSONDecodeError
from pathlib import Path
from typing import TYPE_CHECKING, cast

import tenacity
from pydantic import HttpUrl, WebsocketUrl
from ujson import loads as ujson_loads
from web3 import (
    AsyncBaseProvider,
    AsyncHTTPProvider,
    AsyncIPCProvider,
    AsyncWeb3,
    WebSocketProvider,
)
from web3.exceptions import Web3Exception
from web3.providers.async_base import AsyncJSONBaseProvider
from web3.providers.persistent import PersistentConnectionProvider
from web3.types import RPCResponse

from lendrecon.exceptions import ChainUnavailable, LendreconValueError
from lendrecon.logging import logger


def _fast_decode_rpc_response(raw_response: bytes) -> RPCResponse:
    """
    Decode the JSON-RPC response using ujson.
    """

    try:
        return cast("RPCResponse", ujson_loads(raw_response))
    except ValueError:
        # Re-raise as a dummy JSONDecodeError so web3py's exception handling works as intended.
        msg = "JSON failure"
        raise JSONDecodeError(msg, "[]", 0) from None


def build_async_web3(
    endpoint: HttpUrl | WebsocketUrl | Path | None,
    *,
    optimize: bool = True,
) -> AsyncWeb3[AsyncBaseProvider]:
    """
    Build an unconnected AsyncWeb3 instance for the configured endpoint.
    """

    provider: AsyncBaseProvider
    match endpoint:
        case HttpUrl():
            provider = AsyncHTTPProvider(str(endpoint))
        case WebsocketUrl():
            provider = WebSocketProvider(str(endpoint))
        case Path():
            provider = AsyncIPCProvider(endpoint)
        case None:
            raise LendreconValueError(message="No RPC endpoint is defined in the config file.")

    w3 = AsyncWeb3(provider)

    if optimize:
        # Remove all middleware and monkey-patch the JSON decoding for RPC responses
        w3.middleware_onion.clear()
        if TYPE_CHECKING:
            assert isinstance(w3.provider, AsyncJSONBaseProvider)
        w3.provider.decode_rpc_response = _fast_decode_rpc_response  # type:ignore[method-assign]

    return w3


async def check_connection(w3: AsyncWeb3[AsyncBaseProvider], chain_id: int) -> None:
    """
    Wait for the endpoint to respond, then confirm it serves the expected chain.
    """

    async_w3_connected_check_with_retry = tenacity.AsyncRetrying(
        stop=tenacity.stop_after_delay(10),
        wait=tenacity.wait_exponential_jitter(),
        retry=tenacity.retry_if_result(lambda result: result is False),
    )
    try:
        await async_w3_connected_check_with_retry(w3.is_connected)
    except tenacity.RetryError:
        raise ChainUnavailable(error="Web3 instance is not connected.") from None

    if (endpoint_chain_id := await w3.eth.chain_id) != chain_id:
        raise LendreconValueError(
            message=f"The chain ID ({endpoint_chain_id}) at the RPC endpoint does not match "
            f"the chain ID ({chain_id}) defined in the config file."
        )


@asynccontextmanager
async def connect_async_web3(
    endpoint: HttpUrl | WebsocketUrl | Path | None,
    chain_id: int,
    *,
    optimize: bool = True,
) -> AsyncIterator[AsyncWeb3[AsyncBaseProvider]]:
    """
    Yield a connected AsyncWeb3 instance, closing persistent connections on exit.
    """

    w3 = build_async_web3(endpoint, optimize=optimize)

    if isinstance(w3.provider, PersistentConnectionProvider):
        try:
            await w3.provider.connect()
        except (OSError, Web3Exception) as exc:
            raise ChainUnavailable(error=f"Could not connect to {endpoint}: {exc}") from exc

    try:
        await check_connection(w3, chain_id)
        logger.debug(f"Connected to chain {chain_id} at {endpoint}")
        yield w3
    finally:
        if isinstance(w3.provider, PersistentConnectionProvider):
            await w3.provider.disconnect()
