import pathlib
from json import JSONDecodeError

import pytest
from pydantic import HttpUrl, WebsocketUrl
from web3 import AsyncHTTPProvider, AsyncIPCProvider, WebSocketProvider

from lendrecon.connection import build_async_web3, check_connection
from lendrecon.connection.async_connection import _fast_decode_rpc_response
from lendrecon.exceptions import LendreconValueError


def test_fast_decode_rpc_response():
    assert _fast_decode_rpc_response(b'{"jsonrpc":"2.0","id":1,"result":"0x1"}') == {
        "jsonrpc": "2.0",
        "id": 1,
        "result": "0x1",
    }
    with pytest.raises(JSONDecodeError):
        _fast_decode_rpc_response(b"not json")


def test_build_async_web3_providers(tmp_path: pathlib.Path):
    assert isinstance(
        build_async_web3(HttpUrl("http://localhost:8545")).provider, AsyncHTTPProvider
    )
    assert isinstance(
        build_async_web3(WebsocketUrl("ws://localhost:8546")).provider, WebSocketProvider
    )
    assert isinstance(build_async_web3(tmp_path / "geth.ipc").provider, AsyncIPCProvider)

    with pytest.raises(LendreconValueError, match="No RPC endpoint"):
        build_async_web3(None)


def test_optimized_web3():
    w3 = build_async_web3(HttpUrl("http://localhost:8545"))
    assert list(w3.middleware_onion.middleware) == []
    assert w3.provider.decode_rpc_response is _fast_decode_rpc_response  # type: ignore[attr-defined]

    w3 = build_async_web3(HttpUrl("http://localhost:8545"), optimize=False)
    assert list(w3.middleware_onion.middleware) != []


async def test_chain_id_mismatch():
    class StubEth:
        @property
        async def chain_id(self) -> int:
            return 10

    class StubWeb3:
        eth = StubEth()

        async def is_connected(self) -> bool:
            return True

    with pytest.raises(LendreconValueError, match=r"chain ID \(10\)"):
        await check_connection(StubWeb3(), chain_id=1)  # type: ignore[arg-type]

    await check_connection(StubWeb3(), chain_id=10)  # type: ignore[arg-type]
