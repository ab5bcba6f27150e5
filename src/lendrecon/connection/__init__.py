from .async_connection import (
    build_async_web3,
    check_connection,
    connect_async_web3,
)

__all__ = (
    "build_async_web3",
    "check_connection",
    "connect_async_web3",
)
