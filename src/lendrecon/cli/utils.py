import asyncio
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from typing import Any

import click

from lendrecon.chain import Web3ChainAccess
from lendrecon.config import CONFIG_FILE, settings
from lendrecon.connection import connect_async_web3
from lendrecon.database import SqlDataAccess, get_scoped_sqlite_session
from lendrecon.exceptions import LendreconError
from lendrecon.validation import ReserveValidator


def data_access_from_config() -> SqlDataAccess:
    if not settings.database.path.exists():
        msg = (
            f"No database found at {settings.database.path}. "
            "Create one with 'lendrecon database init'."
        )
        raise click.ClickException(msg)
    return SqlDataAccess(get_scoped_sqlite_session(database_path=settings.database.path))


@asynccontextmanager
async def chain_access_from_config() -> AsyncIterator[Web3ChainAccess]:
    if settings.chain.rpc is None:
        msg = f"An RPC endpoint must be defined under [chain] in config file {CONFIG_FILE}"
        raise click.ClickException(msg)

    async with connect_async_web3(
        endpoint=settings.chain.rpc,
        chain_id=settings.chain.chain_id,
    ) as w3:
        yield Web3ChainAccess(
            w3=w3,
            pool_address=settings.chain.pool_address,
            timeout=settings.validation.rpc_timeout,
            max_attempts=settings.validation.rpc_max_attempts,
        )


@asynccontextmanager
async def validator_from_config() -> AsyncIterator[ReserveValidator]:
    data_access = data_access_from_config()
    async with chain_access_from_config() as chain_access:
        yield ReserveValidator(
            data_access=data_access,
            chain_access=chain_access,
            policy=settings.validation.tolerance_policy(),
        )


def run[T](coroutine: Coroutine[Any, Any, T]) -> T:
    """
    Run the coroutine to completion, reporting package exceptions as a CLI error.
    """

    try:
        return asyncio.run(coroutine)
    except LendreconError as exc:
        raise click.ClickException(str(exc)) from exc
