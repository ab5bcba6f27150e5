import click

from lendrecon.cli import cli, utils


@cli.group()
def chain() -> None:
    """
    Read on-chain state
    """


@chain.command("balance-of")
@click.argument("token_address")
@click.argument("owner_address")
@click.option(
    "--scaled",
    is_flag=True,
    default=False,
    help="Read the scaled balance instead of the real balance.",
)
def chain_balance_of(token_address: str, owner_address: str, *, scaled: bool) -> None:
    """
    Read the token balance held by an owner.
    """

    async def _read() -> int:
        async with utils.chain_access_from_config() as chain_access:
            if scaled:
                return await chain_access.get_scaled_balance_of(token_address, owner_address)
            return await chain_access.get_balance_of(token_address, owner_address)

    click.echo(utils.run(_read()))


@chain.command("last-block")
def chain_last_block() -> None:
    """
    Read the latest block number.
    """

    async def _read() -> int:
        async with utils.chain_access_from_config() as chain_access:
            return await chain_access.get_block_number()

    click.echo(utils.run(_read()))
