import asyncio

import click

from lendrecon.cli import cli, utils
from lendrecon.types.records import ReserveRecord, ReserveTokenField, UserRecord


def _format_reserve(reserve: ReserveRecord) -> list[str]:
    lines = [
        f"Reserve:                {reserve.reserve_address} ({reserve.symbol})",
        f"aToken:                 {reserve.a_token_address}",
        f"Debt token:             {reserve.debt_token_address}",
        f"Total scaled supply:    {reserve.total_scaled_supply}",
        f"Total scaled debt:      {reserve.total_scaled_debt}",
    ]
    for label, value in (
        ("Liquidity rate", reserve.liquidity_rate),
        ("Variable borrow rate", reserve.variable_borrow_rate),
        ("Stable borrow rate", reserve.stable_borrow_rate),
        ("Liquidity index", reserve.liquidity_index),
        ("Variable borrow index", reserve.variable_borrow_index),
        ("Block number", reserve.block_number),
    ):
        if value is not None:
            lines.append(f"{label + ':':<24}{value}")
    return lines


def _format_user(user: UserRecord) -> list[str]:
    lines = [f"User: {user.user_address} ({len(user.positions)} positions)"]
    lines.extend(
        f"  {position.reserve_address}: "
        f"aToken = {position.a_token_balance}, debt token = {position.debt_token_balance}"
        for position in user.positions
    )
    return lines


@cli.group()
def reserve() -> None:
    """
    Inspect stored reserves
    """


@reserve.command("list")
def reserve_list() -> None:
    """
    List every stored reserve.
    """

    reserves = asyncio.run(utils.data_access_from_config().list_all_reserves())
    if not reserves:
        click.echo("No reserves found.")
        return

    for record in reserves:
        click.echo(
            f"{record.symbol:<10} {record.reserve_address} "
            f"aToken={record.a_token_address} debt={record.debt_token_address}"
        )


_FIELD_LABELS = {
    ReserveTokenField.RESERVE: "reserve address",
    ReserveTokenField.A_TOKEN: "aToken address",
    ReserveTokenField.DEBT_TOKEN: "debt token address",
}


def _token_selector(
    reserve_address: str | None,
    a_token_address: str | None,
    debt_token_address: str | None,
) -> tuple[str, ReserveTokenField]:
    selected = [
        (address, token_field)
        for address, token_field in (
            (reserve_address, ReserveTokenField.RESERVE),
            (a_token_address, ReserveTokenField.A_TOKEN),
            (debt_token_address, ReserveTokenField.DEBT_TOKEN),
        )
        if address is not None
    ]
    if len(selected) != 1:
        msg = "Select the reserve with exactly one of RESERVE_ADDRESS, --a-token or --debt-token."
        raise click.UsageError(msg)
    return selected[0]


def _find_reserve(address: str, token_field: ReserveTokenField) -> ReserveRecord:
    record = asyncio.run(
        utils.data_access_from_config().find_reserve_for_token(address, token_field)
    )
    if record is None:
        msg = f"No reserve data found for {_FIELD_LABELS[token_field]} {address}"
        raise click.ClickException(msg)
    return record


a_token_option = click.option(
    "--a-token",
    "a_token_address",
    default=None,
    help="Select the reserve by its aToken address.",
)
debt_token_option = click.option(
    "--debt-token",
    "debt_token_address",
    default=None,
    help="Select the reserve by its variable debt token address.",
)


@reserve.command("show")
@click.argument("reserve_address", required=False)
@a_token_option
@debt_token_option
def reserve_show(
    reserve_address: str | None,
    a_token_address: str | None,
    debt_token_address: str | None,
) -> None:
    """
    Show the stored state of a reserve.
    """

    record = _find_reserve(*_token_selector(reserve_address, a_token_address, debt_token_address))
    for line in _format_reserve(record):
        click.echo(line)


@cli.group()
def user() -> None:
    """
    Inspect stored user positions
    """


@user.command("list")
def user_list() -> None:
    """
    List every stored user.
    """

    users = asyncio.run(utils.data_access_from_config().list_all_users())
    if not users:
        click.echo("No users found.")
        return

    for record in users:
        click.echo(f"{record.user_address} ({len(record.positions)} positions)")


@user.command("show")
@click.argument("user_address")
@click.option(
    "--reserve",
    "reserve_address",
    default=None,
    help="Only show the position in this reserve.",
)
@a_token_option
@debt_token_option
def user_show(
    user_address: str,
    reserve_address: str | None,
    a_token_address: str | None,
    debt_token_address: str | None,
) -> None:
    """
    Show the stored positions of a user, or the position in a single reserve.
    """

    selected_reserve: ReserveRecord | None = None
    if any(
        address is not None for address in (reserve_address, a_token_address, debt_token_address)
    ):
        selected_reserve = _find_reserve(
            *_token_selector(reserve_address, a_token_address, debt_token_address)
        )

    record = asyncio.run(utils.data_access_from_config().get_user_position(user_address))
    if record is None:
        msg = f"No position data found for user address {user_address}"
        raise click.ClickException(msg)

    if selected_reserve is not None:
        position = record.get_position(selected_reserve.reserve_address)
        if position is None:
            click.echo(
                f"User {record.user_address} has no stored position in reserve "
                f"{selected_reserve.reserve_address} ({selected_reserve.symbol})"
            )
            return
        record = UserRecord(user_address=record.user_address, positions=(position,))

    for line in _format_user(record):
        click.echo(line)
