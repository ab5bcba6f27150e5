from collections.abc import Awaitable, Callable

import click
import tqdm

from lendrecon.cli import cli, utils
from lendrecon.config import settings
from lendrecon.validation import (
    BalanceMode,
    BulkResult,
    BulkValidator,
    EntityValidation,
    EntryState,
    EverythingResult,
    ReconciliationTarget,
    ReserveIndexValidation,
    ReserveValidation,
    ReserveValidator,
    Scope,
    Side,
    UserValidation,
    Verdict,
)


def _mode(*, scaled: bool) -> BalanceMode:
    return BalanceMode.SCALED if scaled else BalanceMode.REAL


def _labeled_entries(
    validation: EntityValidation,
    mode: BalanceMode = BalanceMode.REAL,
) -> list[tuple[str, EntryState]]:
    """
    Pair each completed comparison with its description. Sides that failed carry no entry and
    are reported through the validation's error instead.
    """

    match validation:
        case ReserveValidation():
            labeled = [
                (
                    ReconciliationTarget(
                        side=side,
                        scope=Scope.RESERVE,
                        mode=mode,
                        reserve_address=validation.reserve_address,
                    ).description,
                    entry,
                )
                for side, entry in (
                    (Side.SUPPLY, validation.supply),
                    (Side.BORROW, validation.borrow),
                )
            ]
        case ReserveIndexValidation():
            labeled = [
                (
                    f"liquidity index for reserve {validation.reserve_address}",
                    validation.liquidity_index,
                ),
                (
                    f"variable borrow index for reserve {validation.reserve_address}",
                    validation.variable_borrow_index,
                ),
            ]
        case UserValidation():
            labeled = [
                (
                    ReconciliationTarget(
                        side=side,
                        scope=Scope.USER,
                        mode=mode,
                        reserve_address=position.reserve_address,
                        user_address=validation.user_address,
                    ).description,
                    entry,
                )
                for position in validation.positions
                for side, entry in (
                    (Side.SUPPLY, position.supply),
                    (Side.BORROW, position.borrow),
                )
            ]

    return [(description, entry) for description, entry in labeled if entry is not None]


def _echo_entry(description: str, entry: EntryState) -> Verdict:
    classification = entry.classify(description, settings.validation.tolerance_policy())
    click.echo(classification.report(entry.database_amount, entry.on_chain_amount))
    return classification.verdict


def _echo_validation(
    validation: EntityValidation,
    mode: BalanceMode = BalanceMode.REAL,
    *,
    matches: bool = True,
) -> None:
    policy = settings.validation.tolerance_policy()
    for description, entry in _labeled_entries(validation, mode):
        if matches or entry.classify(policy=policy).verdict is not Verdict.MATCH:
            _echo_entry(description, entry)
    if validation.error is not None:
        click.echo(f"Error for {validation.entity}: {validation.error}")


def _echo_bulk_result(
    label: str,
    result: BulkResult[ReserveValidation]
    | BulkResult[ReserveIndexValidation]
    | BulkResult[UserValidation],
    mode: BalanceMode = BalanceMode.REAL,
) -> None:
    for validation in result.results:
        _echo_validation(validation, mode, matches=False)
    for failure in result.failures:
        click.echo(f"Failed {failure.entity} ({failure.exception_type}): {failure.error}")
    click.echo(
        f"Validated {result.total} {label}: {result.success_count} successful, "
        f"{result.error_count} errors, {result.mismatch_count} mismatches"
    )


def _run_bulk[T](
    run: Callable[[BulkValidator], Awaitable[T]],
    *,
    concurrency: int | None,
    deadline: float | None,
    no_progress: bool,
) -> T:
    async def _run() -> T:
        async with utils.validator_from_config() as validator:
            with tqdm.tqdm(
                desc="Validating",
                unit="entity",
                leave=False,
                disable=no_progress,
            ) as pbar:
                bulk_validator = BulkValidator(
                    validator,
                    max_concurrency=(
                        settings.validation.max_concurrency if concurrency is None else concurrency
                    ),
                    deadline=deadline,
                    on_complete=lambda _: pbar.update(),
                )
                return await run(bulk_validator)

    return utils.run(_run())


def _run_single[T](run: Callable[[ReserveValidator], Awaitable[T]]) -> T:
    async def _run() -> T:
        async with utils.validator_from_config() as validator:
            return await run(validator)

    return utils.run(_run())


scaled_option = click.option(
    "--scaled",
    is_flag=True,
    default=False,
    help="Compare scaled balances directly instead of projecting them through the current index.",
)
reserve_option = click.option(
    "--reserve",
    "reserve_address",
    required=True,
    help="The reserve (underlying asset) address.",
)
concurrency_option = click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of entities validated at the same time. Defaults to the config value.",
)
deadline_option = click.option(
    "--deadline",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds after which no further entity is started.",
)
no_progress_option = click.option(
    "--no-progress",
    "no_progress",
    is_flag=True,
    default=False,
    show_default=True,
    help="Disable progress bars.",
)


@cli.group()
def validate() -> None:
    """
    Validation commands
    """


@validate.command("user-supply")
@click.argument("user_address")
@reserve_option
@scaled_option
def validate_user_supply(user_address: str, reserve_address: str, *, scaled: bool) -> None:
    """
    Validate a user's supply (aToken) balance for one reserve.
    """

    mode = _mode(scaled=scaled)
    entry = _run_single(
        lambda validator: validator.validate_user_supply(user_address, reserve_address, mode)
    )
    _echo_entry(
        ReconciliationTarget(
            side=Side.SUPPLY,
            scope=Scope.USER,
            mode=mode,
            reserve_address=reserve_address,
            user_address=user_address,
        ).description,
        entry,
    )


@validate.command("user-borrow")
@click.argument("user_address")
@reserve_option
@scaled_option
def validate_user_borrow(user_address: str, reserve_address: str, *, scaled: bool) -> None:
    """
    Validate a user's variable debt balance for one reserve.
    """

    mode = _mode(scaled=scaled)
    entry = _run_single(
        lambda validator: validator.validate_user_borrow(user_address, reserve_address, mode)
    )
    _echo_entry(
        ReconciliationTarget(
            side=Side.BORROW,
            scope=Scope.USER,
            mode=mode,
            reserve_address=reserve_address,
            user_address=user_address,
        ).description,
        entry,
    )


@validate.command("token-supply")
@reserve_option
@scaled_option
def validate_token_supply(reserve_address: str, *, scaled: bool) -> None:
    """
    Validate the total aToken supply of a reserve.
    """

    mode = _mode(scaled=scaled)
    entry = _run_single(lambda validator: validator.validate_token_supply(reserve_address, mode))
    _echo_entry(
        ReconciliationTarget(
            side=Side.SUPPLY,
            scope=Scope.RESERVE,
            mode=mode,
            reserve_address=reserve_address,
        ).description,
        entry,
    )


@validate.command("token-borrow")
@reserve_option
@scaled_option
def validate_token_borrow(reserve_address: str, *, scaled: bool) -> None:
    """
    Validate the total variable debt token supply of a reserve.
    """

    mode = _mode(scaled=scaled)
    entry = _run_single(lambda validator: validator.validate_token_borrow(reserve_address, mode))
    _echo_entry(
        ReconciliationTarget(
            side=Side.BORROW,
            scope=Scope.RESERVE,
            mode=mode,
            reserve_address=reserve_address,
        ).description,
        entry,
    )


@validate.command("user-all")
@click.argument("user_address")
@scaled_option
def validate_user_all(user_address: str, *, scaled: bool) -> None:
    """
    Validate every position held by a user.
    """

    mode = _mode(scaled=scaled)
    result = _run_single(
        lambda validator: validator.validate_user_all_positions(user_address, mode)
    )
    _echo_validation(result, mode)


@validate.command("reserve-indexes")
@click.argument("reserve_address")
def validate_reserve_indexes(reserve_address: str) -> None:
    """
    Validate the stored liquidity and variable borrow indices of a reserve.
    """

    result = _run_single(lambda validator: validator.validate_reserve_indexes(reserve_address))
    _echo_validation(result)


@validate.command("users-all")
@scaled_option
@concurrency_option
@deadline_option
@no_progress_option
def validate_users_all(
    *,
    scaled: bool,
    concurrency: int | None,
    deadline: float | None,
    no_progress: bool,
) -> None:
    """
    Validate every position of every stored user.
    """

    mode = _mode(scaled=scaled)
    result = _run_bulk(
        lambda bulk_validator: bulk_validator.validate_all_users(mode),
        concurrency=concurrency,
        deadline=deadline,
        no_progress=no_progress,
    )
    _echo_bulk_result("users", result, mode)


@validate.command("token-all")
@scaled_option
@concurrency_option
@deadline_option
@no_progress_option
def validate_token_all(
    *,
    scaled: bool,
    concurrency: int | None,
    deadline: float | None,
    no_progress: bool,
) -> None:
    """
    Validate the supply and borrow totals of every stored reserve.
    """

    mode = _mode(scaled=scaled)
    result = _run_bulk(
        lambda bulk_validator: bulk_validator.validate_all_reserves(mode),
        concurrency=concurrency,
        deadline=deadline,
        no_progress=no_progress,
    )
    _echo_bulk_result("reserves", result, mode)


@validate.command("all")
@scaled_option
@concurrency_option
@deadline_option
@no_progress_option
def validate_all(
    *,
    scaled: bool,
    concurrency: int | None,
    deadline: float | None,
    no_progress: bool,
) -> None:
    """
    Validate every stored reserve, then every stored user.
    """

    mode = _mode(scaled=scaled)
    result: EverythingResult = _run_bulk(
        lambda bulk_validator: bulk_validator.validate_everything(mode),
        concurrency=concurrency,
        deadline=deadline,
        no_progress=no_progress,
    )
    _echo_bulk_result("reserves", result.reserves, mode)
    _echo_bulk_result("users", result.users, mode)
    click.echo(
        f"Validated {result.total} entities in total: {result.success_count} successful, "
        f"{result.error_count} errors, {result.mismatch_count} mismatches"
    )


@validate.command("all-reserve-indexes")
@concurrency_option
@deadline_option
@no_progress_option
def validate_all_reserve_indexes(
    *,
    concurrency: int | None,
    deadline: float | None,
    no_progress: bool,
) -> None:
    """
    Validate the stored indices of every stored reserve.
    """

    result = _run_bulk(
        lambda bulk_validator: bulk_validator.validate_all_reserve_indexes(),
        concurrency=concurrency,
        deadline=deadline,
        no_progress=no_progress,
    )
    _echo_bulk_result("reserves", result)
