import click

from lendrecon.cli import cli
from lendrecon.config import settings
from lendrecon.database.operations import (
    backup_sqlite_database,
    compact_sqlite_database,
    create_new_sqlite_database,
    remove_sqlite_database,
)
from lendrecon.exceptions.base import LendreconValueError
from lendrecon.exceptions.database import BackupExists
from lendrecon.version import __version__


@cli.group()
def database() -> None:
    """
    Database commands
    """


@database.command("init")
def database_init() -> None:
    """
    Create a new, empty database.
    """

    if settings.database.path.exists():
        click.echo(f"A database already exists at {settings.database.path}.")
        return

    create_new_sqlite_database(settings.database.path)
    click.echo(f"Created a new database at {settings.database.path}.")


@database.command("backup")
def database_backup() -> None:
    """
    Back up the database.
    """

    try:
        backup_sqlite_database(settings.database.path)
    except BackupExists as exc:
        user_confirm = click.confirm(
            f"An existing backup was found at {exc.path}. Do you want to remove it and continue?",
            default=False,
        )
        if user_confirm:
            exc.path.unlink()
            backup_sqlite_database(settings.database.path)
        else:
            raise click.Abort from None
    except LendreconValueError as exc:
        raise click.ClickException(str(exc)) from None


@database.command("reset")
def database_reset() -> None:
    """
    Remove and recreate the database.
    """

    user_confirm = click.confirm(
        f"The existing database at {settings.database.path} will be removed and a new, empty database will be created and initialized using the schema included in lendrecon version {__version__}. Do you want to proceed?",  # noqa: E501
        default=False,
    )
    if user_confirm:
        remove_sqlite_database(settings.database.path)
        create_new_sqlite_database(settings.database.path)
    else:
        raise click.Abort


@database.command("compact")
def database_compact() -> None:
    """
    Compact the database.
    """

    try:
        compact_sqlite_database(settings.database.path)
    except LendreconValueError as exc:
        raise click.ClickException(str(exc)) from None
