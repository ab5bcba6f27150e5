import click

from lendrecon.version import __version__


@click.group()
@click.version_option(version=__version__, prog_name="lendrecon")
def cli() -> None:
    """
    Reconcile an off-chain lending ledger against on-chain token state.
    """


from . import chain, config, database, ledger, validate  # noqa: F401, E402
