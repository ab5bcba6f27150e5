import click
import tomlkit

from lendrecon.cli import cli
from lendrecon.config import CONFIG_FILE, settings


@cli.group()
def config() -> None:
    """
    Configuration commands
    """


@config.command("show")
@click.option(
    "--json",
    "output_format",
    flag_value="json",
    help="Display the configuration as JSON.",
)
@click.option(
    "--toml",
    "output_format",
    flag_value="toml",
    default=True,
    help="Display the configuration as TOML.",
)
def config_show(output_format: str) -> None:
    """
    Display the active configuration.
    """

    match output_format:
        case "json":
            click.echo(settings.model_dump_json(indent=2))
        case _:
            click.echo(f"# {CONFIG_FILE}")
            click.echo(tomlkit.dumps(settings.model_dump(mode="json", exclude_none=True)))
