"""covmetrics CLI - covm command."""

from pathlib import Path

import click

from covmetrics import __version__
from covmetrics.cli.methods import methods_command
from covmetrics.config import load_config
from covmetrics.core.errors import ConfigError
from covmetrics.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="covm")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config-root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory holding .covmetrics/config.yaml (default: current directory)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_root: Path | None) -> None:
    """covmetrics - method-level coverage metrics for OpenCover reports."""
    try:
        config = load_config(config_root)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    if verbose:
        config.logging.level = "DEBUG"

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    configure_logging(config=config.logging)


cli.add_command(methods_command, name="methods")


if __name__ == "__main__":
    cli()
