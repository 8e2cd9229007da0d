"""CLI command definitions for macup."""

from pathlib import Path

import click

from macup import __version__, setup_logging
from macup.commands.add import add
from macup.commands.apply import apply
from macup.commands.diff import diff
from macup.commands.import_ import import_packages
from macup.commands.managers import managers
from macup.commands.plan import plan
from macup.commands.validate import validate


@click.group()
@click.version_option(__version__, prog_name="macup")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to the config file",
)
@click.option("--debug", is_flag=True, help="Enable debug output for troubleshooting")
@click.option("--verbose", "-v", is_flag=True, help="Show per-package progress")
@click.pass_context
def cli(ctx, config_path: Path | None, debug: bool, verbose: bool):
    """A thin orchestrator for Mac bootstrap and setup."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["debug"] = debug
    ctx.obj["verbose"] = verbose
    setup_logging(debug, verbose)


cli.add_command(apply)
cli.add_command(plan)
cli.add_command(diff)
cli.add_command(validate)
cli.add_command(add)
cli.add_command(import_packages, name="import")
cli.add_command(managers)

__all__ = [
    "cli",
]


if __name__ == "__main__":
    cli()
