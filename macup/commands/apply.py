"""Apply command implementation."""

import asyncio
import logging
import sys

import click

from macup.errors import ApplyError, PlanError, format_error
from macup.executor import apply_plan, create_execution_plan

from .utils import EXIT_APPLY_FAILED, EXIT_CONFIG_ERROR, load_validated_config

_logging = logging.getLogger(__name__)


@click.command()
@click.argument("section", required=False)
@click.option("--dry-run", is_flag=True, help="Show what would be done without changing anything")
@click.option(
    "--with-system-settings",
    is_flag=True,
    help="Also run the commands in the system section",
)
@click.pass_context
def apply(ctx, section: str | None, dry_run: bool, with_system_settings: bool):
    """Install everything the config declares."""
    path, config = load_validated_config(ctx)
    _logging.debug(f"Using config file {path}")

    try:
        plan = create_execution_plan(config)
    except PlanError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    try:
        asyncio.run(
            apply_plan(
                config,
                plan,
                dry_run=dry_run,
                with_system_settings=with_system_settings,
                section=section,
            )
        )
    except ApplyError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(EXIT_APPLY_FAILED)
