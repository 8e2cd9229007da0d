"""Plan command implementation."""

import sys

import click

from macup.errors import PlanError, format_error
from macup.executor import create_execution_plan, render_plan

from .utils import EXIT_CONFIG_ERROR, load_validated_config


@click.command()
@click.pass_context
def plan(ctx):
    """Show the order in which sections would be applied."""
    _, config = load_validated_config(ctx)
    try:
        execution_plan = create_execution_plan(config)
    except PlanError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    click.echo(render_plan(execution_plan, config))
