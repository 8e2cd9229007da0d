"""Validate command implementation."""

import click

from .utils import load_validated_config


@click.command()
@click.pass_context
def validate(ctx):
    """Check the config file without touching the system."""
    path, config = load_validated_config(ctx)
    sections = list(config.sections())
    click.secho(f"✓ {path} is valid", fg="green")
    if sections:
        click.echo(f"  Sections: {', '.join(sections)}")
