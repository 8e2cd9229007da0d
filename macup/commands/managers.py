"""Managers command implementation."""

import sys

import click

from macup.config import Config, load_config
from macup.errors import ConfigError, format_error
from macup.execution import command_exists
from macup.managers import SectionType, all_names, get_by_name, metadata_from_definition
from macup.paths import find_config_file

from .utils import EXIT_CONFIG_ERROR


def _load_optional_config(ctx) -> Config | None:
    """Load the config if one exists; a broken config is still an error."""
    try:
        path = find_config_file(ctx.obj.get("config_path"))
    except ConfigError:
        return None
    try:
        return load_config(path)
    except ConfigError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(EXIT_CONFIG_ERROR)


@click.command()
@click.pass_context
def managers(ctx):
    """List known package managers and whether their runtime is installed."""
    config = _load_optional_config(ctx)

    entries = [get_by_name(name) for name in all_names()]
    if config is not None:
        entries.extend(metadata_from_definition(d) for d in config.managers.values())

    for metadata in entries:
        installed = command_exists(metadata.runtime_command)
        status = click.style("installed", fg="green") if installed else click.style(
            "missing", fg="yellow"
        )
        kind = "custom" if metadata.section_type == SectionType.CUSTOM else "built-in"
        click.echo(
            f"{metadata.icon} {metadata.name:<10} {metadata.display_name:<24} "
            f"[{kind}] {metadata.runtime_command}: {status}"
        )
