"""Shared helpers for commands."""

import sys
from pathlib import Path

import click

from macup.config import Config, load_config
from macup.errors import ConfigError, format_error
from macup.paths import find_config_file
from macup.validator import validate_config

# Exit codes
EXIT_APPLY_FAILED = 1
EXIT_INVALID_ARGS = 2
EXIT_CONFIG_ERROR = 4


def resolve_config_path(ctx: click.Context) -> Path:
    """Find the config file or exit with EXIT_CONFIG_ERROR."""
    try:
        return find_config_file(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(EXIT_CONFIG_ERROR)


def load_validated_config(ctx: click.Context) -> tuple[Path, Config]:
    """Locate, load and validate the config, exiting with EXIT_CONFIG_ERROR on failure."""
    path = resolve_config_path(ctx)
    try:
        config = load_config(path)
        validate_config(config)
    except ConfigError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    return path, config


__all__ = [
    "EXIT_APPLY_FAILED",
    "EXIT_INVALID_ARGS",
    "EXIT_CONFIG_ERROR",
    "resolve_config_path",
    "load_validated_config",
]
