"""Declarative macOS bootstrap: one config file, every package manager."""

import logging

from .config import Config, load_config, parse_config
from .errors import (
    ApplyError,
    ConfigError,
    InstallationError,
    MacupError,
    PlanError,
    ValidationError,
    format_error,
    format_suggestion,
)
from .execution import command_exists, run_command_async
from .paths import find_config_file

__version__ = "0.1.0"


def setup_logging(debug: bool = False, verbose: bool = False) -> None:
    """Configure the root logger once per CLI invocation."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if not debug else "%(levelname)s %(name)s: %(message)s",
        force=True,
    )


__all__ = [
    "__version__",
    "setup_logging",
    "Config",
    "load_config",
    "parse_config",
    "find_config_file",
    "command_exists",
    "run_command_async",
    "MacupError",
    "ConfigError",
    "ValidationError",
    "PlanError",
    "InstallationError",
    "ApplyError",
    "format_error",
    "format_suggestion",
]
