"""Configuration path helpers for macup."""

import os
from pathlib import Path

from .errors import ConfigError

CONFIG_FILENAME = "macup.yaml"


def get_config_dir() -> Path:
    """Return XDG-compliant config directory: ~/.config/macup"""
    return Path.home() / ".config" / "macup"


def get_search_paths() -> list[Path]:
    """Return candidate config locations in priority order."""
    return [
        Path.cwd() / CONFIG_FILENAME,
        get_config_dir() / CONFIG_FILENAME,
        Path.home() / f".{CONFIG_FILENAME}",
    ]


def find_config_file(explicit_path: Path | None = None) -> Path:
    """Locate the config file.

    Priority:
    1. Explicit --config path (must exist)
    2. MACUP_CONFIG environment variable (must exist)
    3. ./macup.yaml
    4. ~/.config/macup/macup.yaml
    5. ~/.macup.yaml

    Raises:
        ConfigError: If no config file can be found
    """
    if explicit_path is not None:
        if explicit_path.exists():
            return explicit_path
        raise ConfigError(f"Config file not found: {explicit_path}")

    if "MACUP_CONFIG" in os.environ:
        env_path = Path(os.environ["MACUP_CONFIG"])
        if env_path.exists():
            return env_path
        raise ConfigError(f"Config file from MACUP_CONFIG not found: {env_path}")

    candidates = get_search_paths()
    for candidate in candidates:
        if candidate.exists():
            return candidate

    searched = "\n".join(f"  - {p}" for p in candidates)
    raise ConfigError(f"No config file found. Searched:\n{searched}")


__all__ = [
    "CONFIG_FILENAME",
    "get_config_dir",
    "get_search_paths",
    "find_config_file",
]
