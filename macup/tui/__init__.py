"""Terminal UI for interactive flows.

questionary drives the prompts; every entry point refuses to run without
a TTY so scripted use fails loudly instead of hanging.
"""

from .selection import (
    IMPORT_STYLE,
    build_choices,
    format_package_choice,
    select_packages_interactive,
)

__all__ = [
    "IMPORT_STYLE",
    "build_choices",
    "format_package_choice",
    "select_packages_interactive",
]
