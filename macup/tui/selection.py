"""Checkbox selection for `macup import`."""

import sys

import questionary
from prompt_toolkit.styles import Style

from ..importer import ScannedPackage

IMPORT_STYLE = Style.from_dict(
    {
        "separator": "fg:#6c6c6c bold",
        "selected": "fg:#5fd700",
        "pointer": "fg:#00afff bold",
        "instruction": "fg:#6c6c6c italic",
    }
)

_GROUP_TITLES = {
    ("brew", "formulae"): "Homebrew formulae",
    ("brew", "casks"): "Homebrew casks",
    ("mas", "apps"): "Mac App Store apps",
    ("npm", "global"): "npm global packages",
    ("cargo", "packages"): "cargo packages",
}


def format_package_choice(package: ScannedPackage) -> str:
    title = f"{package.icon} {package.label}"
    if package.is_existing:
        title += "  [existing]"
    return title


def build_choices(packages: list[ScannedPackage]) -> list:
    """Checkbox choices grouped by section, a separator before each group.

    Values are indices into ``packages``.
    """
    choices = []
    current = None
    for index, package in enumerate(packages):
        group = (package.section, package.key)
        if group != current:
            current = group
            title = _GROUP_TITLES.get(group, f"{package.section} packages")
            choices.append(questionary.Separator(f"── {title} ──"))
        choices.append(
            questionary.Choice(title=format_package_choice(package), value=index, checked=False)
        )
    return choices


def select_packages_interactive(
    packages: list[ScannedPackage],
) -> list[ScannedPackage] | None:
    """Let the user pick which scanned packages to import.

    Returns:
        The selected packages, or None if the user cancelled

    Raises:
        RuntimeError: If not running in a TTY
    """
    if not sys.stdin.isatty():
        raise RuntimeError("Interactive package selector requires a TTY")

    if not packages:
        return []

    try:
        selected = questionary.checkbox(
            "Select packages to import:",
            choices=build_choices(packages),
            instruction="Space to toggle, Enter to confirm",
            style=IMPORT_STYLE,
        ).ask()
    except KeyboardInterrupt:
        return None

    if selected is None:
        return None

    return [packages[index] for index in selected]


__all__ = [
    "IMPORT_STYLE",
    "format_package_choice",
    "build_choices",
    "select_packages_interactive",
]
