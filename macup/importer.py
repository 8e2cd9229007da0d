"""Scan installed packages and merge them into the raw config mapping.

Used by the ``import`` and ``add`` commands. Everything here works on the
plain mapping returned by ``load_raw_config`` so untouched sections keep
their original shape when the file is written back.
"""

import asyncio
import logging
from dataclasses import dataclass

import yaml

from .config import Config
from .errors import MacupError
from .managers import BrewManager, CargoManager, CommandManager, MasManager, NpmManager
from .managers.base import Manager

_logging = logging.getLogger(__name__)

# Manager argument of `macup add` -> (section, key) in the config file.
ADD_TARGETS = {
    "brew": ("brew", "formulae"),
    "cask": ("brew", "casks"),
    "npm": ("npm", "global"),
    "cargo": ("cargo", "packages"),
}

SECTION_ICONS = {
    ("brew", "formulae"): "🍺",
    ("brew", "casks"): "📦",
    ("npm", "global"): "📦",
    ("cargo", "packages"): "🦀",
    ("mas", "apps"): "📱",
}


@dataclass
class ScannedPackage:
    name: str
    section: str
    key: str
    app_id: int | None = None
    icon: str = "📦"
    is_existing: bool = False

    @property
    def label(self) -> str:
        if self.app_id is not None:
            return f"{self.name} ({self.app_id})"
        return self.name


def resolve_add_target(manager: str, config: Config) -> tuple[str, str]:
    """Map an ``add`` manager argument to its (section, key).

    Raises:
        MacupError: For mas (apps need ids) or unknown managers
    """
    if manager == "mas":
        raise MacupError("mas apps need a name and numeric id; edit the mas section directly")
    if manager in ADD_TARGETS:
        return ADD_TARGETS[manager]
    if manager in config.managers:
        return manager, "packages"
    choices = ", ".join([*ADD_TARGETS, *config.managers])
    raise MacupError(f"Unknown manager '{manager}'. Choose one of: {choices}")


def append_entries(raw: dict, section: str, key: str, entries: list) -> list:
    """Append entries to ``raw[section][key]``, skipping duplicates.

    Mas apps are compared by id, everything else by value. Returns the
    entries that were actually added.
    """
    body = raw.get(section)
    if not isinstance(body, dict):
        body = {}
        raw[section] = body
    current = body.get(key)
    if not isinstance(current, list):
        current = []
        body[key] = current

    if key == "apps":
        seen = {app.get("id") for app in current if isinstance(app, dict)}
    else:
        seen = set(current)

    added = []
    for entry in entries:
        marker = entry["id"] if key == "apps" else entry
        if marker in seen:
            continue
        seen.add(marker)
        current.append(entry)
        added.append(entry)
    return added


def _entry(package: ScannedPackage):
    if package.key == "apps":
        return {"name": package.name, "id": package.app_id}
    return package.name


def group_packages(packages: list[ScannedPackage]) -> dict:
    """Shape selected packages like config sections, preserving scan order."""
    fragment: dict = {}
    for package in packages:
        fragment.setdefault(package.section, {}).setdefault(package.key, []).append(
            _entry(package)
        )
    return fragment


def render_preview(fragment: dict) -> str:
    return yaml.safe_dump(
        fragment, default_flow_style=False, sort_keys=False, allow_unicode=True
    )


def merge_packages(raw: dict, packages: list[ScannedPackage]) -> int:
    """Merge selected packages into ``raw``. Returns how many were added."""
    added = 0
    for section, keys in group_packages(packages).items():
        for key, entries in keys.items():
            added += len(append_entries(raw, section, key, entries))
    return added


def mark_existing(packages: list[ScannedPackage], config: Config) -> None:
    configured: dict[tuple[str, str], set] = {}
    if config.brew is not None:
        configured[("brew", "formulae")] = set(config.brew.formulae)
        configured[("brew", "casks")] = set(config.brew.casks)
    if config.mas is not None:
        configured[("mas", "apps")] = {app.id for app in config.mas.apps}
    if config.npm is not None:
        configured[("npm", "global")] = set(config.npm.global_packages)
    if config.cargo is not None:
        configured[("cargo", "packages")] = set(config.cargo.packages)
    for name, section in config.custom.items():
        configured[(name, "packages")] = set(section.packages)

    for package in packages:
        known = configured.get((package.section, package.key), set())
        marker = package.app_id if package.key == "apps" else package.name
        package.is_existing = marker in known


def _scanned(names, section: str, key: str, icon: str | None = None) -> list[ScannedPackage]:
    icon = icon or SECTION_ICONS.get((section, key), "📦")
    return [ScannedPackage(name, section, key, icon=icon) for name in sorted(names)]


async def _scan(manager: Manager, scan) -> list[ScannedPackage]:
    if not manager.is_installed():
        _logging.debug(f"{manager.name} not installed, skipping scan")
        return []
    try:
        return await scan()
    except MacupError as e:
        _logging.warning(f"Could not scan {manager.name}: {e}")
        return []


async def scan_system(config: Config) -> list[ScannedPackage]:
    """List what every available package manager has installed."""
    brew = BrewManager()
    mas = MasManager()
    npm = NpmManager()
    cargo = CargoManager()

    async def brew_packages():
        formulae, casks = await asyncio.gather(brew.list_formulae(), brew.list_casks())
        return [
            *_scanned(formulae, "brew", "formulae"),
            *_scanned(casks, "brew", "casks"),
        ]

    async def mas_apps():
        apps = await mas.list_apps()
        return [
            ScannedPackage(name, "mas", "apps", app_id=int(app_id), icon="📱")
            for app_id, name in sorted(apps.items(), key=lambda item: item[1].lower())
        ]

    async def npm_packages():
        return _scanned(await npm.list_installed(), "npm", "global")

    async def cargo_packages():
        return _scanned(await cargo.list_installed(), "cargo", "packages")

    scans = [
        _scan(brew, brew_packages),
        _scan(mas, mas_apps),
        _scan(npm, npm_packages),
        _scan(cargo, cargo_packages),
    ]

    for name, definition in config.managers.items():
        if not definition.list_command:
            continue
        manager = CommandManager(definition)

        async def custom_packages(manager=manager, name=name):
            return _scanned(
                await manager.list_installed(), name, "packages", manager.metadata.icon
            )

        scans.append(_scan(manager, custom_packages))

    results = await asyncio.gather(*scans)
    return [package for group in results for package in group]


__all__ = [
    "ADD_TARGETS",
    "ScannedPackage",
    "resolve_add_target",
    "append_entries",
    "group_packages",
    "render_preview",
    "merge_packages",
    "mark_existing",
    "scan_system",
]
