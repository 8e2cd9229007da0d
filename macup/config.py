"""Configuration model, loading and persistence.

The config file is YAML. ``load_config`` turns it into a typed ``Config``
whose optional sections are ``None`` when absent, with settings defaults
filled in. ``load_raw_config``/``save_raw_config`` operate on the plain
mapping and are used only by the flows that edit the file (add, import).
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

DEFAULT_MAX_PARALLEL = 4

BUILTIN_MANAGER_SECTIONS = ("brew", "mas", "npm", "cargo")
RESERVED_KEYS = frozenset(
    {"settings", "managers", "install", "system", *BUILTIN_MANAGER_SECTIONS}
)


@dataclass
class Settings:
    fail_fast: bool = False
    max_parallel: int = DEFAULT_MAX_PARALLEL


@dataclass
class Section:
    """Common shape of every config section."""

    depends_on: list[str] = field(default_factory=list)

    def package_ids(self) -> list[str]:
        return []

    def is_empty(self) -> bool:
        return not self.package_ids()


@dataclass
class BrewConfig(Section):
    taps: list[str] = field(default_factory=list)
    formulae: list[str] = field(default_factory=list)
    casks: list[str] = field(default_factory=list)

    def package_ids(self) -> list[str]:
        return [*self.taps, *self.formulae, *self.casks]


@dataclass
class MasApp:
    name: str
    id: int

    @property
    def label(self) -> str:
        return f"{self.name} ({self.id})"


@dataclass
class MasConfig(Section):
    apps: list[MasApp] = field(default_factory=list)

    def package_ids(self) -> list[str]:
        return [str(app.id) for app in self.apps]

    def label_for(self, app_id: str) -> str:
        for app in self.apps:
            if str(app.id) == app_id:
                return app.label
        return app_id


@dataclass
class NpmConfig(Section):
    # Stored under the `global` key in the file.
    global_packages: list[str] = field(default_factory=list)

    def package_ids(self) -> list[str]:
        return list(self.global_packages)


@dataclass
class PackagesConfig(Section):
    """Section for cargo and user-defined managers: a flat package list."""

    packages: list[str] = field(default_factory=list)

    def package_ids(self) -> list[str]:
        return list(self.packages)


CargoConfig = PackagesConfig


@dataclass
class InstallScript:
    name: str
    command: str
    check: str | None = None
    binary: str | None = None
    required: bool = True


@dataclass
class InstallConfig(Section):
    scripts: list[InstallScript] = field(default_factory=list)

    def package_ids(self) -> list[str]:
        return [script.name for script in self.scripts]


@dataclass
class SystemConfig(Section):
    commands: list[str] = field(default_factory=list)

    def package_ids(self) -> list[str]:
        return list(self.commands)


@dataclass
class ManagerDefinition:
    """A package manager declared in the config's `managers` table."""

    name: str
    install_command: str
    display_name: str | None = None
    icon: str = "📦"
    runtime_command: str | None = None
    runtime_name: str | None = None
    brew_formula: str | None = None
    list_command: str | None = None

    def __post_init__(self):
        if self.display_name is None:
            self.display_name = f"{self.name} packages"
        if self.runtime_command is None:
            self.runtime_command = self.name
        if self.runtime_name is None:
            self.runtime_name = self.runtime_command
        if self.brew_formula is None:
            self.brew_formula = self.runtime_command


@dataclass
class Config:
    """Root configuration. Absent sections are None."""

    settings: Settings = field(default_factory=Settings)
    brew: BrewConfig | None = None
    mas: MasConfig | None = None
    npm: NpmConfig | None = None
    cargo: PackagesConfig | None = None
    install: InstallConfig | None = None
    system: SystemConfig | None = None
    custom: dict[str, PackagesConfig] = field(default_factory=dict)
    managers: dict[str, ManagerDefinition] = field(default_factory=dict)

    def sections(self) -> dict[str, Section]:
        """Return present sections in canonical order."""
        ordered: dict[str, Section | None] = {
            "brew": self.brew,
            "mas": self.mas,
            "npm": self.npm,
            "cargo": self.cargo,
        }
        ordered.update(self.custom)
        ordered["install"] = self.install
        ordered["system"] = self.system
        return {name: section for name, section in ordered.items() if section is not None}

    def get_section(self, name: str) -> Section | None:
        return self.sections().get(name)

    def required_managers(self) -> list[str]:
        """Managers that must exist before any section runs.

        Brew is required when it has taps, formulae or casks, or when any
        section depends on it. Other runtimes are bootstrapped inline by
        their own phase.
        """
        managers = []
        if self.brew is not None and not self.brew.is_empty():
            managers.append("brew")

        needs_brew = any(
            "brew" in section.depends_on
            for name, section in self.sections().items()
            if name != "brew"
        )
        if needs_brew and "brew" not in managers:
            managers.append("brew")

        return managers


def _require_str(value: Any, path: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{path} must be a non-empty string")
    return value


def _optional_str(data: dict, key: str, path: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"{path}.{key} must be a string or null")
    return value


def _bool(data: dict, key: str, path: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{path}.{key} must be a boolean")
    return value


def _string_list(data: dict, key: str, path: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{path}.{key} must be an array")
    return [_require_str(item, f"{path}.{key}[{i}]") for i, item in enumerate(value)]


def _require_table(value: Any, path: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{path} must be a table, got {type(value).__name__}")
    return value


def _parse_settings(data: Any) -> Settings:
    data = _require_table(data, "settings")
    max_parallel = data.get("max_parallel", DEFAULT_MAX_PARALLEL)
    if isinstance(max_parallel, bool) or not isinstance(max_parallel, int):
        raise ConfigError("settings.max_parallel must be an integer")
    return Settings(
        fail_fast=_bool(data, "fail_fast", "settings", False),
        max_parallel=max_parallel,
    )


def _parse_brew(data: Any) -> BrewConfig:
    data = _require_table(data, "brew")
    return BrewConfig(
        depends_on=_string_list(data, "depends_on", "brew"),
        taps=_string_list(data, "taps", "brew"),
        formulae=_string_list(data, "formulae", "brew"),
        casks=_string_list(data, "casks", "brew"),
    )


def _parse_mas(data: Any) -> MasConfig:
    data = _require_table(data, "mas")
    raw_apps = data.get("apps") or []
    if not isinstance(raw_apps, list):
        raise ConfigError("mas.apps must be an array")

    apps = []
    for i, raw in enumerate(raw_apps):
        path = f"mas.apps[{i}]"
        if not isinstance(raw, dict):
            raise ConfigError(f"{path} must be a table with name and id")
        app_id = raw.get("id")
        if isinstance(app_id, bool) or not isinstance(app_id, int):
            raise ConfigError(f"{path}.id must be an integer")
        apps.append(MasApp(name=_require_str(raw.get("name"), f"{path}.name"), id=app_id))

    return MasConfig(depends_on=_string_list(data, "depends_on", "mas"), apps=apps)


def _parse_npm(data: Any) -> NpmConfig:
    data = _require_table(data, "npm")
    return NpmConfig(
        depends_on=_string_list(data, "depends_on", "npm"),
        global_packages=_string_list(data, "global", "npm"),
    )


def _parse_packages(name: str, data: Any) -> PackagesConfig:
    data = _require_table(data, name)
    return PackagesConfig(
        depends_on=_string_list(data, "depends_on", name),
        packages=_string_list(data, "packages", name),
    )


def _parse_install(data: Any) -> InstallConfig:
    data = _require_table(data, "install")
    raw_scripts = data.get("scripts") or []
    if not isinstance(raw_scripts, list):
        raise ConfigError("install.scripts must be an array")

    scripts = []
    for i, raw in enumerate(raw_scripts):
        path = f"install.scripts[{i}]"
        if not isinstance(raw, dict):
            raise ConfigError(f"{path} must be a table")
        scripts.append(
            InstallScript(
                name=_require_str(raw.get("name"), f"{path}.name"),
                command=_require_str(raw.get("command"), f"{path}.command"),
                check=_optional_str(raw, "check", path),
                binary=_optional_str(raw, "binary", path),
                required=_bool(raw, "required", path, True),
            )
        )

    return InstallConfig(
        depends_on=_string_list(data, "depends_on", "install"), scripts=scripts
    )


def _parse_system(data: Any) -> SystemConfig:
    data = _require_table(data, "system")
    return SystemConfig(
        depends_on=_string_list(data, "depends_on", "system"),
        commands=_string_list(data, "commands", "system"),
    )


def _parse_managers(data: Any) -> dict[str, ManagerDefinition]:
    data = _require_table(data, "managers")
    managers = {}
    for name, raw in data.items():
        path = f"managers.{name}"
        raw = _require_table(raw, path)
        managers[name] = ManagerDefinition(
            name=name,
            install_command=_require_str(
                raw.get("install_command"), f"{path}.install_command"
            ),
            display_name=_optional_str(raw, "display_name", path),
            icon=_optional_str(raw, "icon", path) or "📦",
            runtime_command=_optional_str(raw, "runtime_command", path),
            runtime_name=_optional_str(raw, "runtime_name", path),
            brew_formula=_optional_str(raw, "brew_formula", path),
            list_command=_optional_str(raw, "list_command", path),
        )
    return managers


def parse_config(data: dict) -> Config:
    """Convert a raw mapping into a typed Config.

    Raises:
        ConfigError: On wrong types or unknown sections, with the field path
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping, got {type(data).__name__}")

    managers = _parse_managers(data.get("managers"))

    custom = {}
    for key, value in data.items():
        if key in RESERVED_KEYS:
            continue
        if key not in managers:
            raise ConfigError(
                f"Unknown section '{key}'. Declare it under 'managers' to use a custom package manager"
            )
        custom[key] = _parse_packages(key, value)

    return Config(
        settings=_parse_settings(data.get("settings")),
        brew=_parse_brew(data["brew"]) if "brew" in data else None,
        mas=_parse_mas(data["mas"]) if "mas" in data else None,
        npm=_parse_npm(data["npm"]) if "npm" in data else None,
        cargo=_parse_packages("cargo", data["cargo"]) if "cargo" in data else None,
        install=_parse_install(data["install"]) if "install" in data else None,
        system=_parse_system(data["system"]) if "system" in data else None,
        custom=custom,
        managers=managers,
    )


def load_raw_config(path: Path) -> dict:
    """Read the config file into a plain mapping."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}")
    except PermissionError:
        raise ConfigError(f"Permission denied reading config file: {path}")
    except UnicodeDecodeError:
        raise ConfigError(f"Config file is not valid UTF-8: {path}")
    except OSError as e:
        raise ConfigError(f"Error reading config file {path}: {e}")

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Path) -> Config:
    """Load and parse the config file at ``path``."""
    return parse_config(load_raw_config(path))


def save_raw_config(path: Path, data: dict) -> None:
    """Write a plain mapping back to the config file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(
            data, f, default_flow_style=False, sort_keys=False, allow_unicode=True
        )


__all__ = [
    "DEFAULT_MAX_PARALLEL",
    "BUILTIN_MANAGER_SECTIONS",
    "Settings",
    "Section",
    "BrewConfig",
    "MasApp",
    "MasConfig",
    "NpmConfig",
    "PackagesConfig",
    "CargoConfig",
    "InstallScript",
    "InstallConfig",
    "SystemConfig",
    "ManagerDefinition",
    "Config",
    "parse_config",
    "load_raw_config",
    "load_config",
    "save_raw_config",
]
