"""Package-manager integrations and their registry."""

from ..config import DEFAULT_MAX_PARALLEL, Config
from .base import BinaryProbeManager, Manager
from .brew import BrewManager
from .cargo import CargoManager
from .custom import CommandManager, metadata_from_definition
from .mas import MasManager
from .models import InstallResult, parse_package_spec
from .npm import NpmManager
from .reconcile import reconcile_packages
from .registry import (
    BREW,
    CARGO,
    MAS,
    NPM,
    PACKAGE_SECTION_TYPES,
    ManagerMetadata,
    SectionType,
    all_names,
    get_by_name,
    get_by_section_type,
    get_factory,
    register_manager,
    unregister_manager,
)

for _metadata, _factory in (
    (BREW, BrewManager),
    (MAS, MasManager),
    (NPM, NpmManager),
    (CARGO, CargoManager),
):
    if get_by_name(_metadata.name) is None:
        register_manager(_metadata, _factory)


def get_metadata(name: str, config: Config | None = None) -> ManagerMetadata | None:
    """Look up a manager in the registry, then in the config's `managers` table."""
    metadata = get_by_name(name)
    if metadata is not None:
        return metadata
    if config is not None and name in config.managers:
        return metadata_from_definition(config.managers[name])
    return None


def create_manager(
    name: str,
    config: Config | None = None,
    max_parallel: int | None = None,
) -> Manager:
    """Instantiate the manager registered (or configured) under ``name``.

    Raises:
        KeyError: If no such manager exists
    """
    if max_parallel is None:
        max_parallel = config.settings.max_parallel if config else DEFAULT_MAX_PARALLEL

    factory = get_factory(name)
    if factory is not None:
        return factory(max_parallel=max_parallel)
    if config is not None and name in config.managers:
        return CommandManager(config.managers[name], max_parallel=max_parallel)
    raise KeyError(f"Unknown manager: {name}")


__all__ = [
    "Manager",
    "BinaryProbeManager",
    "BrewManager",
    "MasManager",
    "NpmManager",
    "CargoManager",
    "CommandManager",
    "InstallResult",
    "ManagerMetadata",
    "SectionType",
    "PACKAGE_SECTION_TYPES",
    "parse_package_spec",
    "reconcile_packages",
    "register_manager",
    "unregister_manager",
    "get_by_name",
    "get_by_section_type",
    "get_factory",
    "get_metadata",
    "all_names",
    "create_manager",
    "metadata_from_definition",
]
