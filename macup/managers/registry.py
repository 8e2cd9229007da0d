"""Registry of package-manager integrations.

Built-in managers are registered once when ``macup.managers`` is imported.
Additional managers can be added at startup with ``register_manager``;
the table is read-only afterwards.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .base import Manager


class SectionType(Enum):
    MANAGERS = "managers"
    BREW = "brew"
    MAS = "mas"
    NPM = "npm"
    CARGO = "cargo"
    CUSTOM = "custom"
    INSTALL = "install"
    SYSTEM = "system"


# Phases whose handler checks the real runtime instead of trusting the graph.
PACKAGE_SECTION_TYPES = frozenset(
    {SectionType.BREW, SectionType.MAS, SectionType.NPM, SectionType.CARGO, SectionType.CUSTOM}
)


@dataclass(frozen=True)
class ManagerMetadata:
    name: str
    display_name: str
    icon: str
    runtime_command: str
    runtime_name: str
    brew_formula: str
    section_type: SectionType


ManagerFactory = Callable[..., "Manager"]


BREW = ManagerMetadata(
    name="brew",
    display_name="Homebrew packages",
    icon="🍺",
    runtime_command="brew",
    runtime_name="Homebrew",
    brew_formula="",
    section_type=SectionType.BREW,
)

MAS = ManagerMetadata(
    name="mas",
    display_name="Mac App Store apps",
    icon="📱",
    runtime_command="mas",
    runtime_name="mas-cli",
    brew_formula="mas",
    section_type=SectionType.MAS,
)

NPM = ManagerMetadata(
    name="npm",
    display_name="npm packages",
    icon="📦",
    runtime_command="npm",
    runtime_name="node",
    brew_formula="node",
    section_type=SectionType.NPM,
)

CARGO = ManagerMetadata(
    name="cargo",
    display_name="cargo packages",
    icon="🦀",
    runtime_command="cargo",
    runtime_name="rust",
    brew_formula="rust",
    section_type=SectionType.CARGO,
)


_REGISTRY: dict[str, tuple[ManagerMetadata, ManagerFactory]] = {}


def register_manager(metadata: ManagerMetadata, factory: ManagerFactory) -> None:
    """Add a manager to the registry.

    Raises:
        ValueError: If the name is taken, or a non-custom section type is
            already claimed by another manager
    """
    if metadata.name in _REGISTRY:
        raise ValueError(f"Manager '{metadata.name}' is already registered")
    if metadata.section_type not in PACKAGE_SECTION_TYPES:
        raise ValueError(
            f"Manager '{metadata.name}' cannot occupy the {metadata.section_type.value} phase"
        )
    if (
        metadata.section_type != SectionType.CUSTOM
        and get_by_section_type(metadata.section_type) is not None
    ):
        raise ValueError(
            f"Section type {metadata.section_type.value} is already owned by another manager"
        )
    _REGISTRY[metadata.name] = (metadata, factory)


def unregister_manager(name: str) -> None:
    _REGISTRY.pop(name, None)


def get_by_name(name: str) -> ManagerMetadata | None:
    entry = _REGISTRY.get(name)
    return entry[0] if entry else None


def get_by_section_type(section_type: SectionType) -> ManagerMetadata | None:
    for metadata, _ in _REGISTRY.values():
        if metadata.section_type == section_type:
            return metadata
    return None


def get_factory(name: str) -> ManagerFactory | None:
    entry = _REGISTRY.get(name)
    return entry[1] if entry else None


def all_names() -> list[str]:
    return list(_REGISTRY)


__all__ = [
    "SectionType",
    "PACKAGE_SECTION_TYPES",
    "ManagerMetadata",
    "ManagerFactory",
    "BREW",
    "MAS",
    "NPM",
    "CARGO",
    "register_manager",
    "unregister_manager",
    "get_by_name",
    "get_by_section_type",
    "get_factory",
    "all_names",
]
