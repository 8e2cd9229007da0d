"""Package managers declared in the config's `managers` table."""

import shlex

from ..config import DEFAULT_MAX_PARALLEL, ManagerDefinition
from .base import BinaryProbeManager
from .models import parse_package_spec
from .registry import ManagerMetadata, SectionType


def metadata_from_definition(definition: ManagerDefinition) -> ManagerMetadata:
    return ManagerMetadata(
        name=definition.name,
        display_name=definition.display_name,
        icon=definition.icon,
        runtime_command=definition.runtime_command,
        runtime_name=definition.runtime_name,
        brew_formula=definition.brew_formula,
        section_type=SectionType.CUSTOM,
    )


class CommandManager(BinaryProbeManager):
    """Runs the definition's command templates.

    With a ``list_command`` presence comes from the listing (first word of
    each line). Without one, the binary part of ``package:binary`` is probed.
    """

    def __init__(
        self, definition: ManagerDefinition, max_parallel: int = DEFAULT_MAX_PARALLEL
    ):
        super().__init__(max_parallel)
        self.definition = definition
        self.metadata = metadata_from_definition(definition)
        self.package_label = self.metadata.display_name

    async def list_installed(self) -> set[str]:
        if not self.definition.list_command:
            return set()
        lines = await self._list_lines(self.definition.list_command)
        return {line.split()[0] for line in lines}

    async def presence_check(self):
        if not self.definition.list_command:
            return await super().presence_check()
        installed = await self.list_installed()
        return lambda package: parse_package_spec(package)[0] in installed

    async def is_package_installed(self, package: str) -> bool:
        if not self.definition.list_command:
            return await super().is_package_installed(package)
        return parse_package_spec(package)[0] in await self.list_installed()

    async def install_one(self, package: str) -> None:
        name, _ = parse_package_spec(package)
        command = self.definition.install_command.replace("{package}", shlex.quote(name))
        await self._install(name, command)


__all__ = [
    "CommandManager",
    "metadata_from_definition",
]
