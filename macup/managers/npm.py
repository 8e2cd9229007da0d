"""Global npm packages."""

from .base import BinaryProbeManager
from .models import parse_package_spec
from .registry import NPM


def parse_npm_list(lines: list[str]) -> set[str]:
    """Extract package names from ``npm list -g --parseable`` paths.

    The first line is the global prefix itself and carries no package.
    Scoped packages keep their scope (``@scope/name``).
    """
    packages = set()
    for line in lines:
        if "node_modules/" not in line:
            continue
        packages.add(line.rsplit("node_modules/", 1)[1])
    return packages


class NpmManager(BinaryProbeManager):
    metadata = NPM
    package_label = "npm packages"

    async def list_installed(self) -> set[str]:
        lines = await self._list_lines(["npm", "list", "-g", "--depth=0", "--parseable"])
        return parse_npm_list(lines)

    async def install_one(self, package: str) -> None:
        name, _ = parse_package_spec(package)
        await self._install(name, ["npm", "install", "-g", name])


__all__ = [
    "NpmManager",
    "parse_npm_list",
]
