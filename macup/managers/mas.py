"""Mac App Store apps via mas-cli."""

from .base import Manager
from .registry import MAS


def parse_mas_list(lines: list[str]) -> dict[str, str]:
    """Map app id to name from ``mas list`` output.

    Lines look like ``497799835  Xcode  (16.2)``.
    """
    apps = {}
    for line in lines:
        parts = line.split(None, 1)
        if not parts or not parts[0].isdigit():
            continue
        name = parts[1].split("(")[0].strip() if len(parts) > 1 else parts[0]
        apps[parts[0]] = name
    return apps


class MasManager(Manager):
    metadata = MAS
    package_label = "apps"

    async def list_apps(self) -> dict[str, str]:
        return parse_mas_list(await self._list_lines(["mas", "list"]))

    async def list_installed(self) -> set[str]:
        return set(await self.list_apps())

    async def install_one(self, package: str) -> None:
        await self._install(package, ["mas", "install", package])


__all__ = [
    "MasManager",
    "parse_mas_list",
]
