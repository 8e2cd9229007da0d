"""Rust crates installed with ``cargo install``."""

from ..errors import MacupError
from ..execution import run_command_async
from .base import BinaryProbeManager
from .models import parse_package_spec
from .registry import CARGO

RUSTUP_INSTALL_COMMAND = ["rustup", "toolchain", "install", "stable"]


def parse_cargo_list(lines: list[str]) -> set[str]:
    """Extract crate names from ``cargo install --list``.

    Crate lines are unindented (``ripgrep v14.1.0:``); the binaries they
    provide follow on indented lines.
    """
    packages = set()
    for line in lines:
        if line and not line[0].isspace() and " " in line:
            packages.add(line.split()[0])
    return packages


class CargoManager(BinaryProbeManager):
    metadata = CARGO
    package_label = "cargo packages"

    async def list_installed(self) -> set[str]:
        # Indentation separates crates from their binaries, so no line stripping.
        output, returncode = await run_command_async(
            ["cargo", "install", "--list"], timeout=None
        )
        if returncode != 0:
            raise MacupError(f"cargo install --list failed: {output}")
        return parse_cargo_list(output.splitlines())

    async def install_one(self, package: str) -> None:
        name, _ = parse_package_spec(package)
        await self._install(name, ["cargo", "install", name])


__all__ = [
    "CargoManager",
    "parse_cargo_list",
    "RUSTUP_INSTALL_COMMAND",
]
