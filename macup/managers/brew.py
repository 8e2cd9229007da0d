"""Homebrew formulae, casks and taps."""

import asyncio
import logging
import os

from ..errors import InstallationError
from ..execution import BREW_ENV, run_command_async
from .base import Manager
from .models import InstallResult
from .reconcile import reconcile_packages
from .registry import BREW

_logging = logging.getLogger(__name__)

HOMEBREW_INSTALL_SCRIPT = (
    '/bin/bash -c "$(curl -fsSL '
    'https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh)"'
)
APPLE_SILICON_BREW_DIR = "/opt/homebrew/bin"


def is_listed(name: str, installed: set[str]) -> bool:
    """Formulae and casks from a tap (``owner/tap/name``) are listed by short name."""
    return name.rsplit("/", 1)[-1] in installed


def is_tapped(tap: str, installed: set[str]) -> bool:
    return tap.lower() in {t.lower() for t in installed}


async def install_homebrew() -> None:
    """Run the official Homebrew install script.

    On Apple Silicon the new ``brew`` lands outside the default PATH, so
    ``/opt/homebrew/bin`` is prepended for the rest of the process.

    Raises:
        InstallationError: If the install script fails
    """
    _logging.info("→ Installing Homebrew...")
    output, returncode = await run_command_async(HOMEBREW_INSTALL_SCRIPT, timeout=None)
    if returncode != 0:
        reason = "Homebrew install script failed"
        if output:
            reason = f"{reason}: {output}"
        raise InstallationError("brew", reason)

    if os.path.exists(os.path.join(APPLE_SILICON_BREW_DIR, "brew")):
        path = os.environ.get("PATH", "")
        os.environ["PATH"] = f"{APPLE_SILICON_BREW_DIR}:{path}" if path else APPLE_SILICON_BREW_DIR
        _logging.debug(f"Prepended {APPLE_SILICON_BREW_DIR} to PATH")


class BrewManager(Manager):
    metadata = BREW
    package_label = "formulae"

    async def list_formulae(self) -> set[str]:
        return set(await self._list_lines(["brew", "list", "--formula", "-1"], env=BREW_ENV))

    async def list_casks(self) -> set[str]:
        return set(await self._list_lines(["brew", "list", "--cask", "-1"], env=BREW_ENV))

    async def list_taps(self) -> set[str]:
        return set(await self._list_lines(["brew", "tap"], env=BREW_ENV))

    async def list_all(self) -> tuple[set[str], set[str], set[str]]:
        """List taps, formulae and casks concurrently."""
        taps, formulae, casks = await asyncio.gather(
            self.list_taps(), self.list_formulae(), self.list_casks()
        )
        return taps, formulae, casks

    async def list_installed(self) -> set[str]:
        return await self.list_formulae()

    async def install_one(self, package: str) -> None:
        await self.install_formula(package)

    async def install_formula(self, name: str) -> None:
        await self._install(name, ["brew", "install", name], env=BREW_ENV)

    async def install_cask(self, name: str) -> None:
        await self._install(name, ["brew", "install", "--cask", name], env=BREW_ENV)

    async def add_tap(self, name: str) -> None:
        await self._install(name, ["brew", "tap", name], env=BREW_ENV)

    async def install_formulae(
        self, formulae: list[str], installed: set[str] | None = None
    ) -> InstallResult:
        if not formulae:
            return InstallResult()
        if installed is None:
            installed = await self.list_formulae()
        return await reconcile_packages(
            formulae,
            lambda name: is_listed(name, installed),
            self.install_formula,
            self.max_parallel,
            label="formulae",
        )

    async def install_casks(
        self, casks: list[str], installed: set[str] | None = None
    ) -> InstallResult:
        if not casks:
            return InstallResult()
        if installed is None:
            installed = await self.list_casks()
        return await reconcile_packages(
            casks,
            lambda name: is_listed(name, installed),
            self.install_cask,
            self.max_parallel,
            label="casks",
        )

    async def add_taps(self, taps: list[str], installed: set[str] | None = None) -> InstallResult:
        """Add taps sequentially."""
        if not taps:
            return InstallResult()
        if installed is None:
            installed = await self.list_taps()
        known = {tap.lower() for tap in installed}
        return await reconcile_packages(
            taps,
            lambda tap: tap.lower() in known,
            self.add_tap,
            1,
            label="taps",
        )

    async def presence_check(self):
        installed = await self.list_formulae()
        return lambda name: is_listed(name, installed)

    async def is_package_installed(self, package: str) -> bool:
        return is_listed(package, await self.list_formulae())


__all__ = [
    "BrewManager",
    "HOMEBREW_INSTALL_SCRIPT",
    "APPLE_SILICON_BREW_DIR",
    "install_homebrew",
    "is_listed",
    "is_tapped",
]
