"""The contract every package-manager integration implements."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from ..config import DEFAULT_MAX_PARALLEL
from ..errors import InstallationError, MacupError
from ..execution import command_exists, run_command_async
from .models import InstallResult, parse_package_spec
from .reconcile import reconcile_packages
from .registry import ManagerMetadata

_logging = logging.getLogger(__name__)


class Manager(ABC):
    """A package manager that can list and install packages.

    Subclasses set ``metadata`` and implement ``list_installed`` and
    ``install_one``. Presence is decided from one bulk listing unless a
    subclass overrides ``presence_check``.
    """

    metadata: ManagerMetadata
    package_label = "packages"

    def __init__(self, max_parallel: int = DEFAULT_MAX_PARALLEL):
        self.max_parallel = max_parallel

    @property
    def name(self) -> str:
        return self.metadata.name

    def is_installed(self) -> bool:
        return command_exists(self.metadata.runtime_command)

    @abstractmethod
    async def list_installed(self) -> set[str]:
        """Return identifiers of everything this manager has installed."""

    @abstractmethod
    async def install_one(self, package: str) -> None:
        """Run the install command for one package.

        Raises:
            InstallationError: If the command exits non-zero
        """

    async def presence_check(self) -> Callable[[str], bool]:
        installed = await self.list_installed()
        return lambda package: package in installed

    async def is_package_installed(self, package: str) -> bool:
        return package in await self.list_installed()

    async def install_package(self, package: str) -> None:
        if await self.is_package_installed(package):
            _logging.info(f"✓ {package} already installed")
            return
        await self.install_one(package)

    async def missing_packages(self, packages: list[str]) -> list[str]:
        if not packages:
            return []
        is_present = await self.presence_check()
        return [package for package in packages if not is_present(package)]

    async def install_packages(
        self, packages: list[str], is_present: Callable[[str], bool] | None = None
    ) -> InstallResult:
        """Install whatever is missing. ``is_present`` reuses an earlier presence check."""
        if not packages:
            return InstallResult()
        if is_present is None:
            is_present = await self.presence_check()
        return await reconcile_packages(
            packages,
            is_present,
            self.install_one,
            self.max_parallel,
            label=self.package_label,
        )

    async def _list_lines(self, command: list[str] | str, env=None) -> list[str]:
        output, returncode = await run_command_async(
            command, timeout=None, env=env
        )
        if returncode != 0:
            display = command if isinstance(command, str) else " ".join(command)
            raise MacupError(f"{display} failed: {output}")
        return [line.strip() for line in output.splitlines() if line.strip()]

    async def _install(self, package: str, command: list[str] | str, env=None) -> None:
        display = command if isinstance(command, str) else " ".join(command)
        _logging.info(f"→ Installing {package} ({self.name})...")
        output, returncode = await run_command_async(command, timeout=None, env=env)
        if returncode != 0:
            reason = f"{display} failed"
            if output:
                reason = f"{reason}: {output}"
            raise InstallationError(package, reason)
        _logging.info(f"✓ {package} installed")


class BinaryProbeManager(Manager):
    """A manager whose packages count as installed when their binary is on PATH.

    Identifiers may be ``package:binary``; only the package part is passed
    to the install command.
    """

    async def presence_check(self) -> Callable[[str], bool]:
        return lambda package: command_exists(parse_package_spec(package)[1])

    async def is_package_installed(self, package: str) -> bool:
        return command_exists(parse_package_spec(package)[1])

    async def install_package(self, package: str) -> None:
        if await self.is_package_installed(package):
            _logging.info(f"✓ {parse_package_spec(package)[0]} already installed")
            return
        await self.install_one(package)


__all__ = [
    "Manager",
    "BinaryProbeManager",
]
