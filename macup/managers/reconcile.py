"""Batch reconciliation: check what is present, install the rest in parallel."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ..errors import InstallationError
from .models import InstallResult

_logging = logging.getLogger(__name__)


async def reconcile_packages(
    packages: list[str],
    is_satisfied: Callable[[str], bool],
    install_one: Callable[[str], Awaitable[None]],
    max_parallel: int,
    label: str = "packages",
) -> InstallResult:
    """Install every package that ``is_satisfied`` rejects.

    Already satisfied packages land in ``skipped``. The rest are installed
    concurrently, at most ``max_parallel`` at a time. Each install either
    succeeds or raises ``InstallationError``; one failure never stops the
    others. Workers only return their outcome, the merge happens after all
    of them finished.
    """
    result = InstallResult()
    to_install = []
    for package in packages:
        if is_satisfied(package):
            result.skipped.append(package)
        else:
            to_install.append(package)

    if result.skipped:
        _logging.info(f"✓ {len(result.skipped)} {label} already installed")

    if not to_install:
        return result

    _logging.info(f"Installing {len(to_install)} {label}...")

    semaphore = asyncio.Semaphore(max(1, max_parallel))

    async def worker(package: str) -> tuple[str, str | None]:
        async with semaphore:
            try:
                await install_one(package)
            except InstallationError as e:
                return package, e.reason
            return package, None

    outcomes = await asyncio.gather(*(worker(package) for package in to_install))

    for package, reason in outcomes:
        if reason is None:
            result.success.append(package)
        else:
            result.failed.append((package, reason))

    return result


__all__ = [
    "reconcile_packages",
]
