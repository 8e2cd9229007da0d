"""Arbitrary install scripts from the `install` section."""

import logging
from dataclasses import dataclass

from ..config import InstallScript
from ..errors import InstallationError
from ..execution import command_exists, run_check_async, run_command_async

_logging = logging.getLogger(__name__)


@dataclass
class ScriptResult:
    name: str
    status: str
    output: str = ""


async def is_script_installed(script: InstallScript) -> bool:
    """A binary probe wins over a check command; with neither, assume missing."""
    if script.binary:
        return command_exists(script.binary)
    if script.check:
        return await run_check_async(script.check)
    return False


async def apply_script(script: InstallScript) -> None:
    """Run one install script and verify it with its check command.

    Raises:
        InstallationError: If the command fails or verification fails
    """
    _logging.info(f"→ Installing {script.name}...")
    output, returncode = await run_command_async(script.command, timeout=None)
    if returncode != 0:
        reason = f"Failed to install {script.name}"
        if output:
            reason = f"{reason}: {output}"
        raise InstallationError(script.name, reason)

    if script.check and not await run_check_async(script.check):
        raise InstallationError(
            script.name, f"{script.name} installed but verification failed"
        )

    _logging.info(f"✓ {script.name} installed")


async def apply_scripts(scripts: list[InstallScript]) -> list[ScriptResult]:
    """Run scripts in order.

    A failing required script raises and stops the remaining scripts;
    a failing optional script is logged and skipped.
    """
    results = []
    for script in scripts:
        try:
            await apply_script(script)
        except InstallationError as e:
            if script.required:
                raise
            _logging.warning(f"Skipping optional script {script.name}: {e.reason}")
            results.append(ScriptResult(script.name, "failed", e.reason))
            continue
        results.append(ScriptResult(script.name, "success"))
    return results


__all__ = [
    "ScriptResult",
    "is_script_installed",
    "apply_script",
    "apply_scripts",
]
