"""Best-effort system settings commands (``defaults write`` and friends)."""

import logging

from .execution import run_command_async

_logging = logging.getLogger(__name__)


async def apply_commands(commands: list[str]) -> list[str]:
    """Run each command through the shell and return the ones that failed.

    Failures are logged as warnings and never raised.
    """
    failed = []
    for command in commands:
        _logging.info(f"→ Running: {command}")
        output, returncode = await run_command_async(command, timeout=None)
        if returncode != 0:
            _logging.warning(f"Command failed: {command} ({output})")
            failed.append(command)
    return failed


__all__ = [
    "apply_commands",
]
