"""Async command execution utilities."""

import asyncio
import logging
import os
import shutil
from collections.abc import Mapping, Sequence
from typing import Tuple

# Keeps brew from running `brew update` before every install.
BREW_ENV = {"HOMEBREW_NO_AUTO_UPDATE": "1"}

_logging = logging.getLogger(__name__)


def command_exists(command: str) -> bool:
    """Check if an executable is available on PATH."""
    return shutil.which(command) is not None


def _build_env(env: Mapping[str, str] | None) -> dict[str, str] | None:
    if not env:
        return None
    merged = dict(os.environ)
    merged.update(env)
    return merged


async def run_command_async(
    command: str | Sequence[str],
    timeout: float | None = None,
    env: Mapping[str, str] | None = None,
) -> Tuple[str, int]:
    """Run a command asynchronously and return output and return code.

    A string is run through the shell, a sequence is executed directly.
    On a non-zero exit the output is the command's stderr when it wrote any,
    so callers can surface the tool's own diagnostic. Spawn failures and
    timeouts are reported as return code 1 with an explanatory message.

    Without a ``timeout`` the process is awaited for as long as it runs.
    """
    process = None
    display = command if isinstance(command, str) else " ".join(command)
    try:
        _logging.debug(f"Running command: {display}")
        if isinstance(command, str):
            process = await asyncio.create_subprocess_shell(
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=_build_env(env),
            )
        else:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=_build_env(env),
            )
        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=timeout
            )
            output = stdout.decode(errors="replace").strip()
            error_output = stderr.decode(errors="replace").strip()
            returncode = process.returncode if process.returncode is not None else 1
            if error_output:
                _logging.debug(f"stderr: {error_output}")
            if returncode != 0 and error_output:
                return error_output, returncode
            return output, returncode
        except asyncio.TimeoutError:
            process.kill()
            _ = await process.wait()
            _logging.error(f"Command timed out after {timeout} seconds: {display}")
            return f"Command timed out after {timeout} seconds", 1
    except Exception as e:
        _logging.error(
            f"Command execution failed: {type(e).__name__}: {e} | Command: {display}"
        )
        return f"Error: {str(e)}", 1
    finally:
        if process:
            transport = getattr(process, "_transport", None)
            if transport:
                transport.close()


async def run_check_async(command: str, timeout: float | None = None) -> bool:
    """Run a shell check command and report whether it exited successfully."""
    _, returncode = await run_command_async(command, timeout=timeout)
    return returncode == 0


__all__ = [
    "BREW_ENV",
    "command_exists",
    "run_check_async",
    "run_command_async",
]
