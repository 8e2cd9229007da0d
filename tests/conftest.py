"""Pytest fixtures and utilities for macup tests."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from macup.config import parse_config

# Every module that imported run_command_async by name.
RUNNER_TARGETS = [
    "macup.execution.run_command_async",
    "macup.managers.base.run_command_async",
    "macup.managers.brew.run_command_async",
    "macup.managers.cargo.run_command_async",
    "macup.managers.install.run_command_async",
    "macup.system.run_command_async",
    "macup.executor.apply.run_command_async",
]


class FakeSystem:
    """Scripted stand-in for PATH lookups and external commands.

    ``binaries`` decides what ``shutil.which`` finds. ``responses`` maps a
    command line to ``(output, returncode)``; anything unlisted succeeds
    with empty output. Every command line is recorded in ``calls`` and its
    timeout in ``timeouts``.
    """

    def __init__(self):
        self.binaries: set[str] = set()
        self.responses: dict[str, tuple[str, int]] = {}
        self.calls: list[str] = []
        self.timeouts: list = []

    def which(self, name):
        return f"/usr/local/bin/{name}" if name in self.binaries else None

    async def run(self, command, timeout=None, env=None):
        line = command if isinstance(command, str) else " ".join(command)
        self.calls.append(line)
        self.timeouts.append(timeout)
        return self.responses.get(line, ("", 0))

    def respond(self, command: str, output: str = "", returncode: int = 0) -> None:
        self.responses[command] = (output, returncode)

    def installs(self) -> list[str]:
        """Calls that would change the machine."""
        mutating = []
        for line in self.calls:
            words = line.split()
            if "install" in words and "--list" not in words:
                mutating.append(line)
            elif words[:2] == ["brew", "tap"] and len(words) > 2:
                mutating.append(line)
        return mutating


@pytest.fixture
def fake_system() -> Generator[FakeSystem, None, None]:
    """Patch PATH probing and every command runner with a FakeSystem."""
    system = FakeSystem()
    patchers = [patch("macup.execution.shutil.which", new=system.which)]
    patchers += [patch(target, new=system.run) for target in RUNNER_TARGETS]
    for patcher in patchers:
        patcher.start()
    try:
        yield system
    finally:
        for patcher in reversed(patchers):
            patcher.stop()


@pytest.fixture
def make_config():
    """Build a Config from a plain mapping."""

    def _make(data: dict):
        return parse_config(data)

    return _make


@pytest.fixture
def write_config(tmp_path: Path):
    """Write a mapping as macup.yaml in a temp dir and return its path."""

    def _write(data: dict, name: str = "macup.yaml") -> Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def mock_tty() -> Generator[None, None, None]:
    """Mock sys.stdin.isatty to return True."""
    with patch("sys.stdin.isatty", return_value=True):
        yield


@pytest.fixture
def mock_no_tty() -> Generator[None, None, None]:
    """Mock sys.stdin.isatty to return False."""
    with patch("sys.stdin.isatty", return_value=False):
        yield
