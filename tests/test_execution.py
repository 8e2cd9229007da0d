"""Tests for the async command runner."""

import asyncio

import pytest

from macup.execution import BREW_ENV, command_exists, run_check_async, run_command_async


def _process(mocker, stdout=b"", stderr=b"", returncode=0):
    process = mocker.MagicMock()
    process.communicate = mocker.AsyncMock(return_value=(stdout, stderr))
    process.wait = mocker.AsyncMock(return_value=returncode)
    process.returncode = returncode
    return process


@pytest.fixture
def spawn_exec(mocker):
    return mocker.patch("macup.execution.asyncio.create_subprocess_exec", new_callable=mocker.AsyncMock)


@pytest.fixture
def spawn_shell(mocker):
    return mocker.patch("macup.execution.asyncio.create_subprocess_shell", new_callable=mocker.AsyncMock)


class TestRunCommandAsync:
    @pytest.mark.asyncio
    async def test_sequence_runs_without_shell(self, mocker, spawn_exec, spawn_shell):
        spawn_exec.return_value = _process(mocker, stdout=b"wget\njq\n")

        output, returncode = await run_command_async(["brew", "list", "--formula", "-1"])

        assert (output, returncode) == ("wget\njq", 0)
        assert spawn_exec.call_args.args == ("brew", "list", "--formula", "-1")
        spawn_shell.assert_not_called()

    @pytest.mark.asyncio
    async def test_string_runs_through_shell(self, mocker, spawn_exec, spawn_shell):
        spawn_shell.return_value = _process(mocker, stdout=b"ok")

        output, _ = await run_command_async("echo ok | cat")

        assert output == "ok"
        assert spawn_shell.call_args.args == ("echo ok | cat",)
        spawn_exec.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_prefers_stderr(self, mocker, spawn_exec):
        spawn_exec.return_value = _process(
            mocker, stdout=b"partial", stderr=b"Error: No available formula", returncode=1
        )

        assert await run_command_async(["brew", "install", "nope"]) == ("Error: No available formula", 1)

    @pytest.mark.asyncio
    async def test_failure_without_stderr_returns_stdout(self, mocker, spawn_exec):
        spawn_exec.return_value = _process(mocker, stdout=b"details", returncode=2)

        assert await run_command_async(["tool"]) == ("details", 2)

    @pytest.mark.asyncio
    async def test_success_ignores_stderr(self, mocker, spawn_exec):
        spawn_exec.return_value = _process(mocker, stdout=b"done", stderr=b"warning: slow")

        assert await run_command_async(["tool"]) == ("done", 0)

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self, mocker, spawn_exec):
        process = _process(mocker)

        async def hang():
            await asyncio.sleep(10)

        process.communicate = hang
        spawn_exec.return_value = process

        output, returncode = await run_command_async(["sleep", "10"], timeout=0.01)

        assert returncode == 1
        assert "timed out" in output
        process.kill.assert_called_once()
        process.wait.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_spawn_error_reported(self, spawn_exec):
        spawn_exec.side_effect = FileNotFoundError("No such file or directory: 'mas'")

        output, returncode = await run_command_async(["mas", "list"])

        assert returncode == 1
        assert output.startswith("Error: ")
        assert "mas" in output

    @pytest.mark.asyncio
    async def test_env_merged_with_environment(self, mocker, spawn_exec, monkeypatch):
        monkeypatch.setenv("PATH", "/usr/bin")
        spawn_exec.return_value = _process(mocker)

        await run_command_async(["brew", "install", "wget"], env=BREW_ENV)

        env = spawn_exec.call_args.kwargs["env"]
        assert env["HOMEBREW_NO_AUTO_UPDATE"] == "1"
        assert env["PATH"] == "/usr/bin"

    @pytest.mark.asyncio
    async def test_no_env_inherits(self, mocker, spawn_exec):
        spawn_exec.return_value = _process(mocker)

        await run_command_async(["true"])

        assert spawn_exec.call_args.kwargs["env"] is None


@pytest.mark.asyncio
async def test_run_check_async(mocker, spawn_shell):
    spawn_shell.return_value = _process(mocker, returncode=1)
    assert await run_check_async("rustup --version") is False

    spawn_shell.return_value = _process(mocker, returncode=0)
    assert await run_check_async("rustup --version") is True


def test_command_exists(mocker):
    which = mocker.patch(
        "macup.execution.shutil.which",
        side_effect=lambda name: "/bin/ls" if name == "ls" else None,
    )

    assert command_exists("ls")
    assert not command_exists("definitely-not-here")
    assert which.call_count == 2
