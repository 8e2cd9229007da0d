import pytest
import yaml
from click.testing import CliRunner

from macup.commands import cli
from macup.commands.utils import EXIT_APPLY_FAILED, EXIT_CONFIG_ERROR, EXIT_INVALID_ARGS
from macup.errors import ApplyError
from macup.importer import ScannedPackage


@pytest.fixture
def runner():
    """Create a CliRunner for testing."""
    return CliRunner()


def invoke(runner, path, *args, **kwargs):
    return runner.invoke(cli, ["--config", str(path), *args], **kwargs)


class TestValidate:
    def test_valid_config(self, runner, write_config):
        path = write_config({"brew": {"formulae": ["wget"]}, "npm": {"global": ["prettier"]}})

        result = invoke(runner, path, "validate")

        assert result.exit_code == 0
        assert "is valid" in result.output
        assert "Sections: brew, npm" in result.output

    def test_cycle_is_config_error(self, runner, write_config):
        path = write_config({"npm": {"depends_on": ["cargo"]}, "cargo": {"depends_on": ["npm"]}})

        result = invoke(runner, path, "validate")

        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "Dependency cycle detected" in result.output

    def test_missing_config_file(self, runner, tmp_path):
        result = invoke(runner, tmp_path / "nope.yaml", "validate")

        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "Config file not found" in result.output

    def test_type_error(self, runner, write_config):
        path = write_config({"brew": {"formulae": "wget"}})

        result = invoke(runner, path, "validate")

        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "brew.formulae must be an array" in result.output


class TestPlan:
    def test_prints_phases(self, runner, write_config):
        path = write_config(
            {"brew": {"formulae": ["wget"]}, "npm": {"depends_on": ["brew"], "global": ["prettier"]}}
        )

        result = invoke(runner, path, "plan")

        assert result.exit_code == 0
        assert "Execution Plan:" in result.output
        assert "2. brew (1 item)" in result.output
        assert "3. npm (1 item)" in result.output


class TestApply:
    def test_passes_flags(self, runner, write_config, mocker):
        path = write_config({"brew": {"formulae": ["wget"]}})
        apply_plan = mocker.patch("macup.commands.apply.apply_plan", new_callable=mocker.AsyncMock)

        result = invoke(runner, path, "apply", "--dry-run", "--with-system-settings")

        assert result.exit_code == 0
        kwargs = apply_plan.call_args.kwargs
        assert kwargs["dry_run"] is True
        assert kwargs["with_system_settings"] is True
        assert kwargs["section"] is None

    def test_apply_error_exits_one(self, runner, write_config, mocker):
        path = write_config({"brew": {"formulae": ["wget"]}})
        mocker.patch(
            "macup.commands.apply.apply_plan",
            new_callable=mocker.AsyncMock,
            side_effect=ApplyError("macup completed with errors"),
        )

        result = invoke(runner, path, "apply")

        assert result.exit_code == EXIT_APPLY_FAILED
        assert "macup completed with errors" in result.output

    def test_dry_run_end_to_end(self, runner, write_config, fake_system):
        fake_system.binaries = {"brew"}
        fake_system.respond("brew list --formula -1", "wget")
        path = write_config({"brew": {"formulae": ["wget", "jq"]}})

        result = invoke(runner, path, "apply", "--dry-run")

        assert result.exit_code == 0
        assert "→ jq" in result.output
        assert "macup apply completed" in result.output
        assert fake_system.installs() == []

    def test_section_argument_notice(self, runner, write_config, fake_system):
        path = write_config({"brew": {}})

        result = invoke(runner, path, "apply", "brew")

        assert result.exit_code == 0
        assert "Section filtering is not supported" in result.output
        assert "(requested: brew)" in result.output


class TestAdd:
    def test_no_install_updates_config(self, runner, write_config):
        path = write_config({"npm": {"global": ["prettier"]}})

        result = invoke(runner, path, "add", "npm", "prettier", "eslint", "--no-install")

        assert result.exit_code == 0
        assert yaml.safe_load(path.read_text())["npm"]["global"] == ["prettier", "eslint"]

    def test_creates_missing_section(self, runner, write_config):
        path = write_config({"brew": {"formulae": ["wget"]}})

        result = invoke(runner, path, "add", "cask", "iterm2", "--no-install")

        assert result.exit_code == 0
        assert yaml.safe_load(path.read_text())["brew"] == {"formulae": ["wget"], "casks": ["iterm2"]}

    def test_installs_then_records(self, runner, write_config, fake_system):
        fake_system.binaries = {"npm"}
        path = write_config({"npm": {"global": []}})

        result = invoke(runner, path, "add", "npm", "prettier")

        assert result.exit_code == 0
        assert fake_system.installs() == ["npm install -g prettier"]
        assert yaml.safe_load(path.read_text())["npm"]["global"] == ["prettier"]

    def test_install_failure_not_recorded(self, runner, write_config, fake_system):
        fake_system.binaries = {"npm"}
        fake_system.respond("npm install -g nope", "404 Not Found", 1)
        path = write_config({"npm": {"global": []}})

        result = invoke(runner, path, "add", "npm", "nope")

        assert result.exit_code == EXIT_APPLY_FAILED
        assert "404 Not Found" in result.output
        assert yaml.safe_load(path.read_text())["npm"]["global"] == []

    def test_runtime_missing(self, runner, write_config, fake_system):
        path = write_config({})

        result = invoke(runner, path, "add", "cargo", "ripgrep")

        assert result.exit_code == EXIT_APPLY_FAILED
        assert "rust is not installed" in result.output
        assert fake_system.installs() == []

    def test_mas_rejected(self, runner, write_config):
        path = write_config({})

        result = invoke(runner, path, "add", "mas", "497799835")

        assert result.exit_code == EXIT_INVALID_ARGS

    def test_unknown_manager(self, runner, write_config):
        path = write_config({})

        result = invoke(runner, path, "add", "pip", "requests")

        assert result.exit_code == EXIT_INVALID_ARGS
        assert "Unknown manager 'pip'" in result.output

    def test_custom_manager(self, runner, write_config):
        path = write_config({"managers": {"pipx": {"install_command": "pipx install {package}"}}})

        result = invoke(runner, path, "add", "pipx", "poetry", "--no-install")

        assert result.exit_code == 0
        assert yaml.safe_load(path.read_text())["pipx"] == {"packages": ["poetry"]}


class TestDiff:
    def test_reports_missing(self, runner, write_config, fake_system):
        fake_system.binaries = {"brew"}
        fake_system.respond("brew list --formula -1", "wget")
        path = write_config({"brew": {"formulae": ["wget", "jq"]}, "npm": {"global": ["prettier"]}})

        result = invoke(runner, path, "diff")

        assert result.exit_code == 0
        assert "+ formulae: jq" in result.output
        assert "node not installed" in result.output
        assert "1 item(s) missing" in result.output

    def test_up_to_date(self, runner, write_config, fake_system):
        fake_system.binaries = {"npm", "prettier"}
        path = write_config({"npm": {"global": ["prettier"]}})

        result = invoke(runner, path, "diff")

        assert "up to date" in result.output
        assert "Everything in the config is installed" in result.output


class TestManagers:
    def test_lists_builtin_and_custom(self, runner, write_config, fake_system):
        fake_system.binaries = {"brew"}
        path = write_config({"managers": {"pipx": {"install_command": "pipx install {package}"}}})

        result = invoke(runner, path, "managers")

        assert result.exit_code == 0
        lines = result.output.splitlines()
        brew_line = next(line for line in lines if " brew " in line)
        pipx_line = next(line for line in lines if " pipx " in line)
        assert "installed" in brew_line
        assert "[built-in]" in brew_line
        assert "[custom]" in pipx_line
        assert "missing" in pipx_line

    def test_works_without_config(self, runner, tmp_path, fake_system):
        result = invoke(runner, tmp_path / "none.yaml", "managers")

        assert result.exit_code == 0
        assert "cargo" in result.output

    def test_invalid_config_is_an_error(self, runner, write_config, fake_system):
        path = write_config({"brew": {"formulae": "wget"}})

        result = invoke(runner, path, "managers")

        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "must be an array" in result.output


class TestImport:
    def test_requires_tty(self, runner, write_config, mocker):
        mocker.patch("macup.commands.import_._is_interactive", return_value=False)
        path = write_config({})

        result = invoke(runner, path, "import")

        assert result.exit_code == EXIT_INVALID_ARGS
        assert "interactive terminal" in result.output

    def test_merges_selection(self, runner, write_config, mocker):
        mocker.patch("macup.commands.import_._is_interactive", return_value=True)
        scanned = [
            ScannedPackage("jq", "brew", "formulae"),
            ScannedPackage("wget", "brew", "formulae"),
            ScannedPackage("Xcode", "mas", "apps", app_id=497799835),
        ]
        mocker.patch(
            "macup.commands.import_.scan_system",
            new_callable=mocker.AsyncMock,
            return_value=scanned,
        )
        select = mocker.patch(
            "macup.commands.import_.select_packages_interactive",
            return_value=[scanned[0], scanned[2]],
        )
        path = write_config({"brew": {"formulae": ["wget"]}})

        result = invoke(runner, path, "import", input="y\n")

        assert result.exit_code == 0
        assert scanned[1].is_existing
        select.assert_called_once()
        data = yaml.safe_load(path.read_text())
        assert data["brew"]["formulae"] == ["wget", "jq"]
        assert data["mas"]["apps"] == [{"name": "Xcode", "id": 497799835}]
        assert "Added 2 packages" in result.output

    def test_declined_confirmation(self, runner, write_config, mocker):
        mocker.patch("macup.commands.import_._is_interactive", return_value=True)
        scanned = [ScannedPackage("jq", "brew", "formulae")]
        mocker.patch(
            "macup.commands.import_.scan_system",
            new_callable=mocker.AsyncMock,
            return_value=scanned,
        )
        mocker.patch(
            "macup.commands.import_.select_packages_interactive", return_value=scanned
        )
        path = write_config({"brew": {"formulae": ["wget"]}})
        before = path.read_text()

        result = invoke(runner, path, "import", input="n\n")

        assert result.exit_code == 0
        assert "Import cancelled" in result.output
        assert path.read_text() == before
