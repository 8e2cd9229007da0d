"""Tests for config validation."""

import pytest

from macup.errors import ValidationError
from macup.validator import validate_config


def test_valid_config_passes(make_config):
    config = make_config(
        {
            "brew": {"formulae": ["wget"]},
            "npm": {"depends_on": ["brew"], "global": ["prettier"]},
            "install": {"scripts": [{"name": "rustup", "command": "true", "binary": "rustup"}]},
        }
    )
    validate_config(config)


def test_two_section_cycle_names_path(make_config):
    config = make_config({"npm": {"depends_on": ["cargo"]}, "cargo": {"depends_on": ["npm"]}})

    with pytest.raises(ValidationError, match="Dependency cycle detected: npm -> cargo -> npm"):
        validate_config(config)


def test_self_dependency_is_a_cycle(make_config):
    config = make_config({"npm": {"depends_on": ["npm"]}})

    with pytest.raises(ValidationError, match="npm -> npm"):
        validate_config(config)


def test_dependency_on_absent_section_is_not_a_cycle(make_config):
    config = make_config({"install": {"depends_on": ["npm"], "scripts": []}})
    validate_config(config)


def test_max_parallel_at_least_one(make_config):
    config = make_config({"settings": {"max_parallel": 0}})

    with pytest.raises(ValidationError, match="max_parallel"):
        validate_config(config)


def test_mas_id_positive(make_config):
    config = make_config({"mas": {"apps": [{"name": "Broken", "id": -1}]}})

    with pytest.raises(ValidationError, match="App 'Broken' field 'id'"):
        validate_config(config)


def test_script_needs_binary_or_check(make_config):
    config = make_config({"install": {"scripts": [{"name": "thing", "command": "make install"}]}})

    with pytest.raises(ValidationError, match="either a 'binary' or a 'check'"):
        validate_config(config)


def test_script_with_check_only(make_config):
    config = make_config(
        {"install": {"scripts": [{"name": "thing", "command": "make", "check": "thing --version"}]}}
    )
    validate_config(config)


def test_manager_install_command_needs_placeholder(make_config):
    config = make_config({"managers": {"pipx": {"install_command": "pipx install"}}})

    with pytest.raises(ValidationError, match=r"install_command' must contain '\{package\}'"):
        validate_config(config)


def test_manager_cannot_shadow_builtin(make_config):
    config = make_config({"managers": {"npm": {"install_command": "npm i {package}"}}})

    with pytest.raises(ValidationError, match="Manager 'npm' uses a reserved section name"):
        validate_config(config)


def test_custom_manager_valid(make_config):
    config = make_config(
        {
            "managers": {"pipx": {"install_command": "pipx install {package}"}},
            "pipx": {"packages": ["poetry"]},
        }
    )
    validate_config(config)
