"""Tests for TUI utilities."""

from unittest.mock import patch

import pytest
import questionary

from macup.importer import ScannedPackage
from macup.tui import IMPORT_STYLE, build_choices, format_package_choice, select_packages_interactive


def _packages():
    return [
        ScannedPackage("jq", "brew", "formulae", icon="🍺"),
        ScannedPackage("wget", "brew", "formulae", icon="🍺", is_existing=True),
        ScannedPackage("iterm2", "brew", "casks"),
        ScannedPackage("Xcode", "mas", "apps", app_id=497799835, icon="📱"),
        ScannedPackage("poetry", "pipx", "packages", icon="🐍"),
    ]


class TestFormatPackageChoice:
    def test_plain(self):
        assert format_package_choice(ScannedPackage("jq", "brew", "formulae", icon="🍺")) == "🍺 jq"

    def test_existing_marker(self):
        package = ScannedPackage("wget", "brew", "formulae", is_existing=True)
        assert format_package_choice(package).endswith("[existing]")

    def test_mas_app_shows_id(self):
        package = ScannedPackage("Xcode", "mas", "apps", app_id=497799835, icon="📱")
        assert format_package_choice(package) == "📱 Xcode (497799835)"


class TestBuildChoices:
    def test_separator_per_group(self):
        choices = build_choices(_packages())

        separators = [c for c in choices if isinstance(c, questionary.Separator)]
        assert [s.title for s in separators] == [
            "── Homebrew formulae ──",
            "── Homebrew casks ──",
            "── Mac App Store apps ──",
            "── pipx packages ──",
        ]

    def test_values_index_packages(self):
        choices = build_choices(_packages())

        values = [c.value for c in choices if not isinstance(c, questionary.Separator)]
        assert values == [0, 1, 2, 3, 4]

    def test_nothing_checked(self):
        choices = build_choices(_packages())

        assert not any(
            c.checked for c in choices if not isinstance(c, questionary.Separator)
        )


class TestSelectPackagesInteractive:
    def test_raises_without_tty(self, mock_no_tty):
        with pytest.raises(RuntimeError, match="requires a TTY"):
            select_packages_interactive(_packages())

    def test_empty_list(self, mock_tty):
        assert select_packages_interactive([]) == []

    def test_returns_selected_packages(self):
        packages = _packages()
        with patch("sys.stdin.isatty", return_value=True):
            with patch("questionary.checkbox") as mock_cb:
                mock_cb.return_value.ask.return_value = [0, 3]
                result = select_packages_interactive(packages)

        assert result == [packages[0], packages[3]]
        assert mock_cb.call_args.kwargs["style"] is IMPORT_STYLE

    def test_returns_none_on_cancel(self):
        with patch("sys.stdin.isatty", return_value=True):
            with patch("questionary.checkbox") as mock_cb:
                mock_cb.return_value.ask.return_value = None
                assert select_packages_interactive(_packages()) is None

    def test_keyboard_interrupt_returns_none(self):
        with patch("sys.stdin.isatty", return_value=True):
            with patch("questionary.checkbox") as mock_cb:
                mock_cb.return_value.ask.side_effect = KeyboardInterrupt
                assert select_packages_interactive(_packages()) is None
