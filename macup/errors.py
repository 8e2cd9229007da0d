"""Error types and formatting utilities for consistent error messages.

This module provides the exception hierarchy raised by macup and helper
functions for formatting error messages consistently across the codebase.
All user-facing errors should use these utilities.

Error Style Guide:
- User-facing errors use 'Error: ' prefix
- Field errors use structured format: '<entity> field '<field>' <issue>'
- Use present tense: 'must be', 'is required'
- Avoid emojis in error messages (keep in progress displays only)
- Include actionable hints where helpful
- Be concise but informative
"""

from typing import Any


class MacupError(Exception):
    """Base class for all macup errors."""


class ConfigError(MacupError):
    """Raised when config loading or parsing fails."""


class ValidationError(ConfigError):
    """Raised when a parsed config is structurally or semantically invalid."""


class PlanError(MacupError):
    """Raised when the sections cannot be ordered into an execution plan.

    ``sections`` holds the section names that could never be scheduled.
    """

    def __init__(self, message: str, sections: list[str] | None = None):
        super().__init__(message)
        self.sections = sections or []


class InstallationError(MacupError):
    """Raised when a single external install command fails."""

    def __init__(self, package: str, reason: str):
        super().__init__(reason)
        self.package = package
        self.reason = reason


class ApplyError(MacupError):
    """Raised when an apply run ends in a hard failure.

    ``report`` carries whatever the run accumulated before it stopped.
    """

    def __init__(self, message: str, report: Any = None):
        super().__init__(message)
        self.report = report


def format_error(message: str) -> str:
    """Format an error message with consistent prefix.

    Args:
        message: The error message to format

    Returns:
        Formatted error message with 'Error: ' prefix

    Examples:
        >>> format_error("file not found")
        'Error: file not found'
    """
    return f"Error: {message}"


def format_field_error(entity: str, field: str, issue: str) -> str:
    """Format a field validation error with structured format.

    Args:
        entity: Name of the entity being validated (e.g., "Script 'rustup'")
        field: Name of the field that failed validation
        issue: Description of the issue (e.g., "must be a non-empty string")

    Returns:
        Formatted field error message

    Examples:
        >>> format_field_error("Script 'rustup'", "command", "is required")
        "Script 'rustup' field 'command' is required"
    """
    return f"{entity} field '{field}' {issue}"


def format_suggestion(message: str, suggestion: str) -> str:
    """Format an error message with a helpful suggestion.

    Examples:
        >>> format_suggestion("config file not found", "run 'macup import' to create one")
        "Error: config file not found. Hint: run 'macup import' to create one"
    """
    return f"{format_error(message)}. Hint: {suggestion}"


__all__ = [
    "MacupError",
    "ConfigError",
    "ValidationError",
    "PlanError",
    "InstallationError",
    "ApplyError",
    "format_error",
    "format_field_error",
    "format_suggestion",
]
