"""Pre-flight validation of a parsed config."""

from .config import RESERVED_KEYS, Config
from .errors import ValidationError, format_field_error


def validate_config(config: Config) -> None:
    """Validate config for correctness before planning.

    Raises:
        ValidationError: On the first problem found
    """
    check_dependency_cycles(config)
    validate_settings(config)
    validate_mas_apps(config)
    validate_install_scripts(config)
    validate_custom_managers(config)


def _find_cycle(
    node: str,
    graph: dict[str, list[str]],
    visited: set[str],
    stack: list[str],
) -> list[str] | None:
    if node in stack:
        return stack[stack.index(node) :] + [node]
    if node in visited:
        return None

    visited.add(node)
    stack.append(node)
    for neighbor in graph.get(node, []):
        cycle = _find_cycle(neighbor, graph, visited, stack)
        if cycle:
            return cycle
    stack.pop()
    return None


def check_dependency_cycles(config: Config) -> None:
    """Reject circular `depends_on` chains, naming the cycle path."""
    graph = {name: list(section.depends_on) for name, section in config.sections().items()}

    visited: set[str] = set()
    for node in graph:
        cycle = _find_cycle(node, graph, visited, [])
        if cycle:
            raise ValidationError(
                f"Dependency cycle detected: {' -> '.join(cycle)}"
            )


def validate_settings(config: Config) -> None:
    if config.settings.max_parallel < 1:
        raise ValidationError(
            format_field_error("Settings", "max_parallel", "must be at least 1")
        )


def validate_mas_apps(config: Config) -> None:
    if config.mas is None:
        return
    for app in config.mas.apps:
        if app.id <= 0:
            raise ValidationError(
                format_field_error(f"App '{app.name}'", "id", "must be a positive integer")
            )


def validate_install_scripts(config: Config) -> None:
    if config.install is None:
        return
    for i, script in enumerate(config.install.scripts):
        entity = f"Script '{script.name or i}'"
        if not script.name or not script.name.strip():
            raise ValidationError(format_field_error(entity, "name", "is required"))
        if not script.command or not script.command.strip():
            raise ValidationError(format_field_error(entity, "command", "is required"))
        if not script.binary and not script.check:
            raise ValidationError(
                f"{entity} needs either a 'binary' or a 'check' to detect installation"
            )


def validate_custom_managers(config: Config) -> None:
    for name in config.managers:
        if name in RESERVED_KEYS:
            raise ValidationError(
                f"Manager '{name}' uses a reserved section name"
            )

    for name, definition in config.managers.items():
        if "{package}" not in definition.install_command:
            raise ValidationError(
                format_field_error(
                    f"Manager '{name}'", "install_command", "must contain '{package}'"
                )
            )

    for name in config.custom:
        if name not in config.managers:
            raise ValidationError(
                f"Section '{name}' has no matching entry under 'managers'"
            )


__all__ = [
    "validate_config",
    "check_dependency_cycles",
    "validate_settings",
    "validate_mas_apps",
    "validate_install_scripts",
    "validate_custom_managers",
]
