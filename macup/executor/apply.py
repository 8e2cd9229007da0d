"""Run an execution plan phase by phase."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

import click

from ..config import Config, MasConfig
from ..errors import ApplyError, InstallationError, MacupError
from ..execution import BREW_ENV, command_exists, run_command_async
from ..managers import create_manager, get_metadata
from ..managers.base import Manager
from ..managers.brew import BrewManager, install_homebrew, is_listed, is_tapped
from ..managers.cargo import RUSTUP_INSTALL_COMMAND
from ..managers.install import apply_scripts, is_script_installed
from ..managers.models import InstallResult
from ..managers.registry import PACKAGE_SECTION_TYPES, ManagerMetadata, SectionType
from ..system import apply_commands
from .planner import ExecutionPlan, Phase

_logging = logging.getLogger(__name__)

BANNER_WIDTH = 50


@dataclass
class SkippedPhase:
    name: str
    reason: str


@dataclass
class ExecutionContext:
    available_managers: set[str] = field(default_factory=set)
    skipped_phases: list[SkippedPhase] = field(default_factory=list)


@dataclass
class ManagerFailure:
    name: str
    reason: str


@dataclass
class PackageFailure:
    package: str
    manager: str
    reason: str


@dataclass
class ApplyErrors:
    manager_failures: list[ManagerFailure] = field(default_factory=list)
    package_failures: list[PackageFailure] = field(default_factory=list)

    def has_failures(self) -> bool:
        return bool(self.manager_failures or self.package_failures)

    def record_result(
        self,
        manager: str,
        result: InstallResult,
        label: Callable[[str], str] = str,
    ) -> None:
        for package, reason in result.failed:
            self.package_failures.append(PackageFailure(label(package), manager, reason))


@dataclass
class ApplyReport:
    context: ExecutionContext = field(default_factory=ExecutionContext)
    errors: ApplyErrors = field(default_factory=ApplyErrors)

    @property
    def has_issues(self) -> bool:
        return self.errors.has_failures() or bool(self.context.skipped_phases)


def can_execute_phase(phase: Phase, available_managers: set[str]) -> bool:
    """Managers, brew and package-manager phases always run.

    Package-manager phases probe their own runtime, so a manually installed
    node still lets the npm phase work without brew. Install scripts and
    system commands require every dependency to be available.
    """
    if phase.section_type == SectionType.MANAGERS:
        return True
    if phase.section_type in PACKAGE_SECTION_TYPES:
        return True
    return all(dep in available_managers for dep in phase.depends_on)


def missing_dependencies(phase: Phase, available_managers: set[str]) -> list[str]:
    return [dep for dep in phase.depends_on if dep not in available_managers]


async def check_and_install_manager(name: str, dry_run: bool) -> None:
    """Make sure a required manager exists, installing brew if needed.

    Raises:
        InstallationError: If installing the manager fails
    """
    if command_exists(name):
        click.echo(f"  ✓ {click.style(name, fg='green')} is installed")
        return

    click.echo(f"  → Installing {click.style(name, fg='yellow')}...")
    if dry_run:
        click.echo(f"    → Would install {name}")
        return

    if name == "brew":
        await install_homebrew()
        click.echo(f"  ✓ {click.style(name, fg='green')} installed")
    else:
        click.echo(f"  ℹ️  {click.style(name, fg='cyan')} will be auto-installed when needed")


def runtime_install_command(metadata: ManagerMetadata) -> list[str]:
    if metadata.name == "cargo" and command_exists("rustup"):
        return list(RUSTUP_INSTALL_COMMAND)
    return ["brew", "install", metadata.brew_formula]


async def install_runtime(metadata: ManagerMetadata, dry_run: bool) -> None:
    """Bootstrap the runtime a package manager needs.

    Raises:
        InstallationError: If the runtime cannot be installed
    """
    command = runtime_install_command(metadata)
    display = " ".join(command)
    click.echo(
        f"  ⚠️  {click.style(metadata.runtime_command, fg='yellow')} not found, "
        f"installing {click.style(metadata.runtime_name, fg='cyan')}..."
    )

    if dry_run:
        click.echo(f"    → Would run: {display}")
        return

    if command[0] == "brew" and not command_exists("brew"):
        raise InstallationError(
            metadata.runtime_name,
            f"{metadata.brew_formula} requires brew, but brew is not installed",
        )
    output, returncode = await run_command_async(command, timeout=None, env=BREW_ENV)
    if returncode != 0:
        reason = f"{display} failed"
        if output:
            reason = f"{reason}: {output}"
        raise InstallationError(metadata.runtime_name, reason)

    click.echo(f"  ✓ {click.style(metadata.runtime_name, fg='green')} installed")


def print_result(result: InstallResult) -> None:
    if result.success:
        click.echo(f"  ✓ {len(result.success)} installed")
    if result.skipped:
        click.echo(f"  ⊘ {len(result.skipped)} skipped (already installed)")
    if result.failed:
        click.echo(f"  ✗ {len(result.failed)} failed:")
        for package, reason in result.failed:
            click.echo(f"    - {package}: {reason}")


def _print_missing(title: str, missing: list[str], verb: str = "install") -> None:
    click.echo(f"  {title} ({len(missing)} to {verb}):")
    for item in missing:
        click.echo(f"    → {item}")


def _nothing_present(package: str) -> bool:
    return False


def _brew_unavailable_reason(errors: ApplyErrors) -> str:
    for failure in errors.manager_failures:
        if failure.name == "brew":
            return f"Homebrew installation failed: {failure.reason}"
    return "Homebrew is not installed"


async def _presence(manager: Manager) -> Callable[[str], bool]:
    try:
        return await manager.presence_check()
    except MacupError as e:
        _logging.warning(f"Could not list installed {manager.package_label}: {e}")
        return _nothing_present


async def _apply_brew_packages(
    brew: BrewManager, section, errors: ApplyErrors, dry_run: bool, runtime_ready: bool
) -> None:
    taps, formulae, casks = set(), set(), set()
    if runtime_ready:
        try:
            taps, formulae, casks = await brew.list_all()
        except MacupError as e:
            _logging.warning(f"Could not list Homebrew packages: {e}")

    groups = (
        ("Taps", section.taps, taps, is_tapped, brew.add_taps, "add"),
        ("Formulae", section.formulae, formulae, is_listed, brew.install_formulae, "install"),
        ("Casks", section.casks, casks, is_listed, brew.install_casks, "install"),
    )
    for title, items, installed, is_present, install, verb in groups:
        if not items:
            continue
        missing = [item for item in items if not is_present(item, installed)]
        if not missing:
            continue
        if dry_run:
            _print_missing(title, missing, verb)
            continue

        result = await install(items, installed=installed)
        print_result(result)
        errors.record_result(brew.name, result)


async def apply_package_phase(
    config: Config,
    phase: Phase,
    ctx: ExecutionContext,
    errors: ApplyErrors,
    dry_run: bool,
) -> None:
    """Generic handler for brew, built-in and user-defined package managers.

    Raises:
        ApplyError: If the runtime cannot be bootstrapped and fail_fast is set
    """
    metadata = get_metadata(phase.name, config)
    if metadata is None:
        raise ApplyError(f"No package manager registered for section '{phase.name}'")

    section = config.get_section(phase.name)
    packages = section.package_ids() if section is not None else []
    manager = create_manager(phase.name, config)

    if not packages:
        if manager.is_installed():
            ctx.available_managers.add(metadata.name)
        return

    label = section.label_for if isinstance(section, MasConfig) else str

    click.secho(f"{metadata.icon} Installing {metadata.display_name}...", fg="cyan", bold=True)

    runtime_ready = manager.is_installed()
    if not runtime_ready and phase.section_type == SectionType.BREW:
        # The managers phase owns the Homebrew bootstrap.
        if not dry_run:
            reason = _brew_unavailable_reason(errors)
            click.echo(f"  ❌ {reason}")
            for package in packages:
                errors.package_failures.append(PackageFailure(package, metadata.name, reason))
            click.echo()
            return
    elif not runtime_ready:
        try:
            await install_runtime(metadata, dry_run)
        except InstallationError as e:
            click.echo(f"  ❌ Failed to install {metadata.runtime_name}: {e.reason}")
            reason = f"{metadata.runtime_name} installation failed: {e.reason}"
            for package in packages:
                errors.package_failures.append(
                    PackageFailure(label(package), metadata.name, reason)
                )
            if config.settings.fail_fast:
                raise ApplyError(f"Failed to install {metadata.runtime_name}")
            click.echo()
            return
        runtime_ready = not dry_run

    ctx.available_managers.add(metadata.name)

    if phase.section_type == SectionType.BREW:
        await _apply_brew_packages(manager, section, errors, dry_run, runtime_ready)
        click.echo()
        return

    present = await _presence(manager) if runtime_ready else _nothing_present

    missing = [package for package in packages if not present(package)]
    if not missing:
        click.echo(f"  ✓ All {manager.package_label} already installed")
        click.echo()
        return

    if dry_run:
        _print_missing(manager.package_label.capitalize(), [label(p) for p in missing])
        click.echo()
        return

    result = await manager.install_packages(packages, is_present=present)
    print_result(result)
    errors.record_result(metadata.name, result, label)
    click.echo()


async def apply_managers_phase(
    config: Config, ctx: ExecutionContext, errors: ApplyErrors, dry_run: bool
) -> None:
    """
    Raises:
        ApplyError: If a manager fails to install and fail_fast is set
    """
    click.secho("📦 Checking package managers...", fg="cyan", bold=True)
    required = config.required_managers()
    if not required:
        click.echo("  (No package managers required)")

    for name in required:
        try:
            await check_and_install_manager(name, dry_run)
        except InstallationError as e:
            click.echo(f"  ❌ Failed to install {click.style(name, fg='red')}: {e.reason}")
            errors.manager_failures.append(ManagerFailure(name, e.reason))
            if config.settings.fail_fast:
                raise ApplyError(f"Manager installation failed: {name}")
            continue
        ctx.available_managers.add(name)

    click.echo()


async def apply_install_phase(config: Config, errors: ApplyErrors, dry_run: bool) -> None:
    """
    Raises:
        ApplyError: If a required script fails, regardless of fail_fast
    """
    if config.install is None or not config.install.scripts:
        return

    click.secho("🔧 Running install scripts...", fg="cyan", bold=True)
    scripts = config.install.scripts
    present = await asyncio.gather(*(is_script_installed(script) for script in scripts))
    missing = [script for script, ok in zip(scripts, present) if not ok]

    if not missing:
        click.echo("  ✓ All scripts already installed")
        click.echo()
        return

    if dry_run:
        _print_missing("Scripts", [script.name for script in missing], "run")
        click.echo()
        return

    try:
        results = await apply_scripts(missing)
    except InstallationError as e:
        click.echo(f"  ❌ {e.reason}")
        errors.package_failures.append(PackageFailure(e.package, "install", e.reason))
        raise ApplyError(f"Required install script '{e.package}' failed")

    for result in results:
        if result.status == "success":
            click.echo(f"  ✓ {result.name}")
        else:
            click.secho(f"  ⚠️  {result.name} (optional) failed: {result.output}", fg="yellow")
    click.echo()


async def apply_system_phase(
    config: Config, dry_run: bool, with_system_settings: bool
) -> None:
    if config.system is None:
        return

    if not with_system_settings:
        click.secho(
            "⊘ Skipping system settings (use --with-system-settings to apply)", fg="yellow"
        )
        click.echo()
        return

    click.secho("⚙️  Applying system settings...", fg="cyan", bold=True)
    if dry_run:
        for command in config.system.commands:
            click.echo(f"  → Would run: {command}")
    else:
        for command in await apply_commands(config.system.commands):
            click.secho(f"  ⚠️  Command failed: {command}", fg="yellow")
    click.echo()


def print_summary(report: ApplyReport) -> None:
    ctx, errors = report.context, report.errors

    click.echo()
    click.secho("=" * BANNER_WIDTH, fg="yellow")
    click.secho("⚠️  macup completed with issues", fg="yellow", bold=True)
    click.secho("=" * BANNER_WIDTH, fg="yellow")
    click.echo()

    if ctx.skipped_phases:
        click.secho("Skipped phases:", fg="yellow", bold=True)
        for skipped in ctx.skipped_phases:
            click.echo(f"  ⊘ {click.style(skipped.name, fg='yellow')} phase")
            click.echo(f"     Reason: {skipped.reason}")
            click.echo()

    if errors.manager_failures:
        click.secho("Failed manager installations:", fg="red", bold=True)
        for failure in errors.manager_failures:
            click.echo(f"  ❌ {click.style(failure.name, fg='red')} (manager)")
            click.echo(f"     Reason: {failure.reason}")
            click.echo(f"     Fix: Install {failure.name} manually and re-run macup apply")
            click.echo()

    if errors.package_failures:
        click.secho("Failed package installations:", fg="red", bold=True)
        by_manager: dict[str, list[PackageFailure]] = {}
        for failure in errors.package_failures:
            by_manager.setdefault(failure.manager, []).append(failure)

        for manager, failures in by_manager.items():
            click.echo(f"  {click.style('Packages', fg='red')} via {manager}:")
            for failure in failures:
                click.echo(f"    ❌ {failure.package}")
                click.echo(f"       Reason: {failure.reason}")
            click.echo()

    click.echo(f"💡 {click.style('Run macup apply again after fixing the issues.', fg='bright_yellow')}")
    click.echo("   Already installed packages will be skipped automatically.")
    click.echo()


async def _run_phase(
    config: Config,
    phase: Phase,
    report: ApplyReport,
    dry_run: bool,
    with_system_settings: bool,
) -> None:
    ctx, errors = report.context, report.errors

    if phase.section_type == SectionType.MANAGERS:
        await apply_managers_phase(config, ctx, errors, dry_run)
    elif phase.section_type in PACKAGE_SECTION_TYPES:
        await apply_package_phase(config, phase, ctx, errors, dry_run)
    elif phase.section_type == SectionType.INSTALL:
        await apply_install_phase(config, errors, dry_run)
    elif phase.section_type == SectionType.SYSTEM:
        await apply_system_phase(config, dry_run, with_system_settings)


async def apply_plan(
    config: Config,
    plan: ExecutionPlan,
    dry_run: bool = False,
    with_system_settings: bool = False,
    section: str | None = None,
) -> ApplyReport:
    """Execute every phase of ``plan`` in order.

    Returns the report when the run finished without failures (skipped
    phases only produce a warning).

    Raises:
        ApplyError: On recorded failures, a failed required script, or a
            fail_fast abort. The error carries the report.
    """
    report = ApplyReport()
    ctx = report.context

    click.secho("=" * BANNER_WIDTH, fg="bright_blue")
    click.secho("Starting macup apply", fg="bright_blue", bold=True)
    click.secho("=" * BANNER_WIDTH, fg="bright_blue")
    click.echo()

    if dry_run:
        click.secho("[DRY RUN MODE]", fg="yellow", bold=True)
        click.echo()

    if section is not None:
        click.secho(
            f"ℹ️  Section filtering is not supported, applying all sections (requested: {section})",
            fg="cyan",
        )
        click.echo()

    for phase in plan.phases:
        if not can_execute_phase(phase, ctx.available_managers):
            reason = "Missing dependencies: " + ", ".join(
                missing_dependencies(phase, ctx.available_managers)
            )
            ctx.skipped_phases.append(SkippedPhase(phase.name, reason))
            click.secho(f"  ⚠️  Skipping {phase.name} phase: {reason}", fg="yellow")
            click.echo()
            continue

        try:
            await _run_phase(config, phase, report, dry_run, with_system_settings)
        except ApplyError as e:
            e.report = report
            print_summary(report)
            raise

    if report.has_issues:
        print_summary(report)
        if report.errors.has_failures():
            raise ApplyError("macup completed with errors", report=report)
        click.secho("⚠️  Some phases were skipped due to missing dependencies", fg="yellow")

    click.secho("=" * BANNER_WIDTH, fg="bright_green")
    click.secho("✓ macup apply completed!", fg="bright_green", bold=True)
    click.secho("=" * BANNER_WIDTH, fg="bright_green")

    return report


__all__ = [
    "SkippedPhase",
    "ExecutionContext",
    "ManagerFailure",
    "PackageFailure",
    "ApplyErrors",
    "ApplyReport",
    "can_execute_phase",
    "missing_dependencies",
    "check_and_install_manager",
    "runtime_install_command",
    "install_runtime",
    "apply_package_phase",
    "apply_managers_phase",
    "apply_install_phase",
    "apply_system_phase",
    "print_result",
    "print_summary",
    "apply_plan",
]
