"""Import command implementation."""

import asyncio
import sys

import click

from macup.config import load_raw_config, save_raw_config
from macup.errors import ConfigError, format_error, format_suggestion
from macup.importer import group_packages, mark_existing, merge_packages, render_preview, scan_system
from macup.tui import select_packages_interactive

from .utils import EXIT_CONFIG_ERROR, EXIT_INVALID_ARGS, load_validated_config

BANNER_WIDTH = 60


def _banner(title: str, color: str = "bright_blue") -> None:
    click.secho("=" * BANNER_WIDTH, fg=color)
    click.secho(title, fg=color, bold=True)
    click.secho("=" * BANNER_WIDTH, fg=color)


def _is_interactive() -> bool:
    return sys.stdin.isatty()


@click.command(name="import")
@click.pass_context
def import_packages(ctx):
    """Scan installed packages and add selected ones to the config."""
    if not _is_interactive():
        click.echo(
            format_suggestion("import needs an interactive terminal", "use 'macup add' in scripts"),
            err=True,
        )
        sys.exit(EXIT_INVALID_ARGS)

    path, config = load_validated_config(ctx)

    _banner("macup import - Scan system packages")
    click.echo()
    click.secho("Scanning system packages...", fg="cyan")
    packages = asyncio.run(scan_system(config))

    if not packages:
        click.secho("No packages found on system.", fg="yellow")
        return

    click.echo(f"  {click.style('✓', fg='green')} Found {len(packages)} packages")
    click.echo()

    mark_existing(packages, config)

    try:
        selected = select_packages_interactive(packages)
    except RuntimeError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(EXIT_INVALID_ARGS)

    if selected is None:
        click.secho("Import cancelled.", fg="yellow")
        return
    if not selected:
        click.secho("No packages selected.", fg="yellow")
        return

    click.echo()
    _banner("Preview - Will add to config:")
    click.echo()
    click.echo(render_preview(group_packages(selected)))

    if not click.confirm(f"Add these packages to {path.name}?", default=True):
        click.secho("Import cancelled.", fg="yellow")
        return

    try:
        raw = load_raw_config(path)
    except ConfigError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    added = merge_packages(raw, selected)
    if added:
        save_raw_config(path, raw)

    click.echo()
    _banner("✅ Import completed successfully!", color="bright_green")
    click.echo()
    click.echo(f"Added {added} packages to {path}")
    click.echo()
    click.secho("Next steps:", bold=True)
    click.echo(f"  • Run {click.style('macup diff', fg='cyan')} to verify changes")
    click.echo(f"  • Run {click.style('macup apply', fg='cyan')} to apply on a new machine")
