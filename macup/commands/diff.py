"""Diff command implementation."""

import asyncio

import click

from macup.config import Config, MasConfig
from macup.errors import MacupError
from macup.managers import BrewManager, create_manager, get_metadata
from macup.managers.brew import is_listed, is_tapped

from .utils import load_validated_config


@click.command()
@click.pass_context
def diff(ctx):
    """Show which configured packages are not installed yet."""
    _, config = load_validated_config(ctx)
    missing = asyncio.run(run_diff(config))
    click.echo()
    if missing:
        click.secho(f"{missing} item(s) missing. Run 'macup apply' to install them.", fg="yellow")
    else:
        click.secho("✓ Everything in the config is installed", fg="green")


async def _brew_missing(brew: BrewManager, config: Config) -> dict[str, list[str]]:
    taps, formulae, casks = await brew.list_all()
    section = config.brew
    return {
        "taps": [tap for tap in section.taps if not is_tapped(tap, taps)],
        "formulae": [name for name in section.formulae if not is_listed(name, formulae)],
        "casks": [name for name in section.casks if not is_listed(name, casks)],
    }


async def run_diff(config: Config) -> int:
    """Print missing packages per section. Returns the number of missing items."""
    total = 0
    for name, section in config.sections().items():
        metadata = get_metadata(name, config)
        if metadata is None or section.is_empty():
            continue

        manager = create_manager(name, config)
        click.secho(f"{metadata.icon} {metadata.display_name}", bold=True)
        if not manager.is_installed():
            click.secho(f"  ⊘ {metadata.runtime_name} not installed", fg="yellow")
            continue

        try:
            if isinstance(manager, BrewManager):
                groups = await _brew_missing(manager, config)
            else:
                groups = {"": await manager.missing_packages(section.package_ids())}
        except MacupError as e:
            click.secho(f"  ❌ {e}", fg="red")
            continue

        label = section.label_for if isinstance(section, MasConfig) else str
        section_missing = 0
        for group, items in groups.items():
            for item in items:
                prefix = f"{group}: " if group else ""
                click.secho(f"  + {prefix}{label(item)}", fg="yellow")
            section_missing += len(items)

        if not section_missing:
            click.secho("  ✓ up to date", fg="green")
        total += section_missing

    return total
