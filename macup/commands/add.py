"""Add command implementation."""

import asyncio
import sys
from pathlib import Path

import click

from macup.config import Config, load_raw_config, save_raw_config
from macup.errors import ConfigError, InstallationError, MacupError, format_error
from macup.importer import append_entries, resolve_add_target
from macup.managers import create_manager
from macup.managers.base import Manager
from macup.managers.brew import is_listed

from .utils import EXIT_APPLY_FAILED, EXIT_CONFIG_ERROR, EXIT_INVALID_ARGS, load_validated_config


@click.command()
@click.argument("manager")
@click.argument("packages", nargs=-1, required=True)
@click.option("--no-install", is_flag=True, help="Only update the config file")
@click.pass_context
def add(ctx, manager: str, packages: tuple[str, ...], no_install: bool):
    """Install packages and record them in the config.

    MANAGER is one of brew, cask, npm, cargo or a manager declared under
    `managers` in the config.
    """
    path, config = load_validated_config(ctx)

    try:
        section, key = resolve_add_target(manager, config)
    except MacupError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(EXIT_INVALID_ARGS)

    click.secho(f"Adding {len(packages)} package(s) to {section}.{key}...", fg="cyan")
    click.echo()

    failed = asyncio.run(run_add(path, config, manager, list(packages), section, key, no_install))
    if failed:
        sys.exit(EXIT_APPLY_FAILED)


async def _is_present(manager: Manager, package: str, cask: bool) -> bool:
    if cask:
        return is_listed(package, await manager.list_casks())
    return await manager.is_package_installed(package)


async def run_add(
    path: Path,
    config: Config,
    manager_arg: str,
    packages: list[str],
    section: str,
    key: str,
    no_install: bool,
) -> list[tuple[str, str]]:
    """Install (unless ``no_install``) and record packages. Returns failures."""
    cask = manager_arg == "cask"
    manager = create_manager("brew" if cask else manager_arg, config)

    to_add = []
    failed = []
    if no_install:
        to_add = list(packages)
    else:
        if not manager.is_installed():
            click.echo(
                format_error(
                    f"{manager.metadata.runtime_name} is not installed. Run 'macup apply' first"
                ),
                err=True,
            )
            return [(package, "manager not installed") for package in packages]

        for package in packages:
            try:
                if await _is_present(manager, package, cask):
                    click.echo(f"→ {package}: {click.style('already installed', fg='green')}")
                elif cask:
                    await manager.install_cask(package)
                    click.echo(f"→ {package}: {click.style('✓ installed', fg='green')}")
                else:
                    await manager.install_one(package)
                    click.echo(f"→ {package}: {click.style('✓ installed', fg='green')}")
            except InstallationError as e:
                failed.append((package, e.reason))
            except MacupError as e:
                failed.append((package, str(e)))
            else:
                to_add.append(package)
                continue
            click.echo(f"→ {package}: {click.style(f'✗ {failed[-1][1]}', fg='red')}")

    if to_add:
        try:
            raw = load_raw_config(path)
        except ConfigError as e:
            click.echo(format_error(str(e)), err=True)
            sys.exit(EXIT_CONFIG_ERROR)
        added = append_entries(raw, section, key, to_add)
        if added:
            save_raw_config(path, raw)
        click.echo()
        click.secho(f"✓ Added {len(added)} package(s) to {path}", fg="green")

    if failed:
        click.echo()
        click.secho(f"⚠ {len(failed)} package(s) failed to install:", fg="yellow")
        for package, reason in failed:
            click.echo(f"  - {package}: {reason}")

    return failed
