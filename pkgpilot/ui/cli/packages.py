"""
CLI commands for package management.

Thin wrappers over ``pkgpilot.adapters.packages.AptPackageManager``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import NoReturn

import click

from pkgpilot.adapters.packages import AptPackageManager, PackageManagerError
from pkgpilot.core.config.loader import ConfigError
from pkgpilot.core.models.package import PackageRecord


def _fail(message: str) -> NoReturn:
    click.secho(f"❌ {message}", fg="red")
    sys.exit(1)


def build_manager(ctx: click.Context) -> AptPackageManager:
    """Build the apt backend from settings and the context's runner.

    Tests inject a runner with ``obj={"runner": MockCommandRunner()}``.
    """
    from pkgpilot.adapters.shell.command import SubprocessCommandRunner
    from pkgpilot.core.config.loader import load_settings

    settings = load_settings(ctx.obj.get("config_path"))
    runner = ctx.obj.get("runner") or SubprocessCommandRunner(
        timeout=settings.runner.timeout,
    )
    return AptPackageManager(runner, settings.apt)


def _manager_or_exit(ctx: click.Context) -> AptPackageManager:
    try:
        return build_manager(ctx)
    except ConfigError as e:
        _fail(str(e))


def _print_records(title: str, pkgs: list[PackageRecord]) -> None:
    click.secho(f"📦 {title} ({len(pkgs)}):", fg="cyan", bold=True)
    for p in pkgs:
        click.echo(f"   {p.name:<40} {p.architecture:<8} {p.version}")
    click.echo()


@click.group()
def packages() -> None:
    """Packages — installed, updates, install, remove."""


# ── Observe ─────────────────────────────────────────────────────


@packages.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def installed(ctx: click.Context, as_json: bool) -> None:
    """List installed packages."""
    manager = _manager_or_exit(ctx)
    try:
        pkgs = manager.installed_packages()
    except PackageManagerError as e:
        _fail(str(e))

    if as_json:
        click.echo(json.dumps([p.to_dict() for p in pkgs], indent=2))
        return

    _print_records("Installed", pkgs)


@packages.command()
@click.option(
    "--include-new",
    is_flag=True,
    help="Also list packages the upgrade would newly install.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def updates(ctx: click.Context, include_new: bool, as_json: bool) -> None:
    """Refresh package lists and show pending updates."""
    manager = _manager_or_exit(ctx)
    try:
        pkgs = manager.updates(include_new=include_new)
    except PackageManagerError as e:
        _fail(str(e))

    if as_json:
        click.echo(json.dumps([p.to_dict() for p in pkgs], indent=2))
        return

    if not pkgs:
        click.secho("✅ All packages up to date", fg="green")
        return

    _print_records("Pending updates", pkgs)


@packages.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def info(ctx: click.Context, path: Path, as_json: bool) -> None:
    """Show name, architecture and version of a .deb archive."""
    manager = _manager_or_exit(ctx)
    try:
        pkg = manager.deb_package_info(path)
    except PackageManagerError as e:
        _fail(str(e))

    if as_json:
        click.echo(json.dumps(pkg.to_dict(), indent=2))
        return

    click.echo(str(pkg))


# ── Act ─────────────────────────────────────────────────────────


@packages.command()
@click.argument("names", nargs=-1, required=True)
@click.pass_context
def install(ctx: click.Context, names: tuple[str, ...]) -> None:
    """Install one or more packages."""
    manager = _manager_or_exit(ctx)
    try:
        manager.install(list(names))
    except PackageManagerError as e:
        _fail(str(e))
    click.secho(f"✅ Installed: {', '.join(names)}", fg="green")


@packages.command()
@click.argument("names", nargs=-1, required=True)
@click.pass_context
def remove(ctx: click.Context, names: tuple[str, ...]) -> None:
    """Remove one or more packages."""
    manager = _manager_or_exit(ctx)
    try:
        manager.remove(list(names))
    except PackageManagerError as e:
        _fail(str(e))
    click.secho(f"✅ Removed: {', '.join(names)}", fg="green")


@packages.command("install-deb")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def install_deb(ctx: click.Context, path: Path) -> None:
    """Install a local .deb archive with dpkg."""
    manager = _manager_or_exit(ctx)
    try:
        manager.install_deb(path)
    except PackageManagerError as e:
        _fail(str(e))
    click.secho(f"✅ Installed: {path.name}", fg="green")
