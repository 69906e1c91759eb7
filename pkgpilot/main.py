"""
pkgpilot — CLI entrypoint.

Usage:
    python -m pkgpilot.main --help
    python -m pkgpilot.main status
    python -m pkgpilot.main packages updates --include-new
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from pkgpilot import __version__
from pkgpilot.core.observability.logging_config import (
    LOG_FILE_ENV,
    LOG_FILE_LEVEL_ENV,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="pkgpilot")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to pkgpilot.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """pkgpilot — install, remove and inspect APT packages."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(LOG_FILE_ENV),
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV),
    )


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show backend availability and effective tool paths."""
    from pkgpilot.core.config.loader import ConfigError
    from pkgpilot.ui.cli.packages import build_manager

    try:
        manager = build_manager(ctx)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    available = manager.is_available()
    settings = manager.settings

    if as_json:
        click.echo(json.dumps({
            "backend": manager.name,
            "available": available,
            "settings": settings.model_dump(),
        }, indent=2))
        return

    icon = "✅" if available else "❌"
    click.secho(f"\n{icon} {manager.name}", fg="cyan", bold=True)
    click.echo(f"   apt-get:    {settings.apt_get}")
    click.echo(f"   dpkg:       {settings.dpkg}")
    click.echo(f"   dpkg-query: {settings.dpkg_query}")
    click.echo(f"   dpkg-deb:   {settings.dpkg_deb}")
    click.echo(f"   upgrade:    {settings.upgrade_type}")
    click.echo()


# ── Register sub-groups ─────────────────────────────────────────────

from pkgpilot.ui.cli.packages import packages  # noqa: E402

cli.add_command(packages)


if __name__ == "__main__":
    cli()
