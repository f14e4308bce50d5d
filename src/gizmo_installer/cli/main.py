"""
Gizmo Installer CLI Main Entry Point.

Diagnostic commands for checking what the installer would see: the
published releases of each flow, the removable drives, and downloads.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
import humanize
from rich.console import Console
from rich.table import Table

from gizmo_installer import __version__
from gizmo_installer.core.config import InstallerConfig, load_config
from gizmo_installer.core.errors import InstallerError
from gizmo_installer.core.logging import setup_logging
from gizmo_installer.core.models import Asset, FlowKind, Release
from gizmo_installer.flows import FlowInfo, flow_catalog
from gizmo_installer.operations import firmware, github
from gizmo_installer.platform import get_device_backend

console = Console()

FLOW_CHOICE = click.Choice([kind.value for kind in FlowKind])


def get_config(ctx: click.Context) -> InstallerConfig:
    return ctx.obj["config"]


def flow_info(kind_value: str) -> FlowInfo:
    kind = FlowKind(kind_value)
    return next(info for info in flow_catalog(starter_code_enabled=True) if info.kind is kind)


def release_status(release: Release) -> str:
    if release.draft:
        return "draft"
    if release.prerelease:
        return "prerelease"
    if release.latest:
        return "latest"
    return ""


def default_asset(kind: FlowKind, release: Release) -> Asset:
    """The asset a flow installs when none is named."""
    if kind is FlowKind.DRIVER_STATION:
        return firmware.driver_station_archive(release)
    if kind is FlowKind.STARTER_CODE:
        return firmware.starter_program(release)
    revisions = [firmware.variant_label(a, release) for a in firmware.firmware_variants(release)]
    raise click.UsageError(
        "System firmware has one file per board revision; pass --asset. "
        f"Revisions: {', '.join(revisions) or 'none'}"
    )


@click.group()
@click.version_option(version=__version__, prog_name="Gizmo Installer")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.pass_context
def cli(ctx: click.Context, config: Path | None, json_output: bool) -> None:
    """
    Gizmo Installer diagnostics.

    Inspect releases and removable drives the way the installer sees them.
    """
    ctx.ensure_object(dict)

    if config:
        ctx.obj["config"] = InstallerConfig.load(config)
    else:
        ctx.obj["config"] = load_config()

    setup_logging(ctx.obj["config"].logging)
    ctx.obj["json_output"] = json_output


@cli.command("releases")
@click.argument("flow", type=FLOW_CHOICE)
@click.pass_context
def list_releases(ctx: click.Context, flow: str) -> None:
    """List the releases published for FLOW."""
    config = get_config(ctx)
    info = flow_info(flow)

    with console.status("Fetching available releases..."):
        releases = github.fetch_releases(config.github.owner, info.repo, config.github)

    if ctx.obj.get("json_output", False):
        data = [
            {
                "name": r.name,
                "tag_name": r.tag_name,
                "status": release_status(r),
                "assets": [a.name for a in r.assets],
            }
            for r in releases
        ]
        click.echo(json.dumps(data, indent=2))
        return

    table = Table(title=f"Releases of {config.github.owner}/{info.repo}")
    table.add_column("Name", style="cyan")
    table.add_column("Tag", style="white")
    table.add_column("Status", style="yellow")
    table.add_column("Assets", style="green")

    for release in releases:
        table.add_row(
            release.name,
            release.tag_name,
            release_status(release),
            f"{len(release.assets)} "
            f"({humanize.naturalsize(release.total_asset_bytes, binary=True)})",
        )

    console.print(table)


@cli.command("drives")
@click.pass_context
def list_drives(ctx: click.Context) -> None:
    """List removable drives."""
    backend = get_device_backend()

    with console.status("Searching for removable drives..."):
        devices = backend.list_removable_devices()

    if ctx.obj.get("json_output", False):
        click.echo(json.dumps([d.to_dict() for d in devices], indent=2))
        return

    if not devices:
        console.print("[yellow]No removable drives found.[/yellow]")
        return

    table = Table(title="Removable Drives")
    table.add_column("Label", style="cyan")
    table.add_column("Path", style="green")
    table.add_column("Device", style="white")

    for device in devices:
        table.add_row(device.label or "unnamed", str(device.path), device.node or "")

    console.print(table)


@cli.command("download")
@click.argument("flow", type=FLOW_CHOICE)
@click.option("--version", "version_name", help="Release name (default: latest)")
@click.option("--asset", "asset_name", help="Asset file name (default: the flow's file)")
@click.option(
    "--dest",
    "-d",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Download directory",
)
@click.pass_context
def download(
    ctx: click.Context,
    flow: str,
    version_name: str | None,
    asset_name: str | None,
    dest: Path,
) -> None:
    """Download a release asset of FLOW."""
    config = get_config(ctx)
    info = flow_info(flow)
    owner = config.github.owner

    with console.status("Fetching available releases..."):
        releases = github.fetch_releases(owner, info.repo, config.github)

    if version_name:
        release = next((r for r in releases if r.name == version_name), None)
        if release is None:
            raise InstallerError(f"Release {version_name} not found.")
    else:
        release = next(r for r in releases if r.latest)

    asset = (
        firmware.require_asset(release, asset_name)
        if asset_name
        else default_asset(info.kind, release)
    )

    with console.status(f"Downloading {asset.name}..."):
        path = github.download_asset(asset, owner, info.repo, release, dest, config.github)

    console.print(f"[green]Downloaded {asset.name} to {path}[/green]")


def main() -> None:
    """Main entry point."""
    try:
        cli(obj={})
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
