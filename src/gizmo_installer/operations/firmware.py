"""Asset naming rules for the Gizmo release artifacts."""

from __future__ import annotations

from gizmo_installer.core.errors import AssetNotFoundError
from gizmo_installer.core.models import Asset, Release

DRIVER_STATION_ARCHIVE = "ds-ramdisk.zip"
FIRMWARE_PREFIX = "gss-"


def _firmware_suffix(release: Release) -> str:
    return f"-{release.tag_name}.uf2"


def firmware_variants(release: Release) -> list[Asset]:
    """System firmware builds, one per board revision: ``gss-<rev>-<tag>.uf2``."""
    suffix = _firmware_suffix(release)
    return [
        asset
        for asset in release.assets
        if asset.name.startswith(FIRMWARE_PREFIX) and asset.name.endswith(suffix)
    ]


def variant_label(asset: Asset, release: Release) -> str:
    """Board revision shown to the operator, e.g. ``v01.00``."""
    name = asset.name.removeprefix(FIRMWARE_PREFIX)
    return name.removesuffix(_firmware_suffix(release))


def starter_program_name(release: Release) -> str:
    return f"best-default-program-{release.tag_name}.uf2"


def require_asset(release: Release, name: str) -> Asset:
    asset = release.find_asset(name)
    if asset is None:
        raise AssetNotFoundError(f"Could not find {name} in release assets.")
    return asset


def driver_station_archive(release: Release) -> Asset:
    return require_asset(release, DRIVER_STATION_ARCHIVE)


def starter_program(release: Release) -> Asset:
    return require_asset(release, starter_program_name(release))
