"""
Gizmo Installer data models.

Defines releases, assets, removable devices and the step identities of
each installation flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class FlowKind(Enum):
    """Installation flows offered by the launcher."""

    DRIVER_STATION = "driver_station"
    SYSTEM_FIRMWARE = "system_firmware"
    STARTER_CODE = "starter_code"


class StepId(Enum):
    """Step identities shared by all flows.

    Each flow uses an ordered subset of these.
    """

    CHOOSE_VERSION = "choose_version"
    ENTER_TEAM_NUMBERS = "enter_team_numbers"
    CHOOSE_BOARD_REVISION = "choose_board_revision"
    DOWNLOAD = "download"
    CHOOSE_DRIVE = "choose_drive"
    INSTALL = "install"
    DONE = "done"


@dataclass(frozen=True)
class Asset:
    """A downloadable file attached to a release."""

    name: str
    download_url: str
    size_bytes: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Asset:
        return cls(
            name=data["name"],
            download_url=data["browser_download_url"],
            size_bytes=int(data.get("size") or 0),
        )


@dataclass(frozen=True, eq=False)
class Release:
    """A published release of a repository.

    Two releases are equal when their names are equal.
    """

    name: str
    tag_name: str
    assets: tuple[Asset, ...] = ()
    prerelease: bool = False
    draft: bool = False
    latest: bool = False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Release):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    @property
    def display_name(self) -> str:
        if self.draft:
            suffix = " (draft)"
        elif self.prerelease:
            suffix = " (prerelease)"
        elif self.latest:
            suffix = " (latest)"
        else:
            suffix = ""
        return f"{self.name}{suffix}"

    @property
    def is_stable(self) -> bool:
        return not self.draft and not self.prerelease

    @property
    def total_asset_bytes(self) -> int:
        return sum(asset.size_bytes for asset in self.assets)

    def find_asset(self, name: str) -> Asset | None:
        """Return the asset called ``name``, if the release has one."""
        for asset in self.assets:
            if asset.name == name:
                return asset
        return None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Release:
        return cls(
            name=data.get("name") or data["tag_name"],
            tag_name=data["tag_name"],
            assets=tuple(Asset.from_api(a) for a in data.get("assets", [])),
            prerelease=bool(data.get("prerelease", False)),
            draft=bool(data.get("draft", False)),
        )


@dataclass(frozen=True, eq=False)
class DeviceHandle:
    """A removable volume that software can be written to.

    ``path`` is where the volume's filesystem is reachable (a mount point
    or drive root). ``node`` is the block device backing it, when the
    platform needs one for formatting. Equality is by ``path``.
    """

    path: Path
    label: str = ""
    node: str | None = field(default=None)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DeviceHandle):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def __str__(self) -> str:
        name = self.label or "unnamed"
        return f"{name} ({self.path})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "label": self.label,
            "node": self.node,
        }
