"""
Collaborators consumed by the step engine.

Steps never call HTTP or shell code directly; they receive an
InstallerServices bundle so tests can substitute fakes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from gizmo_installer.core.models import Asset, Release
from gizmo_installer.core.task import DEFAULT_RECEIVE_TIMEOUT

if TYPE_CHECKING:
    from gizmo_installer.platform.base import DeviceBackend


FetchReleases = Callable[[str, str], list[Release]]
DownloadAsset = Callable[[Asset, str, str, Release], Path]


@dataclass(frozen=True)
class InstallerServices:
    """Operations available to steps.

    ``fetch_releases(owner, repo)`` and
    ``download_asset(asset, owner, repo, release)`` are blocking and are
    only ever invoked on worker threads.
    """

    fetch_releases: FetchReleases
    download_asset: DownloadAsset
    backend: DeviceBackend
    owner: str = "gizmo-platform"
    receive_timeout: float = DEFAULT_RECEIVE_TIMEOUT
