"""
Wizard session state.

Everything one installation flow accumulates across its steps. Owned by
the render thread; workers only ever see copies of the values they need.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from gizmo_installer.core.models import Asset, DeviceHandle, Release


@dataclass
class SessionState:
    """Flow-scoped state. A fresh instance is the flow's empty form."""

    releases: list[Release] | None = None
    release: Release | None = None
    variants: list[Asset] | None = None
    asset: Asset | None = None
    artifact_path: Path | None = None
    devices: list[DeviceHandle] | None = None
    device: DeviceHandle | None = None
    targets_text: str = ""
    targets: list[str] = field(default_factory=list)
    target_index: int = 0
    installed: bool = False
    error: Exception | None = None

    @property
    def current_target(self) -> str | None:
        if 0 <= self.target_index < len(self.targets):
            return self.targets[self.target_index]
        return None

    @property
    def has_next_target(self) -> bool:
        return self.target_index < len(self.targets) - 1

    def select_release(self, release: Release) -> None:
        """Select a release, dropping anything derived from the previous one."""
        if release == self.release:
            return
        self.release = release
        self.variants = None
        self.asset = None
        self.artifact_path = None

    def clear_device_selection(self) -> None:
        self.devices = None
        self.device = None

    def advance_target(self) -> None:
        """Move on to the next pending target and forget the last device."""
        self.target_index += 1
        self.installed = False
        self.clear_device_selection()
