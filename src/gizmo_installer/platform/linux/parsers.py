"""
Linux output parsers.

Parsers for lsblk output and mount tables.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from gizmo_installer.core.errors import DeviceCommandError
from gizmo_installer.core.models import DeviceHandle


def parse_lsblk_json(output: str) -> list[dict[str, Any]]:
    """Parse JSON output from lsblk.

    Raises:
        DeviceCommandError: If the output is not an lsblk JSON document.
    """
    if not output.strip():
        return []

    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise DeviceCommandError(f"Could not parse lsblk output: {e}") from e
    if not isinstance(data, dict):
        raise DeviceCommandError("Could not parse lsblk output: expected a JSON object")
    return data.get("blockdevices", [])


def parse_flag(value: Any) -> bool:
    """lsblk reports booleans as ``true``/``false`` or ``"1"``/``"0"``."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip() in ("1", "true")
    return False


def block_mountpoint(block: dict[str, Any]) -> str | None:
    """First mount point of a block device, from either lsblk column."""
    mountpoint = block.get("mountpoint")
    if mountpoint:
        return mountpoint
    for candidate in block.get("mountpoints") or []:
        if candidate:
            return candidate
    return None


def build_devices_from_lsblk(
    blocks: list[dict[str, Any]],
    mounts: dict[str, str],
    parent_removable: bool = False,
) -> list[DeviceHandle]:
    """Collect mounted filesystems that live on removable disks.

    ``mounts`` maps device nodes to mount points and fills in gaps where
    lsblk has no mount point column.
    """
    devices: list[DeviceHandle] = []

    for block in blocks:
        removable = parent_removable or parse_flag(block.get("rm")) or parse_flag(
            block.get("hotplug")
        )
        node = block.get("path") or f"/dev/{block.get('name', '')}"
        children = block.get("children") or []

        if removable and block.get("fstype"):
            mountpoint = block_mountpoint(block) or mounts.get(node)
            if mountpoint and mountpoint != "[SWAP]":
                devices.append(
                    DeviceHandle(
                        path=Path(mountpoint),
                        label=block.get("label") or "",
                        node=node,
                    )
                )

        if children:
            devices.extend(build_devices_from_lsblk(children, mounts, removable))

    return devices
