"""
Windows output parsers.

Parsers for PowerShell volume output.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from gizmo_installer.core.errors import DeviceCommandError
from gizmo_installer.core.models import DeviceHandle


def parse_powershell_json(output: str) -> list[dict[str, Any]]:
    """Parse JSON output from PowerShell commands.

    ConvertTo-Json emits a bare object for a single result and an array
    otherwise.

    Raises:
        DeviceCommandError: If the output is not JSON.
    """
    output = output.strip()
    if not output:
        return []

    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise DeviceCommandError(f"Could not parse PowerShell output: {e}") from e
    if isinstance(data, list):
        return data
    return [data]


def parse_drive_letter(value: Any) -> str | None:
    """Windows PowerShell 5 serializes ``[char]`` as its code point."""
    if isinstance(value, int) and value > 0:
        value = chr(value)
    if isinstance(value, str) and len(value) == 1 and value.isalpha():
        return value.upper()
    return None


def build_device_from_volume(volume: dict[str, Any]) -> DeviceHandle | None:
    """Build a device from one ``Get-Volume`` record, or None without a drive letter."""
    letter = parse_drive_letter(volume.get("DriveLetter"))
    if letter is None:
        return None
    return DeviceHandle(
        path=Path(f"{letter}:\\"),
        label=volume.get("FileSystemLabel") or "",
        node=letter,
    )
