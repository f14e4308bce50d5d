"""
Gizmo Installer Windows Platform Backend.

Implements drive operations using PowerShell storage cmdlets:
- Get-Volume for removable drive discovery
- Format-Volume for formatting
- Write-VolumeCache for flushing
"""

from gizmo_installer.platform.windows.backend import WindowsBackend
from gizmo_installer.platform.windows.parsers import (
    build_device_from_volume,
    parse_powershell_json,
)

__all__ = [
    "WindowsBackend",
    "build_device_from_volume",
    "parse_powershell_json",
]
