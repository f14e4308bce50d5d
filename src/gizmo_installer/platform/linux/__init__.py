"""
Gizmo Installer Linux Platform Backend.

Implements drive operations using standard Linux tools:
- lsblk for removable drive discovery
- udisksctl for unmounting and mounting
- mkfs.vfat (through pkexec) for formatting
- sync for flushing
"""

from gizmo_installer.platform.linux.backend import LinuxBackend
from gizmo_installer.platform.linux.parsers import (
    build_devices_from_lsblk,
    parse_lsblk_json,
)

__all__ = [
    "LinuxBackend",
    "build_devices_from_lsblk",
    "parse_lsblk_json",
]
