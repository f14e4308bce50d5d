"""
Windows Platform Backend Implementation.

Implements drive operations using PowerShell storage cmdlets.
"""

from __future__ import annotations

from gizmo_installer.core.errors import DeviceCommandError
from gizmo_installer.core.logging import OperationLogger, get_logger
from gizmo_installer.core.models import DeviceHandle
from gizmo_installer.platform.base import CommandResult, DeviceBackend, gizmo_label
from gizmo_installer.platform.windows.parsers import (
    build_device_from_volume,
    parse_drive_letter,
    parse_powershell_json,
)

logger = get_logger(__name__)

LIST_VOLUMES_SCRIPT = (
    "Get-Volume | Where-Object {$_.DriveType -eq 'Removable'} | "
    "Select-Object DriveLetter, FileSystemLabel | ConvertTo-Json"
)


class WindowsBackend(DeviceBackend):
    """Windows implementation of drive operations."""

    POWERSHELL = "powershell"

    @property
    def name(self) -> str:
        return "windows"

    def _run_powershell(
        self,
        script: str,
        timeout: int = 300,
    ) -> CommandResult:
        """Run a PowerShell script."""
        cmd = [
            self.POWERSHELL,
            "-NoProfile",
            "-NonInteractive",
            "-ExecutionPolicy", "Bypass",
            "-Command", script,
        ]
        return self.run_command(cmd, timeout=timeout)

    def _drive_letter(self, device: DeviceHandle) -> str:
        letter = parse_drive_letter(device.node) or parse_drive_letter(str(device.path)[:1])
        if letter is None:
            raise DeviceCommandError(f"Could not determine drive letter of {device}.")
        return letter

    def list_removable_devices(self) -> list[DeviceHandle]:
        """List removable volumes that have a drive letter."""
        result = self._run_powershell(LIST_VOLUMES_SCRIPT)
        result.raise_for_status("Running Get-Volume")

        devices = []
        for volume in parse_powershell_json(result.stdout):
            device = build_device_from_volume(volume)
            if device is not None:
                devices.append(device)
        logger.debug("Removable drives found", count=len(devices))
        return devices

    def format_device(self, device: DeviceHandle, label_suffix: str) -> None:
        """Format ``device`` as FAT32 with a ``GIZMO<suffix>`` label."""
        label = gizmo_label(label_suffix)
        letter = self._drive_letter(device)

        with OperationLogger("drive format", logger, drive=letter, label=label):
            self._run_powershell(
                f"Format-Volume -DriveLetter {letter} -FileSystem FAT32 "
                f"-NewFileSystemLabel '{label}' -Confirm:$false",
                timeout=600,
            ).raise_for_status("Running Format-Volume")

    def flush(self, device: DeviceHandle) -> None:
        """Write the volume cache of ``device`` to disk."""
        letter = self._drive_letter(device)
        self._run_powershell(
            f"Write-VolumeCache -DriveLetter {letter}",
            timeout=600,
        ).raise_for_status("Writing filesystem cache")
        logger.info("Drive flushed", drive=letter)
