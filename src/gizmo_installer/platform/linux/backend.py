"""
Linux Platform Backend Implementation.

Implements drive operations using standard Linux tools.
"""

from __future__ import annotations

import shutil

import psutil

from gizmo_installer.core.errors import DeviceCommandError
from gizmo_installer.core.logging import OperationLogger, get_logger
from gizmo_installer.core.models import DeviceHandle
from gizmo_installer.platform.base import DeviceBackend, gizmo_label
from gizmo_installer.platform.linux.parsers import build_devices_from_lsblk, parse_lsblk_json

logger = get_logger(__name__)


class LinuxBackend(DeviceBackend):
    """Linux implementation of drive operations."""

    # Tool paths (can be overridden for testing)
    LSBLK = "lsblk"
    UDISKSCTL = "udisksctl"
    PKEXEC = "pkexec"
    MKFS_VFAT = "mkfs.vfat"
    SYNC = "sync"

    @property
    def name(self) -> str:
        return "linux"

    def _check_tool(self, tool: str) -> bool:
        """Check if a tool is available."""
        return shutil.which(tool) is not None

    def _get_mounts(self) -> dict[str, str]:
        """Map device nodes to mount points."""
        return {part.device: part.mountpoint for part in psutil.disk_partitions(all=False)}

    def list_removable_devices(self) -> list[DeviceHandle]:
        """List mounted filesystems on removable disks using lsblk."""
        result = self.run_command(
            [
                self.LSBLK,
                "-J",
                "-o",
                "NAME,PATH,TYPE,RM,HOTPLUG,FSTYPE,LABEL,MOUNTPOINT",
            ],
        )
        result.raise_for_status("Listing drives")

        devices = build_devices_from_lsblk(parse_lsblk_json(result.stdout), self._get_mounts())
        logger.debug("Removable drives found", count=len(devices))
        return devices

    def format_device(self, device: DeviceHandle, label_suffix: str) -> None:
        """Unmount, format as FAT32 and remount ``device``."""
        label = gizmo_label(label_suffix)
        if not device.node:
            raise DeviceCommandError(f"Could not determine the block device for {device}.")
        if not self._check_tool(self.MKFS_VFAT) and not self._check_tool(
            f"/usr/sbin/{self.MKFS_VFAT}"
        ):
            raise DeviceCommandError("mkfs.vfat not found. Install dosfstools and try again.")

        with OperationLogger("drive format", logger, device=device.node, label=label):
            self.run_command(
                [self.UDISKSCTL, "unmount", "--no-user-interaction", "-b", device.node],
                timeout=60,
            ).raise_for_status(f"Unmounting {device}")

            self.run_command(
                [self.PKEXEC, self.MKFS_VFAT, "-F", "32", "-n", label, device.node],
                timeout=600,
            ).raise_for_status(f"Formatting {device}")

            self.run_command(
                [self.UDISKSCTL, "mount", "--no-user-interaction", "-b", device.node],
                timeout=60,
            ).raise_for_status(f"Mounting {device.node}")

    def flush(self, device: DeviceHandle) -> None:
        """Flush the filesystem holding ``device``'s mount point."""
        self.run_command(
            [self.SYNC, "-f", str(device.path)],
            timeout=600,
        ).raise_for_status(f"Flushing {device}")
        logger.info("Drive flushed", device=str(device.path))
