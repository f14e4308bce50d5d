"""
Gizmo Installer Device Backend Base.

Defines the interface each host platform implements to find, format,
write to and flush removable drives.
"""

from __future__ import annotations

import subprocess
import time
from abc import ABC, abstractmethod
from pathlib import Path

from gizmo_installer.core.errors import DeviceCommandError, DeviceNotFoundError
from gizmo_installer.core.logging import get_logger
from gizmo_installer.core.models import DeviceHandle
from gizmo_installer.operations import payload

logger = get_logger(__name__)

LABEL_PREFIX = "GIZMO"
MAX_FAT_LABEL_LENGTH = 11


def gizmo_label(suffix: str) -> str:
    """Volume label for a formatted drive, e.g. ``GIZMO1234``."""
    label = f"{LABEL_PREFIX}{suffix}"
    if len(label) > MAX_FAT_LABEL_LENGTH:
        raise DeviceCommandError(
            f"Label {label} is longer than {MAX_FAT_LABEL_LENGTH} characters."
        )
    return label


class CommandResult:
    """Result of a command execution."""

    def __init__(
        self,
        returncode: int,
        stdout: str,
        stderr: str,
        command: str | list[str],
        duration_seconds: float = 0.0,
    ) -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.command = command
        self.duration_seconds = duration_seconds

    @property
    def success(self) -> bool:
        return self.returncode == 0

    def raise_for_status(self, action: str) -> None:
        if not self.success:
            detail = self.stderr.strip() or f"exit code {self.returncode}"
            raise DeviceCommandError(f"{action} failed: {detail}")

    def __repr__(self) -> str:
        cmd = self.command if isinstance(self.command, str) else " ".join(self.command)
        return f"CommandResult(rc={self.returncode}, cmd='{cmd[:50]}...')"


class DeviceBackend(ABC):
    """Abstract base class for platform-specific drive operations."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Platform name (e.g., 'linux', 'windows')."""

    @abstractmethod
    def list_removable_devices(self) -> list[DeviceHandle]:
        """List mounted removable drives."""

    @abstractmethod
    def format_device(self, device: DeviceHandle, label_suffix: str) -> None:
        """Format ``device`` as FAT32 labelled ``GIZMO<label_suffix>``."""

    @abstractmethod
    def flush(self, device: DeviceHandle) -> None:
        """Flush pending writes to ``device``."""

    def write_payload(self, source: Path, device: DeviceHandle, overwrite: bool = True) -> None:
        """Write a downloaded artifact onto ``device``."""
        payload.write_payload(source, device, overwrite=overwrite)

    def resolve_by_label(self, label: str, previous: DeviceHandle | None = None) -> DeviceHandle:
        """Find the mounted device carrying ``label``.

        A freshly formatted drive may come back at a different mount
        point. When several drives carry the label the one at
        ``previous``'s path wins.
        """
        matches = [d for d in self.list_removable_devices() if d.label == label]
        if not matches:
            raise DeviceNotFoundError(f"Could not find drive labelled {label} after formatting.")
        if previous is not None:
            for device in matches:
                if device.path == previous.path:
                    return device
        if len(matches) > 1:
            logger.warning("Several drives share a label", label=label, count=len(matches))
        return matches[0]

    def run_command(
        self,
        command: list[str],
        timeout: int = 300,
        check: bool = True,
    ) -> CommandResult:
        """Run a system command."""
        logger.debug("Running command", command=command)
        start_time = time.time()

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(
                returncode=-1,
                stdout="",
                stderr=f"Command timed out after {timeout}s",
                command=command,
                duration_seconds=timeout,
            )
        except OSError as e:
            return CommandResult(
                returncode=-1,
                stdout="",
                stderr=str(e),
                command=command,
                duration_seconds=time.time() - start_time,
            )

        if check and result.returncode != 0:
            logger.warning(
                "Command failed",
                command=command,
                returncode=result.returncode,
                stderr=result.stderr[:500] if result.stderr else "",
            )

        return CommandResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            command=command,
            duration_seconds=time.time() - start_time,
        )
