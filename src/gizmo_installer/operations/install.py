"""
Install sequences.

Each function runs strictly in order and stops at the first failure, so
nothing is written to a drive whose format failed.
"""

from __future__ import annotations

from pathlib import Path

from gizmo_installer.core.logging import OperationLogger, get_logger
from gizmo_installer.core.models import DeviceHandle
from gizmo_installer.platform.base import DeviceBackend, gizmo_label

logger = get_logger(__name__)


def install_archive(
    backend: DeviceBackend,
    archive: Path,
    device: DeviceHandle,
    label_suffix: str,
) -> DeviceHandle:
    """Format ``device``, extract ``archive`` onto it and flush.

    Returns the device as it was found again after formatting.
    """
    label = gizmo_label(label_suffix)
    with OperationLogger("archive install", logger, device=str(device.path), label=label):
        backend.format_device(device, label_suffix)
        formatted = backend.resolve_by_label(label, previous=device)
        if formatted != device:
            logger.info("Drive moved after format", old=str(device.path), new=str(formatted.path))
        backend.write_payload(archive, formatted, overwrite=True)
        backend.flush(formatted)
    return formatted


def install_file(backend: DeviceBackend, source: Path, device: DeviceHandle) -> DeviceHandle:
    """Copy a single file onto ``device``.

    Boot drives of microcontrollers reboot as soon as a UF2 image lands,
    so there is nothing to flush afterwards.
    """
    with OperationLogger("file install", logger, device=str(device.path), source=source.name):
        backend.write_payload(source, device, overwrite=True)
    return device
