"""
Payload writing.

Puts a downloaded artifact onto a mounted device: zip archives are
extracted into the volume root, anything else is copied as one file.
"""

from __future__ import annotations

import shutil
import zipfile
from pathlib import Path

from gizmo_installer.core.errors import PayloadWriteError
from gizmo_installer.core.logging import OperationLogger, get_logger
from gizmo_installer.core.models import DeviceHandle

logger = get_logger(__name__)


def _safe_member_path(root: Path, member: str) -> Path:
    target = (root / member).resolve()
    if not target.is_relative_to(root.resolve()):
        raise PayloadWriteError(f"Archive entry escapes the destination: {member}")
    return target


def extract_archive(archive: Path, destination: Path, overwrite: bool = True) -> list[Path]:
    """Extract a zip archive into ``destination``.

    Returns the paths of the files written.
    """
    written: list[Path] = []
    try:
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                target = _safe_member_path(destination, info.filename)
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                if target.exists() and not overwrite:
                    raise PayloadWriteError(f"{target} already exists.")
                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                written.append(target)
    except zipfile.BadZipFile as e:
        raise PayloadWriteError(f"{archive.name} is not a valid zip archive.") from e
    except OSError as e:
        raise PayloadWriteError(f"Failed to extract {archive.name}: {e}") from e
    return written


def copy_file(source: Path, destination_dir: Path, overwrite: bool = True) -> Path:
    """Copy ``source`` into ``destination_dir`` keeping its file name."""
    target = destination_dir / source.name
    if target.exists() and not overwrite:
        raise PayloadWriteError(f"{target} already exists.")
    try:
        shutil.copyfile(source, target)
    except OSError as e:
        raise PayloadWriteError(f"Failed to copy {source.name} to {destination_dir}: {e}") from e
    return target


def write_payload(source: Path, device: DeviceHandle, overwrite: bool = True) -> None:
    """Write ``source`` onto ``device``."""
    if not source.is_file():
        raise PayloadWriteError(f"Payload not found: {source}")
    if not device.path.is_dir():
        raise PayloadWriteError(f"Drive {device} is not accessible.")

    with OperationLogger("payload write", logger, source=source.name, device=str(device.path)):
        if zipfile.is_zipfile(source):
            files = extract_archive(source, device.path, overwrite=overwrite)
            logger.info("Archive extracted", files=len(files), device=str(device.path))
        else:
            copy_file(source, device.path, overwrite=overwrite)
