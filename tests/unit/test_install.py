"""
Tests for gizmo_installer.operations.install module.
"""

from pathlib import Path
from unittest.mock import Mock, call

import pytest

from gizmo_installer.core.errors import DeviceCommandError, DeviceNotFoundError
from gizmo_installer.core.models import DeviceHandle
from gizmo_installer.operations.install import install_archive, install_file


@pytest.fixture
def device(temp_dir: Path) -> DeviceHandle:
    return DeviceHandle(path=temp_dir / "sd", label="OLD", node="/dev/sdz1")


class TestInstallArchive:
    """Tests for install_archive."""

    def test_sequence(self, mock_backend: Mock, device: DeviceHandle, temp_dir: Path) -> None:
        archive = temp_dir / "ds-ramdisk.zip"
        manager = Mock()
        manager.attach_mock(mock_backend.format_device, "format_device")
        manager.attach_mock(mock_backend.resolve_by_label, "resolve_by_label")
        manager.attach_mock(mock_backend.write_payload, "write_payload")
        manager.attach_mock(mock_backend.flush, "flush")

        result = install_archive(mock_backend, archive, device, "1234")

        assert [c[0] for c in manager.mock_calls] == [
            "format_device",
            "resolve_by_label",
            "write_payload",
            "flush",
        ]
        assert result.label == "GIZMO1234"
        mock_backend.format_device.assert_called_once_with(device, "1234")
        mock_backend.resolve_by_label.assert_called_once_with("GIZMO1234", previous=device)
        mock_backend.write_payload.assert_called_once_with(archive, result, overwrite=True)
        mock_backend.flush.assert_called_once_with(result)

    def test_format_failure_writes_nothing(
        self, mock_backend: Mock, device: DeviceHandle, temp_dir: Path
    ) -> None:
        mock_backend.format_device.side_effect = DeviceCommandError("Formatting failed: busy")

        with pytest.raises(DeviceCommandError):
            install_archive(mock_backend, temp_dir / "ds-ramdisk.zip", device, "1234")

        mock_backend.write_payload.assert_not_called()
        mock_backend.flush.assert_not_called()

    def test_drive_lost_after_format(
        self, mock_backend: Mock, device: DeviceHandle, temp_dir: Path
    ) -> None:
        mock_backend.resolve_by_label.side_effect = DeviceNotFoundError("gone")

        with pytest.raises(DeviceNotFoundError):
            install_archive(mock_backend, temp_dir / "ds-ramdisk.zip", device, "1234")

        mock_backend.write_payload.assert_not_called()

    def test_label_too_long(self, mock_backend: Mock, device: DeviceHandle, temp_dir: Path) -> None:
        with pytest.raises(DeviceCommandError):
            install_archive(mock_backend, temp_dir / "ds-ramdisk.zip", device, "1234567")

        mock_backend.format_device.assert_not_called()

    def test_write_failure_skips_flush(
        self, mock_backend: Mock, device: DeviceHandle, temp_dir: Path
    ) -> None:
        mock_backend.write_payload.side_effect = OSError("disk full")

        with pytest.raises(OSError):
            install_archive(mock_backend, temp_dir / "ds-ramdisk.zip", device, "1234")

        mock_backend.flush.assert_not_called()


class TestInstallFile:
    """Tests for install_file."""

    def test_copies_without_format_or_flush(
        self, mock_backend: Mock, device: DeviceHandle, temp_dir: Path
    ) -> None:
        source = temp_dir / "gss-v01.00-v1.uf2"

        result = install_file(mock_backend, source, device)

        assert result == device
        assert mock_backend.write_payload.call_args == call(source, device, overwrite=True)
        mock_backend.format_device.assert_not_called()
        mock_backend.flush.assert_not_called()
