"""
Gizmo Installer Platform Abstraction Layer.

Provides the Linux and Windows implementations of removable drive
operations.
"""

from __future__ import annotations

import platform

from gizmo_installer.platform.base import CommandResult, DeviceBackend, gizmo_label


def get_device_backend() -> DeviceBackend:
    """Get the appropriate device backend for the current OS."""
    system = get_platform_name()

    if system == "linux":
        from gizmo_installer.platform.linux import LinuxBackend

        return LinuxBackend()
    elif system == "windows":
        from gizmo_installer.platform.windows import WindowsBackend

        return WindowsBackend()
    else:
        raise RuntimeError(f"Unsupported platform: {system}")


def get_platform_name() -> str:
    """Get the current platform name."""
    return platform.system().lower()


__all__ = [
    "CommandResult",
    "DeviceBackend",
    "get_device_backend",
    "get_platform_name",
    "gizmo_label",
]
