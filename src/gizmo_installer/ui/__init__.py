"""
Gizmo Installer GUI Module.

Provides the PySide6-based graphical user interface.
"""

from gizmo_installer.ui.main import InstallerApp, main

__all__ = ["main", "InstallerApp"]
