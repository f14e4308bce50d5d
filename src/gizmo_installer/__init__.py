"""
Gizmo Installer - Software installer for the BEST Gizmo platform.

Walks an operator through downloading a released artifact and writing
it onto a removable drive or microcontroller boot drive.
"""

__version__ = "1.0.0"
__author__ = "Gizmo Platform Team"

from gizmo_installer.core.config import InstallerConfig
from gizmo_installer.core.context import InstallerContext

__all__ = ["InstallerConfig", "InstallerContext", "__version__"]
