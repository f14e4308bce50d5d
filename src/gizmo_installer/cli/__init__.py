"""
Gizmo Installer CLI Module.

Provides diagnostic commands for the installer.
"""

from gizmo_installer.cli.main import cli, main

__all__ = ["main", "cli"]
