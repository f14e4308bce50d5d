"""
Gizmo Installer UI Widgets.

Custom Qt widgets for the installer.
"""

from gizmo_installer.ui.widgets.step_widget import StepWidget

__all__ = ["StepWidget"]
