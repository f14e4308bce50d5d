"""
Gizmo Installer Core - Step engine and shared services.

Contains the background task bridge, the wizard steps and state
machine, configuration and logging.
"""

from gizmo_installer.core.config import InstallerConfig
from gizmo_installer.core.errors import InstallerError
from gizmo_installer.core.logging import get_logger, setup_logging
from gizmo_installer.core.task import TaskPoll, TaskSlot, TaskState
from gizmo_installer.core.wizard import FlowSpec, Wizard

__all__ = [
    "FlowSpec",
    "InstallerConfig",
    "InstallerError",
    "TaskPoll",
    "TaskSlot",
    "TaskState",
    "Wizard",
    "get_logger",
    "setup_logging",
]
