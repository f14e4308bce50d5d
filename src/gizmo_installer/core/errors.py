"""
Gizmo Installer error hierarchy.

Every failure shown to the operator is an InstallerError whose message
is written in plain language.
"""

from __future__ import annotations


class InstallerError(Exception):
    """Base class for all installer failures."""


class ReleaseFetchError(InstallerError):
    """Fetching the release list failed."""


class NoStableReleaseError(ReleaseFetchError):
    """The release list contains no release that is neither draft nor prerelease."""


class AssetNotFoundError(InstallerError):
    """A release does not carry the expected asset."""


class DownloadError(InstallerError):
    """Downloading an asset failed."""


class DeviceNotFoundError(InstallerError):
    """A removable device could not be found or re-resolved."""


class DeviceCommandError(InstallerError):
    """A platform command acting on a device failed."""


class PayloadWriteError(InstallerError):
    """Writing a payload onto a device failed."""


class TaskError(InstallerError):
    """Base class for background task bridge failures."""


class TaskAlreadyRunningError(TaskError):
    """A task was started while another one is still pending in the same slot."""


class TaskFaultError(TaskError):
    """A background worker terminated abnormally."""


class TaskProtocolError(TaskError):
    """A background worker finished without delivering a result."""
