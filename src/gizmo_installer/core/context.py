"""
Process-wide installer context.

Owns the configuration, the scratch download cache and the device
backend, and builds the service bundle every flow is given.
"""

from __future__ import annotations

import functools
import tempfile
from pathlib import Path
from types import TracebackType

from gizmo_installer.core.config import InstallerConfig
from gizmo_installer.core.logging import get_logger, setup_logging
from gizmo_installer.core.services import InstallerServices
from gizmo_installer.operations import github
from gizmo_installer.platform import DeviceBackend, get_device_backend

logger = get_logger(__name__)

DOWNLOAD_SUBDIR = "github_downloads"


class InstallerContext:
    """Shared state for one run of the installer."""

    def __init__(
        self,
        config: InstallerConfig | None = None,
        backend: DeviceBackend | None = None,
    ) -> None:
        self.config = config or InstallerConfig()
        setup_logging(self.config.logging)

        self._tmpdir: tempfile.TemporaryDirectory[str] | None = tempfile.TemporaryDirectory(
            prefix=self.config.cache_prefix
        )
        self.cache_root = Path(self._tmpdir.name) / DOWNLOAD_SUBDIR
        self.cache_root.mkdir(parents=True, exist_ok=True)
        self._backend = backend

        logger.info("Installer context created", cache_root=str(self.cache_root))

    @property
    def backend(self) -> DeviceBackend:
        if self._backend is None:
            self._backend = get_device_backend()
            logger.info("Device backend selected", platform=self._backend.name)
        return self._backend

    def services(self) -> InstallerServices:
        """Operations for the step engine, bound to this context."""
        github_config = self.config.github
        return InstallerServices(
            fetch_releases=functools.partial(github.fetch_releases, config=github_config),
            download_asset=functools.partial(
                github.download_asset, cache_root=self.cache_root, config=github_config
            ),
            backend=self.backend,
            owner=github_config.owner,
            receive_timeout=self.config.tasks.receive_timeout_seconds,
        )

    def close(self) -> None:
        """Remove the download cache."""
        if self._tmpdir is not None:
            logger.info("Removing download cache", cache_root=str(self.cache_root))
            self._tmpdir.cleanup()
            self._tmpdir = None

    def __enter__(self) -> InstallerContext:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
