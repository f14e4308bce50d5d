"""
Pytest configuration and fixtures for Gizmo Installer tests.
"""

import os
import sys
import tempfile
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Generator
from unittest.mock import Mock

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from gizmo_installer.core.config import InstallerConfig  # noqa: E402
from gizmo_installer.core.models import Asset, DeviceHandle, Release  # noqa: E402
from gizmo_installer.core.services import InstallerServices  # noqa: E402
from gizmo_installer.core.view import StepView, UIAction  # noqa: E402
from gizmo_installer.platform.base import DeviceBackend  # noqa: E402


class FakeUI:
    """Scripted stand-in for the step widget."""

    def __init__(self) -> None:
        self.actions: list[UIAction] = []
        self.views: list[StepView] = []

    def push(self, action: UIAction) -> None:
        self.actions.append(action)

    def take_action(self) -> UIAction | None:
        if self.actions:
            return self.actions.pop(0)
        return None

    def render(self, view: StepView) -> None:
        self.views.append(view)

    @property
    def last(self) -> StepView:
        return self.views[-1]


def make_release(
    name: str,
    tag_name: str | None = None,
    assets: list[str] | None = None,
    prerelease: bool = False,
    draft: bool = False,
    latest: bool = False,
) -> Release:
    tag = tag_name or name
    return Release(
        name=name,
        tag_name=tag,
        assets=tuple(
            Asset(name=a, download_url=f"https://example.invalid/{tag}/{a}", size_bytes=1024)
            for a in (assets or [])
        ),
        prerelease=prerelease,
        draft=draft,
        latest=latest,
    )


def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll ``predicate`` until it holds or ``timeout`` elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config(temp_dir: Path) -> InstallerConfig:
    """Create a sample configuration for testing."""
    config = InstallerConfig()
    config.logging.log_directory = temp_dir / "logs"
    config.logging.file_enabled = False
    config.logging.console_enabled = False
    return config


@pytest.fixture
def fake_ui() -> FakeUI:
    return FakeUI()


@pytest.fixture
def release_factory() -> Callable[..., Release]:
    return make_release


@pytest.fixture
def until() -> Callable[..., bool]:
    return wait_until


@pytest.fixture
def mock_backend(temp_dir: Path) -> Mock:
    """Create a mock device backend with one removable drive."""
    backend = Mock(spec=DeviceBackend)
    backend.name = "mock"
    drive = temp_dir / "drive"
    drive.mkdir()
    backend.list_removable_devices.return_value = [
        DeviceHandle(path=drive, label="SDCARD", node="/dev/sdz1"),
    ]
    backend.resolve_by_label.side_effect = lambda label, previous=None: DeviceHandle(
        path=previous.path if previous else drive, label=label, node="/dev/sdz1"
    )
    return backend


@pytest.fixture
def services_factory(mock_backend: Mock, temp_dir: Path) -> Callable[..., InstallerServices]:
    """Build InstallerServices around fake collaborators."""

    def factory(
        releases: list[Release] | None = None,
        fetch: Callable[[str, str], Any] | None = None,
        download: Callable[..., Path] | None = None,
        backend: Any = None,
    ) -> InstallerServices:
        def default_fetch(owner: str, repo: str) -> list[Release]:
            return list(releases or [])

        def default_download(asset: Asset, owner: str, repo: str, release: Release) -> Path:
            path = temp_dir / "cache" / owner / repo / release.name / asset.name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"payload")
            return path

        return InstallerServices(
            fetch_releases=fetch or default_fetch,
            download_asset=download or default_download,
            backend=backend or mock_backend,
            receive_timeout=0.5,
        )

    return factory


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "gui: GUI tests requiring Qt")
    config.addinivalue_line("markers", "slow: Slow running tests")


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Modify test collection based on available resources."""
    # Skip GUI tests if Qt is not available or if running in CI without display
    try:
        from PySide6.QtWidgets import QApplication  # noqa: F401

        if (
            os.environ.get("DISPLAY") is None
            and os.environ.get("QT_QPA_PLATFORM") != "offscreen"
            and sys.platform != "win32"
        ):
            skip_gui = pytest.mark.skip(reason="No display available")
            for item in items:
                if "gui" in item.keywords:
                    item.add_marker(skip_gui)
    except ImportError:
        skip_gui = pytest.mark.skip(reason="PySide6 not available")
        for item in items:
            if "gui" in item.keywords:
                item.add_marker(skip_gui)


@pytest.fixture
def qapp() -> Generator["QApplication", None, None]:
    """Create a QApplication for GUI tests."""
    try:
        from PySide6.QtWidgets import QApplication

        app = QApplication.instance()
        if app is None:
            app = QApplication([])

        yield app

        # Don't quit the app as it may be reused
    except ImportError:
        pytest.skip("PySide6 not available")
