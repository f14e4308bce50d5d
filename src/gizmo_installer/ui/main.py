"""
Gizmo Installer GUI Entry Point.

Launches the PySide6 graphical user interface.
"""

from __future__ import annotations

import sys

from PySide6.QtWidgets import QApplication, QMessageBox

from gizmo_installer import __version__
from gizmo_installer.core.config import load_config
from gizmo_installer.core.context import InstallerContext
from gizmo_installer.core.logging import get_logger
from gizmo_installer.ui.views.main_window import MainWindow

logger = get_logger(__name__)


class InstallerApp:
    """Main application class."""

    def __init__(self, args: list[str] | None = None) -> None:
        self.args = args or sys.argv
        self.app: QApplication | None = None
        self.window: MainWindow | None = None
        self.context: InstallerContext | None = None

    def run(self) -> int:
        """Run the application."""
        self.app = QApplication(self.args)
        self.app.setApplicationName("Gizmo Installer")
        self.app.setApplicationVersion(__version__)
        self.app.setOrganizationName("BEST Robotics")
        self.app.setStyle("Fusion")

        try:
            config = load_config()
            self.context = InstallerContext(config=config)

            self.window = MainWindow(self.context)
            self.window.show()

            return self.app.exec()

        except Exception as e:
            logger.exception("Startup failed")
            QMessageBox.critical(
                None,
                "Startup Error",
                f"Failed to start the Gizmo Installer:\n\n{e}",
            )
            return 1

        finally:
            if self.context:
                self.context.close()


def main() -> None:
    """Main entry point for GUI."""
    app = InstallerApp()
    sys.exit(app.run())


if __name__ == "__main__":
    main()
