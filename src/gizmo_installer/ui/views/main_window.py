"""
Gizmo Installer Main Window.

Launcher page with one button per flow, and the wizard page that a
timer drives one frame at a time.
"""

from __future__ import annotations

from typing import Any

from PySide6.QtCore import Qt, QTimer, Slot
from PySide6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QStackedWidget,
    QStyle,
    QVBoxLayout,
    QWidget,
)

from gizmo_installer import __version__
from gizmo_installer.core.context import InstallerContext
from gizmo_installer.core.logging import get_logger
from gizmo_installer.core.models import FlowKind
from gizmo_installer.core.wizard import Wizard
from gizmo_installer.flows import build_flow, flow_catalog
from gizmo_installer.ui.theme import gizmo_qss
from gizmo_installer.ui.widgets.step_widget import StepWidget

logger = get_logger(__name__)

ERROR_SUMMARY = "Sorry, an error has occurred. The install process has been cancelled."


class MainWindow(QMainWindow):
    """Main application window."""

    def __init__(self, context: InstallerContext, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._context = context
        self._wizard: Wizard | None = None
        self._error_dialog_open = False

        self.setWindowTitle(f"BEST Gizmo Software Installer v{__version__}")
        self.setMinimumSize(800, 560)
        self.setStyleSheet(gizmo_qss())

        self._setup_central_widget()

        # Frame timer
        self._tick_timer = QTimer(self)
        self._tick_timer.timeout.connect(self._tick)
        self._tick_timer.start(context.config.ui.tick_interval_ms)

    @property
    def wizard(self) -> Wizard | None:
        return self._wizard

    @property
    def step_widget(self) -> StepWidget:
        return self._step_widget

    def _setup_central_widget(self) -> None:
        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        layout.addWidget(self._create_header())

        self._pages = QStackedWidget()
        self._launcher_page = self._create_launcher()
        self._step_widget = StepWidget()
        self._pages.addWidget(self._launcher_page)
        self._pages.addWidget(self._step_widget)
        layout.addWidget(self._pages, 1)

        self.setCentralWidget(central)
        self._show_launcher()

    def _create_header(self) -> QFrame:
        self._header = QFrame()
        self._header.setObjectName("headerBar")
        header_layout = QHBoxLayout(self._header)
        header_layout.setContentsMargins(10, 10, 10, 10)

        self._start_over_button = QPushButton("Start Over")
        self._start_over_button.setObjectName("startOverButton")
        self._start_over_button.setIcon(self.style().standardIcon(QStyle.SP_ArrowBack))
        self._start_over_button.clicked.connect(self.start_over)
        header_layout.addWidget(self._start_over_button)

        header_layout.addStretch()
        self._title_label = QLabel("")
        self._title_label.setObjectName("flowTitle")
        header_layout.addWidget(self._title_label)
        header_layout.addStretch()

        return self._header

    def _create_launcher(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setContentsMargins(24, 24, 24, 24)

        title = QLabel("BEST Gizmo Software Installer")
        title.setObjectName("launcherTitle")
        title.setAlignment(Qt.AlignCenter)
        layout.addWidget(title)
        layout.addWidget(QLabel("This tool will help you install or update your Gizmo software."))
        layout.addWidget(
            QLabel(
                "Select which software you would like to install, then follow the instructions."
            )
        )
        layout.addStretch()

        buttons_layout = QHBoxLayout()
        buttons_layout.addStretch()
        self._flow_buttons: dict[FlowKind, QPushButton] = {}
        for info in flow_catalog(self._context.config.ui.starter_code_enabled):
            button = QPushButton(info.button_label)
            button.setObjectName("flowButton")
            button.setEnabled(info.enabled)
            button.clicked.connect(lambda _checked=False, kind=info.kind: self.start_flow(kind))
            self._flow_buttons[info.kind] = button
            buttons_layout.addWidget(button)
        buttons_layout.addStretch()
        layout.addLayout(buttons_layout)
        layout.addStretch()

        return page

    def _show_launcher(self) -> None:
        self._header.setVisible(False)
        self._title_label.setText("")
        self._step_widget.clear()
        self._pages.setCurrentWidget(self._launcher_page)

    # ==================== Flow control ====================

    def start_flow(self, kind: FlowKind) -> None:
        """Open the wizard for ``kind``."""
        try:
            services = self._context.services()
        except Exception as e:
            logger.error("Could not start flow", flow=kind.value, error=str(e))
            QMessageBox.critical(self, "Error", f"{ERROR_SUMMARY}\n\n{e}")
            return

        self._wizard = Wizard(build_flow(kind, services))
        logger.info("Flow started", flow=kind.value)

        self._step_widget.clear()
        self._title_label.setText(self._wizard.title)
        self._header.setVisible(True)
        self._pages.setCurrentWidget(self._step_widget)
        self._tick()

    @Slot()
    def start_over(self) -> None:
        """Abandon the current flow and return to the launcher."""
        if self._wizard is not None:
            self._wizard.reset()
            logger.info("Flow abandoned", flow=self._wizard.flow.kind.value)
        self._wizard = None
        self._show_launcher()

    @Slot()
    def _tick(self) -> None:
        if self._wizard is None or self._error_dialog_open:
            return
        self._wizard.tick(self._step_widget)
        if self._wizard.error is not None:
            self._show_error()

    def _show_error(self) -> None:
        if self._wizard is None:
            return
        self._error_dialog_open = True
        try:
            dialog = QMessageBox(self)
            dialog.setIcon(QMessageBox.Critical)
            dialog.setWindowTitle("Error")
            dialog.setText(ERROR_SUMMARY)
            dialog.setInformativeText(self._wizard.error_message or "No error information found.")
            dialog.setStandardButtons(QMessageBox.Ok)
            dialog.exec()
        finally:
            self._error_dialog_open = False

        self._wizard.acknowledge_error()
        self._wizard = None
        self._show_launcher()

    def closeEvent(self, event: Any) -> None:
        """Handle window close."""
        self._tick_timer.stop()
        super().closeEvent(event)
