"""
Gizmo Installer Step Widget.

Draws the current step's StepView and queues operator input for the
wizard to read on its next tick.
"""

from __future__ import annotations

from collections import deque

from PySide6.QtCore import Slot
from PySide6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QPlainTextEdit,
    QProgressBar,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from gizmo_installer.core.view import ActionKind, ChoiceStyle, StepView, UIAction


class StepWidget(QWidget):
    """Toolkit side of the step view protocol."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._actions: deque[UIAction] = deque()
        self._choices: list[str] = []
        self._primary_action = ActionKind.NEXT
        self._view: StepView | None = None
        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)

        self._heading = QLabel("")
        self._heading.setObjectName("stepHeading")
        layout.addWidget(self._heading)

        self._instructions = QLabel("")
        self._instructions.setWordWrap(True)
        layout.addWidget(self._instructions)

        # Loading indicator
        self._loading_label = QLabel("")
        layout.addWidget(self._loading_label)
        self._progress_bar = QProgressBar()
        self._progress_bar.setRange(0, 0)
        self._progress_bar.setTextVisible(False)
        layout.addWidget(self._progress_bar)

        self._combo = QComboBox()
        self._combo.setPlaceholderText("Select Version")
        self._combo.activated.connect(self._on_choice_selected)
        layout.addWidget(self._combo)

        self._list = QListWidget()
        self._list.currentRowChanged.connect(self._on_choice_selected)
        layout.addWidget(self._list)

        self._empty_label = QLabel("")
        layout.addWidget(self._empty_label)

        self._text_edit = QPlainTextEdit()
        self._text_edit.textChanged.connect(self._on_text_changed)
        layout.addWidget(self._text_edit)

        self._info_label = QLabel("")
        self._info_label.setWordWrap(True)
        layout.addWidget(self._info_label)

        self._validation_label = QLabel("")
        self._validation_label.setObjectName("validationMessage")
        self._validation_label.setWordWrap(True)
        layout.addWidget(self._validation_label)

        layout.addStretch()

        # Button row
        button_layout = QHBoxLayout()
        self._refresh_button = QPushButton("Refresh")
        self._refresh_button.clicked.connect(self._on_refresh_clicked)
        button_layout.addWidget(self._refresh_button)
        button_layout.addStretch()

        self._primary_button = QPushButton("Next")
        self._primary_button.setObjectName("nextButton")
        self._primary_button.clicked.connect(self._on_primary_clicked)
        button_layout.addWidget(self._primary_button)
        layout.addLayout(button_layout)

        self.clear()

    # ==================== StepUI ====================

    def take_action(self) -> UIAction | None:
        """Return the oldest queued operator action."""
        if self._actions:
            return self._actions.popleft()
        return None

    def render(self, view: StepView) -> None:
        """Draw ``view``; widgets are only touched where something changed."""
        self._view = view
        self._heading.setText(view.heading)
        self._instructions.setText(view.instructions)
        self._instructions.setVisible(bool(view.instructions))

        self._loading_label.setText(view.loading_message)
        self._loading_label.setVisible(view.loading)
        self._progress_bar.setVisible(view.loading)

        self._update_choices(view)
        self._update_text(view)

        self._info_label.setText(view.info)
        self._info_label.setVisible(bool(view.info))
        self._validation_label.setText(view.validation_message)
        self._validation_label.setVisible(bool(view.validation_message))

        self._refresh_button.setVisible(view.refresh_enabled)
        self._primary_action = view.primary_action
        self._primary_button.setVisible(view.primary_label is not None)
        self._primary_button.setText(view.primary_label or "")
        self._primary_button.setEnabled(view.primary_enabled)

    # ==================== Helpers ====================

    def clear(self) -> None:
        """Forget queued actions and blank every control."""
        self._actions.clear()
        self._view = None
        self._set_choices([])
        self._text_edit.blockSignals(True)
        self._text_edit.clear()
        self._text_edit.blockSignals(False)
        for widget in (
            self._loading_label,
            self._progress_bar,
            self._combo,
            self._list,
            self._empty_label,
            self._text_edit,
            self._info_label,
            self._validation_label,
            self._refresh_button,
            self._primary_button,
        ):
            widget.setVisible(False)

    def queue_action(self, action: UIAction) -> None:
        # Only the newest edit or selection matters.
        if action.kind in (ActionKind.TEXT, ActionKind.SELECT):
            self._actions = deque(a for a in self._actions if a.kind is not action.kind)
        self._actions.append(action)

    @property
    def pending_actions(self) -> int:
        return len(self._actions)

    def _set_choices(self, choices: list[str]) -> None:
        self._choices = list(choices)
        self._combo.blockSignals(True)
        self._list.blockSignals(True)
        self._combo.clear()
        self._combo.addItems(self._choices)
        self._list.clear()
        self._list.addItems(self._choices)
        self._combo.blockSignals(False)
        self._list.blockSignals(False)

    def _update_choices(self, view: StepView) -> None:
        if view.choices != self._choices:
            self._set_choices(view.choices)

        has_choices = bool(view.choices)
        dropdown = view.choice_style is ChoiceStyle.DROPDOWN
        self._combo.setVisible(has_choices and dropdown)
        self._list.setVisible(has_choices and not dropdown)
        self._combo.setEnabled(view.interactive)
        self._list.setEnabled(view.interactive)

        selected = view.selected if view.selected is not None else -1
        if self._combo.currentIndex() != selected:
            self._combo.blockSignals(True)
            self._combo.setCurrentIndex(selected)
            self._combo.blockSignals(False)
        if self._list.currentRow() != selected:
            self._list.blockSignals(True)
            self._list.setCurrentRow(selected)
            self._list.blockSignals(False)

        show_empty = bool(view.empty_message) and not view.loading and not has_choices
        self._empty_label.setText(view.empty_message)
        self._empty_label.setVisible(show_empty)

    def _update_text(self, view: StepView) -> None:
        if view.text_input is None:
            self._text_edit.setVisible(False)
            return
        self._text_edit.setVisible(True)
        pending_text = any(a.kind is ActionKind.TEXT for a in self._actions)
        if not pending_text and self._text_edit.toPlainText() != view.text_input:
            self._text_edit.blockSignals(True)
            self._text_edit.setPlainText(view.text_input)
            self._text_edit.blockSignals(False)

    # ==================== Slots ====================

    @Slot(int)
    def _on_choice_selected(self, index: int) -> None:
        if index >= 0:
            self.queue_action(UIAction(ActionKind.SELECT, index=index))

    @Slot()
    def _on_text_changed(self) -> None:
        self.queue_action(UIAction(ActionKind.TEXT, text=self._text_edit.toPlainText()))

    @Slot()
    def _on_refresh_clicked(self) -> None:
        self.queue_action(UIAction(ActionKind.REFRESH))

    @Slot()
    def _on_primary_clicked(self) -> None:
        self.queue_action(UIAction(self._primary_action))
