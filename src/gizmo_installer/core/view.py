"""
Step view model.

Steps describe what should be on screen as a StepView and read operator
input as UIAction values, so the step engine never touches a toolkit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol


class ActionKind(Enum):
    """Operator actions a step can react to."""

    SELECT = auto()
    TEXT = auto()
    NEXT = auto()
    REFRESH = auto()
    NEXT_TARGET = auto()


class ChoiceStyle(Enum):
    """How a list of choices is presented."""

    DROPDOWN = auto()
    LIST = auto()


@dataclass(frozen=True)
class UIAction:
    """One operator action queued by the UI."""

    kind: ActionKind
    index: int | None = None
    text: str | None = None


@dataclass
class StepView:
    """Everything the UI needs to draw the current step for one frame."""

    heading: str
    instructions: str = ""
    loading: bool = False
    loading_message: str = ""
    choices: list[str] = field(default_factory=list)
    choice_style: ChoiceStyle = ChoiceStyle.LIST
    selected: int | None = None
    empty_message: str = ""
    text_input: str | None = None
    info: str = ""
    validation_message: str = ""
    primary_label: str | None = None
    primary_action: ActionKind = ActionKind.NEXT
    primary_enabled: bool = False
    refresh_enabled: bool = False

    @property
    def interactive(self) -> bool:
        return not self.loading


class StepUI(Protocol):
    """What a step needs from the UI each frame."""

    def take_action(self) -> UIAction | None:
        """Return the oldest unhandled operator action, if any."""
        ...

    def render(self, view: StepView) -> None:
        """Draw ``view``."""
        ...
