"""
Gizmo Installer wizard.

Drives one installation flow: owns the session state and the active
step, dispatches one frame at a time, and freezes on the first error
until the operator acknowledges it.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from gizmo_installer.core.errors import InstallerError
from gizmo_installer.core.logging import get_logger
from gizmo_installer.core.models import FlowKind, StepId
from gizmo_installer.core.state import SessionState
from gizmo_installer.core.steps import Step
from gizmo_installer.core.view import StepUI

logger = get_logger(__name__)

StepFactory = Callable[[], Mapping[StepId, Step]]


@dataclass(frozen=True)
class FlowSpec:
    """Closed description of one flow: its steps and allowed transitions."""

    kind: FlowKind
    title: str
    initial_step: StepId
    transitions: Mapping[StepId, frozenset[StepId]]
    build_steps: StepFactory = field(compare=False)

    def allows(self, source: StepId, target: StepId) -> bool:
        return target in self.transitions.get(source, frozenset())


class Wizard:
    """Runs one installation flow, one frame at a time."""

    def __init__(self, flow: FlowSpec) -> None:
        self.flow = flow
        self.state = SessionState()
        self._steps: Mapping[StepId, Step] = {}
        self.current: StepId = flow.initial_step
        self._fresh = True
        self._build()

    @property
    def title(self) -> str:
        return self.flow.title

    @property
    def step(self) -> Step:
        return self._steps[self.current]

    @property
    def error(self) -> Exception | None:
        return self.state.error

    @property
    def error_message(self) -> str:
        error = self.state.error
        if error is None:
            return ""
        return str(error) or type(error).__name__

    @property
    def is_loading(self) -> bool:
        return self.state.error is None and self.step.loading

    def tick(self, ui: StepUI) -> None:
        """Advance the active step by one frame.

        Does nothing while an error is waiting to be acknowledged.
        """
        if self.state.error is not None:
            return

        step = self.step
        try:
            if self._fresh:
                self._fresh = False
                logger.debug("Entering step", flow=self.flow.kind.value, step=self.current.value)
                step.enter(self.state)
            outcome = step.render_and_advance(self.state, ui)
            if outcome is not None:
                self._transition(outcome.next_step)
        except Exception as e:
            self._freeze(e)

    def acknowledge_error(self) -> None:
        """Dismiss the frozen error; the flow starts over."""
        logger.info("Error acknowledged", flow=self.flow.kind.value, error=self.error_message)
        self.reset()

    def reset(self) -> None:
        """Drop all flow state and return to the first step."""
        logger.info("Wizard reset", flow=self.flow.kind.value, step=self.current.value)
        self._build()

    def _build(self) -> None:
        # Workers still running for the old steps finish on their own; their
        # slots are dropped with the steps, so their results are never read.
        self.state = SessionState()
        self._steps = self.flow.build_steps()
        self.current = self.flow.initial_step
        self._fresh = True

    def _transition(self, target: StepId) -> None:
        if not self.flow.allows(self.current, target) or target not in self._steps:
            raise InstallerError(
                f"Invalid step transition from '{self.current.value}' to '{target.value}'."
            )
        logger.info(
            "Step transition",
            flow=self.flow.kind.value,
            source=self.current.value,
            target=target.value,
        )
        self.current = target
        self._fresh = True

    def _freeze(self, error: Exception) -> None:
        if not isinstance(error, InstallerError):
            wrapped = InstallerError(str(error) or type(error).__name__)
            wrapped.__cause__ = error
            error = wrapped
        self.state.error = error
        logger.error(
            "Wizard stopped by error",
            flow=self.flow.kind.value,
            step=self.current.value,
            error_type=type(error.__cause__ or error).__name__,
            error=str(error),
        )
