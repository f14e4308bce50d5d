"""
Gizmo Installer wizard steps.

A step is called once per frame while it is current. Steps that need
slow work own a TaskSlot, start at most one task in it when their
prerequisites hold and the result is still unknown, and hand failures
up to the wizard by raising.
"""

from __future__ import annotations

import functools
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, TypeVar

from gizmo_installer.core.errors import InstallerError, NoStableReleaseError
from gizmo_installer.core.logging import get_logger
from gizmo_installer.core.models import Asset, DeviceHandle, Release, StepId
from gizmo_installer.core.services import InstallerServices
from gizmo_installer.core.state import SessionState
from gizmo_installer.core.task import TaskPoll, TaskSlot, TaskState
from gizmo_installer.core.view import (
    ActionKind,
    ChoiceStyle,
    StepUI,
    StepView,
    UIAction,
)

T = TypeVar("T")
logger = get_logger(__name__)

MAX_TARGET_DIGITS = 6

AssetChooser = Callable[[Release], Asset]
InstallPlan = Callable[[InstallerServices, SessionState], Callable[[], DeviceHandle]]
VariantFinder = Callable[[Release], list[Asset]]
VariantLabel = Callable[[Asset, Release], str]


@dataclass(frozen=True)
class StepComplete:
    """Signal that the current step is done and which step comes next."""

    next_step: StepId


class Step(ABC):
    """Base class for all wizard steps."""

    def __init__(
        self,
        step_id: StepId,
        next_step: StepId | None,
        heading: str,
        instructions: str = "",
    ) -> None:
        self.step_id = step_id
        self.next_step = next_step
        self.heading = heading
        self.instructions = instructions

    @property
    def loading(self) -> bool:
        return False

    def enter(self, state: SessionState) -> None:
        """Called once each time this step becomes current."""

    @abstractmethod
    def render_and_advance(self, state: SessionState, ui: StepUI) -> StepComplete | None:
        """Advance the step by one frame and draw it."""

    def describe(self, state: SessionState) -> str:
        return self.instructions.format(target=state.current_target or "")

    def complete(self) -> StepComplete:
        if self.next_step is None:
            raise InstallerError(f"Step '{self.step_id.value}' has no following step.")
        return StepComplete(self.next_step)


class TaskStep(Step, Generic[T]):
    """A step whose result is produced by one background task."""

    loading_message = "Working..."

    def __init__(
        self,
        step_id: StepId,
        next_step: StepId | None,
        heading: str,
        instructions: str = "",
        receive_timeout: float = 1.0,
    ) -> None:
        super().__init__(step_id, next_step, heading, instructions)
        self.slot: TaskSlot[T] = TaskSlot(step_id.value, receive_timeout)

    @property
    def loading(self) -> bool:
        return self.slot.is_pending

    @abstractmethod
    def has_result(self, state: SessionState) -> bool:
        """Whether the value this step's task would produce is already known."""

    @abstractmethod
    def make_operation(self, state: SessionState) -> Callable[[], T]:
        """Bind the operation to private copies of its inputs."""

    @abstractmethod
    def store_result(self, state: SessionState, value: T) -> None:
        """Record a finished task's value in the session state."""

    def check_prerequisites(self, state: SessionState) -> None:
        """Raise if the step cannot do its work with the current state."""

    def start_if_needed(self, state: SessionState) -> None:
        if self.slot.is_empty and not self.has_result(state):
            self.check_prerequisites(state)
            self.slot.start(self.make_operation(state))

    def pump(self, state: SessionState) -> TaskPoll[T]:
        """Start the task if needed, then poll it once."""
        self.start_if_needed(state)
        poll = self.slot.poll()
        if poll.state is TaskState.FAILED:
            if poll.error is None:
                raise InstallerError(f"{self.heading} failed without reporting an error.")
            raise poll.error
        if poll.state is TaskState.READY:
            self.store_result(state, poll.value)  # type: ignore[arg-type]
        return poll


class ChooseVersionStep(TaskStep[list[Release]]):
    """Fetches the release list and lets the operator pick one."""

    loading_message = "Fetching available releases..."

    def __init__(
        self,
        services: InstallerServices,
        repo: str,
        next_step: StepId,
        heading: str,
        instructions: str,
    ) -> None:
        super().__init__(
            StepId.CHOOSE_VERSION,
            next_step,
            heading,
            instructions,
            receive_timeout=services.receive_timeout,
        )
        self._services = services
        self._repo = repo

    def has_result(self, state: SessionState) -> bool:
        return state.releases is not None

    def make_operation(self, state: SessionState) -> Callable[[], list[Release]]:
        return functools.partial(self._services.fetch_releases, self._services.owner, self._repo)

    def store_result(self, state: SessionState, value: list[Release]) -> None:
        state.releases = list(value)
        if state.release is None:
            latest = next((r for r in state.releases if r.latest), None)
            if latest is None:
                raise NoStableReleaseError("Latest release not found.")
            state.select_release(latest)

    def render_and_advance(self, state: SessionState, ui: StepUI) -> StepComplete | None:
        self.pump(state)
        action = ui.take_action()
        result: StepComplete | None = None

        if action is not None and not self.loading and state.releases is not None:
            if action.kind is ActionKind.SELECT and _valid_index(action, state.releases):
                state.select_release(state.releases[action.index])  # type: ignore[index]
            elif action.kind is ActionKind.NEXT and state.release is not None:
                result = self.complete()

        releases = state.releases or []
        ui.render(
            StepView(
                heading=self.heading,
                instructions=self.describe(state),
                loading=state.releases is None,
                loading_message=self.loading_message,
                choices=[r.display_name for r in releases],
                choice_style=ChoiceStyle.DROPDOWN,
                selected=releases.index(state.release) if state.release in releases else None,
                primary_label="Next",
                primary_enabled=state.release is not None,
            )
        )
        return result


def parse_targets(text: str) -> list[str] | None:
    """Parse one target identifier per line.

    Returns ``None`` when the text contains anything but digits and line
    breaks. Blank lines are ignored.
    """
    if not all(c.isascii() and (c.isdigit() or c in "\r\n") for c in text):
        return None
    return [line.strip() for line in text.splitlines() if line.strip()]


class EnterTargetsStep(Step):
    """Collects the list of target identifiers (team numbers)."""

    def __init__(self, next_step: StepId, heading: str, instructions: str) -> None:
        super().__init__(StepId.ENTER_TEAM_NUMBERS, next_step, heading, instructions)

    def render_and_advance(self, state: SessionState, ui: StepUI) -> StepComplete | None:
        action = ui.take_action()
        result: StepComplete | None = None

        if action is not None:
            if action.kind is ActionKind.TEXT and action.text is not None:
                state.targets_text = action.text
                state.targets = parse_targets(action.text) or []
            elif action.kind is ActionKind.NEXT and self._validate(state) == "" and state.targets:
                state.target_index = 0
                result = self.complete()

        validation = self._validate(state)
        if validation:
            state.targets = []

        ui.render(
            StepView(
                heading=self.heading,
                instructions=self.describe(state),
                text_input=state.targets_text,
                info=f"{len(state.targets)} team numbers.",
                validation_message=validation,
                primary_label="Next",
                primary_enabled=not validation and bool(state.targets),
            )
        )
        return result

    @staticmethod
    def _validate(state: SessionState) -> str:
        targets = parse_targets(state.targets_text)
        if targets is None:
            return "Invalid team numbers."
        if any(len(t) > MAX_TARGET_DIGITS for t in targets):
            return f"Team numbers can have at most {MAX_TARGET_DIGITS} digits."
        return ""


class ChooseVariantStep(Step):
    """Lets the operator pick one of several assets of the selected release."""

    def __init__(
        self,
        next_step: StepId,
        heading: str,
        instructions: str,
        find_variants: VariantFinder,
        label_variant: VariantLabel,
        empty_message: str,
    ) -> None:
        super().__init__(StepId.CHOOSE_BOARD_REVISION, next_step, heading, instructions)
        self._find_variants = find_variants
        self._label_variant = label_variant
        self._empty_message = empty_message

    def enter(self, state: SessionState) -> None:
        if state.release is None:
            raise InstallerError("No release was selected before choosing a hardware version.")
        if state.variants is None:
            state.variants = self._find_variants(state.release)

    def render_and_advance(self, state: SessionState, ui: StepUI) -> StepComplete | None:
        variants = state.variants or []
        action = ui.take_action()
        result: StepComplete | None = None

        if action is not None:
            if action.kind is ActionKind.SELECT and _valid_index(action, variants):
                chosen = variants[action.index]  # type: ignore[index]
                if chosen != state.asset:
                    state.asset = chosen
                    state.artifact_path = None
            elif action.kind is ActionKind.NEXT and state.asset is not None:
                result = self.complete()

        release = state.release
        ui.render(
            StepView(
                heading=self.heading,
                instructions=self.describe(state),
                choices=[self._label_variant(a, release) for a in variants] if release else [],
                selected=variants.index(state.asset) if state.asset in variants else None,
                validation_message="" if variants else self._empty_message,
                primary_label="Next",
                primary_enabled=state.asset is not None,
            )
        )
        return result


class DownloadStep(TaskStep[Path]):
    """Downloads the chosen asset and advances as soon as it is on disk."""

    def __init__(
        self,
        services: InstallerServices,
        repo: str,
        next_step: StepId,
        heading: str,
        loading_message: str,
        choose_asset: AssetChooser | None = None,
    ) -> None:
        super().__init__(
            StepId.DOWNLOAD,
            next_step,
            heading,
            receive_timeout=services.receive_timeout,
        )
        self._services = services
        self._repo = repo
        self._choose_asset = choose_asset
        self.loading_message = loading_message

    def enter(self, state: SessionState) -> None:
        self.start_if_needed(state)

    def has_result(self, state: SessionState) -> bool:
        return state.artifact_path is not None

    def check_prerequisites(self, state: SessionState) -> None:
        if state.release is None:
            raise InstallerError("No release was selected before downloading.")
        if state.asset is None and self._choose_asset is None:
            raise InstallerError("No file was selected for download.")

    def make_operation(self, state: SessionState) -> Callable[[], Path]:
        release = state.release
        if release is None:
            raise InstallerError("No release was selected before downloading.")
        if state.asset is None:
            if self._choose_asset is None:
                raise InstallerError("No file was selected for download.")
            state.asset = self._choose_asset(release)
        logger.info("Downloading asset", asset=state.asset.name, release=release.name)
        return functools.partial(
            self._services.download_asset,
            state.asset,
            self._services.owner,
            self._repo,
            release,
        )

    def store_result(self, state: SessionState, value: Path) -> None:
        state.artifact_path = value

    def render_and_advance(self, state: SessionState, ui: StepUI) -> StepComplete | None:
        self.pump(state)
        ui.take_action()
        ui.render(
            StepView(
                heading=self.heading,
                loading=True,
                loading_message=self.loading_message,
            )
        )
        if state.artifact_path is not None:
            return self.complete()
        return None


class ChooseDeviceStep(TaskStep[list[DeviceHandle]]):
    """Enumerates removable devices and lets the operator pick the target."""

    loading_message = "Searching for removable drives..."

    def __init__(
        self,
        services: InstallerServices,
        next_step: StepId,
        heading: str,
        instructions: str,
        next_label: str,
    ) -> None:
        super().__init__(
            StepId.CHOOSE_DRIVE,
            next_step,
            heading,
            instructions,
            receive_timeout=services.receive_timeout,
        )
        self._services = services
        self._next_label = next_label

    def enter(self, state: SessionState) -> None:
        # Devices are never cached across visits.
        state.clear_device_selection()

    def has_result(self, state: SessionState) -> bool:
        return state.devices is not None

    def make_operation(self, state: SessionState) -> Callable[[], list[DeviceHandle]]:
        return self._services.backend.list_removable_devices

    def store_result(self, state: SessionState, value: list[DeviceHandle]) -> None:
        state.devices = list(value)
        logger.info("Removable devices listed", count=len(state.devices))

    def render_and_advance(self, state: SessionState, ui: StepUI) -> StepComplete | None:
        self.pump(state)
        action = ui.take_action()
        result: StepComplete | None = None

        if action is not None and not self.loading and state.devices is not None:
            if action.kind is ActionKind.SELECT and _valid_index(action, state.devices):
                state.device = state.devices[action.index]  # type: ignore[index]
            elif action.kind is ActionKind.REFRESH:
                state.clear_device_selection()
            elif action.kind is ActionKind.NEXT and state.device is not None:
                result = self.complete()

        devices = state.devices or []
        ui.render(
            StepView(
                heading=self.heading,
                instructions=self.describe(state),
                loading=state.devices is None,
                loading_message=self.loading_message,
                choices=[str(d) for d in devices],
                selected=devices.index(state.device) if state.device in devices else None,
                empty_message="No removable drives found.",
                primary_label=self._next_label,
                primary_enabled=state.device is not None,
                refresh_enabled=state.devices is not None,
            )
        )
        return result


class InstallStep(TaskStep[DeviceHandle]):
    """Writes the downloaded artifact onto the selected device."""

    def __init__(
        self,
        services: InstallerServices,
        next_step: StepId,
        heading: str,
        loading_message: str,
        plan: InstallPlan,
    ) -> None:
        super().__init__(
            StepId.INSTALL,
            next_step,
            heading,
            receive_timeout=services.receive_timeout,
        )
        self._services = services
        self._plan = plan
        self.loading_message = loading_message

    def enter(self, state: SessionState) -> None:
        self.start_if_needed(state)

    def has_result(self, state: SessionState) -> bool:
        return state.installed

    def check_prerequisites(self, state: SessionState) -> None:
        if state.artifact_path is None:
            raise InstallerError("Nothing has been downloaded to install.")
        if state.device is None:
            raise InstallerError("No drive was selected to install onto.")

    def make_operation(self, state: SessionState) -> Callable[[], DeviceHandle]:
        return self._plan(self._services, state)

    def store_result(self, state: SessionState, value: DeviceHandle) -> None:
        state.installed = True
        state.device = value

    def render_and_advance(self, state: SessionState, ui: StepUI) -> StepComplete | None:
        self.pump(state)
        ui.take_action()
        ui.render(
            StepView(
                heading=self.heading,
                loading=True,
                loading_message=self.loading_message,
            )
        )
        if state.installed:
            return self.complete()
        return None


class DoneStep(Step):
    """Terminal step, optionally looping back to set up another device."""

    def __init__(
        self,
        heading: str,
        instructions: str,
        final_message: str,
        loop_step: StepId | None = None,
        loop_label: str = "Next",
        per_target: bool = False,
    ) -> None:
        super().__init__(StepId.DONE, None, heading, instructions)
        self._final_message = final_message
        self._loop_step = loop_step
        self._loop_label = loop_label
        self._per_target = per_target

    def can_loop(self, state: SessionState) -> bool:
        if self._loop_step is None:
            return False
        if self._per_target:
            return state.has_next_target
        return True

    def render_and_advance(self, state: SessionState, ui: StepUI) -> StepComplete | None:
        action = ui.take_action()
        can_loop = self.can_loop(state)

        loop_step = self._loop_step
        if (
            action is not None
            and action.kind is ActionKind.NEXT_TARGET
            and can_loop
            and loop_step is not None
        ):
            if self._per_target:
                state.advance_target()
            else:
                state.installed = False
                state.clear_device_selection()
            logger.info("Setting up next device", target=state.current_target)
            return StepComplete(loop_step)

        message = self.describe(state)
        ui.render(
            StepView(
                heading=self.heading,
                instructions=message,
                info=(
                    "Once you have done this, click Next."
                    if can_loop and self._per_target
                    else self._final_message.format(target=state.current_target or "")
                ),
                primary_label=self._loop_label if can_loop else None,
                primary_action=ActionKind.NEXT_TARGET,
                primary_enabled=can_loop,
            )
        )
        return None


def _valid_index(action: UIAction, items: Sequence[object]) -> bool:
    return action.index is not None and 0 <= action.index < len(items)
