"""
Tests for gizmo_installer.core.steps module.

Steps are driven frame by frame with a scripted FakeUI.
"""

import threading
from pathlib import Path

import pytest

from gizmo_installer.core.errors import (
    AssetNotFoundError,
    InstallerError,
    NoStableReleaseError,
    ReleaseFetchError,
)
from gizmo_installer.core.models import DeviceHandle, StepId
from gizmo_installer.core.state import SessionState
from gizmo_installer.core.steps import (
    ChooseDeviceStep,
    ChooseVariantStep,
    ChooseVersionStep,
    DoneStep,
    DownloadStep,
    EnterTargetsStep,
    StepComplete,
    parse_targets,
)
from gizmo_installer.core.view import ActionKind, ChoiceStyle, UIAction
from gizmo_installer.operations import firmware


def frame_until(step, state, ui, until, predicate):  # type: ignore[no-untyped-def]
    """Run frames until ``predicate`` holds; return the last frame's outcome."""
    outcomes = []

    def check() -> bool:
        outcomes.append(step.render_and_advance(state, ui))
        return predicate()

    assert until(check)
    return outcomes[-1]


class TestParseTargets:
    """Tests for parse_targets."""

    def test_one_per_line(self) -> None:
        assert parse_targets("100\n200\r\n300") == ["100", "200", "300"]

    def test_blank_lines_ignored(self) -> None:
        assert parse_targets("\n100\n\n") == ["100"]
        assert parse_targets("") == []

    @pytest.mark.parametrize("text", ["12a", "100 200", "-5", "１２"])
    def test_invalid(self, text: str) -> None:
        assert parse_targets(text) is None


class TestEnterTargetsStep:
    """Tests for EnterTargetsStep."""

    def make_step(self) -> EnterTargetsStep:
        return EnterTargetsStep(StepId.DOWNLOAD, "Team Numbers", "Enter your team numbers.")

    def test_counts_targets(self, fake_ui) -> None:
        step = self.make_step()
        state = SessionState()
        fake_ui.push(UIAction(ActionKind.TEXT, text="100\n200"))

        assert step.render_and_advance(state, fake_ui) is None

        assert state.targets == ["100", "200"]
        assert fake_ui.last.info == "2 team numbers."
        assert fake_ui.last.primary_enabled
        assert fake_ui.last.validation_message == ""

    def test_invalid_characters(self, fake_ui) -> None:
        step = self.make_step()
        state = SessionState()
        fake_ui.push(UIAction(ActionKind.TEXT, text="100\nabc"))
        step.render_and_advance(state, fake_ui)

        assert fake_ui.last.validation_message == "Invalid team numbers."
        assert fake_ui.last.info == "0 team numbers."
        assert not fake_ui.last.primary_enabled

        fake_ui.push(UIAction(ActionKind.NEXT))
        assert step.render_and_advance(state, fake_ui) is None

    def test_too_many_digits(self, fake_ui) -> None:
        step = self.make_step()
        state = SessionState()
        fake_ui.push(UIAction(ActionKind.TEXT, text="1234567"))
        step.render_and_advance(state, fake_ui)

        assert fake_ui.last.validation_message == "Team numbers can have at most 6 digits."
        assert not fake_ui.last.primary_enabled

    def test_empty_cannot_advance(self, fake_ui) -> None:
        step = self.make_step()
        state = SessionState()
        fake_ui.push(UIAction(ActionKind.NEXT))
        assert step.render_and_advance(state, fake_ui) is None

    def test_next_advances(self, fake_ui) -> None:
        step = self.make_step()
        state = SessionState(target_index=3)
        fake_ui.push(UIAction(ActionKind.TEXT, text="42"))
        fake_ui.push(UIAction(ActionKind.NEXT))

        step.render_and_advance(state, fake_ui)
        outcome = step.render_and_advance(state, fake_ui)

        assert outcome == StepComplete(StepId.DOWNLOAD)
        assert state.target_index == 0
        assert state.current_target == "42"


class TestChooseVersionStep:
    """Tests for ChooseVersionStep."""

    def test_auto_selects_latest(self, fake_ui, services_factory, release_factory, until) -> None:
        gate = threading.Event()

        def fetch(owner: str, repo: str):  # type: ignore[no-untyped-def]
            gate.wait(5)
            return [release_factory("v2", prerelease=True), release_factory("v1", latest=True)]

        step = ChooseVersionStep(
            services_factory(fetch=fetch), "gizmo", StepId.DOWNLOAD, "Software Version", ""
        )
        state = SessionState()

        step.render_and_advance(state, fake_ui)
        assert fake_ui.last.loading
        assert fake_ui.last.loading_message == "Fetching available releases..."
        assert not fake_ui.last.primary_enabled

        gate.set()
        frame_until(step, state, fake_ui, until, lambda: state.releases is not None)

        assert state.release.name == "v1"  # type: ignore[union-attr]
        step.render_and_advance(state, fake_ui)
        view = fake_ui.last
        assert view.choices == ["v2 (prerelease)", "v1 (latest)"]
        assert view.choice_style is ChoiceStyle.DROPDOWN
        assert view.selected == 1
        assert view.primary_enabled

    def test_select_and_next(self, fake_ui, services_factory, release_factory, until) -> None:
        releases = [release_factory("v2", latest=True), release_factory("v1")]
        step = ChooseVersionStep(
            services_factory(releases), "gizmo", StepId.DOWNLOAD, "Software Version", ""
        )
        state = SessionState()
        frame_until(step, state, fake_ui, until, lambda: state.releases is not None)

        fake_ui.push(UIAction(ActionKind.SELECT, index=1))
        fake_ui.push(UIAction(ActionKind.SELECT, index=9))
        fake_ui.push(UIAction(ActionKind.NEXT))
        step.render_and_advance(state, fake_ui)
        step.render_and_advance(state, fake_ui)
        outcome = step.render_and_advance(state, fake_ui)

        assert state.release.name == "v1"  # type: ignore[union-attr]
        assert outcome == StepComplete(StepId.DOWNLOAD)

    def test_fetch_started_once(self, fake_ui, services_factory, release_factory, until) -> None:
        gate = threading.Event()
        calls = []

        def fetch(owner: str, repo: str):  # type: ignore[no-untyped-def]
            calls.append((owner, repo))
            gate.wait(5)
            return [release_factory("v1", latest=True)]

        step = ChooseVersionStep(
            services_factory(fetch=fetch), "firmware", StepId.DOWNLOAD, "Firmware Version", ""
        )
        state = SessionState()
        for _ in range(20):
            step.render_and_advance(state, fake_ui)
        gate.set()
        frame_until(step, state, fake_ui, until, lambda: state.releases is not None)

        assert calls == [("gizmo-platform", "firmware")]
        assert step.slot.started_count == 1

    def test_no_latest_release(self, fake_ui, services_factory, release_factory, until) -> None:
        step = ChooseVersionStep(
            services_factory([release_factory("v1")]), "gizmo", StepId.DOWNLOAD, "Version", ""
        )
        state = SessionState()

        with pytest.raises(NoStableReleaseError, match="Latest release not found."):
            frame_until(step, state, fake_ui, until, lambda: False)

    def test_fetch_error_raised(self, fake_ui, services_factory, until) -> None:
        def fetch(owner: str, repo: str):  # type: ignore[no-untyped-def]
            raise ReleaseFetchError("Could not reach the release server.")

        step = ChooseVersionStep(
            services_factory(fetch=fetch), "gizmo", StepId.DOWNLOAD, "Version", ""
        )

        with pytest.raises(ReleaseFetchError, match="release server"):
            frame_until(step, SessionState(), fake_ui, until, lambda: False)


class TestChooseVariantStep:
    """Tests for ChooseVariantStep."""

    def make_step(self) -> ChooseVariantStep:
        return ChooseVariantStep(
            StepId.DOWNLOAD,
            "Choose Hardware Version",
            "",
            find_variants=firmware.firmware_variants,
            label_variant=firmware.variant_label,
            empty_message="Could not recognize any firmware files in the selected release.",
        )

    def test_lists_variants(self, fake_ui, release_factory) -> None:
        release = release_factory("v1", assets=["gss-v01.00-v1.uf2", "gss-v00.r6b-v1.uf2"])
        state = SessionState(release=release)
        step = self.make_step()
        step.enter(state)

        fake_ui.push(UIAction(ActionKind.SELECT, index=1))
        step.render_and_advance(state, fake_ui)

        assert fake_ui.last.choices == ["v01.00", "v00.r6b"]
        assert fake_ui.last.selected == 1
        assert state.asset.name == "gss-v00.r6b-v1.uf2"  # type: ignore[union-attr]

        fake_ui.push(UIAction(ActionKind.NEXT))
        assert step.render_and_advance(state, fake_ui) == StepComplete(StepId.DOWNLOAD)

    def test_no_variants(self, fake_ui, release_factory) -> None:
        state = SessionState(release=release_factory("v1", assets=["ds-ramdisk.zip"]))
        step = self.make_step()
        step.enter(state)

        fake_ui.push(UIAction(ActionKind.NEXT))
        assert step.render_and_advance(state, fake_ui) is None
        assert fake_ui.last.validation_message.startswith("Could not recognize")
        assert not fake_ui.last.primary_enabled

    def test_requires_release(self) -> None:
        with pytest.raises(InstallerError):
            self.make_step().enter(SessionState())


class TestDownloadStep:
    """Tests for DownloadStep."""

    def test_downloads_and_advances(self, fake_ui, services_factory, release_factory, until) -> None:
        release = release_factory("v1", assets=["ds-ramdisk.zip"], latest=True)
        step = DownloadStep(
            services_factory(),
            "gizmo",
            StepId.CHOOSE_DRIVE,
            "Download",
            "Downloading software archive...",
            choose_asset=firmware.driver_station_archive,
        )
        state = SessionState(release=release)
        step.enter(state)

        outcome = frame_until(
            step, state, fake_ui, until, lambda: state.artifact_path is not None
        )

        assert outcome == StepComplete(StepId.CHOOSE_DRIVE)
        assert state.asset.name == "ds-ramdisk.zip"  # type: ignore[union-attr]
        assert state.artifact_path.read_bytes() == b"payload"  # type: ignore[union-attr]
        assert fake_ui.last.loading
        assert step.slot.started_count == 1

    def test_cached_artifact_skips_download(self, fake_ui, services_factory, release_factory) -> None:
        def download(*args: object) -> Path:
            raise AssertionError("download should not run")

        release = release_factory("v1", assets=["ds-ramdisk.zip"])
        state = SessionState(release=release, artifact_path=Path("/cache/ds-ramdisk.zip"))
        step = DownloadStep(
            services_factory(download=download), "gizmo", StepId.CHOOSE_DRIVE, "Download", ""
        )
        step.enter(state)

        assert step.render_and_advance(state, fake_ui) == StepComplete(StepId.CHOOSE_DRIVE)
        assert step.slot.started_count == 0

    def test_missing_asset(self, services_factory, release_factory) -> None:
        step = DownloadStep(
            services_factory(),
            "gizmo",
            StepId.CHOOSE_DRIVE,
            "Download",
            "",
            choose_asset=firmware.driver_station_archive,
        )
        with pytest.raises(AssetNotFoundError):
            step.enter(SessionState(release=release_factory("v1", assets=["other.zip"])))

    def test_operation_requires_release(self, services_factory) -> None:
        step = DownloadStep(services_factory(), "gizmo", StepId.CHOOSE_DRIVE, "Download", "")
        with pytest.raises(InstallerError, match="No release was selected"):
            step.make_operation(SessionState())

    def test_operation_requires_asset(self, services_factory, release_factory) -> None:
        step = DownloadStep(services_factory(), "gizmo", StepId.CHOOSE_DRIVE, "Download", "")
        state = SessionState(release=release_factory("v1", assets=["ds-ramdisk.zip"]))
        with pytest.raises(InstallerError, match="No file was selected"):
            step.make_operation(state)


class TestChooseDeviceStep:
    """Tests for ChooseDeviceStep."""

    def make_step(self, services) -> ChooseDeviceStep:  # type: ignore[no-untyped-def]
        return ChooseDeviceStep(
            services, StepId.INSTALL, "Choose Drive", "For team {target}.", "Install Software"
        )

    def test_select_device(self, fake_ui, services_factory, mock_backend, until) -> None:
        step = self.make_step(services_factory())
        state = SessionState(targets=["100"])
        step.enter(state)

        frame_until(step, state, fake_ui, until, lambda: state.devices is not None)
        fake_ui.push(UIAction(ActionKind.SELECT, index=0))
        step.render_and_advance(state, fake_ui)
        fake_ui.push(UIAction(ActionKind.NEXT))
        outcome = step.render_and_advance(state, fake_ui)

        assert outcome == StepComplete(StepId.INSTALL)
        assert state.device == mock_backend.list_removable_devices.return_value[0]
        assert fake_ui.last.instructions == "For team 100."
        assert fake_ui.last.primary_label == "Install Software"

    def test_refresh_enumerates_again(self, fake_ui, services_factory, mock_backend, until) -> None:
        step = self.make_step(services_factory())
        state = SessionState()
        step.enter(state)
        frame_until(step, state, fake_ui, until, lambda: state.devices is not None)

        mock_backend.list_removable_devices.return_value = []
        fake_ui.push(UIAction(ActionKind.REFRESH))
        step.render_and_advance(state, fake_ui)
        frame_until(step, state, fake_ui, until, lambda: state.devices is not None)
        step.render_and_advance(state, fake_ui)

        assert mock_backend.list_removable_devices.call_count == 2
        assert fake_ui.last.choices == []
        assert fake_ui.last.empty_message == "No removable drives found."
        assert not fake_ui.last.primary_enabled

    def test_enter_forgets_devices(self, services_factory) -> None:
        state = SessionState(devices=[DeviceHandle(path=Path("/media/sd"))])
        state.device = state.devices[0]  # type: ignore[index]
        self.make_step(services_factory()).enter(state)
        assert state.devices is None
        assert state.device is None


class TestDoneStep:
    """Tests for DoneStep."""

    def test_per_target_loop(self, fake_ui) -> None:
        step = DoneStep(
            "Installation Complete",
            "Insert the card for team {target}.",
            "All team numbers have been processed.",
            loop_step=StepId.CHOOSE_DRIVE,
            per_target=True,
        )
        state = SessionState(targets=["100", "200"], installed=True)

        step.render_and_advance(state, fake_ui)
        assert fake_ui.last.instructions == "Insert the card for team 100."
        assert fake_ui.last.info == "Once you have done this, click Next."
        assert fake_ui.last.primary_action is ActionKind.NEXT_TARGET

        fake_ui.push(UIAction(ActionKind.NEXT_TARGET))
        assert step.render_and_advance(state, fake_ui) == StepComplete(StepId.CHOOSE_DRIVE)
        assert state.current_target == "200"
        assert not state.installed

        step.render_and_advance(state, fake_ui)
        assert fake_ui.last.info == "All team numbers have been processed."
        assert fake_ui.last.primary_label is None

        fake_ui.push(UIAction(ActionKind.NEXT_TARGET))
        assert step.render_and_advance(state, fake_ui) is None

    def test_unbounded_loop(self, fake_ui) -> None:
        step = DoneStep(
            "Installation Complete",
            "You can now disconnect the device.",
            "Click Setup Another Device.",
            loop_step=StepId.CHOOSE_DRIVE,
            loop_label="Setup Another Device",
        )
        state = SessionState(installed=True, device=DeviceHandle(path=Path("/media/rp2")))

        step.render_and_advance(state, fake_ui)
        assert fake_ui.last.primary_label == "Setup Another Device"

        fake_ui.push(UIAction(ActionKind.NEXT_TARGET))
        assert step.render_and_advance(state, fake_ui) == StepComplete(StepId.CHOOSE_DRIVE)
        assert state.device is None
        assert not state.installed


def test_step_without_successor() -> None:
    step = DoneStep("Done", "", "")
    with pytest.raises(InstallerError):
        step.complete()
