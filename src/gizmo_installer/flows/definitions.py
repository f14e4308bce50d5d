"""
Gizmo Installer flow definitions.

Each flow is a fixed chain of steps with its own transition table. The
step factories here are called again on every reset, so a flow never
carries anything over from an earlier run.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from gizmo_installer.core.errors import InstallerError
from gizmo_installer.core.models import DeviceHandle, FlowKind, StepId
from gizmo_installer.core.services import InstallerServices
from gizmo_installer.core.state import SessionState
from gizmo_installer.core.steps import (
    ChooseDeviceStep,
    ChooseVariantStep,
    ChooseVersionStep,
    DoneStep,
    DownloadStep,
    EnterTargetsStep,
    InstallStep,
    Step,
)
from gizmo_installer.core.wizard import FlowSpec
from gizmo_installer.operations import firmware
from gizmo_installer.operations.install import install_archive, install_file

DRIVER_STATION_REPO = "gizmo"
FIRMWARE_REPO = "firmware"
STARTER_CODE_REPO = "CircuitPython_Gizmo"


@dataclass(frozen=True)
class FlowInfo:
    """Launcher entry for one flow."""

    kind: FlowKind
    title: str
    repo: str
    enabled: bool = True

    @property
    def button_label(self) -> str:
        return self.title if self.enabled else "Coming Soon"


def flow_catalog(starter_code_enabled: bool = False) -> list[FlowInfo]:
    """Flows offered on the launcher page, in display order."""
    return [
        FlowInfo(FlowKind.DRIVER_STATION, "Driver Station", DRIVER_STATION_REPO),
        FlowInfo(FlowKind.SYSTEM_FIRMWARE, "System Firmware", FIRMWARE_REPO),
        FlowInfo(
            FlowKind.STARTER_CODE,
            "Starter Code",
            STARTER_CODE_REPO,
            enabled=starter_code_enabled,
        ),
    ]


def _linear(*steps: StepId) -> dict[StepId, frozenset[StepId]]:
    table = {source: frozenset({target}) for source, target in zip(steps, steps[1:])}
    # Every flow can loop from Done back to the drive chooser.
    table[StepId.DONE] = frozenset({StepId.CHOOSE_DRIVE})
    return table


def _archive_plan(services: InstallerServices, state: SessionState) -> Callable[[], DeviceHandle]:
    if state.artifact_path is None or state.device is None:
        raise InstallerError("Nothing is ready to install.")
    return functools.partial(
        install_archive,
        services.backend,
        state.artifact_path,
        state.device,
        state.current_target or "",
    )


def _file_plan(services: InstallerServices, state: SessionState) -> Callable[[], DeviceHandle]:
    if state.artifact_path is None or state.device is None:
        raise InstallerError("Nothing is ready to install.")
    return functools.partial(install_file, services.backend, state.artifact_path, state.device)


DRIVER_STATION_STEPS = (
    StepId.CHOOSE_VERSION,
    StepId.ENTER_TEAM_NUMBERS,
    StepId.DOWNLOAD,
    StepId.CHOOSE_DRIVE,
    StepId.INSTALL,
    StepId.DONE,
)

DRIVER_STATION_DRIVE_INSTRUCTIONS = """Setting up driver station for team {target}.

1. Insert the microSD card for this team into your computer.
2. Click the "Refresh" button to update the list below.
3. Select the microSD card drive from the list and click "Install Software".
"""


def driver_station_steps(services: InstallerServices) -> Mapping[StepId, Step]:
    return {
        StepId.CHOOSE_VERSION: ChooseVersionStep(
            services,
            DRIVER_STATION_REPO,
            next_step=StepId.ENTER_TEAM_NUMBERS,
            heading="Software Version",
            instructions=(
                "Select the version of the software you want to install. "
                "Usually, this should be the latest version."
            ),
        ),
        StepId.ENTER_TEAM_NUMBERS: EnterTargetsStep(
            next_step=StepId.DOWNLOAD,
            heading="Team Numbers",
            instructions="Enter your team numbers, one per line.",
        ),
        StepId.DOWNLOAD: DownloadStep(
            services,
            DRIVER_STATION_REPO,
            next_step=StepId.CHOOSE_DRIVE,
            heading="Download",
            loading_message="Downloading software archive...",
            choose_asset=firmware.driver_station_archive,
        ),
        StepId.CHOOSE_DRIVE: ChooseDeviceStep(
            services,
            next_step=StepId.INSTALL,
            heading="Choose Drive",
            instructions=DRIVER_STATION_DRIVE_INSTRUCTIONS,
            next_label="Install Software",
        ),
        StepId.INSTALL: InstallStep(
            services,
            next_step=StepId.DONE,
            heading="Installing",
            loading_message="Installing software...",
            plan=_archive_plan,
        ),
        StepId.DONE: DoneStep(
            heading="Installation Complete",
            instructions=(
                "Please remove the card from the drive and insert it into the "
                "driver station for team {target}."
            ),
            final_message=(
                "All team numbers have been processed. You can now close the "
                "wizard or click 'Start Over'."
            ),
            loop_step=StepId.CHOOSE_DRIVE,
            loop_label="Next",
            per_target=True,
        ),
    }


FIRMWARE_STEPS = (
    StepId.CHOOSE_VERSION,
    StepId.CHOOSE_BOARD_REVISION,
    StepId.DOWNLOAD,
    StepId.CHOOSE_DRIVE,
    StepId.INSTALL,
    StepId.DONE,
)

BOOT_DRIVE_INSTRUCTIONS = """1. Press and hold the BOOTSEL button on the {processor} processor.
2. Connect the {processor} processor to your computer with the USB cable.
3. Release the BOOTSEL button.
4. Click the "Refresh" button to update the list below.
5. Select the drive from the list and click "{action}". The drive should be named "RPI-RP2".
"""


def _boot_drive_instructions(processor: str, action: str) -> str:
    return BOOT_DRIVE_INSTRUCTIONS.format(processor=processor, action=action)


def firmware_steps(services: InstallerServices) -> Mapping[StepId, Step]:
    return {
        StepId.CHOOSE_VERSION: ChooseVersionStep(
            services,
            FIRMWARE_REPO,
            next_step=StepId.CHOOSE_BOARD_REVISION,
            heading="Firmware Version",
            instructions=(
                "Select the version of the firmware you want to install. "
                "Usually, this should be the latest version."
            ),
        ),
        StepId.CHOOSE_BOARD_REVISION: ChooseVariantStep(
            next_step=StepId.DOWNLOAD,
            heading="Choose Hardware Version",
            instructions=(
                "Select the hardware version of the Gizmo PCB you are using. This "
                "should be printed on the board and should look something like "
                '"v01.00" or "v00.r6b"'
            ),
            find_variants=firmware.firmware_variants,
            label_variant=firmware.variant_label,
            empty_message="Could not recognize any firmware files in the selected release.",
        ),
        StepId.DOWNLOAD: DownloadStep(
            services,
            FIRMWARE_REPO,
            next_step=StepId.CHOOSE_DRIVE,
            heading="Download",
            loading_message="Downloading firmware file...",
        ),
        StepId.CHOOSE_DRIVE: ChooseDeviceStep(
            services,
            next_step=StepId.INSTALL,
            heading="Choose Device",
            instructions=_boot_drive_instructions("system", "Install Firmware"),
            next_label="Install Firmware",
        ),
        StepId.INSTALL: InstallStep(
            services,
            next_step=StepId.DONE,
            heading="Installing",
            loading_message="Installing firmware...",
            plan=_file_plan,
        ),
        StepId.DONE: DoneStep(
            heading="Installation Complete",
            instructions="You can now disconnect the device from the computer.",
            final_message=(
                'To install system firmware onto another device, click "Setup Another '
                'Device". If you are done installing system firmware, you can close the '
                'wizard or click "Start Over".'
            ),
            loop_step=StepId.CHOOSE_DRIVE,
            loop_label="Setup Another Device",
        ),
    }


STARTER_CODE_STEPS = (
    StepId.CHOOSE_VERSION,
    StepId.DOWNLOAD,
    StepId.CHOOSE_DRIVE,
    StepId.INSTALL,
    StepId.DONE,
)


def starter_code_steps(services: InstallerServices) -> Mapping[StepId, Step]:
    return {
        StepId.CHOOSE_VERSION: ChooseVersionStep(
            services,
            STARTER_CODE_REPO,
            next_step=StepId.DOWNLOAD,
            heading="Software Version",
            instructions=(
                "Select the version of the starter code you want to install. "
                "Usually, this should be the latest version."
            ),
        ),
        StepId.DOWNLOAD: DownloadStep(
            services,
            STARTER_CODE_REPO,
            next_step=StepId.CHOOSE_DRIVE,
            heading="Download",
            loading_message="Downloading starter program file...",
            choose_asset=firmware.starter_program,
        ),
        StepId.CHOOSE_DRIVE: ChooseDeviceStep(
            services,
            next_step=StepId.INSTALL,
            heading="Choose Device",
            instructions=_boot_drive_instructions("student", "Install Program"),
            next_label="Install Program",
        ),
        StepId.INSTALL: InstallStep(
            services,
            next_step=StepId.DONE,
            heading="Installing",
            loading_message="Installing starter program...",
            plan=_file_plan,
        ),
        StepId.DONE: DoneStep(
            heading="Installation Complete",
            instructions="You can now disconnect the device from the computer.",
            final_message=(
                'To install the starter program onto another device, click "Setup '
                'Another Device". If you are done installing starter code onto Gizmos, '
                'you can close the wizard or click "Start Over".'
            ),
            loop_step=StepId.CHOOSE_DRIVE,
            loop_label="Setup Another Device",
        ),
    }


StepFactory = Callable[[InstallerServices], Mapping[StepId, Step]]

_FLOWS: dict[FlowKind, tuple[str, tuple[StepId, ...], StepFactory]] = {
    FlowKind.DRIVER_STATION: ("Driver Station Setup", DRIVER_STATION_STEPS, driver_station_steps),
    FlowKind.SYSTEM_FIRMWARE: ("System Firmware", FIRMWARE_STEPS, firmware_steps),
    FlowKind.STARTER_CODE: ("Student Starter Code", STARTER_CODE_STEPS, starter_code_steps),
}


def build_flow(kind: FlowKind, services: InstallerServices) -> FlowSpec:
    """Describe the ``kind`` flow, bound to ``services``."""
    title, order, factory = _FLOWS[kind]
    return FlowSpec(
        kind=kind,
        title=title,
        initial_step=order[0],
        transitions=_linear(*order),
        build_steps=functools.partial(factory, services),
    )
