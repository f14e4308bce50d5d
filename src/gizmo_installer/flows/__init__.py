"""
Gizmo Installer flows.

The three installation wizards: Driver Station, System Firmware and
Student Starter Code.
"""

from gizmo_installer.flows.definitions import FlowInfo, build_flow, flow_catalog

__all__ = ["FlowInfo", "build_flow", "flow_catalog"]
