"""Gizmo Installer top-level windows."""
