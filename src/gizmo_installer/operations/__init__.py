"""
Gizmo Installer leaf operations.

Blocking work that steps run on background threads: talking to the
release server, writing payloads and driving the install sequence.
"""
