"""Supported editor registry and installation detection.

Public API::

    from corridor_mdm.editors import EDITORS, InstallationDetector

    detected = InstallationDetector().detect(identity)
    for editor in detected:
        print(f"{editor.name}: {editor.install_path} ({editor.found_at.value})")
"""

from __future__ import annotations

from corridor_mdm.editors.detector import InstallationDetector
from corridor_mdm.editors.models import DetectedEditor, FoundAt
from corridor_mdm.editors.registry import (
    EDITORS,
    MACOS_LAYOUT,
    EditorDescriptor,
    HostLayout,
)

__all__ = [
    "DetectedEditor",
    "EDITORS",
    "EditorDescriptor",
    "FoundAt",
    "HostLayout",
    "InstallationDetector",
    "MACOS_LAYOUT",
]
