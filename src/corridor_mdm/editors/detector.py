"""Installation Detector: which supported editors are present on disk.

Detection Algorithm:
    For each descriptor, in registry order, probe the standard location
    and then the per-user alternative location. The first directory that
    exists wins and is recorded as ``FoundAt``. A descriptor contributes
    at most one ``DetectedEditor``.

Detection never fails: unreadable locations count as absent, and an
empty result is a valid outcome that ends the run successfully.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from corridor_mdm.editors.models import DetectedEditor, FoundAt
from corridor_mdm.editors.registry import (
    EDITORS,
    MACOS_LAYOUT,
    EditorDescriptor,
    HostLayout,
)
from corridor_mdm.identity.models import DeviceIdentity

logger = logging.getLogger(__name__)


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except (PermissionError, OSError):
        return False


class InstallationDetector:
    """Scans the editor registry against the filesystem.

    Usage::

        detector = InstallationDetector()
        for editor in detector.detect(identity):
            print(editor.name, editor.found_at, editor.cli_path)
    """

    def __init__(
        self,
        registry: Sequence[EditorDescriptor] = EDITORS,
        layout: HostLayout = MACOS_LAYOUT,
    ) -> None:
        self.registry = list(registry)
        self.layout = layout

    def candidates(
        self, descriptor: EditorDescriptor, username: str,
    ) -> list[tuple[FoundAt, Path]]:
        """Candidate install locations for one editor, in priority order."""
        return [
            (FoundAt.STANDARD, descriptor.standard_path(self.layout)),
            (FoundAt.ALTERNATIVE, descriptor.alternative_path(self.layout, username)),
        ]

    def probe(
        self, descriptor: EditorDescriptor, username: str,
    ) -> DetectedEditor | None:
        """Return where ``descriptor`` is installed, or None if absent."""
        for found_at, path in self.candidates(descriptor, username):
            if _is_dir(path):
                return DetectedEditor(
                    descriptor=descriptor, found_at=found_at, install_path=path,
                )
        return None

    def detect(self, identity: DeviceIdentity) -> list[DetectedEditor]:
        """Find all installed editors for the identity's OS user.

        Returns:
            Detected editors in registry declaration order.
        """
        detected: list[DetectedEditor] = []
        for descriptor in self.registry:
            editor = self.probe(descriptor, identity.os_username)
            if editor is None:
                logger.debug("%s not found", descriptor.name)
                continue
            logger.info("%s detected at %s", descriptor.name, editor.install_path)
            detected.append(editor)
        return detected
