"""Data models for the installation detector."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from corridor_mdm.editors.registry import EditorDescriptor


class FoundAt(Enum):
    """Which candidate install location an editor was found at."""

    STANDARD = "standard"
    ALTERNATIVE = "alternative"


@dataclass(frozen=True)
class DetectedEditor:
    """An editor found on disk during this run.

    Attributes:
        descriptor: The registry entry for the editor.
        found_at: Which candidate location matched. Fixes every later
            path derivation for this editor.
        install_path: The matching app bundle directory.
    """

    descriptor: EditorDescriptor
    found_at: FoundAt
    install_path: Path

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def cli_path(self) -> Path:
        """CLI path inside the bundle that was actually detected."""
        return self.descriptor.cli_path(self.install_path)
