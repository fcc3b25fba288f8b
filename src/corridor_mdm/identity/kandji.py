"""Identity values injected by Kandji as managed global variables.

Kandji writes a managed preferences plist on every enrolled Mac; the
``SERIAL_NUMBER`` and ``EMAIL`` keys hold the device serial and the
assigned user's email.
"""

from __future__ import annotations

import logging
import plistlib
from pathlib import Path

logger = logging.getLogger(__name__)

SERIAL_KEY = "SERIAL_NUMBER"
EMAIL_KEY = "EMAIL"


class KandjiVariables:
    """Reader for the Kandji global variables plist.

    The plist is parsed lazily, once. A missing or unreadable file behaves
    like a file with no keys, so the resolver reports the specific field
    that could not be resolved.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._values: dict[str, object] | None = None

    def _load(self) -> dict[str, object]:
        if self._values is None:
            try:
                with self.path.open("rb") as fh:
                    data = plistlib.load(fh)
            except (OSError, plistlib.InvalidFileException, ValueError) as exc:
                logger.error("Cannot read Kandji global variables %s: %s", self.path, exc)
                data = {}
            self._values = data if isinstance(data, dict) else {}
        return self._values

    def get(self, key: str) -> str:
        """Return the string value for ``key``, or ``""`` if absent."""
        value = self._load().get(key)
        return str(value).strip() if value is not None else ""

    def serial(self) -> str:
        return self.get(SERIAL_KEY)

    def email(self) -> str:
        return self.get(EMAIL_KEY)
