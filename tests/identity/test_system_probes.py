"""Tests for the hardware serial and console user probes.

Command output is canned; the console device is a temp file owned by the
test user.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from corridor_mdm.identity.system import read_console_user, read_hardware_serial

from tests.helpers import CURRENT_USER

IOREG_OUTPUT = """\
+-o Root  <class IORegistryEntry, id 0x100000100, retain 30>
  | {
  |   "IOPlatformSerialNumber" = "C02XK0AAJG5H"
  |   "IOPlatformUUID" = "3F2504E0-4F89-11D3-9A0C-0305E82C3301"
  | }
"""

PROFILER_OUTPUT = """\
Hardware:

    Hardware Overview:

      Model Name: MacBook Pro
      Serial Number (system): FVFXC2ABQ05D
      Hardware UUID: 3F2504E0-4F89-11D3-9A0C-0305E82C3301
"""


def _canned(outputs: dict[str, str]):
    calls: list[list[str]] = []

    def run(argv: list[str]) -> str:
        calls.append(argv)
        return outputs.get(argv[0], "")

    run.calls = calls  # type: ignore[attr-defined]
    return run


class TestHardwareSerial:
    """Serial number probe order and parsing."""

    def test_ioreg_primary(self) -> None:
        """ioreg output is used when it contains a serial."""
        run = _canned({"ioreg": IOREG_OUTPUT, "system_profiler": PROFILER_OUTPUT})
        assert read_hardware_serial(run) == "C02XK0AAJG5H"
        assert [c[0] for c in run.calls] == ["ioreg"]

    def test_system_profiler_fallback(self) -> None:
        """system_profiler is consulted when ioreg yields nothing."""
        run = _canned({"system_profiler": PROFILER_OUTPUT})
        assert read_hardware_serial(run) == "FVFXC2ABQ05D"

    def test_empty_ioreg_value_falls_back(self) -> None:
        """An empty IOPlatformSerialNumber counts as missing."""
        run = _canned({
            "ioreg": '"IOPlatformSerialNumber" = ""',
            "system_profiler": PROFILER_OUTPUT,
        })
        assert read_hardware_serial(run) == "FVFXC2ABQ05D"

    def test_no_serial(self) -> None:
        """Both probes empty -> empty string."""
        assert read_hardware_serial(_canned({})) == ""


class TestConsoleUser:
    """Console owner detection with system-account fallback."""

    def test_console_owner(self, tmp_path: Path) -> None:
        """The owner of the console device is the user."""
        console = tmp_path / "console"
        console.touch()
        if CURRENT_USER == "root":
            # root is a system account: falls through to ``last``.
            run = _canned({"last": "alice  console  Mon Oct 12 09:14   still logged in\n"})
            assert read_console_user(run, console) == "alice"
        else:
            assert read_console_user(_canned({}), console) == CURRENT_USER

    def test_system_account_uses_last(self, tmp_path: Path) -> None:
        """A system-owned console falls back to the last console login."""
        with patch("corridor_mdm.identity.system._console_owner", return_value="_mbsetupuser"):
            run = _canned({"last": "bob  console  Mon Oct 12 09:14   still logged in\n\nwtmp begins Mon Oct 1\n"})
            assert read_console_user(run, tmp_path / "console") == "bob"

    def test_missing_console_uses_last(self, tmp_path: Path) -> None:
        """An unreadable console device falls back to ``last``."""
        run = _canned({"last": "carol console Mon Oct 12 09:14 still logged in\n"})
        assert read_console_user(run, tmp_path / "absent") == "carol"

    def test_last_noise_is_not_a_user(self, tmp_path: Path) -> None:
        """``wtmp begins`` with no sessions yields no user."""
        run = _canned({"last": "\nwtmp begins Mon Oct  1 08:00\n"})
        assert read_console_user(run, tmp_path / "absent") == ""

    def test_last_returns_system_account(self, tmp_path: Path) -> None:
        """A system account from ``last`` is still rejected."""
        run = _canned({"last": "root console Mon Oct 12 09:14 - 09:20\n"})
        assert read_console_user(run, tmp_path / "absent") == ""
