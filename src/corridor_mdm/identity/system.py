"""Local identity probes: hardware serial number and console user.

Both probes shell out to macOS tools. The command executor is a plain
callable (``argv -> stdout``) so tests can substitute canned output.

Serial Number:
    1. ``ioreg -l`` -> ``"IOPlatformSerialNumber" = "..."``
    2. ``system_profiler SPHardwareDataType`` -> ``Serial Number (system): ...``

Console User:
    1. Owner of ``/dev/console``.
    2. If that is a system account, the most recent console login from
       ``last -1 -t console``.
"""

from __future__ import annotations

import logging
import os
import pwd
import re
import subprocess
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

CommandOutput = Callable[[list[str]], str]

# Accounts that own the console when nobody is interactively logged in.
SYSTEM_ACCOUNTS: frozenset[str] = frozenset({
    "root",
    "_mbsetupuser",
    "loginwindow",
})

# First-column tokens of ``last`` output that are not user names.
_LAST_NOISE: frozenset[str] = frozenset({"wtmp", "reboot", "shutdown"})

_IOREG_SERIAL_RE = re.compile(r'"IOPlatformSerialNumber"\s*=\s*"([^"]*)"')
_PROFILER_SERIAL_RE = re.compile(r"Serial Number[^:\n]*:\s*(\S+)")

CONSOLE_DEVICE = Path("/dev/console")


def run_command(argv: list[str]) -> str:
    """Run a probe command and return its stdout, or ``""`` on any failure."""
    try:
        proc = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            timeout=60,
            env={**os.environ, "LC_ALL": "C"},
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("Probe %s failed: %s", argv[0], exc)
        return ""
    return proc.stdout or ""


def read_hardware_serial(run: CommandOutput = run_command) -> str:
    """Return the device serial number, or ``""`` if no probe yields one."""
    match = _IOREG_SERIAL_RE.search(run(["ioreg", "-l"]))
    if match and match.group(1).strip():
        return match.group(1).strip()

    logger.debug("ioreg returned no serial; falling back to system_profiler")
    match = _PROFILER_SERIAL_RE.search(
        run(["system_profiler", "SPHardwareDataType"])
    )
    if match:
        return match.group(1).strip()
    return ""


def _console_owner(console: Path) -> str:
    try:
        uid = console.stat().st_uid
        return pwd.getpwuid(uid).pw_name
    except (OSError, KeyError):
        return ""


def _last_console_user(run: CommandOutput) -> str:
    for line in run(["last", "-1", "-t", "console"]).splitlines():
        parts = line.split()
        if parts:
            return "" if parts[0] in _LAST_NOISE else parts[0]
    return ""


def read_console_user(
    run: CommandOutput = run_command,
    console: Path = CONSOLE_DEVICE,
) -> str:
    """Return the interactively logged-in user, or ``""`` if unknown.

    System accounts are never returned: when the console belongs to one
    (login window, setup assistant), the most recent console login is used.
    """
    user = _console_owner(console)
    if not user or user in SYSTEM_ACCOUNTS:
        logger.debug("Console owned by %r; checking last console login", user)
        user = _last_console_user(run)
    if user in SYSTEM_ACCOUNTS:
        return ""
    return user
