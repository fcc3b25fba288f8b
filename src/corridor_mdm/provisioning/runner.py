"""Run-as-user command execution.

The extension installer must invoke editor CLIs as the logged-in user, so
that extensions land in that user's profile rather than root's. That
privilege drop is modelled as a ``CommandRunner`` passed into the
installer; tests substitute a runner that records calls and returns
canned output.
"""

from __future__ import annotations

import logging
import os
import pwd
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command invocation.

    Attributes:
        returncode: Process exit status (non-zero for launch failures and
            timeouts as well).
        output: Combined stdout and stderr.
    """

    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(ABC):
    """Executes a command on behalf of a specific OS user."""

    @abstractmethod
    def run(self, argv: list[str], *, user: str) -> CommandResult:
        """Run ``argv`` as ``user`` and capture its combined output.

        Implementations must not raise for a failing command; the exit
        status and output are reported in the ``CommandResult``.
        """


def _effective_username() -> str:
    try:
        return pwd.getpwuid(os.geteuid()).pw_name
    except KeyError:
        return ""


class SudoRunner(CommandRunner):
    """Runs commands through ``sudo -u <user>`` when running as root.

    When the process already runs as the target user no privilege change
    is needed and the command is executed directly.
    """

    def __init__(self, timeout: float = 300.0) -> None:
        self.timeout = timeout

    def build_argv(self, argv: list[str], user: str) -> list[str]:
        if os.geteuid() == 0 and user != _effective_username():
            return ["sudo", "-u", user, *argv]
        return list(argv)

    def run(self, argv: list[str], *, user: str) -> CommandResult:
        full_argv = self.build_argv(argv, user)
        logger.debug("Running: %s", " ".join(full_argv))
        try:
            proc = subprocess.run(
                full_argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            output = exc.output or ""
            if isinstance(output, bytes):
                output = output.decode("utf-8", errors="replace")
            return CommandResult(
                returncode=-1,
                output=f"{output}\nTimed out after {self.timeout:g}s".lstrip(),
            )
        except OSError as exc:
            return CommandResult(returncode=127, output=str(exc))
        return CommandResult(returncode=proc.returncode, output=proc.stdout or "")
