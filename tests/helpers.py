"""Test doubles shared across test packages."""

from __future__ import annotations

import os
import pwd

from corridor_mdm.provisioning.runner import CommandResult, CommandRunner

CURRENT_USER = pwd.getpwuid(os.getuid()).pw_name


class FakeRunner(CommandRunner):
    """Records invocations and replays canned results in order.

    The last result is reused once the queue is exhausted.
    """

    def __init__(self, *results: CommandResult) -> None:
        self.results = list(results) or [CommandResult(0, "")]
        self.calls: list[tuple[list[str], str]] = []

    def run(self, argv: list[str], *, user: str) -> CommandResult:
        self.calls.append((argv, user))
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0]
