"""Extension Installer: idempotently ensure the extension in each editor.

Editor CLIs disagree on how they phrase success and no-op, and some MDM
agents swallow their output entirely. The exit status alone is therefore
not trusted; the captured output is classified instead:

    1. Output mentions "already installed"        -> success (no-op).
    2. Output mentions "successfully installed"   -> success.
    3. Extensions directory holds a matching entry -> success.
    4. Anything else                               -> InstallFailedError.

Markers are matched case-insensitively.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from corridor_mdm.config import DEFAULT_EXTENSION_ID
from corridor_mdm.editors.models import DetectedEditor
from corridor_mdm.editors.registry import MACOS_LAYOUT, HostLayout
from corridor_mdm.exceptions import CliMissingError, InstallFailedError
from corridor_mdm.identity.models import DeviceIdentity
from corridor_mdm.provisioning.runner import CommandRunner

logger = logging.getLogger(__name__)

ALREADY_INSTALLED_MARKER: str = "already installed"
SUCCESS_MARKER: str = "successfully installed"


class InstallOutcome(Enum):
    """How an install attempt was judged successful."""

    ALREADY_INSTALLED = "already_installed"
    INSTALLED = "installed"
    FOUND_ON_DISK = "found_on_disk"
    FAILED = "failed"


def classify_output(output: str) -> InstallOutcome:
    """Classify CLI output alone (tiers 1 and 2).

    Returns ``InstallOutcome.FAILED`` when neither marker is present; the
    caller then falls back to the filesystem check.
    """
    lowered = output.lower()
    if ALREADY_INSTALLED_MARKER in lowered:
        return InstallOutcome.ALREADY_INSTALLED
    if SUCCESS_MARKER in lowered:
        return InstallOutcome.INSTALLED
    return InstallOutcome.FAILED


def extension_present(extensions_dir: Path, extension_id: str) -> bool:
    """Whether ``extensions_dir`` holds an entry for ``extension_id``.

    Installed extensions live in ``<publisher>.<name>-<version>``
    directories, so a case-insensitive prefix match is used.
    """
    prefix = extension_id.lower()
    try:
        return any(
            entry.name.lower().startswith(prefix)
            for entry in extensions_dir.iterdir()
        )
    except (PermissionError, OSError):
        return False


class ExtensionInstaller:
    """Installs the extension into detected editors as the logged-in user."""

    def __init__(
        self,
        runner: CommandRunner,
        *,
        extension_id: str = DEFAULT_EXTENSION_ID,
        layout: HostLayout = MACOS_LAYOUT,
    ) -> None:
        self.runner = runner
        self.extension_id = extension_id
        self.layout = layout

    def install_command(self, cli_path: Path) -> list[str]:
        return [str(cli_path), "--install-extension", self.extension_id, "--force"]

    def ensure_installed(
        self, editor: DetectedEditor, identity: DeviceIdentity,
    ) -> InstallOutcome:
        """Make sure the extension is installed for ``editor``.

        Returns:
            The (successful) outcome that confirmed the installation.

        Raises:
            CliMissingError: The bundled CLI is not a regular file.
            InstallFailedError: Neither output nor filesystem confirm it.
        """
        cli_path = editor.cli_path
        if not cli_path.is_file():
            raise CliMissingError(
                f"{editor.name} CLI not found at {cli_path}",
                editor=editor.name,
                cli_path=str(cli_path),
            )

        logger.info("Installing Corridor extension for %s...", editor.name)
        result = self.runner.run(
            self.install_command(cli_path), user=identity.os_username,
        )
        logger.debug(
            "%s CLI exited with %d: %s", editor.name, result.returncode, result.output,
        )

        outcome = classify_output(result.output)
        if outcome is InstallOutcome.ALREADY_INSTALLED:
            logger.info("Corridor extension is already installed for %s", editor.name)
            return outcome
        if outcome is InstallOutcome.INSTALLED:
            logger.info("Corridor extension installed successfully for %s", editor.name)
            return outcome

        ext_dir = editor.descriptor.extension_dir_path(
            self.layout, identity.os_username,
        )
        if extension_present(ext_dir, self.extension_id):
            logger.info(
                "Corridor extension is already installed for %s (found in %s)",
                editor.name, ext_dir,
            )
            return InstallOutcome.FOUND_ON_DISK

        raise InstallFailedError(
            f"Failed to install Corridor extension for {editor.name} "
            f"(exit code {result.returncode}): {result.output}",
            editor=editor.name,
            output=result.output,
        )
