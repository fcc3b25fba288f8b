"""A single provisioning pass.

Pipeline:
    1. Validate operator settings.
    2. Resolve the device identity (serial, console user, email).
    3. Detect installed editors. None found -> done, nothing to do.
    4. For each detected editor, in registry order: ensure the extension
       is installed, then issue and stage its API token.

Every error aborts the pass. Editors processed before the failing one
keep their installed extension and pending-token file; there is no
rollback. The MDM scheduler re-runs the whole pass later, and each step
is idempotent, so a re-run converges.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from corridor_mdm.config import Settings
from corridor_mdm.editors.detector import InstallationDetector
from corridor_mdm.editors.models import DetectedEditor
from corridor_mdm.editors.registry import HostLayout
from corridor_mdm.identity.models import DeviceIdentity
from corridor_mdm.identity.resolver import IdentityResolver, resolver_for
from corridor_mdm.provisioning.installer import ExtensionInstaller, InstallOutcome
from corridor_mdm.provisioning.runner import CommandRunner, SudoRunner
from corridor_mdm.provisioning.tokens import TokenProvisioner

logger = logging.getLogger(__name__)


@dataclass
class ProvisioningReport:
    """What a successful pass did.

    Attributes:
        identity: The resolved device identity.
        detected: Editors found on disk, in registry order.
        installs: Editor name -> how its installation was confirmed.
        pending_tokens: Editor name -> path of the staged token file.
    """

    identity: DeviceIdentity
    detected: list[DetectedEditor] = field(default_factory=list)
    installs: dict[str, InstallOutcome] = field(default_factory=dict)
    pending_tokens: dict[str, Path] = field(default_factory=dict)

    @property
    def nothing_to_do(self) -> bool:
        return not self.detected


class ProvisioningOrchestrator:
    """Wires the resolver, detector, installer and provisioner together."""

    def __init__(
        self,
        resolver: IdentityResolver,
        detector: InstallationDetector,
        installer: ExtensionInstaller,
        provisioner: TokenProvisioner,
    ) -> None:
        self.resolver = resolver
        self.detector = detector
        self.installer = installer
        self.provisioner = provisioner

    def run(self) -> ProvisioningReport:
        """Execute one provisioning pass.

        Raises:
            CorridorMDMError: Any identity, install or provisioning failure.
        """
        identity = self.resolver.resolve()
        report = ProvisioningReport(identity=identity)

        report.detected = self.detector.detect(identity)
        if not report.detected:
            names = ", ".join(d.name for d in self.detector.registry)
            logger.info(
                "No supported editors (%s) are installed. "
                "Skipping Corridor extension installation.",
                names,
            )
            return report

        for editor in report.detected:
            report.installs[editor.name] = self.installer.ensure_installed(
                editor, identity,
            )
            credential = self.provisioner.provision(editor, identity)
            report.pending_tokens[editor.name] = credential.pending_path

        logger.info("User provisioned successfully!")
        logger.info(
            "The Corridor extension will migrate tokens for each editor "
            "to secure storage on next launch of that editor"
        )
        return report


def build_orchestrator(
    settings: Settings,
    *,
    runner: CommandRunner | None = None,
) -> ProvisioningOrchestrator:
    """Create an orchestrator for validated ``settings``.

    Raises:
        ConfigError: If ``settings`` fail validation.
    """
    settings.validate()
    layout = HostLayout(
        applications_dir=Path(settings.applications_dir),
        home_root=Path(settings.home_root),
    )
    return ProvisioningOrchestrator(
        resolver=resolver_for(settings),
        detector=InstallationDetector(layout=layout),
        installer=ExtensionInstaller(
            runner or SudoRunner(timeout=settings.command_timeout),
            extension_id=settings.extension_id,
            layout=layout,
        ),
        provisioner=TokenProvisioner(
            settings.team_token,
            api_url=settings.api_url,
            layout=layout,
            timeout=settings.http_timeout,
        ),
    )
