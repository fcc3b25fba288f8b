"""Extension installation, token issuance and the provisioning pass.

Public API::

    from corridor_mdm.config import load_settings
    from corridor_mdm.provisioning import build_orchestrator

    report = build_orchestrator(load_settings()).run()
"""

from __future__ import annotations

from corridor_mdm.provisioning.installer import ExtensionInstaller, InstallOutcome
from corridor_mdm.provisioning.orchestrator import (
    ProvisioningOrchestrator,
    ProvisioningReport,
    build_orchestrator,
)
from corridor_mdm.provisioning.runner import CommandResult, CommandRunner, SudoRunner
from corridor_mdm.provisioning.tokens import ProvisionedCredential, TokenProvisioner

__all__ = [
    "CommandResult",
    "CommandRunner",
    "ExtensionInstaller",
    "InstallOutcome",
    "ProvisionedCredential",
    "ProvisioningOrchestrator",
    "ProvisioningReport",
    "SudoRunner",
    "TokenProvisioner",
    "build_orchestrator",
]
