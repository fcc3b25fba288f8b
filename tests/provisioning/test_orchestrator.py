"""Tests for a full provisioning pass with fake collaborators.

Identity comes from in-memory probes, HTTP from an httpx.MockTransport,
and CLI invocations from a FakeRunner.
"""

from __future__ import annotations

import json

import httpx
import pytest

from corridor_mdm.config import Settings
from corridor_mdm.editors.detector import InstallationDetector
from corridor_mdm.editors.registry import EDITORS, HostLayout
from corridor_mdm.exceptions import CliMissingError, ConfigError, InstallFailedError, NoEmailError
from corridor_mdm.identity.directory import GraphDirectory
from corridor_mdm.identity.models import DeviceIdentity
from corridor_mdm.identity.resolver import IdentityResolver
from corridor_mdm.provisioning.installer import ExtensionInstaller, InstallOutcome
from corridor_mdm.provisioning.orchestrator import (
    ProvisioningOrchestrator,
    build_orchestrator,
)
from corridor_mdm.provisioning.runner import CommandResult
from corridor_mdm.provisioning.tokens import TokenProvisioner

from tests.editors.helpers import install_alternative, install_standard
from tests.helpers import FakeRunner

CURSOR, VSCODE, WINDSURF = EDITORS


class _Issuer:
    """Mock issuance endpoint that hands out numbered tokens."""

    def __init__(self) -> None:
        self.platforms: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        platform = json.loads(request.content)["platform"]
        self.platforms.append(platform)
        return httpx.Response(200, json={
            "apiToken": f"tok-{platform}",
            "apiTokenId": f"id-{len(self.platforms)}",
        })


def _resolver(identity: DeviceIdentity, email_lookup=None) -> IdentityResolver:
    return IdentityResolver(
        serial_probe=lambda: identity.serial,
        user_probe=lambda: identity.os_username,
        email_lookup=email_lookup or (lambda _serial: identity.user_email),
    )


def _orchestrator(
    layout: HostLayout,
    identity: DeviceIdentity,
    runner: FakeRunner,
    issuer,
    email_lookup=None,
) -> ProvisioningOrchestrator:
    return ProvisioningOrchestrator(
        resolver=_resolver(identity, email_lookup),
        detector=InstallationDetector(layout=layout),
        installer=ExtensionInstaller(runner, layout=layout),
        provisioner=TokenProvisioner(
            "team-token", layout=layout, transport=httpx.MockTransport(issuer),
        ),
    )


def _pending(layout: HostLayout, identity: DeviceIdentity, tag: str):
    return layout.config_root(identity.os_username) / tag / "pending-token"


class TestRun:
    """Pass-level behaviour."""

    def test_nothing_installed(self, layout: HostLayout, identity: DeviceIdentity) -> None:
        """No editors: success, no CLI calls, no HTTP, no files."""
        runner, issuer = FakeRunner(), _Issuer()
        report = _orchestrator(layout, identity, runner, issuer).run()
        assert report.nothing_to_do
        assert runner.calls == []
        assert issuer.platforms == []
        assert not layout.config_root(identity.os_username).exists()

    def test_all_editors(self, layout: HostLayout, identity: DeviceIdentity) -> None:
        """Every detected editor gets the extension and its own token."""
        install_standard(layout, CURSOR)
        install_alternative(layout, VSCODE, identity.os_username)
        runner = FakeRunner(CommandResult(0, "Extension was successfully installed."))
        issuer = _Issuer()

        report = _orchestrator(layout, identity, runner, issuer).run()

        assert [d.name for d in report.detected] == ["Cursor", "VSCode"]
        assert report.installs == {
            "Cursor": InstallOutcome.INSTALLED,
            "VSCode": InstallOutcome.INSTALLED,
        }
        assert issuer.platforms == ["cursor", "vscode"]
        for tag in ("cursor", "vscode"):
            data = json.loads(_pending(layout, identity, tag).read_text())
            assert data["apiToken"] == f"tok-{tag}"
        assert report.pending_tokens["VSCode"] == _pending(layout, identity, "vscode")
        assert not _pending(layout, identity, "windsurf").exists()

    def test_rerun_is_idempotent(self, layout: HostLayout, identity: DeviceIdentity) -> None:
        """A second pass over an already-provisioned device succeeds."""
        install_standard(layout, WINDSURF)
        runner = FakeRunner(
            CommandResult(0, "successfully installed"),
            CommandResult(0, "already installed"),
        )
        orchestrator = _orchestrator(layout, identity, runner, _Issuer())
        orchestrator.run()
        report = orchestrator.run()
        assert report.installs == {"Windsurf": InstallOutcome.ALREADY_INSTALLED}

    def test_directory_404_aborts_before_editors(
        self, layout: HostLayout, identity: DeviceIdentity,
    ) -> None:
        """A failed directory lookup touches no editor and writes nothing."""
        install_standard(layout, CURSOR)
        directory = GraphDirectory(
            "graph-token",
            transport=httpx.MockTransport(lambda r: httpx.Response(404, text="Not Found")),
        )
        runner, issuer = FakeRunner(), _Issuer()
        orchestrator = _orchestrator(
            layout, identity, runner, issuer, email_lookup=directory.lookup_email,
        )
        with pytest.raises(NoEmailError) as excinfo:
            orchestrator.run()
        assert excinfo.value.status_code == 404
        assert runner.calls == []
        assert issuer.platforms == []
        assert not layout.config_root(identity.os_username).exists()

    def test_second_cli_missing_keeps_first_credential(
        self, layout: HostLayout, identity: DeviceIdentity,
    ) -> None:
        """Earlier editors stay provisioned when a later one fails; no rollback."""
        install_standard(layout, CURSOR)
        install_standard(layout, VSCODE, with_cli=False)
        runner = FakeRunner(CommandResult(0, "successfully installed"))
        issuer = _Issuer()

        with pytest.raises(CliMissingError) as excinfo:
            _orchestrator(layout, identity, runner, issuer).run()

        assert excinfo.value.editor == "VSCode"
        assert issuer.platforms == ["cursor"]
        assert json.loads(_pending(layout, identity, "cursor").read_text())["apiToken"] == "tok-cursor"
        assert not _pending(layout, identity, "vscode").exists()

    def test_install_failure_skips_issuance(
        self, layout: HostLayout, identity: DeviceIdentity,
    ) -> None:
        """An editor whose install fails never gets a token."""
        install_standard(layout, CURSOR)
        runner = FakeRunner(CommandResult(1, "Error: EACCES"))
        issuer = _Issuer()
        with pytest.raises(InstallFailedError):
            _orchestrator(layout, identity, runner, issuer).run()
        assert issuer.platforms == []


class TestBuildOrchestrator:
    """Construction from Settings."""

    def test_validates_first(self) -> None:
        """Invalid settings fail before any collaborator is built."""
        with pytest.raises(ConfigError):
            build_orchestrator(Settings(team_token="YOUR_TEAM_TOKEN_HERE"))

    def test_wires_settings(self, tmp_path) -> None:
        """Layout, extension id and API URL come from settings."""
        settings = Settings(
            team_token="team",
            identity_source="kandji",
            api_url="https://api.test/api",
            extension_id="acme.tool",
            applications_dir=str(tmp_path / "Apps"),
            home_root=str(tmp_path / "Homes"),
        )
        orchestrator = build_orchestrator(settings, runner=FakeRunner())
        assert orchestrator.detector.layout.applications_dir == tmp_path / "Apps"
        assert orchestrator.installer.extension_id == "acme.tool"
        assert orchestrator.provisioner.endpoint == (
            "https://api.test/api/extension-auth/mdm-sync-device"
        )
