"""``corridor-mdm provision`` — Run one provisioning pass.

Exit Codes:
    0 — Provisioning succeeded, or no supported editor is installed.
    1 — Configuration, identity, installation or token issuance failed.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from corridor_mdm.config import IDENTITY_SOURCES, load_settings
from corridor_mdm.exceptions import CorridorMDMError, IdentityError
from corridor_mdm.provisioning.orchestrator import build_orchestrator

logger = logging.getLogger(__name__)


@click.command("provision")
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings file.",
)
@click.option(
    "--source", "identity_source",
    type=click.Choice(list(IDENTITY_SOURCES)),
    default=None,
    help="Identity source: intune (Graph lookup) or kandji (global variables).",
)
@click.option("--team-token", default=None, help="Corridor team token.")
@click.option("--graph-token", default=None, help="Microsoft Graph API token.")
@click.option("--api-url", default=None, help="Corridor API base URL.")
@click.option("--summary/--no-summary", default=False, help="Print a summary table.")
def provision_command(
    config_path: Path | None,
    identity_source: str | None,
    team_token: str | None,
    graph_token: str | None,
    api_url: str | None,
    summary: bool,
) -> None:
    """Install the Corridor extension and stage API tokens for each editor.

    Credentials may also come from CORRIDOR_TEAM_TOKEN and GRAPH_API_TOKEN.

    Examples:

        corridor-mdm provision --source kandji

        corridor-mdm provision --config /etc/corridor-mdm.yaml --summary
    """
    try:
        settings = load_settings(
            config_path,
            overrides={
                "identity_source": identity_source,
                "team_token": team_token,
                "graph_token": graph_token,
                "api_url": api_url,
            },
        )
        report = build_orchestrator(settings).run()
    except CorridorMDMError as exc:
        if isinstance(exc, IdentityError):
            logger.error("Identity resolution failed (%s): %s", exc.field, exc)
        else:
            logger.error("%s", exc)
        sys.exit(1)

    if summary:
        from corridor_mdm.cli.output import print_report
        print_report(report)

    if not report.nothing_to_do:
        logger.info("Corridor MDM provisioning complete!")
