"""``corridor-mdm editors`` — Show supported editors and where they are installed."""

from __future__ import annotations

import getpass
import json
from pathlib import Path
from typing import Any

import click

from corridor_mdm.config import load_settings
from corridor_mdm.exceptions import ConfigError
from corridor_mdm.editors.detector import InstallationDetector
from corridor_mdm.editors.registry import HostLayout
from corridor_mdm.identity.system import read_console_user


def _editor_rows(detector: InstallationDetector, username: str) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for descriptor in detector.registry:
        found = detector.probe(descriptor, username)
        rows.append({
            "editor": descriptor.name,
            "platform": descriptor.platform_tag,
            "found_at": found.found_at.value if found else None,
            "install_path": str(found.install_path) if found else None,
            "cli_path": str(found.cli_path) if found else None,
        })
    return rows


@click.command("editors")
@click.option("--user", "username", default=None, help="OS user (default: console user).")
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings file (for applications_dir / home_root).",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def editors_command(
    username: str | None,
    config_path: Path | None,
    output_format: str,
) -> None:
    """List supported editors and detect which are installed.

    Credentials are not required; nothing is installed or provisioned.
    """
    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    layout = HostLayout(
        applications_dir=Path(settings.applications_dir),
        home_root=Path(settings.home_root),
    )
    user = username or read_console_user() or getpass.getuser()
    rows = _editor_rows(InstallationDetector(layout=layout), user)

    if output_format == "json":
        click.echo(json.dumps({"user": user, "editors": rows}, indent=2))
    else:
        from corridor_mdm.cli.output import print_editor_table
        print_editor_table(rows, user)
