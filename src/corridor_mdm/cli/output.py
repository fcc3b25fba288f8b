"""Rich output formatting helpers for the Corridor MDM CLI.

Logging carries the operational record of a pass (it is what the MDM
console captures); these helpers only render the human-facing summaries.
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

from corridor_mdm.provisioning.installer import InstallOutcome
from corridor_mdm.provisioning.orchestrator import ProvisioningReport

_OUTCOME_STYLES: dict[InstallOutcome, str] = {
    InstallOutcome.INSTALLED: "bold green",
    InstallOutcome.ALREADY_INSTALLED: "green",
    InstallOutcome.FOUND_ON_DISK: "cyan",
    InstallOutcome.FAILED: "bold red",
}

console = Console()


def outcome_style(outcome: InstallOutcome) -> str:
    """Return the Rich style string for an install outcome."""
    return _OUTCOME_STYLES.get(outcome, "white")


def print_editor_table(rows: list[dict[str, Any]], username: str) -> None:
    """Print the editor registry with per-editor detection status.

    Args:
        rows: Dicts produced by ``editors_command`` (one per descriptor).
        username: The user the alternative locations were resolved for.
    """
    table = Table(
        title=f"Supported Editors (user: {username})",
        show_header=True,
        header_style="bold",
    )
    table.add_column("Editor", style="bold")
    table.add_column("Platform", style="dim")
    table.add_column("Status", justify="center")
    table.add_column("Location")
    table.add_column("CLI")

    for row in rows:
        if row["found_at"] is None:
            status = Text("absent", style="dim")
        else:
            status = Text(row["found_at"], style="green")
        table.add_row(
            row["editor"], row["platform"], status,
            row["install_path"] or "-", row["cli_path"] or "-",
        )
    console.print(table)


def print_report(report: ProvisioningReport) -> None:
    """Print a summary of a completed provisioning pass."""
    if report.nothing_to_do:
        console.print("[dim]No supported editors installed; nothing to do.[/dim]")
        return

    table = Table(title="Corridor Provisioning", show_header=True, header_style="bold")
    table.add_column("Editor", style="bold")
    table.add_column("Extension", justify="center")
    table.add_column("Pending Token")
    for editor in report.detected:
        outcome = report.installs.get(editor.name, InstallOutcome.FAILED)
        table.add_row(
            editor.name,
            Text(outcome.value, style=outcome_style(outcome)),
            str(report.pending_tokens.get(editor.name, "-")),
        )
    console.print(table)
