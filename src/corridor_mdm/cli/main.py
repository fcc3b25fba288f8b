"""Corridor MDM CLI — provision editors on MDM-managed devices.

Entry point for the ``corridor-mdm`` command-line tool. Registers all
subcommands under a single Click group and configures logging once for
the whole process.

Commands:
    provision — Install the extension and stage API tokens (one pass).
    editors   — List supported editors and detect installations.

Usage::

    corridor-mdm provision                       # Intune, env credentials
    corridor-mdm provision --source kandji
    corridor-mdm -v provision --config corridor.yaml
    corridor-mdm editors --user alice --format json
"""

from __future__ import annotations

import logging
import sys

import click

from corridor_mdm import __version__
from corridor_mdm.cli.editors_cmd import editors_command
from corridor_mdm.cli.provision_cmd import provision_command

LOG_FORMAT: str = "[Corridor MDM] %(levelname)s: %(message)s"


def configure_logging(verbose: int, quiet: bool) -> int:
    """Configure the root logger on stderr and return the chosen level."""
    if quiet:
        level = logging.WARNING
    elif verbose > 0:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)
    # httpx logs every request at INFO; keep it for -v only.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose > 1 else logging.WARNING)
    return level


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity.")
@click.option("-q", "--quiet", is_flag=True, help="Only log warnings and errors.")
def cli(verbose: int, quiet: bool) -> None:
    """Corridor MDM: provision the Corridor extension on managed devices.

    Detects Cursor, VS Code and Windsurf, installs the Corridor extension
    into each, and stages a per-editor API token for the logged-in user.
    """
    configure_logging(verbose, quiet)


# Register all subcommands
cli.add_command(provision_command)
cli.add_command(editors_command)
