"""Shared test helpers for creating fake editor installations.

Each helper creates a minimal app bundle layout: the ``.app`` directory
and, optionally, the bundled CLI under ``Contents/Resources/app/bin``.
"""

from __future__ import annotations

import stat
from pathlib import Path

from corridor_mdm.editors.registry import EditorDescriptor, HostLayout


def create_bundle(root: Path, descriptor: EditorDescriptor, *, with_cli: bool = True) -> Path:
    """Create ``<root>/<App>.app`` and return its path."""
    bundle = root / descriptor.app_bundle
    bundle.mkdir(parents=True, exist_ok=True)
    if with_cli:
        cli = descriptor.cli_path(bundle)
        cli.parent.mkdir(parents=True, exist_ok=True)
        cli.write_text("#!/bin/sh\nexit 0\n")
        cli.chmod(cli.stat().st_mode | stat.S_IXUSR)
    return bundle


def install_standard(
    layout: HostLayout, descriptor: EditorDescriptor, *, with_cli: bool = True,
) -> Path:
    """Install an editor under the Applications directory."""
    return create_bundle(layout.applications_dir, descriptor, with_cli=with_cli)


def install_alternative(
    layout: HostLayout, descriptor: EditorDescriptor, username: str,
    *, with_cli: bool = True,
) -> Path:
    """Install an editor under the user's Downloads directory."""
    return create_bundle(layout.downloads(username), descriptor, with_cli=with_cli)


def create_extension_dir(
    layout: HostLayout, descriptor: EditorDescriptor, username: str, entry: str,
) -> Path:
    """Create an installed-extension entry in the user's extensions dir."""
    ext = descriptor.extension_dir_path(layout, username) / entry
    ext.mkdir(parents=True, exist_ok=True)
    return ext
