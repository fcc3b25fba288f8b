"""Operator configuration for a provisioning pass.

Settings are layered, lowest precedence first:

    1. Built-in defaults (``Settings`` field defaults).
    2. An optional YAML file (``--config PATH``) holding a flat mapping.
    3. Environment variables (see ``ENV_VARS``).
    4. Explicit overrides, usually CLI options.

``Settings.validate()`` must pass before any identity lookup, filesystem
probe, or network call is made. It rejects the placeholder values shipped
in the MDM script templates so that an unedited deployment fails loudly
instead of calling the issuance endpoint with a dummy token.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from corridor_mdm.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_API_URL: str = "https://app.corridor.dev/api"
DEFAULT_EXTENSION_ID: str = "corridor.Corridor"
DEFAULT_KANDJI_PLIST: str = (
    "/Library/Managed Preferences/io.kandji.globalvariables.plist"
)

IDENTITY_SOURCES: tuple[str, ...] = ("intune", "kandji")

# Values shipped in the script templates; treated the same as "unset".
TEAM_TOKEN_PLACEHOLDERS: frozenset[str] = frozenset({
    "YOUR_TEAM_TOKEN_HERE",
    "cor-team_...",
})
GRAPH_TOKEN_PLACEHOLDERS: frozenset[str] = frozenset({
    "YOUR_GRAPH_API_TOKEN_HERE",
})

# Environment variable -> Settings field.
ENV_VARS: dict[str, str] = {
    "CORRIDOR_TEAM_TOKEN": "team_token",
    "GRAPH_API_TOKEN": "graph_token",
    "CORRIDOR_API_URL": "api_url",
    "CORRIDOR_IDENTITY_SOURCE": "identity_source",
}


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for one provisioning pass.

    Attributes:
        team_token: Team-scoped bearer credential for token issuance.
        graph_token: Microsoft Graph bearer token (``intune`` source only).
        identity_source: Where serial and email come from: ``intune`` or
            ``kandji``.
        api_url: Base URL of the Corridor API.
        extension_id: Marketplace identifier of the extension to install.
        http_timeout: Timeout in seconds for every HTTP request.
        command_timeout: Timeout in seconds for each editor CLI invocation.
        applications_dir: System-wide application install root.
        home_root: Parent directory of user home directories.
        kandji_plist: Path to the Kandji global variables plist.
    """

    team_token: str = ""
    graph_token: str = ""
    identity_source: str = "intune"
    api_url: str = DEFAULT_API_URL
    extension_id: str = DEFAULT_EXTENSION_ID
    http_timeout: float = 30.0
    command_timeout: float = 300.0
    applications_dir: str = "/Applications"
    home_root: str = "/Users"
    kandji_plist: str = DEFAULT_KANDJI_PLIST

    def validate(self) -> None:
        """Check that required credentials are present and not placeholders.

        Raises:
            ConfigError: On the first invalid setting found.
        """
        if not self.team_token or self.team_token in TEAM_TOKEN_PLACEHOLDERS:
            raise ConfigError(
                "CORRIDOR_TEAM_TOKEN is not configured. Please set your team token."
            )
        if self.identity_source not in IDENTITY_SOURCES:
            raise ConfigError(
                f"Unknown identity source {self.identity_source!r} "
                f"(expected one of: {', '.join(IDENTITY_SOURCES)})"
            )
        if self.identity_source == "intune" and (
            not self.graph_token or self.graph_token in GRAPH_TOKEN_PLACEHOLDERS
        ):
            raise ConfigError(
                "GRAPH_API_TOKEN is not configured. "
                "Please set your Microsoft Graph API token."
            )
        if self.http_timeout <= 0 or self.command_timeout <= 0:
            raise ConfigError("Timeouts must be positive numbers of seconds")


def _field_names() -> set[str]:
    return {f.name for f in fields(Settings)}


def read_config_file(path: Path) -> dict[str, Any]:
    """Load a YAML configuration file into a dict of Settings fields.

    Args:
        path: Path to the YAML file.

    Returns:
        Mapping of field name to value. An empty file yields ``{}``.

    Raises:
        ConfigError: If the file is unreadable, not a mapping, or contains
            keys that are not Settings fields.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    unknown = sorted(set(data) - _field_names())
    if unknown:
        raise ConfigError(
            f"Unknown setting(s) in {path}: {', '.join(map(str, unknown))}"
        )
    return data


def _from_environ(environ: Mapping[str, str]) -> dict[str, str]:
    values: dict[str, str] = {}
    for var, name in ENV_VARS.items():
        value = environ.get(var)
        if value:
            values[name] = value
    return values


def _coerce(values: dict[str, Any]) -> dict[str, Any]:
    """Coerce YAML/env values to the types Settings expects."""
    out: dict[str, Any] = {}
    for name, value in values.items():
        if name in ("http_timeout", "command_timeout"):
            try:
                out[name] = float(value)
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"{name} must be a number, got {value!r}") from exc
        else:
            out[name] = "" if value is None else str(value)
    return out


def load_settings(
    config_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Build Settings from defaults, config file, environment and overrides.

    Overrides whose value is ``None`` are ignored, so unset CLI options do
    not mask lower layers.

    Args:
        config_path: Optional YAML config file.
        environ: Environment mapping (defaults to ``os.environ``).
        overrides: Highest-precedence values.

    Returns:
        The merged, unvalidated Settings.
    """
    env = os.environ if environ is None else environ
    merged: dict[str, Any] = {}
    if config_path is not None:
        merged.update(read_config_file(config_path))
        logger.debug("Loaded settings from %s", config_path)
    merged.update(_from_environ(env))
    if overrides:
        merged.update({k: v for k, v in overrides.items() if v is not None})
    return replace(Settings(), **_coerce(merged))
