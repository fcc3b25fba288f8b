"""Token Provisioner: exchange device identity for per-editor API tokens.

Protocol::

    POST {api_url}/extension-auth/mdm-sync-device
    Authorization: Bearer <team token>
    {"deviceSerial": "...", "userEmail": "...", "platform": "<platform tag>"}

    200 {"apiToken": "...", "apiTokenId": "..."}

The issued token is staged in a pending-token file that the Corridor
extension migrates into secure storage on its next launch::

    ~/.corridor/<platform tag>/pending-token
    {"apiToken": "...", "apiTokenId": "..." | null, "provisionedAt": "...Z"}

The file is a handoff, not a vault: it is owned by and readable only by
the end user, and every write fully replaces the previous pending file.
"""

from __future__ import annotations

import json
import logging
import os
import pwd
import tempfile
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import httpx

from corridor_mdm.config import DEFAULT_API_URL
from corridor_mdm.editors.models import DetectedEditor
from corridor_mdm.editors.registry import MACOS_LAYOUT, HostLayout
from corridor_mdm.exceptions import (
    MalformedResponseError,
    ProvisionError,
    RejectedError,
    UnreachableError,
)
from corridor_mdm.http_client import DEFAULT_TIMEOUT, body_text, build_client
from corridor_mdm.identity.models import DeviceIdentity

logger = logging.getLogger(__name__)

SYNC_DEVICE_PATH: str = "/extension-auth/mdm-sync-device"
PENDING_TOKEN_FILENAME: str = "pending-token"
TIMESTAMP_FORMAT: str = "%Y-%m-%dT%H:%M:%SZ"

DIR_MODE: int = 0o700
FILE_MODE: int = 0o600


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProvisionedCredential:
    """An API token issued for one editor.

    Attributes:
        api_token: Opaque secret; never logged or shown in reprs.
        api_token_id: Optional correlation id from the issuance service.
        issued_at: UTC time the token was received.
        pending_path: Where the token was staged, once persisted.
    """

    api_token: str = field(repr=False)
    api_token_id: str | None
    issued_at: datetime
    pending_path: Path | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the pending-token file format."""
        return {
            "apiToken": self.api_token,
            "apiTokenId": self.api_token_id,
            "provisionedAt": self.issued_at.astimezone(timezone.utc).strftime(
                TIMESTAMP_FORMAT
            ),
        }


def parse_issuance_response(
    response: httpx.Response, editor: str, now: datetime,
) -> ProvisionedCredential:
    """Validate an issuance response and build the credential.

    Raises:
        RejectedError: Status is not 200.
        MalformedResponseError: 200 without a non-empty ``apiToken``.
    """
    body = body_text(response)
    if response.status_code != 200:
        raise RejectedError(
            f"Failed to provision user for {editor}. HTTP {response.status_code}. "
            f"Response body: {body}",
            editor=editor,
            status_code=response.status_code,
            body=body,
        )

    try:
        payload = response.json()
    except ValueError:
        payload = None
    token = payload.get("apiToken") if isinstance(payload, dict) else None
    if not isinstance(token, str) or not token:
        raise MalformedResponseError(
            f"Could not extract API token from response for {editor}. "
            f"Response body: {body}",
            editor=editor,
            body=body,
        )

    token_id = payload.get("apiTokenId")
    return ProvisionedCredential(
        api_token=token,
        api_token_id=str(token_id) if token_id not in (None, "") else None,
        issued_at=now,
    )


def _owner_uid(username: str) -> int:
    return pwd.getpwnam(username).pw_uid


def _chown_if_needed(path: Path, uid: int) -> None:
    if path.stat().st_uid != uid:
        os.chown(path, uid, -1)


def write_pending_token(
    path: Path, credential: ProvisionedCredential, owner_uid: int,
) -> None:
    """Atomically replace ``path`` with the credential, mode 0600.

    The parent directory must already exist.
    """
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(credential.to_dict(), fh, indent=2)
            fh.write("\n")
        os.chmod(tmp, FILE_MODE)
        _chown_if_needed(tmp, owner_uid)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


class TokenProvisioner:
    """Requests per-editor API tokens and stages them for the extension."""

    def __init__(
        self,
        team_token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        layout: HostLayout = MACOS_LAYOUT,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.team_token = team_token
        self.api_url = api_url.rstrip("/")
        self.layout = layout
        self.timeout = timeout
        self.clock = clock
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return self.api_url + SYNC_DEVICE_PATH

    def pending_token_path(
        self, editor: DetectedEditor, identity: DeviceIdentity,
    ) -> Path:
        config_root = self.layout.config_root(identity.os_username)
        return config_root / editor.descriptor.platform_tag / PENDING_TOKEN_FILENAME

    def request_token(
        self, editor: DetectedEditor, identity: DeviceIdentity,
    ) -> ProvisionedCredential:
        """Call the issuance endpoint for one editor (no persistence).

        Raises:
            UnreachableError: Connection failure or timeout.
            RejectedError: Non-200 response.
            MalformedResponseError: 200 without a usable token.
        """
        platform = editor.descriptor.platform_tag
        logger.info("Creating API token for %s (%s)...", editor.name, platform)
        payload = {
            "deviceSerial": identity.serial,
            "userEmail": identity.user_email,
            "platform": platform,
        }
        try:
            with build_client(
                bearer_token=self.team_token,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = client.post(self.endpoint, json=payload)
        except httpx.HTTPError as exc:
            raise UnreachableError(
                f"Failed to connect to Corridor API for {editor.name}: {exc}",
                editor=editor.name,
            ) from exc
        return parse_issuance_response(response, editor.name, self.clock())

    def persist(
        self,
        editor: DetectedEditor,
        identity: DeviceIdentity,
        credential: ProvisionedCredential,
    ) -> Path:
        """Write the pending-token file for ``editor``, owned by the user.

        Returns:
            Path of the written file.

        Raises:
            ProvisionError: The user is unknown or the file cannot be written.
        """
        path = self.pending_token_path(editor, identity)
        editor_dir = path.parent
        config_root = editor_dir.parent
        try:
            uid = _owner_uid(identity.os_username)
            config_root.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
            _chown_if_needed(config_root, uid)
            editor_dir.mkdir(mode=DIR_MODE, exist_ok=True)
            os.chmod(editor_dir, DIR_MODE)
            _chown_if_needed(editor_dir, uid)
            write_pending_token(path, credential, uid)
        except KeyError as exc:
            raise ProvisionError(
                f"Unknown user {identity.os_username!r}; cannot store token "
                f"for {editor.name}",
                editor=editor.name,
            ) from exc
        except OSError as exc:
            raise ProvisionError(
                f"Cannot write pending token for {editor.name} at {path}: {exc}",
                editor=editor.name,
            ) from exc
        logger.info("Pending token for %s stored in %s", editor.name, path)
        return path

    def provision(
        self, editor: DetectedEditor, identity: DeviceIdentity,
    ) -> ProvisionedCredential:
        """Request a token for ``editor`` and stage it in its pending file.

        Returns:
            The credential, with ``pending_path`` set to the written file.
        """
        credential = self.request_token(editor, identity)
        path = self.persist(editor, identity, credential)
        return replace(credential, pending_path=path)
