"""Microsoft Graph directory lookup: device serial -> user email.

Intune exposes no reliable on-device record of the assigned user's email,
so it is fetched from the managed devices collection, filtered by serial:

    GET /v1.0/deviceManagement/managedDevices
        ?$filter=serialNumber eq '<serial>'
        &$select=id,deviceName,serialNumber,userPrincipalName

The first record's ``userPrincipalName`` is the email. Requires a token
with ``DeviceManagementManagedDevices.Read.All``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from corridor_mdm.exceptions import NoEmailError
from corridor_mdm.http_client import DEFAULT_TIMEOUT, body_text, build_client

logger = logging.getLogger(__name__)

GRAPH_MANAGED_DEVICES_URL: str = (
    "https://graph.microsoft.com/v1.0/deviceManagement/managedDevices"
)
SELECT_FIELDS: str = "id,deviceName,serialNumber,userPrincipalName"
EMAIL_FIELD: str = "userPrincipalName"


def _odata_quote(value: str) -> str:
    return value.replace("'", "''")


def _first_principal(payload: Any) -> str:
    records = payload.get("value") if isinstance(payload, dict) else None
    if not isinstance(records, list) or not records:
        return ""
    first = records[0]
    if not isinstance(first, dict):
        return ""
    email = first.get(EMAIL_FIELD)
    return email.strip() if isinstance(email, str) else ""


class GraphDirectory:
    """Looks up the assigned user's email for a device serial.

    Usage::

        directory = GraphDirectory(token)
        email = directory.lookup_email("C02XK0AAJG5H")
    """

    def __init__(
        self,
        token: str,
        *,
        url: str = GRAPH_MANAGED_DEVICES_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.token = token
        self.url = url
        self.timeout = timeout
        self._transport = transport

    def lookup_email(self, serial: str) -> str:
        """Return the user principal name of the device with ``serial``.

        Raises:
            NoEmailError: On transport failure, non-200 status, unparseable
                body, or when no matching record carries an email. The
                status code and raw body are attached when available.
        """
        logger.info("Querying Microsoft Graph API for device serial: %s", serial)
        params = {
            "$filter": f"serialNumber eq '{_odata_quote(serial)}'",
            "$select": SELECT_FIELDS,
        }
        try:
            with build_client(
                bearer_token=self.token,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = client.get(self.url, params=params)
        except httpx.HTTPError as exc:
            raise NoEmailError(
                f"Graph API request failed: {exc}"
            ) from exc

        body = body_text(response)
        if response.status_code != 200:
            raise NoEmailError(
                f"Graph API request failed with HTTP {response.status_code}. "
                f"Response: {body}",
                status_code=response.status_code,
                body=body,
            )

        try:
            payload = response.json()
        except ValueError:
            payload = None
        email = _first_principal(payload)
        if not email:
            raise NoEmailError(
                "Could not retrieve user email from Microsoft Graph API. "
                "Ensure the device is enrolled in Intune and GRAPH_API_TOKEN "
                f"is valid. Response: {body}",
                status_code=response.status_code,
                body=body,
            )
        return email
