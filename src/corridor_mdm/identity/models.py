"""Data model for the resolved device identity."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DeviceIdentity:
    """Who and what is being provisioned in this run.

    Immutable once resolved; a run never proceeds with a partial identity.

    Attributes:
        serial: Stable hardware serial number of the device.
        user_email: Email of the user the device is assigned to.
        os_username: Local account name of the interactive console session.
    """

    serial: str
    user_email: str
    os_username: str
