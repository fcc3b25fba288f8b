"""Identity Resolver: serial, console user and email for this device.

The three fields are resolved independently, in the order serial, user,
email, and the first one that cannot be resolved aborts the run. Where
each value comes from depends on the MDM flavour:

========  ==========================  ===============================
Source    Serial                      Email
========  ==========================  ===============================
intune    ioreg / system_profiler     Microsoft Graph managed devices
kandji    Kandji global variables     Kandji global variables
========  ==========================  ===============================

The console user always comes from the local session (``system.py``).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from corridor_mdm.config import Settings
from corridor_mdm.exceptions import ConfigError, NoEmailError, NoSerialError, NoUserError
from corridor_mdm.identity.directory import GraphDirectory
from corridor_mdm.identity.kandji import KandjiVariables
from corridor_mdm.identity.models import DeviceIdentity
from corridor_mdm.identity.system import read_console_user, read_hardware_serial

logger = logging.getLogger(__name__)

Probe = Callable[[], str]
EmailLookup = Callable[[str], str]


class IdentityResolver:
    """Combines one serial probe, one user probe and one email lookup.

    Each collaborator is a plain callable so that sources can be mixed and
    replaced in tests. ``email_lookup`` receives the resolved serial.
    """

    def __init__(
        self,
        serial_probe: Probe,
        user_probe: Probe,
        email_lookup: EmailLookup,
    ) -> None:
        self.serial_probe = serial_probe
        self.user_probe = user_probe
        self.email_lookup = email_lookup

    def resolve(self) -> DeviceIdentity:
        """Resolve the full identity.

        Raises:
            NoSerialError: No serial number could be read.
            NoUserError: No interactive user could be determined.
            NoEmailError: No email could be obtained.
        """
        serial = self.serial_probe().strip()
        if not serial:
            raise NoSerialError("Could not retrieve device serial number")
        logger.info("Device Serial: %s", serial)

        user = self.user_probe().strip()
        if not user:
            raise NoUserError("Could not retrieve logged-in username")
        logger.info("Current User: %s", user)

        email = self.email_lookup(serial).strip()
        if not email:
            raise NoEmailError("Could not retrieve user email")
        logger.info("User Email: %s", email)

        return DeviceIdentity(serial=serial, user_email=email, os_username=user)


def resolver_for(settings: Settings) -> IdentityResolver:
    """Build the resolver for ``settings.identity_source``.

    Raises:
        ConfigError: If the identity source is unknown.
    """
    if settings.identity_source == "intune":
        directory = GraphDirectory(settings.graph_token, timeout=settings.http_timeout)
        return IdentityResolver(
            serial_probe=read_hardware_serial,
            user_probe=read_console_user,
            email_lookup=directory.lookup_email,
        )
    if settings.identity_source == "kandji":
        variables = KandjiVariables(Path(settings.kandji_plist))
        return IdentityResolver(
            serial_probe=variables.serial,
            user_probe=read_console_user,
            email_lookup=lambda _serial: variables.email(),
        )
    raise ConfigError(f"Unknown identity source {settings.identity_source!r}")
