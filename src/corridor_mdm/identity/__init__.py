"""Device identity resolution.

Public API::

    from corridor_mdm.identity import DeviceIdentity, resolver_for

    identity = resolver_for(settings).resolve()
    print(identity.serial, identity.os_username, identity.user_email)
"""

from __future__ import annotations

from corridor_mdm.identity.directory import GraphDirectory
from corridor_mdm.identity.kandji import KandjiVariables
from corridor_mdm.identity.models import DeviceIdentity
from corridor_mdm.identity.resolver import IdentityResolver, resolver_for

__all__ = [
    "DeviceIdentity",
    "GraphDirectory",
    "IdentityResolver",
    "KandjiVariables",
    "resolver_for",
]
