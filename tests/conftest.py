"""Shared fixtures for corridor_mdm tests.

Every test runs against a fake host rooted in ``tmp_path``: an
``Applications`` directory and a ``Users`` home root. The OS user is the
account running the tests, so ownership changes are no-ops.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from corridor_mdm.editors.registry import HostLayout
from corridor_mdm.identity.models import DeviceIdentity

from tests.helpers import CURRENT_USER


@pytest.fixture
def layout(tmp_path: Path) -> HostLayout:
    """A host layout rooted in a temporary directory."""
    apps = tmp_path / "Applications"
    homes = tmp_path / "Users"
    apps.mkdir()
    (homes / CURRENT_USER).mkdir(parents=True)
    return HostLayout(applications_dir=apps, home_root=homes)


@pytest.fixture
def identity() -> DeviceIdentity:
    """Identity of the user running the tests."""
    return DeviceIdentity(
        serial="C02XK0AAJG5H",
        user_email="alice@example.com",
        os_username=CURRENT_USER,
    )
