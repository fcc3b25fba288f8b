"""Corridor MDM: provision the Corridor editor extension and API tokens on managed devices."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Sent as the platform-independent product marker in User-Agent headers.
_PRODUCT_ID = "corridor-mdm"
