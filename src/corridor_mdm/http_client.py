"""Shared blocking HTTP client utilities.

Provides a thin wrapper around ``httpx.Client`` with standardised
timeouts and user-agent headers. The directory lookup and the token
provisioner both build their clients here so that HTTP behaviour is
consistent, and so tests can inject an ``httpx.MockTransport``.
"""

from __future__ import annotations

import httpx

from corridor_mdm import __version__

# Timeout for all HTTP requests (seconds).
DEFAULT_TIMEOUT: float = 30.0

# User-Agent sent with every request.
USER_AGENT: str = f"Corridor-MDM/{__version__}"


def build_client(
    *,
    bearer_token: str,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create an ``httpx.Client`` authenticated with a bearer token.

    Args:
        bearer_token: Credential sent as ``Authorization: Bearer <token>``.
        timeout: Request timeout in seconds.
        transport: Optional transport override (tests use MockTransport).

    Returns:
        A configured client. Callers own it and must close it.
    """
    return httpx.Client(
        timeout=timeout,
        headers={
            "User-Agent": USER_AGENT,
            "Authorization": f"Bearer {bearer_token}",
            "Content-Type": "application/json",
        },
        follow_redirects=False,
        transport=transport,
    )


def body_text(response: httpx.Response) -> str:
    """Return the response body as text, never raising on decode errors."""
    try:
        return response.text
    except (UnicodeDecodeError, LookupError):
        return response.content.decode("utf-8", errors="replace")
