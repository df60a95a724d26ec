"""Shared HTTP client with connection pooling for GitHub API calls."""

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0

_client: Optional[httpx.AsyncClient] = None


def get_http_client(timeout: float = DEFAULT_TIMEOUT_SECONDS) -> httpx.AsyncClient:
    """Return the process-wide AsyncClient, creating it on first use.

    ``timeout`` only applies when the client is created.
    """
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            follow_redirects=True,
        )
        logger.debug("Created shared HTTP client (timeout=%.1fs)", timeout)
    return _client


async def close_http_client() -> None:
    """Close the shared client; the next get_http_client() call recreates it."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
        logger.debug("Closed shared HTTP client")
