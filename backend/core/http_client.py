"""Shared async HTTP client for GitHub and GitLab calls.

Auth headers are passed per request, so one pooled client serves both hosts.
The getter is a coroutine so FastAPI runs it on the event loop; nothing is
awaited between the check and the assignment, so concurrent requests on a
cold start share one client.
"""

import logging

import httpx
from fastapi import Depends

from backend.settings import get_settings
from backend.settings import Settings


logger = logging.getLogger(__name__)

_client: httpx.AsyncClient | None = None


async def get_http_client(
    settings: Settings = Depends(get_settings),
) -> httpx.AsyncClient:
    """Get or create the shared HTTP client."""

    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.http_timeout_seconds, connect=5.0),
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        )
        logger.debug("Created shared HTTP client")
    return _client


async def close_http_client() -> None:
    """Close the shared HTTP client on app shutdown."""

    global _client
    if _client is not None and not _client.is_closed:
        await _client.aclose()
        logger.debug("Closed shared HTTP client")
    _client = None
