"""Provenance helpers for tool adapters."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import httpx

from backend.tripply.models.common import Citation


def citation_for_http(
    title: str,
    url: str,
    snippet: str | None = None,
    confidence: float = 1.0,
    timestamp: datetime | None = None,
) -> Citation:
    """Create a citation for an HTTP-backed tool result.

    Args:
        title: Human-readable source name (e.g., "Open-Meteo Weather API")
        url: Public URL of the source (never a request URL carrying a key)
        snippet: Short description of what was found
        confidence: Source confidence in [0, 1]
        timestamp: When the source content was published (defaults to now)

    Returns:
        Citation stamped with now(UTC) unless a timestamp is given
    """
    return Citation(
        url=url,
        title=title,
        snippet=snippet,
        timestamp=timestamp or datetime.now(UTC),
        confidence=confidence,
    )


@asynccontextmanager
async def http_client(
    client: httpx.AsyncClient | None, timeout: float = 10.0
) -> AsyncIterator[httpx.AsyncClient]:
    """Use the injected client, or open a short-lived one for this call."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=timeout) as owned:
        yield owned
