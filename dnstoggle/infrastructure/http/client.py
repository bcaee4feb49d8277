from __future__ import annotations

from typing import Optional
import httpx

from dnstoggle.settings import get_settings

_client: Optional[httpx.AsyncClient] = None


def build_timeout(request_timeout: float) -> httpx.Timeout:
    return httpx.Timeout(request_timeout)


async def open_http_client(timeout: float | None = None) -> httpx.AsyncClient:
    """Create a single shared AsyncClient (if not already created)."""
    global _client
    if _client is None:
        if timeout is None:
            timeout = get_settings().request_timeout_seconds
        _client = httpx.AsyncClient(
            timeout=build_timeout(timeout),
            headers={"Accept": "application/json"},
        )
    return _client


def get_http_client() -> httpx.AsyncClient:
    """Return the shared client. Must have been opened at startup."""
    if _client is None:
        raise RuntimeError(
            "HTTP client not opened yet. Call open_http_client() at startup."
        )
    return _client


async def close_http_client() -> None:
    """Close and drop the shared client."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
