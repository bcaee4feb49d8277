from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from dnstoggle.domain.ports.notifier import NotifierPort
from dnstoggle.domain.services import format_duration

logger = logging.getLogger(__name__)


class HttpWebhookNotifier(NotifierPort):
    """POSTs one small JSON document per event to a webhook URL."""

    def __init__(
        self,
        url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
    ) -> None:
        self._url = url
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=timeout)

    async def _post(self, event: str, profile_name: str, **extra: Any) -> None:
        payload = {
            "event": event,
            "profile": profile_name,
            "at": datetime.now(timezone.utc).isoformat(),
            **extra,
        }
        try:
            resp = await self._client.post(self._url, json=payload)
            if not (200 <= resp.status_code < 300):
                text = resp.text[:200]
                raise RuntimeError(f"webhook responded {resp.status_code}: {text}")
        except httpx.HTTPError as e:
            raise RuntimeError(f"webhook HTTP error: {e}") from e

    async def profile_disabled(self, profile_name: str, duration_seconds: float) -> None:
        await self._post(
            "profile_disabled",
            profile_name,
            duration_seconds=int(duration_seconds),
            text=f"{profile_name} disabled for {format_duration(duration_seconds)}",
        )

    async def profile_enabled(self, profile_name: str) -> None:
        await self._post("profile_enabled", profile_name, text=f"{profile_name} enabled")

    async def disable_expired(self, profile_name: str) -> None:
        await self._post(
            "disable_expired",
            profile_name,
            text=f"{profile_name} is active again",
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class LoggingNotifier(NotifierPort):
    """Used when no webhook is configured."""

    async def profile_disabled(self, profile_name: str, duration_seconds: float) -> None:
        logger.info(
            "profile disabled",
            extra={"profile": profile_name, "duration": format_duration(duration_seconds)},
        )

    async def profile_enabled(self, profile_name: str) -> None:
        logger.info("profile enabled", extra={"profile": profile_name})

    async def disable_expired(self, profile_name: str) -> None:
        logger.info("profile disable expired", extra={"profile": profile_name})

    async def aclose(self) -> None:
        return None
