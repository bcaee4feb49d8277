from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from dnstoggle.domain.entities import Profile
from dnstoggle.domain.errors import (
    DecodingError,
    InvalidCredential,
    NetworkError,
    NotFound,
    RateLimited,
    ServerError,
    Unauthorized,
)
from dnstoggle.domain.ports.profiles_api import ProfilesApiPort
from dnstoggle.domain.services import redact
from dnstoggle.schemas.upstream import ProfilesResponse, ProfileUpdateResponse

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
)


@dataclass(frozen=True)
class Endpoint:
    path: str
    method: str = "GET"
    body: Optional[dict[str, Any]] = None

    @classmethod
    def list_profiles(cls) -> "Endpoint":
        return cls(path="/profiles")

    @classmethod
    def update_profile(cls, profile_id: str, disable_ttl: int) -> "Endpoint":
        return cls(
            path=f"/profiles/{profile_id}",
            method="PUT",
            body={"disable_ttl": disable_ttl},
        )


def parse_retry_after(value: str | None) -> float | None:
    """Retry-After is either delta-seconds or an HTTP date."""
    if not value:
        return None
    value = value.strip()
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


def classify_transport_error(exc: Exception) -> NetworkError:
    if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError)):
        return NetworkError(NetworkError.TIMEOUT, type(exc).__name__)
    if isinstance(exc, httpx.ConnectError):
        text = str(exc).lower()
        if any(marker in text for marker in _DNS_MARKERS):
            return NetworkError(NetworkError.DNS_FAILURE, str(exc))
        return NetworkError(NetworkError.UNAVAILABLE, str(exc))
    if isinstance(exc, (httpx.RemoteProtocolError, httpx.ReadError, httpx.WriteError)):
        return NetworkError(NetworkError.CONNECTION_LOST, str(exc))
    return NetworkError(NetworkError.UNAVAILABLE, str(exc))


class ControlDApiClient:
    """
    One HTTP exchange per call against the ControlD REST API.

    Status mapping: 2xx -> decoded model, 401 -> Unauthorized,
    404 -> NotFound, 429 -> RateLimited, anything else -> ServerError.
    Transport failures become NetworkError. Retries are not done here.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        request_timeout: float = 30.0,
        resource_timeout: float = 60.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._resource_timeout = resource_timeout
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(
            timeout=request_timeout
        )

    async def request(
        self,
        endpoint: Endpoint,
        credential: str,
        response_model: Optional[Type[M]] = None,
    ) -> Optional[M]:
        if not credential or not credential.strip():
            raise InvalidCredential("API key is empty")

        url = f"{self._base_url}{endpoint.path}"
        headers = {
            "Authorization": f"Bearer {credential}",
            "Content-Type": "application/json",
        }

        started = time.perf_counter()
        try:
            resp = await asyncio.wait_for(
                self._client.request(
                    endpoint.method, url, json=endpoint.body, headers=headers
                ),
                timeout=self._resource_timeout,
            )
        except (httpx.HTTPError, asyncio.TimeoutError) as e:
            err = classify_transport_error(e)
            logger.warning(
                "upstream request failed",
                extra={
                    "method": endpoint.method,
                    "path": endpoint.path,
                    "kind": err.kind,
                    "token": redact(credential),
                },
            )
            raise err from e

        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        logger.debug(
            "upstream response",
            extra={
                "method": endpoint.method,
                "path": endpoint.path,
                "status": resp.status_code,
                "duration_ms": duration_ms,
            },
        )

        status = resp.status_code
        if status == 401:
            raise Unauthorized()
        if status == 404:
            raise NotFound(endpoint.path)
        if status == 429:
            raise RateLimited(parse_retry_after(resp.headers.get("Retry-After")))
        if not (200 <= status < 300):
            raise ServerError(status, resp.text[:500])

        if response_model is None:
            return None
        try:
            return response_model.model_validate_json(resp.content)
        except ValidationError as e:
            logger.error(
                "response did not match schema",
                extra={"path": endpoint.path, "errors": e.error_count()},
            )
            raise DecodingError(str(e).splitlines()[0]) from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class ControlDProfilesApi(ProfilesApiPort):
    def __init__(self, client: ControlDApiClient) -> None:
        self._client = client

    async def list_profiles(self, credential: str) -> list[Profile]:
        resp = await self._client.request(
            Endpoint.list_profiles(), credential, ProfilesResponse
        )
        if not resp.success:
            raise ServerError(200, "profiles request reported success=false")
        profiles = [p.to_entity() for p in resp.body.profiles]
        logger.info("fetched profiles", extra={"count": len(profiles)})
        return profiles

    async def set_disable_until(
        self, credential: str, profile_id: str, disable_ttl: int
    ) -> str | None:
        resp = await self._client.request(
            Endpoint.update_profile(profile_id, disable_ttl),
            credential,
            ProfileUpdateResponse,
        )
        if not resp.success:
            raise ServerError(200, resp.server_message or "update reported success=false")
        return resp.server_message
