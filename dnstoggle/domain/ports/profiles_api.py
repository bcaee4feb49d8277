from __future__ import annotations

from typing import Protocol

from dnstoggle.domain.entities import Profile


class ProfilesApiPort(Protocol):
    async def list_profiles(self, credential: str) -> list[Profile]:
        """GET /profiles. One network call, no retries."""

    async def set_disable_until(
        self, credential: str, profile_id: str, disable_ttl: int
    ) -> str | None:
        """
        PUT /profiles/{id} with {"disable_ttl": disable_ttl}.
        0 re-enables. Returns the server message, if any.
        """
