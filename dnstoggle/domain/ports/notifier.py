from __future__ import annotations

from typing import Protocol


class NotifierPort(Protocol):
    """
    Fire-and-forget user notifications. Callers treat any exception
    raised here as non-fatal.
    """

    async def profile_disabled(self, profile_name: str, duration_seconds: float) -> None:
        """A profile was disabled for `duration_seconds`."""

    async def profile_enabled(self, profile_name: str) -> None:
        """A profile was re-enabled by the user."""

    async def disable_expired(self, profile_name: str) -> None:
        """A disabled profile became active again on its own."""
