from __future__ import annotations

from typing import Protocol


class PreferencesPort(Protocol):
    async def get_selected_profile(self) -> tuple[str, str] | None:
        """Return (profile_id, profile_name) of the last selection, if any."""

    async def set_selected_profile(self, profile_id: str, profile_name: str) -> None:
        """Remember the selected profile."""

    async def clear(self) -> None:
        """Forget all stored preferences."""
