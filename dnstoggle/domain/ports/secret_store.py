from __future__ import annotations

from typing import Protocol


class SecretStorePort(Protocol):
    async def get(self, key: str) -> str | None:
        """Return the stored secret or None if absent."""

    async def set(self, key: str, value: str) -> None:
        """Store/replace the secret. Raises SecretStoreError on backend failure."""

    async def delete(self, key: str) -> None:
        """Remove the secret. Deleting a missing key is not an error."""
