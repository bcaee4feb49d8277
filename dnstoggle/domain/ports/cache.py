from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, Protocol


class ResponseCachePort(Protocol):
    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[Any]],
        ttl: Optional[float] = None,
    ) -> Any:
        """Fresh cached value for `key`, or the result of `loader()` (then cached)."""

    def remove(self, key: str) -> None:
        """Drop `key` unconditionally."""

    def remove_matching(self, fragment: str) -> int:
        """Drop every key containing `fragment`."""
