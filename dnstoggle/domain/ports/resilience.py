from __future__ import annotations

from typing import Awaitable, Callable, Protocol, TypeVar

T = TypeVar("T")


class RetryPort(Protocol):
    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run `operation`, retrying transient failures."""
