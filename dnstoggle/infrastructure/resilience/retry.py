from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, ClassVar, Optional, TypeVar

from dnstoggle.domain.errors import DomainError, RateLimited

logger = logging.getLogger(__name__)

T = TypeVar("T")

JITTER_FRACTION = 0.3


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0  # seconds
    max_delay: float = 30.0  # cap (seconds)
    multiplier: float = 2.0
    jitter: bool = True

    DEFAULT: ClassVar["RetryPolicy"]
    AGGRESSIVE: ClassVar["RetryPolicy"]
    CONSERVATIVE: ClassVar["RetryPolicy"]

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must be >= 0")

    @classmethod
    def from_name(cls, name: str) -> "RetryPolicy":
        presets = {
            "default": cls.DEFAULT,
            "aggressive": cls.AGGRESSIVE,
            "conservative": cls.CONSERVATIVE,
        }
        try:
            return presets[name.strip().lower()]
        except KeyError:
            raise ValueError(f"unknown retry preset: {name}") from None

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        # attempt is zero-based: the attempt that just failed
        if attempt >= self.max_attempts - 1:
            return False
        return isinstance(error, DomainError) and error.retryable

    def compute_delay(self, attempt: int, rng: Optional[random.Random] = None) -> float:
        delay = self.base_delay * (self.multiplier**attempt)
        delay = delay if delay < self.max_delay else self.max_delay
        if self.jitter:
            spread = delay * JITTER_FRACTION
            delay += (rng or random).uniform(-spread, spread)
        return max(0.0, delay)

    def delay_for(
        self, error: BaseException, attempt: int, rng: Optional[random.Random] = None
    ) -> float:
        if isinstance(error, RateLimited) and error.retry_after is not None:
            return max(0.0, error.retry_after)
        return self.compute_delay(attempt, rng)

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        on_retry: Optional[Callable[[int, BaseException, float], None]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ) -> T:
        """
        Run `operation` up to max_attempts times. Retryable DomainErrors are
        absorbed and retried after a backoff; anything else propagates on the
        first occurrence. When attempts run out the last error is raised.
        """
        attempt = 0
        while True:
            try:
                return await operation()
            except Exception as e:
                if not self.should_retry(e, attempt):
                    if isinstance(e, DomainError) and e.retryable:
                        logger.error(
                            "retries exhausted",
                            extra={"attempts": attempt + 1, "error": str(e)},
                        )
                    raise
                delay = self.delay_for(e, attempt, rng)
                logger.warning(
                    "retryable error; backing off",
                    extra={
                        "attempt": attempt + 1,
                        "max_attempts": self.max_attempts,
                        "error": type(e).__name__,
                        "retry_in_s": round(delay, 3),
                    },
                )
                if on_retry is not None:
                    on_retry(attempt + 1, e, delay)
                await sleep(delay)
                attempt += 1


RetryPolicy.DEFAULT = RetryPolicy(
    max_attempts=3, base_delay=1.0, max_delay=30.0, multiplier=2.0, jitter=True
)
RetryPolicy.AGGRESSIVE = RetryPolicy(
    max_attempts=5, base_delay=0.5, max_delay=60.0, multiplier=2.0, jitter=True
)
RetryPolicy.CONSERVATIVE = RetryPolicy(
    max_attempts=2, base_delay=2.0, max_delay=15.0, multiplier=1.5, jitter=False
)
