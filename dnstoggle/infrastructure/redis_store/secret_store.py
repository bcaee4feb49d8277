from __future__ import annotations

import logging
from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from dnstoggle.domain.errors import SecretStoreError
from dnstoggle.domain.ports.secret_store import SecretStorePort

logger = logging.getLogger(__name__)


class RedisSecretStore(SecretStorePort):
    """
    Secret vault on Redis. Values are stored as plain strings under
    `<prefix><key>`; protect the Redis instance accordingly.
    """

    def __init__(self, redis: Redis, *, key_prefix: str = "secret:") -> None:
        self._redis = redis
        self._prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._redis.get(self._key(key))
        except RedisError as e:
            logger.error("secret read failed", extra={"key": key, "error": str(e)})
            raise SecretStoreError(f"failed to read {key}: {e}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            await self._redis.set(self._key(key), value)
        except RedisError as e:
            raise SecretStoreError(f"failed to store {key}: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(self._key(key))
        except RedisError as e:
            raise SecretStoreError(f"failed to delete {key}: {e}") from e
