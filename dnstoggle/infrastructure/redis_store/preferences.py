from __future__ import annotations

import logging
from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from dnstoggle.domain.errors import SecretStoreError
from dnstoggle.domain.ports.preferences import PreferencesPort

logger = logging.getLogger(__name__)


class RedisPreferences(PreferencesPort):
    def __init__(self, redis: Redis, *, key: str = "prefs:selected_profile") -> None:
        self._redis = redis
        self._key = key

    async def get_selected_profile(self) -> Optional[tuple[str, str]]:
        try:
            stored = await self._redis.hgetall(self._key)
        except RedisError as e:
            logger.error("preferences read failed", extra={"error": str(e)})
            raise SecretStoreError(f"failed to read selected profile: {e}") from e
        if not stored or not stored.get("id"):
            return None
        return stored["id"], stored.get("name", "")

    async def set_selected_profile(self, profile_id: str, profile_name: str) -> None:
        pipe = self._redis.pipeline(transaction=True)
        pipe.delete(self._key)
        pipe.hset(self._key, mapping={"id": profile_id, "name": profile_name})
        try:
            await pipe.execute()
        except RedisError as e:
            raise SecretStoreError(f"failed to store selected profile: {e}") from e

    async def clear(self) -> None:
        try:
            await self._redis.delete(self._key)
        except RedisError as e:
            raise SecretStoreError(f"failed to clear selected profile: {e}") from e
