from __future__ import annotations

from redis.asyncio import Redis

from bookswap.persistence.roster_repository import KeyValueRosterRepository


class RedisRosterRepository(KeyValueRosterRepository):
    """Whole roster serialized as JSON under a single key, like browser localStorage."""

    def __init__(self, redis: Redis, key: str = "gift-exchange-participants"):
        self._redis = redis
        self._key = key

    async def _read_raw(self) -> str | None:
        raw = await self._redis.get(self._key)
        # redis returns bytes unless the client decodes responses
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode()
        return raw

    async def _write_raw(self, payload: str) -> None:
        await self._redis.set(self._key, payload)

    async def clear(self) -> None:
        await self._redis.delete(self._key)
