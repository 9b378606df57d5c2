"""State stores for pending authorizations.

A pending authorization maps the opaque ``state`` sent to Spotify back to
the redirect URI of the application that called /login. Entries expire on
their own; reads never delete, so a repeated callback with the same state
sees the same value until the TTL runs out.

Two backends:
- InMemoryStateStore: single-process dict, fine for one worker
- RedisStateStore: shared across workers/instances via REDIS_URL
"""

import logging
import time
from typing import Callable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from oauth_proxy.errors import StateStoreError

logger = logging.getLogger(__name__)

# Pending authorizations live for 5 minutes
STATE_TTL_SECONDS = 300


class StateStore:
    """Async key/value store with per-key expiry."""

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        raise NotImplementedError

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def close(self) -> None:
        pass


class InMemoryStateStore(StateStore):
    """Dict-backed store. Expired entries are evicted lazily."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self._evict_expired()
        self._entries[key] = (value, self._clock() + ttl_seconds)

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def _evict_expired(self) -> None:
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]


class RedisStateStore(StateStore):
    """Redis-backed store using SET ... EX for expiry."""

    def __init__(self, client: "redis.Redis", key_prefix: str = "oauth-proxy:state:"):
        self._client = client
        self._key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "oauth-proxy:state:") -> "RedisStateStore":
        client = redis.from_url(url, decode_responses=True)
        return cls(client, key_prefix=key_prefix)

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._client.set(self._key(key), value, ex=ttl_seconds)
        except RedisError as e:
            raise StateStoreError(f"Failed to write state: {e}") from e

    async def get(self, key: str) -> Optional[str]:
        try:
            value = await self._client.get(self._key(key))
        except RedisError as e:
            raise StateStoreError(f"Failed to read state: {e}") from e

        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def close(self) -> None:
        await self._client.aclose()


def build_state_store(config) -> StateStore:
    """Pick the Redis store when REDIS_URL is configured, else in-memory."""
    if config.redis_url:
        logger.info("[STATE] Using Redis state store")
        return RedisStateStore.from_url(config.redis_url, key_prefix=config.state_key_prefix)

    logger.info("[STATE] Using in-memory state store (single process only)")
    return InMemoryStateStore()
