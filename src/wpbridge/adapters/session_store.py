"""
Session store adapters - key/value storage with per-key expiry for auth sessions.

InMemorySessionStore is process-local (single worker only). RedisSessionStore
shares sessions across processes using REDIS_HOST / REDIS_PORT / REDIS_PASSWORD.
"""

import os
import time
from collections.abc import Callable
from typing import Protocol

from redis.asyncio import Redis

from wpbridge.utils.get_logger import get_logger

logger = get_logger(__name__)


class SessionStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    async def delete(self, key: str) -> None: ...


class InMemorySessionStore:
    """Dict-backed store. Expired keys are dropped when read."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._entries[key] = (value, self._clock() + ttl_seconds)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


_redis_client: Redis | None = None


def get_redis_client() -> Redis:
    """Shared redis client built from REDIS_HOST / REDIS_PORT / REDIS_PASSWORD."""
    global _redis_client
    if _redis_client is None:
        _redis_client = Redis(
            host=os.getenv("REDIS_HOST", "localhost"),
            port=int(os.getenv("REDIS_PORT", "6379")),
            password=os.getenv("REDIS_PASSWORD") or None,
            decode_responses=True,
            socket_timeout=10.0,
            socket_connect_timeout=5.0,
        )
    return _redis_client


class RedisSessionStore:
    """Redis-backed store; expiry is delegated to redis (SET ... EX ttl)."""

    def __init__(self, client: Redis | None = None, prefix: str = "wpbridge:session:"):
        self._client = client
        self.prefix = prefix

    @property
    def client(self) -> Redis:
        if self._client is None:
            self._client = get_redis_client()
        return self._client

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> str | None:
        return await self.client.get(self._key(key))

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self.client.set(self._key(key), value, ex=max(1, int(ttl_seconds)))

    async def delete(self, key: str) -> None:
        await self.client.delete(self._key(key))


def create_session_store(kind: str | None = None) -> SessionStore:
    """Pick a store from `kind` or SESSION_STORE (memory|redis, default memory)."""
    kind = (kind or os.getenv("SESSION_STORE", "memory")).lower()
    if kind == "redis":
        logger.info("Using redis session store")
        return RedisSessionStore()
    if kind != "memory":
        raise ValueError(f"Unknown SESSION_STORE: {kind}")
    logger.info("Using in-memory session store")
    return InMemorySessionStore()
