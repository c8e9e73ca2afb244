"""
Rate Limiter Utility - one AsyncLimiter per WordPress origin, per event loop.

Usage:
    from wpbridge.utils.rate_limiter import get_rate_limiter

    async with get_rate_limiter(10, 1.0, origin="https://example.com"):
        ...

AsyncLimiter binds to the loop it first waits on, so limiters are keyed by loop id
and a stale one is replaced when the running loop changes.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any
from urllib.parse import urlsplit

from aiolimiter import AsyncLimiter

from wpbridge.utils.get_logger import get_logger

logger = get_logger(__name__)

_lock = threading.Lock()

# (origin, max_rate, time_period, loop_id) -> limiter
_limiters: dict[tuple[str, int, float, int], SiteRateLimiter] = {}


def origin_of(url: str) -> str:
    """scheme://host[:port] of a URL; limits are shared by every path on a site."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}".lower()


class SiteRateLimiter:
    """AsyncLimiter wrapper that rebuilds itself once when it hits a foreign loop."""

    def __init__(self, origin: str, max_rate: int, time_period: float):
        self.origin = origin
        self.max_rate = max_rate
        self.time_period = time_period
        self._limiter: AsyncLimiter | None = None
        self._loop_id: int | None = None

    def _current(self) -> AsyncLimiter:
        loop_id = id(asyncio.get_running_loop())
        if self._limiter is None or self._loop_id != loop_id:
            self._limiter = AsyncLimiter(self.max_rate, self.time_period)
            self._loop_id = loop_id
        return self._limiter

    async def __aenter__(self) -> SiteRateLimiter:
        try:
            await self._current().acquire()
        except RuntimeError as e:
            if "loop" not in str(e).lower():
                raise
            logger.warning(f"Rate limiter for {self.origin} crossed event loops, rebuilding: {e}")
            self._limiter = None
            await self._current().acquire()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        return None


def get_rate_limiter(max_rate: int, time_period: float = 1.0, origin: str = "") -> SiteRateLimiter:
    """Shared limiter for `origin` at this rate on the running loop."""
    key = (origin, max_rate, time_period, id(asyncio.get_running_loop()))

    limiter = _limiters.get(key)
    if limiter is None:
        with _lock:
            limiter = _limiters.setdefault(key, SiteRateLimiter(origin, max_rate, time_period))
        logger.info(f"Rate limiting {origin or 'requests'} to {max_rate} per {time_period}s")
    return limiter
