"""Fixed-window rate limiting.

Each key gets a counter that resets ``window_seconds`` after the first request
of its window. This is a fixed window, not a sliding one: a burst straddling a
window edge can admit up to ``2 * max_requests`` within one window length.

Counters live in a ``RateLimitStore``. The in-memory store is process-local,
so N replicas admit up to N times the limit; select the Redis store when the
deployment runs more than one instance.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock
from typing import Protocol

import redis
from starlette.requests import Request

__all__ = [
    "FixedWindowRateLimiter",
    "InMemoryRateLimitStore",
    "RateLimitEntry",
    "RateLimitStore",
    "RateLimitSweeper",
    "RedisRateLimitStore",
    "client_key",
]

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass
class RateLimitEntry:
    """Requests seen in the current window and when that window ends."""

    count: int
    reset_at: float


class RateLimitStore(Protocol):
    """Counter storage shared by every limiter in the process."""

    def get(self, key: str) -> RateLimitEntry | None:
        """Return the entry for ``key`` without modifying it."""
        ...

    def increment(self, key: str, now: float, window: float) -> RateLimitEntry:
        """Count one request and return the entry afterwards.

        Starts a fresh window (count 1) if the key is absent or its window has
        ended; otherwise adds one to the count. Atomic per key.
        """
        ...

    def delete_expired(self, now: float) -> int:
        """Drop entries whose window has ended; return how many were removed."""
        ...


class InMemoryRateLimitStore:
    """Dict-backed store guarded by a lock."""

    def __init__(self) -> None:
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = Lock()

    def get(self, key: str) -> RateLimitEntry | None:
        with self._lock:
            entry = self._entries.get(key)
            return RateLimitEntry(entry.count, entry.reset_at) if entry else None

    def increment(self, key: str, now: float, window: float) -> RateLimitEntry:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or now >= entry.reset_at:
                entry = RateLimitEntry(count=1, reset_at=now + window)
                self._entries[key] = entry
            else:
                entry.count += 1
            return RateLimitEntry(entry.count, entry.reset_at)

    def delete_expired(self, now: float) -> int:
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.reset_at <= now]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def clear(self) -> None:
        """Forget every counter."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisRateLimitStore:
    """Store shared across replicas; Redis key expiry ends each window."""

    def __init__(self, client: redis.Redis, prefix: str = "ratelimit:") -> None:
        self._redis = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str) -> RedisRateLimitStore:
        return cls(redis.Redis.from_url(url))

    def _name(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> RateLimitEntry | None:
        pipe = self._redis.pipeline()
        pipe.get(self._name(key))
        pipe.pttl(self._name(key))
        raw, ttl_ms = pipe.execute()
        if raw is None or ttl_ms is None or ttl_ms < 0:
            return None
        return RateLimitEntry(count=int(raw), reset_at=time.time() + ttl_ms / 1000)

    def increment(self, key: str, now: float, window: float) -> RateLimitEntry:
        name = self._name(key)
        window_ms = max(1, math.ceil(window * 1000))
        # MULTI/EXEC: the NX set opens a window only when no counter exists.
        pipe = self._redis.pipeline(transaction=True)
        pipe.set(name, 0, px=window_ms, nx=True)
        pipe.incr(name)
        pipe.pttl(name)
        _, count, ttl_ms = pipe.execute()
        if ttl_ms is None or ttl_ms < 0:
            ttl_ms = window_ms
        return RateLimitEntry(count=int(count), reset_at=now + ttl_ms / 1000)

    def delete_expired(self, now: float) -> int:
        # Redis expires windows itself.
        return 0


def client_key(request: Request, trust_proxy_headers: bool = True) -> str:
    """Derive the caller's network identity.

    With ``trust_proxy_headers`` the first ``X-Forwarded-For`` hop wins, then
    ``X-Real-IP``; both are client-controlled unless a proxy overwrites them.
    Otherwise only the transport peer address is used.
    """
    if trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",", 1)[0].strip()
            if first:
                return first
        real_ip = request.headers.get("x-real-ip")
        if real_ip and real_ip.strip():
            return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class FixedWindowRateLimiter:
    """Admits at most ``max_requests`` per key per window."""

    def __init__(
        self,
        name: str,
        *,
        window_seconds: float,
        max_requests: int,
        store: RateLimitStore,
        key_func: Callable[[Request], str] = client_key,
        clock: Clock = time.time,
    ) -> None:
        if window_seconds <= 0 or max_requests <= 0:
            raise ValueError("window_seconds and max_requests must be positive")
        self.name = name
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.store = store
        self.key_func = key_func
        self.clock = clock

    def _store_key(self, key: str) -> str:
        return f"{self.name}:{key}"

    def hit(self, key: str) -> bool:
        """Count a request for an already-derived key and decide admission."""
        entry = self.store.increment(self._store_key(key), self.clock(), self.window_seconds)
        return entry.count <= self.max_requests

    def admit(self, request: Request) -> bool:
        """Return True if ``request`` fits in its caller's current window."""
        key = self.key_func(request)
        admitted = self.hit(key)
        if not admitted:
            logger.info("Rate limit %r exceeded for %s", self.name, key)
        return admitted

    def retry_after(self, request: Request) -> int:
        """Seconds until the caller's current window ends (at least 1)."""
        entry = self.store.get(self._store_key(self.key_func(request)))
        if entry is None:
            return 1
        return max(1, math.ceil(entry.reset_at - self.clock()))


class RateLimitSweeper:
    """Periodically removes expired rate-limit entries.

    Housekeeping only: an expired entry that has not been swept yet is already
    treated as a fresh window by ``increment``.
    """

    def __init__(self, store: RateLimitStore, interval_seconds: float, clock: Clock = time.time) -> None:
        self.store = store
        self.interval_seconds = max(0.1, float(interval_seconds))
        self.clock = clock
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    def sweep_once(self) -> int:
        removed = self.store.delete_expired(self.clock())
        if removed:
            logger.debug("Swept %d expired rate-limit entries", removed)
        return removed

    async def start(self) -> None:
        """Start the background sweep loop."""
        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background sweep loop."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_seconds)
            except TimeoutError:
                try:
                    self.sweep_once()
                except redis.RedisError as exc:
                    logger.warning("Rate-limit sweep failed: %s", exc)
                except Exception:
                    logger.exception("Unexpected error during rate-limit sweep")
