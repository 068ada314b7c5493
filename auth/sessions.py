"""
auth/sessions.py -- In-memory session table: token -> last activity time.

This is the only mutable state the service owns. It is built once in the
application lifespan (api/main.py), stored on app.state, and mutated only
through AuthGate (auth/gate.py).

Locking:
  The table is split into shards chosen by a hash of the token. Each shard
  has its own asyncio.Lock, held for the whole read-decide-write section of
  begin() and touch_if_active(). Two requests for the same token always land
  on the same shard, so they can never both see "not yet expired" and then
  disagree about removal. shards=1 gives a single table-wide lock.

Expiry:
  Lazy. An idle entry is only removed when touch_if_active() finds it stale,
  or when sweep_expired() runs. Without a sweep, a token that is never
  presented again keeps its slot until the process exits.

Time comes from a monotonic clock (injectable for tests), so wall-clock
adjustments never expire or resurrect sessions.
"""

from __future__ import annotations

import asyncio
import logging
import time
import zlib
from collections.abc import Callable
from dataclasses import dataclass, field

logger = logging.getLogger("mitfahrboerse.auth")

DEFAULT_IDLE_SECONDS = 10 * 60
DEFAULT_SHARDS = 16


class SessionNotFound(Exception):
    """No session exists for the token."""


class SessionExpired(Exception):
    """The session was idle past the limit and has been removed."""


@dataclass
class _Shard:
    sessions: dict[str, float] = field(default_factory=dict)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class SessionTable:
    """Token -> last-activity map with a fixed idle limit.

    Usage:
        table = SessionTable(idle_limit=600)
        await table.begin("abc123")
        await table.touch_if_active("abc123")   # raises SessionNotFound / SessionExpired
    """

    def __init__(
        self,
        idle_limit: float = DEFAULT_IDLE_SECONDS,
        shards: int = DEFAULT_SHARDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if idle_limit <= 0:
            raise ValueError("idle_limit must be positive")
        if shards < 1:
            raise ValueError("shards must be at least 1")
        self.idle_limit = idle_limit
        self._clock = clock
        self._shards = [_Shard() for _ in range(shards)]

    def _shard_for(self, token: str) -> _Shard:
        # A token always maps to the same shard, in every process.
        return self._shards[zlib.crc32(token.encode("utf-8")) % len(self._shards)]

    async def begin(self, token: str) -> None:
        """Start or restart the session for token, stamped now."""
        shard = self._shard_for(token)
        async with shard.lock:
            shard.sessions[token] = self._clock()

    async def touch_if_active(self, token: str) -> None:
        """Refresh token's last activity, or fail if it has no live session.

        Raises SessionNotFound if token was never logged in (or was already
        removed). Raises SessionExpired if the session was idle longer than
        idle_limit; the entry is removed before raising.
        """
        shard = self._shard_for(token)
        async with shard.lock:
            last = shard.sessions.get(token)
            if last is None:
                raise SessionNotFound(token)
            now = self._clock()
            if now - last > self.idle_limit:
                del shard.sessions[token]
                raise SessionExpired(token)
            shard.sessions[token] = max(now, last)

    async def end(self, token: str) -> bool:
        """Drop token's session. Returns True if one existed."""
        shard = self._shard_for(token)
        async with shard.lock:
            return shard.sessions.pop(token, None) is not None

    async def sweep_expired(self) -> int:
        """Remove every session idle past the limit. Returns the count removed.

        Purely a memory bound: a swept token would have failed its next
        touch_if_active() with SessionExpired anyway, and now fails with
        SessionNotFound instead. Both surface as 401.
        """
        removed = 0
        for shard in self._shards:
            async with shard.lock:
                now = self._clock()
                stale = [t for t, last in shard.sessions.items() if now - last > self.idle_limit]
                for token in stale:
                    del shard.sessions[token]
                removed += len(stale)
        return removed

    def __len__(self) -> int:
        # Unlocked read; a snapshot for health reporting only.
        return sum(len(shard.sessions) for shard in self._shards)
