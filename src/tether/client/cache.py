"""Response caches for client GET calls.

Two stores share one async interface:

- ``MemoryCache``: an in-process dict.
- ``SQLiteCache``: a file-backed table that survives restarts, for
  CLIs and workers that want what a browser's local storage gives a
  web client. Blocking ``sqlite3`` calls run in a worker thread via
  ``anyio.to_thread``.

Entries expire at an absolute time and are evicted lazily on read.
Stores are passed explicitly to ``create_client``; there is no global cache.
"""

import json
import sqlite3
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import anyio.to_thread

from tether.config import CacheConfig

type Clock = Callable[[], float]

DEFAULT_CACHE_PATH = ".tether-cache.sqlite3"


def cache_key(method: str, url: str) -> str:
    """``"GET:https://api.example.com/projects?page=2"``"""
    return f"{method.upper()}:{url}"


@dataclass(frozen=True, slots=True)
class CacheEntry:
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class CacheStore(Protocol):
    """What the client needs from a cache."""

    async def get(self, key: str) -> CacheEntry | None: ...
    async def set(self, key: str, value: Any, ttl: float) -> None: ...
    async def remove(self, key: str) -> None: ...
    async def clear(self) -> None: ...
    async def invalidate(self, pattern: str) -> int: ...


class MemoryCache:
    """In-process cache. Last write wins on the same key."""

    __slots__ = ("_clock", "_entries", "_lock")

    def __init__(self, *, clock: Clock = time.time) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            return entry

    async def set(self, key: str, value: Any, ttl: float) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    async def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    async def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    async def invalidate(self, pattern: str) -> int:
        """Remove every entry whose key contains *pattern*. Returns the count."""
        with self._lock:
            doomed = [key for key in self._entries if pattern in key]
            for key in doomed:
                del self._entries[key]
            return len(doomed)


class SQLiteCache:
    """Persistent cache in an SQLite file. Values must be JSON-serializable."""

    __slots__ = ("_clock", "_conn", "_lock", "path")

    def __init__(self, path: str | Path = DEFAULT_CACHE_PATH, *, clock: Clock = time.time) -> None:
        self.path = str(path)
        self._clock = clock
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self.path, check_same_thread=False, isolation_level=None)
        self._conn.execute(
            "CREATE TABLE IF NOT EXISTS tether_cache ("
            " key TEXT PRIMARY KEY,"
            " value TEXT NOT NULL,"
            " expires_at REAL NOT NULL)"
        )

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    async def _run[T](self, func: Callable[[], T]) -> T:
        def locked() -> T:
            with self._lock:
                return func()

        return await anyio.to_thread.run_sync(locked)

    async def get(self, key: str) -> CacheEntry | None:
        def read() -> CacheEntry | None:
            row = self._conn.execute(
                "SELECT value, expires_at FROM tether_cache WHERE key = ?", (key,)
            ).fetchone()
            if row is None:
                return None
            entry = CacheEntry(value=json.loads(row[0]), expires_at=row[1])
            if entry.is_expired(self._clock()):
                self._conn.execute("DELETE FROM tether_cache WHERE key = ?", (key,))
                return None
            return entry

        return await self._run(read)

    async def set(self, key: str, value: Any, ttl: float) -> None:
        payload = json.dumps(value)
        expires_at = self._clock() + ttl
        await self._run(
            lambda: self._conn.execute(
                "INSERT OR REPLACE INTO tether_cache (key, value, expires_at) VALUES (?, ?, ?)",
                (key, payload, expires_at),
            )
        )

    async def remove(self, key: str) -> None:
        await self._run(lambda: self._conn.execute("DELETE FROM tether_cache WHERE key = ?", (key,)))

    async def clear(self) -> None:
        await self._run(lambda: self._conn.execute("DELETE FROM tether_cache"))

    async def invalidate(self, pattern: str) -> int:
        """Remove every entry whose key contains *pattern*. Returns the count."""
        # instr() avoids LIKE wildcards inside the pattern
        cursor = await self._run(
            lambda: self._conn.execute("DELETE FROM tether_cache WHERE instr(key, ?) > 0", (pattern,))
        )
        return cursor.rowcount


def make_cache(config: CacheConfig, *, clock: Clock = time.time) -> CacheStore:
    """Build the store named by ``config.storage``."""
    if config.storage == "persistent":
        return SQLiteCache(config.path or DEFAULT_CACHE_PATH, clock=clock)
    return MemoryCache(clock=clock)
