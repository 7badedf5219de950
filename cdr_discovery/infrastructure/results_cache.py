"""In-memory TTL store mapping session ids to discovery results."""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from cdr_discovery.discovery.contracts import DiscoveryResult

_logger = logging.getLogger("cdr-discovery.results")

DEFAULT_TTL_SECONDS = 3600.0


class ReadWriteLock:
    """Many concurrent readers or one writer; waiting writers block new readers."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class ResultsCache:
    """Thread-safe TTL cache of discovery results.

    Entries expire lazily: every lookup and enumeration checks the stored
    deadline and drops stale entries. The cache is unbounded unless
    ``max_sessions`` is given, in which case storing past the cap first purges
    expired entries and then evicts the entry closest to expiry.
    ``start_sweeper`` optionally runs one background thread that purges
    expired entries on an interval.
    """

    def __init__(self, ttl: float = DEFAULT_TTL_SECONDS, max_sessions: Optional[int] = None):
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self._store: dict[str, tuple[DiscoveryResult, float]] = {}
        self._ttl = float(ttl)
        self._max_sessions = max_sessions
        self._lock = ReadWriteLock()
        self._stats_lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._sweeper: Optional[threading.Thread] = None
        self._sweeper_stop = threading.Event()

    @property
    def ttl(self) -> float:
        return self._ttl

    def store(self, session_id: str, result: DiscoveryResult) -> None:
        with self._lock.write():
            self._store[session_id] = (result, time.monotonic() + self._ttl)
            if self._max_sessions is None or len(self._store) <= self._max_sessions:
                return
            self._cleanup_expired()
            while len(self._store) > self._max_sessions:
                oldest = min(self._store, key=lambda k: self._store[k][1])
                del self._store[oldest]
                _logger.warning("results cache full, evicted session %s", oldest)

    def get(self, session_id: str) -> Optional[DiscoveryResult]:
        """Return the cached result, or None when unknown or expired."""
        expired = False
        with self._lock.read():
            entry = self._store.get(session_id)
            if entry is not None:
                result, expire_at = entry
                if time.monotonic() < expire_at:
                    self._count(hit=True)
                    return result
                expired = True
        if expired:
            self._drop_if_expired(session_id)
        self._count(hit=False)
        return None

    def exists(self, session_id: str) -> bool:
        with self._lock.read():
            entry = self._store.get(session_id)
            return entry is not None and time.monotonic() < entry[1]

    def delete(self, session_id: str) -> None:
        with self._lock.write():
            self._store.pop(session_id, None)

    def clear(self) -> None:
        with self._lock.write():
            self._store.clear()
        with self._stats_lock:
            self._hits = 0
            self._misses = 0

    def get_all(self) -> dict[str, DiscoveryResult]:
        """Snapshot of every live entry; mutating it does not touch the cache."""
        now = time.monotonic()
        with self._lock.read():
            return {key: result for key, (result, expire_at) in self._store.items() if now < expire_at}

    def count(self) -> int:
        now = time.monotonic()
        with self._lock.read():
            return sum(1 for _, expire_at in self._store.values() if now < expire_at)

    def update_ttl(self, ttl: float) -> None:
        """Change the TTL applied to entries stored from now on."""
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        with self._lock.write():
            self._ttl = float(ttl)

    def purge_expired(self) -> int:
        with self._lock.write():
            return self._cleanup_expired()

    def _cleanup_expired(self) -> int:
        now = time.monotonic()
        expired = [k for k, (_, exp) in self._store.items() if now >= exp]
        for key in expired:
            del self._store[key]
        return len(expired)

    def _drop_if_expired(self, session_id: str) -> None:
        with self._lock.write():
            entry = self._store.get(session_id)
            if entry is not None and time.monotonic() >= entry[1]:
                del self._store[session_id]

    def _count(self, *, hit: bool) -> None:
        with self._stats_lock:
            if hit:
                self._hits += 1
            else:
                self._misses += 1

    @property
    def stats(self) -> dict[str, Any]:
        with self._stats_lock:
            hits, misses = self._hits, self._misses
        total = hits + misses
        return {
            "size": self.count(),
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / total, 3) if total > 0 else 0.0,
        }

    # Background sweeper

    def start_sweeper(self, interval: float = 60.0) -> None:
        if self._sweeper is not None and self._sweeper.is_alive():
            return
        self._sweeper_stop.clear()
        self._sweeper = threading.Thread(
            target=self._sweep_loop,
            args=(interval,),
            name="results-cache-sweeper",
            daemon=True,
        )
        self._sweeper.start()
        _logger.info("results cache sweeper started (interval=%.1fs)", interval)

    def stop_sweeper(self, timeout: float = 5.0) -> None:
        thread = self._sweeper
        if thread is None:
            return
        self._sweeper_stop.set()
        thread.join(timeout)
        self._sweeper = None

    def _sweep_loop(self, interval: float) -> None:
        while not self._sweeper_stop.wait(interval):
            removed = self.purge_expired()
            if removed:
                _logger.debug("results cache sweeper removed %d expired session(s)", removed)


__all__ = ["DEFAULT_TTL_SECONDS", "ReadWriteLock", "ResultsCache"]
