"""
In-process result cache for extraction and analysis results.

Fixed capacity (oldest entry evicted first), per-entry TTL, and a periodic
sweep of expired entries. Safe for concurrent use from threads and tasks;
values are stored and returned as-is, so callers must only store immutable
objects (frozen models).
"""

from __future__ import annotations

import hashlib
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from leadverify.config import (
    DEFAULT_CACHE_CAPACITY,
    DEFAULT_CACHE_SWEEP_INTERVAL,
    DEFAULT_CACHE_TTL,
)

_MISSING = object()


@dataclass(frozen=True, slots=True)
class _Entry:
    value: Any
    expires_at: float


def fingerprint(*parts: Any) -> str:
    """Stable cache key from ordered parts: ``namespace:sha256``."""
    if not parts:
        raise ValueError("fingerprint needs at least a namespace")
    namespace = str(parts[0])
    body = "\x1f".join("" if p is None else str(p).strip().lower() for p in parts[1:])
    digest = hashlib.sha256(body.encode("utf-8")).hexdigest()
    return f"{namespace}:{digest}"


def document_set_key(document_ids: Iterable[str]) -> str:
    """Cache key for a document set; order of ids does not matter."""
    body = "\x1f".join(sorted(str(d) for d in document_ids))
    return f"analysis:{hashlib.sha256(body.encode('utf-8')).hexdigest()}"


class ResultCache:
    def __init__(
        self,
        *,
        capacity: int = DEFAULT_CACHE_CAPACITY,
        default_ttl: float = DEFAULT_CACHE_TTL,
        sweep_interval: float = DEFAULT_CACHE_SWEEP_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self.default_ttl = default_ttl
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._lock = threading.RLock()
        self._last_sweep = clock()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return default
            if entry.expires_at <= self._clock():
                del self._entries[key]
                self.misses += 1
                return default
            self.hits += 1
            return entry.value

    def __contains__(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            now = self._clock()
            self._maybe_sweep(now)
            # Overwrite replaces the entry wholesale and refreshes its position
            self._entries.pop(key, None)
            self._entries[key] = _Entry(value=value, expires_at=now + ttl)
            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                self.evictions += 1
                logger.debug("Result cache full; evicted {key}", key=evicted)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def invalidate_namespace(self, namespace: str) -> int:
        prefix = f"{namespace}:"
        with self._lock:
            doomed = [k for k in self._entries if k.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.info("Invalidated {count} cached {namespace} entries", count=len(doomed), namespace=namespace)
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def sweep(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        with self._lock:
            now = self._clock()
            self._last_sweep = now
            expired = [k for k, e in self._entries.items() if e.expires_at <= now]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Result cache sweep removed {count} entries", count=len(expired))
        return len(expired)

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep >= self.sweep_interval:
            self.sweep()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "size": len(self._entries),
                "capacity": self.capacity,
                "hits": self.hits,
                "misses": self.misses,
                "evictions": self.evictions,
            }
