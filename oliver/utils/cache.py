"""In-process query cache keyed by serialized request parameters."""

from __future__ import annotations

import hashlib
import json
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from pydantic import BaseModel

from oliver.config import settings


def _normalize(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return _normalize(value.model_dump(mode="json", exclude_none=True))
    if isinstance(value, Mapping):
        return {str(k): _normalize(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]
    return value


def build_cache_key(**components: Any) -> str:
    """Hash request components (query params, session token) into a key.

    ``None`` values inside mappings are dropped, so an omitted filter and an
    explicit ``None`` share one entry. Sequence order is significant.
    """

    payload = json.dumps(_normalize(components), sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


@dataclass
class _CacheEntry:
    expires_at: float | None
    value: Any


class QueryCache:
    """Cache of backend responses shared by every session of the process.

    Entries live until their TTL elapses or :meth:`clear` is called. Each
    :meth:`set` sweeps expired entries, and once ``max_entries`` is reached
    the least recently written entries are evicted first.
    """

    def __init__(
        self,
        *,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, _CacheEntry] = {}
        self._clock = clock
        self.max_entries = max_entries or settings.QUERY_CACHE_MAX_ENTRIES

    @staticmethod
    def _compose(namespace: str, key: str) -> str:
        return f"{namespace}:{key}"

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, namespace: str, key: str) -> Any | None:
        namespaced = self._compose(namespace, key)
        with self._lock:
            entry = self._entries.get(namespaced)
            if not entry:
                return None
            if entry.expires_at is not None and entry.expires_at < self._clock():
                self._entries.pop(namespaced, None)
                return None
            return entry.value

    def _purge_expired(self, now: float) -> None:
        expired = [
            cache_key
            for cache_key, entry in self._entries.items()
            if entry.expires_at is not None and entry.expires_at < now
        ]
        for cache_key in expired:
            del self._entries[cache_key]

    def set(self, namespace: str, key: str, value: Any, ttl_seconds: int) -> None:
        namespaced = self._compose(namespace, key)
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            # Re-inserting moves the key to the newest position.
            self._entries.pop(namespaced, None)
            while len(self._entries) >= self.max_entries:
                del self._entries[next(iter(self._entries))]
            expires_at = now + ttl_seconds if ttl_seconds else None
            self._entries[namespaced] = _CacheEntry(expires_at=expires_at, value=value)

    def invalidate(self, namespace: str, *, key: str | None = None, prefix: str | None = None) -> None:
        if key is not None:
            with self._lock:
                self._entries.pop(self._compose(namespace, key), None)
            return

        pattern = self._compose(namespace, prefix or "")
        with self._lock:
            for cache_key in list(self._entries.keys()):
                if cache_key.startswith(pattern):
                    self._entries.pop(cache_key, None)

    def clear(self) -> None:
        """Drop every entry; called on session reload and between tests."""

        with self._lock:
            self._entries.clear()


query_cache = QueryCache()

DEFAULT_TTL_SECONDS = settings.QUERY_CACHE_TTL_SECONDS


__all__ = ["query_cache", "QueryCache", "build_cache_key", "DEFAULT_TTL_SECONDS"]
