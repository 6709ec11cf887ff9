"""Session-scoped record of problems that have been recommended."""
from __future__ import annotations

import hashlib
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Iterable

from oliver.config import settings


class RecommendedProblemRegistry:
    """Append-only set of recommended problem ids.

    Every recommendation page that loads adds its ids here so problem lists
    elsewhere can show the AI badge. The set only grows until :meth:`reset`
    is called at a session or page-load boundary.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids: set[int] = set()

    def add_many(self, problem_ids: Iterable[int]) -> None:
        with self._lock:
            self._ids.update(problem_ids)

    def __contains__(self, problem_id: object) -> bool:
        with self._lock:
            return problem_id in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def snapshot(self) -> frozenset[int]:
        with self._lock:
            return frozenset(self._ids)

    def reset(self) -> None:
        with self._lock:
            self._ids.clear()


@dataclass
class _SessionSlot:
    registry: RecommendedProblemRegistry
    last_seen: float


def session_key(token: str) -> str:
    """Stable, non-reversible key for a session token."""

    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class SessionRegistries:
    """One :class:`RecommendedProblemRegistry` per session token.

    Sessions idle for longer than ``idle_seconds`` start over with an empty
    registry, and beyond ``max_sessions`` the least recently used session is
    dropped. Callers without a token get a fresh registry that is never
    stored, so anonymous requests never see each other's ids.
    """

    def __init__(
        self,
        *,
        max_sessions: int | None = None,
        idle_seconds: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._lock = threading.Lock()
        self._slots: OrderedDict[str, _SessionSlot] = OrderedDict()
        self.max_sessions = max_sessions or settings.SESSION_REGISTRY_MAX_SESSIONS
        self.idle_seconds = idle_seconds or settings.SESSION_REGISTRY_IDLE_SECONDS
        self._clock = clock

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)

    def _purge_idle(self, now: float) -> None:
        while self._slots:
            key, slot = next(iter(self._slots.items()))
            if now - slot.last_seen <= self.idle_seconds:
                break
            del self._slots[key]

    def for_session(self, token: str | None) -> RecommendedProblemRegistry:
        if not token:
            return RecommendedProblemRegistry()

        key = session_key(token)
        with self._lock:
            now = self._clock()
            # Slots are ordered by last use, so idle ones sit at the front.
            self._purge_idle(now)
            slot = self._slots.pop(key, None)
            if slot is None:
                slot = _SessionSlot(registry=RecommendedProblemRegistry(), last_seen=now)
            slot.last_seen = now
            self._slots[key] = slot
            while len(self._slots) > self.max_sessions:
                self._slots.popitem(last=False)
            return slot.registry

    def discard(self, token: str | None) -> None:
        """Forget a session, e.g. on logout."""

        if not token:
            return
        with self._lock:
            self._slots.pop(session_key(token), None)

    def clear(self) -> None:
        with self._lock:
            self._slots.clear()


def should_show_badge(problem_id: int, registry: RecommendedProblemRegistry, *, show_ai: bool) -> bool:
    """Return whether a problem row should carry the AI badge."""

    return show_ai and problem_id in registry
