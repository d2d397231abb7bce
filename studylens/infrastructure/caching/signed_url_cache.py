from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass(frozen=True)
class CachedUrl:
    value: str
    expires_at: float


class SignedUrlCache:
    """
    Storage-path -> signed URL cache with caller-controlled TTL.

    Owned by whoever constructs it (the container in production, the test in
    tests); nothing here is module-global.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None, max_entries: int = 1024):
        self._clock = clock or time.time
        self._max_entries = max(1, int(max_entries))
        self._entries: Dict[str, CachedUrl] = {}

    def get(self, key: str) -> Optional[CachedUrl]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            self._entries.pop(key, None)
            return None
        return entry

    def set(self, key: str, value: str, ttl_seconds: float) -> CachedUrl:
        now = self._clock()
        self._prune(now)
        entry = CachedUrl(value=value, expires_at=now + ttl_seconds)
        self._entries.pop(key, None)
        self._entries[key] = entry
        # Still full of live URLs: drop the oldest writes
        while len(self._entries) > self._max_entries:
            del self._entries[next(iter(self._entries))]
        return entry

    def _prune(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
