from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class CacheEntry:
    enabled_keys: frozenset[str]
    expires_at: float


class ModuleCache:
    """Per-tenant TTL cache of the last enabled module set.

    Entries only ever feed a provisional render; they are replaced by the next
    server listing and expire after ``ttl_seconds`` regardless.
    """

    def __init__(self, ttl_seconds: float = 60.0, now: Callable[[], float] | None = None) -> None:
        self.ttl_seconds = max(1.0, ttl_seconds)
        self._now = now or time.monotonic
        self._entries: dict[str, CacheEntry] = {}

    def get(self, tenant_id: str) -> frozenset[str] | None:
        entry = self._entries.get(tenant_id)
        if not entry:
            return None
        if entry.expires_at <= self._now():
            self._entries.pop(tenant_id, None)
            return None
        return entry.enabled_keys

    def set(self, tenant_id: str, enabled_keys) -> None:
        self._entries[tenant_id] = CacheEntry(
            enabled_keys=frozenset(enabled_keys),
            expires_at=self._now() + self.ttl_seconds,
        )

    def invalidate(self, tenant_id: str) -> None:
        self._entries.pop(tenant_id, None)

    def clear(self) -> None:
        self._entries.clear()
