"""
Feature flag definition cache.

A narrow get/set/clear interface so the evaluator can be given a TTL cache
in production, a NullFlagCache in tests, or a shared cache later without
touching evaluation logic. Per-(org, user) decisions are never cached here:
only flag definitions, keyed by flag key.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

from tenant_gate.models.feature_flag import FlagDefinition


@dataclass(frozen=True)
class CachedFlag:
    """A cache hit. flag is None when the lookup found no such flag."""

    flag: FlagDefinition | None
    expires_at: float


@runtime_checkable
class FlagCache(Protocol):
    def get(self, key: str) -> CachedFlag | None: ...

    def set(self, key: str, flag: FlagDefinition | None) -> None: ...

    def clear(self) -> None: ...


class TTLFlagCache:
    """
    In-process cache with a fixed time-to-live per entry.

    Entries are independent per key. Two requests missing the same key at
    once both refetch and both write the same value, which is harmless, so
    no locking is done.
    """

    def __init__(self, ttl_seconds: float = 60.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._store: dict[str, CachedFlag] = {}

    def get(self, key: str) -> CachedFlag | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            self._store.pop(key, None)
            return None
        return entry

    def set(self, key: str, flag: FlagDefinition | None) -> None:
        self._store[key] = CachedFlag(flag=flag, expires_at=self._clock() + self.ttl_seconds)

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


class NullFlagCache:
    """Cache that never holds anything; every get_flag goes to the database."""

    def get(self, key: str) -> CachedFlag | None:
        return None

    def set(self, key: str, flag: FlagDefinition | None) -> None:
        return None

    def clear(self) -> None:
        return None
