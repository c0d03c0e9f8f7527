"""Explicit time-bounded cache.

Holds a single value together with the moment it was fetched. Owners
create one per cached concern and pass it around instead of relying on a
module-level global, so tests can inject a clock or a pre-filled cache.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class TTLCache(Generic[T]):
    """A single cached value with a time-to-live.

    Attributes:
        ttl: Lifetime of a fetched value in seconds.
        clock: Monotonic time source, injectable for tests.
    """

    ttl: float
    clock: Callable[[], float] = time.monotonic
    value: T | None = field(default=None, init=False)
    fetched_at: float | None = field(default=None, init=False)

    def is_fresh(self, now: float | None = None) -> bool:
        """True when a value is cached and younger than the TTL."""
        if self.fetched_at is None:
            return False
        if now is None:
            now = self.clock()
        return now - self.fetched_at < self.ttl

    def put(self, value: T) -> T:
        self.value = value
        self.fetched_at = self.clock()
        return value

    def get(self) -> T | None:
        """Return the cached value, or None once it has expired."""
        return self.value if self.is_fresh() else None

    def get_or_fetch(self, fetch: Callable[[], T]) -> T:
        """Return the cached value, calling fetch() to refresh it when stale."""
        if self.is_fresh():
            return self.value  # type: ignore[return-value]
        return self.put(fetch())

    def invalidate(self) -> None:
        self.value = None
        self.fetched_at = None
