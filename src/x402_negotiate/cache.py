"""Bounded in-memory cache with LRU eviction and per-entry expiry."""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, TypeVar

from typing_extensions import Self

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

DEFAULT_CAPACITY = 256
DEFAULT_MAX_AGE_MS = 30_000


def monotonic_ms() -> float:
    return time.monotonic() * 1000


@dataclass
class CacheConfig:
    """Configuration for AgedLRUCache.

    Attributes:
        capacity: Maximum number of entries.
        max_age: Entry lifetime in milliseconds.
    """

    capacity: int = DEFAULT_CAPACITY
    max_age: float = DEFAULT_MAX_AGE_MS


class AgedLRUCache(Generic[K, V]):
    """Fixed-capacity map combining recency eviction and absolute expiry.

    An entry expires ``max_age`` milliseconds after it was last ``put``;
    reading it does not extend its life. Expired entries are evicted lazily
    by the ``get`` that discovers them, so ``size`` may include them until then.

    Args:
        capacity: Maximum number of entries.
        max_age: Entry lifetime in milliseconds.
        now: Clock returning milliseconds; injectable for tests.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        max_age: float = DEFAULT_MAX_AGE_MS,
        now: Callable[[], float] = monotonic_ms,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._max_age = max_age
        self._now = now
        self._entries: OrderedDict[K, tuple[float, V]] = OrderedDict()

    @classmethod
    def from_config(
        cls,
        config: CacheConfig,
        now: Callable[[], float] = monotonic_ms,
    ) -> Self:
        return cls(capacity=config.capacity, max_age=config.max_age, now=now)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def max_age(self) -> float:
        return self._max_age

    @property
    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def _is_fresh(self, inserted_at: float) -> bool:
        return self._now() - inserted_at < self._max_age

    def __contains__(self, key: object) -> bool:
        """Freshness-aware membership test that neither touches nor evicts."""
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and self._is_fresh(entry[0])

    def get(self, key: K) -> V | None:
        """Return the value if present and fresh, marking it most recently used."""
        entry = self._entries.pop(key, None)
        if entry is None:
            return None
        if not self._is_fresh(entry[0]):
            return None
        self._entries[key] = entry
        return entry[1]

    def put(self, key: K, value: V) -> None:
        """Insert or refresh an entry, evicting the least recently used one if full."""
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self._capacity:
            self._entries.popitem(last=False)
        self._entries[key] = (self._now(), value)

    def clear(self) -> None:
        self._entries.clear()
