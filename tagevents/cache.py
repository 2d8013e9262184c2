from __future__ import annotations
from collections import OrderedDict
from typing import Callable, Generic, Hashable, List, Optional, TypeVar
import logging

import config

logger = logging.getLogger(__name__)

V = TypeVar("V")


class LRUCache(Generic[V]):
    """
    Bounded map with strict least-recently-used eviction.

    Recency is updated on every read through get() / get_or_create(),
    not only on insertion. Entries are ordered oldest first, so the
    front of the OrderedDict is always the next eviction candidate.
    """

    def __init__(self, capacity: int = config.STREAM_CACHE_SIZE) -> None:
        if capacity < 1:
            raise ValueError(f"Cache capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._data: OrderedDict[Hashable, V] = OrderedDict()

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: Hashable) -> bool:
        # Membership checks do not count as an access.
        return key in self._data

    def keys(self) -> List[Hashable]:
        """Keys from least to most recently used."""
        return list(self._data.keys())

    def get(self, key: Hashable) -> Optional[V]:
        if key not in self._data:
            return None
        self._data.move_to_end(key)
        return self._data[key]

    def put(self, key: Hashable, value: V) -> None:
        if key in self._data:
            self._data.move_to_end(key)
        self._data[key] = value
        while len(self._data) > self.capacity:
            evicted, _ = self._data.popitem(last=False)
            logger.debug("Evicted view for %r (capacity %d)", evicted, self.capacity)

    def get_or_create(self, key: Hashable, factory: Callable[[Hashable], V]) -> V:
        if key in self._data:
            self._data.move_to_end(key)
            return self._data[key]
        value = factory(key)
        self.put(key, value)
        return value

    def clear(self) -> None:
        self._data.clear()
