"""Bounded reservoir sampling with keyed lookup.

A ReservoirSampler keeps a uniform random sample of at most ``capacity``
items from a stream of unknown length (Algorithm R). After N >= capacity
observations every observed item is present with probability capacity / N;
before that, every item seen so far is kept.

When a ``key`` function is given, the sampler also maintains an index from
key to slot so that ``find(key)`` is O(1). The estimator uses this to merge
repeat sightings of a pay-level domain into the Domain already held rather
than inserting a second one. Replacing a slot is a single overwrite plus an
index update; the evicted item is dropped wholesale.

Single-writer: no internal locking. ``items()`` is meant to be read once
the stream has been fully observed.
"""

from __future__ import annotations

import random
from typing import Callable, Generic, Hashable, Iterator, TypeVar

from .errors import ConfigurationError

T = TypeVar("T")


class ReservoirSampler(Generic[T]):
    """Fixed-capacity uniform sample of a stream of items."""

    def __init__(
        self,
        capacity: int,
        key: Callable[[T], Hashable] | None = None,
        rng: random.Random | None = None,
    ):
        if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity <= 0:
            raise ConfigurationError("capacity", capacity, "must be a positive integer")
        self.capacity = capacity
        self._key = key
        self._rng = rng if rng is not None else random.Random()
        self._slots: list[T] = []
        self._index: dict[Hashable, int] = {}
        self._observed = 0

    # -----------------------------------------------------------------------
    # Stream ingestion
    # -----------------------------------------------------------------------

    def observe(self, item: T) -> bool:
        """Offer one item to the reservoir.

        Returns True if the item now occupies a slot. The observation count
        advances on every call, whether or not the item is kept.
        """
        self._observed += 1

        if len(self._slots) < self.capacity:
            self._slots.append(item)
            if self._key is not None:
                self._index[self._key(item)] = len(self._slots) - 1
            return True

        # Keep with probability capacity / observed, in a uniformly chosen slot
        slot = self._rng.randrange(self._observed)
        if slot >= self.capacity:
            return False

        if self._key is not None:
            evicted = self._slots[slot]
            self._index.pop(self._key(evicted), None)
            self._index[self._key(item)] = slot
        self._slots[slot] = item
        return True

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    def find(self, key: Hashable) -> T | None:
        """Return the held item with this key, or None."""
        if self._key is None:
            raise TypeError("find() requires a sampler constructed with a key function")
        slot = self._index.get(key)
        if slot is None:
            return None
        return self._slots[slot]

    def items(self) -> list[T]:
        """Snapshot of the current sample; a new list on every call."""
        return list(self._slots)

    @property
    def observed(self) -> int:
        """Number of items offered so far."""
        return self._observed

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items())

    def __contains__(self, key: object) -> bool:
        if self._key is None:
            return key in self._slots
        return key in self._index

    def __repr__(self) -> str:
        return (
            f"ReservoirSampler({len(self._slots)}/{self.capacity} held, "
            f"{self._observed} observed)"
        )
