"""Thread-safe store of fetch outcomes keyed by URI.

Workers write outcomes concurrently; the draining consumer blocks on a
per-URI event instead of polling. A URI is reserved before it is fetched
so that two batches sharing one cache never fetch it twice.
"""

from __future__ import annotations

import logging
import threading

from .types import FetchOutcome

logger = logging.getLogger(__name__)


class DereferenceCache:
    """Mapping of URI to its last known FetchOutcome."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._outcomes: dict[str, FetchOutcome] = {}
        self._events: dict[str, threading.Event] = {}
        self._reserved: set[str] = set()

    def _event(self, uri: str) -> threading.Event:
        # Caller holds the lock
        event = self._events.get(uri)
        if event is None:
            event = self._events[uri] = threading.Event()
        return event

    def get(self, uri: str) -> FetchOutcome | None:
        with self._lock:
            return self._outcomes.get(uri)

    def put(self, outcome: FetchOutcome) -> None:
        """Store an outcome and wake anyone waiting on its URI."""
        with self._lock:
            self._outcomes[outcome.uri] = outcome
            self._reserved.discard(outcome.uri)
            event = self._event(outcome.uri)
        event.set()

    def reserve(self, uri: str) -> bool:
        """Claim a URI for fetching.

        Returns False if it is already cached or claimed by another worker.
        """
        with self._lock:
            if uri in self._outcomes or uri in self._reserved:
                return False
            self._reserved.add(uri)
            self._event(uri)
            return True

    def release(self, uri: str) -> None:
        """Drop a claim that will never produce an outcome."""
        with self._lock:
            self._reserved.discard(uri)

    def is_pending(self, uri: str) -> bool:
        with self._lock:
            return uri in self._reserved

    def wait_for(self, uri: str, timeout: float | None = None) -> FetchOutcome | None:
        """Block until an outcome for ``uri`` is stored, or ``timeout`` elapses.

        Returns None on timeout.
        """
        with self._lock:
            outcome = self._outcomes.get(uri)
            if outcome is not None:
                return outcome
            event = self._event(uri)
        if timeout is not None and timeout <= 0:
            return None
        if not event.wait(timeout):
            logger.debug("Timed out waiting for outcome", extra={"uri": uri})
            return None
        return self.get(uri)

    def clear(self) -> None:
        with self._lock:
            self._outcomes.clear()
            self._reserved.clear()
            self._events.clear()

    def __contains__(self, uri: object) -> bool:
        with self._lock:
            return uri in self._outcomes

    def __len__(self) -> int:
        with self._lock:
            return len(self._outcomes)

    def __repr__(self) -> str:
        return f"DereferenceCache({len(self)} outcomes)"
