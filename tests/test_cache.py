"""Tests for the dereference cache: storage, reservations, blocking waits."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import threading
import time

import pytest

from ldderef.cache import DereferenceCache
from ldderef.types import FetchOutcome, Hop

URI = "http://example.org/resource"


def _ok(uri: str = URI) -> FetchOutcome:
    return FetchOutcome(uri=uri, status_sequence=(Hop(200),), final_status=200)


@pytest.fixture
def cache():
    return DereferenceCache()


class TestStorage:
    def test_put_and_get(self, cache):
        assert cache.get(URI) is None
        cache.put(_ok())
        assert cache.get(URI).final_status == 200
        assert URI in cache
        assert len(cache) == 1

    def test_clear(self, cache):
        cache.put(_ok())
        cache.clear()
        assert len(cache) == 0
        assert cache.get(URI) is None


class TestReservations:
    def test_second_reservation_is_refused(self, cache):
        assert cache.reserve(URI) is True
        assert cache.reserve(URI) is False
        assert cache.is_pending(URI)

    def test_cached_uri_cannot_be_reserved(self, cache):
        cache.put(_ok())
        assert cache.reserve(URI) is False

    def test_put_clears_reservation(self, cache):
        cache.reserve(URI)
        cache.put(_ok())
        assert not cache.is_pending(URI)

    def test_release_allows_new_reservation(self, cache):
        cache.reserve(URI)
        cache.release(URI)
        assert cache.reserve(URI) is True


class TestWaitFor:
    def test_returns_cached_outcome_immediately(self, cache):
        cache.put(_ok())
        assert cache.wait_for(URI, timeout=0).final_status == 200

    def test_times_out_with_none(self, cache):
        started = time.monotonic()
        assert cache.wait_for(URI, timeout=0.05) is None
        assert time.monotonic() - started < 2

    def test_zero_timeout_does_not_block(self, cache):
        assert cache.wait_for(URI, timeout=0) is None

    def test_woken_by_concurrent_put(self, cache):
        timer = threading.Timer(0.05, cache.put, args=(_ok(),))
        timer.start()
        try:
            outcome = cache.wait_for(URI, timeout=5)
        finally:
            timer.cancel()
        assert outcome is not None
        assert outcome.final_status == 200

    def test_concurrent_writers(self, cache):
        uris = [f"http://example.org/{i}" for i in range(200)]
        threads = [
            threading.Thread(target=lambda chunk=uris[i::4]: [cache.put(_ok(u)) for u in chunk])
            for i in range(4)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(cache) == 200
        assert all(cache.wait_for(u, timeout=0) is not None for u in uris)
