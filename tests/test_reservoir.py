"""Tests for the bounded reservoir sampler.

Covers the fill phase, replacement with keyed-index maintenance, the
bounded size, and the uniform inclusion probability capacity / N.
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import random
from collections import Counter

import pytest

from ldderef.errors import ConfigurationError
from ldderef.reservoir import ReservoirSampler


class _AlwaysReplace(random.Random):
    """Picks slot 0 every time, so every new item replaces slot 0."""

    def randrange(self, *args, **kwargs):
        return 0


class _NeverReplace(random.Random):
    """Picks a slot beyond the capacity, so no item is ever replaced."""

    def randrange(self, stop, *args, **kwargs):
        return stop - 1


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    @pytest.mark.parametrize("capacity", [0, -1, 2.5, True, "3"])
    def test_rejects_non_positive_capacity(self, capacity):
        with pytest.raises(ConfigurationError):
            ReservoirSampler(capacity)

    def test_starts_empty(self):
        r = ReservoirSampler(3)
        assert len(r) == 0
        assert r.items() == []
        assert r.observed == 0


# ---------------------------------------------------------------------------
# Fill phase
# ---------------------------------------------------------------------------

class TestFill:
    def test_keeps_everything_below_capacity(self):
        r = ReservoirSampler(5)
        for i in range(4):
            assert r.observe(i) is True
        assert r.items() == [0, 1, 2, 3]
        assert r.observed == 4

    def test_items_is_a_fresh_snapshot(self):
        r = ReservoirSampler(3)
        r.observe("a")
        snapshot = r.items()
        snapshot.append("tampered")
        assert r.items() == ["a"]
        assert r.items() is not r.items()


# ---------------------------------------------------------------------------
# Replacement
# ---------------------------------------------------------------------------

class TestReplacement:
    def test_observed_counts_every_call(self):
        r = ReservoirSampler(2, rng=_NeverReplace())
        for i in range(10):
            r.observe(i)
        assert r.observed == 10
        assert r.items() == [0, 1]

    def test_never_exceeds_capacity(self):
        r = ReservoirSampler(7, rng=random.Random(3))
        for i in range(10_000):
            r.observe(i)
        assert len(r) == 7

    def test_replacement_overwrites_one_slot(self):
        r = ReservoirSampler(2, rng=_AlwaysReplace())
        r.observe("a")
        r.observe("b")
        assert r.observe("c") is True
        assert r.items() == ["c", "b"]

    def test_rejected_item_reports_false(self):
        r = ReservoirSampler(1, rng=_NeverReplace())
        r.observe("a")
        assert r.observe("b") is False
        assert r.items() == ["a"]


# ---------------------------------------------------------------------------
# Keyed lookup
# ---------------------------------------------------------------------------

class TestKeyedLookup:
    def test_find_returns_held_item(self):
        r = ReservoirSampler(3, key=lambda s: s.lower())
        r.observe("Alpha")
        assert r.find("alpha") == "Alpha"
        assert r.find("beta") is None
        assert "alpha" in r

    def test_eviction_removes_key_from_index(self):
        r = ReservoirSampler(1, key=lambda s: s, rng=_AlwaysReplace())
        r.observe("a")
        r.observe("b")
        assert r.find("a") is None
        assert r.find("b") == "b"
        assert "a" not in r

    def test_find_without_key_function_is_an_error(self):
        r = ReservoirSampler(1)
        with pytest.raises(TypeError):
            r.find("x")


# ---------------------------------------------------------------------------
# Uniformity
# ---------------------------------------------------------------------------

class TestUniformity:
    def test_inclusion_frequency_converges_to_capacity_over_n(self):
        capacity, n, runs = 5, 20, 4000
        rng = random.Random(1234)
        counts: Counter = Counter()
        for _ in range(runs):
            r = ReservoirSampler(capacity, rng=rng)
            for i in range(n):
                r.observe(i)
            counts.update(r.items())

        expected = capacity / n
        for i in range(n):
            assert counts[i] / runs == pytest.approx(expected, abs=0.04)
        assert sum(counts.values()) == capacity * runs
