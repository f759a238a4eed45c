"""Bounded recent-event cache used for fast duplicate rejection."""

import pytest

from agrinotify.common.dedupe import RecentEventCache


def test_oldest_entries_are_evicted():
    cache = RecentEventCache(max_entries=3)
    for event_id in ("a", "b", "c", "d"):
        cache.mark_processed(event_id)
    assert len(cache) == 3
    assert "a" not in cache
    assert "d" in cache


def test_seen_refreshes_recency():
    cache = RecentEventCache(max_entries=2)
    cache.mark_processed("a")
    cache.mark_processed("b")
    assert cache.seen("a")
    cache.mark_processed("c")
    assert "a" in cache
    assert "b" not in cache


def test_claim_blocks_second_claim_until_released():
    cache = RecentEventCache()
    assert cache.claim("evt")
    assert not cache.claim("evt")
    cache.release("evt")
    assert cache.claim("evt")
    cache.mark_processed("evt")
    assert not cache.claim("evt")


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        RecentEventCache(max_entries=0)
