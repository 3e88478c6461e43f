"""
Tests for the per-collection TTL cache.
"""

import pytest

from core.storage import Collection, CollectionCache


@pytest.fixture
def cache(clock):
    return CollectionCache(ttl_ms=5000, clock=clock)


def test_serves_value_within_ttl(cache, clock):
    cache.put(Collection.TOPICS, ["a"])
    clock.advance(4.999)

    assert cache.get(Collection.TOPICS) == ["a"]


def test_expires_at_ttl(cache, clock):
    cache.put(Collection.TOPICS, ["a"])
    clock.advance(5.0)

    assert cache.get(Collection.TOPICS) is None
    assert Collection.TOPICS not in cache


def test_empty_collections_are_cached(cache):
    cache.put(Collection.POSTS, [])
    cache.put(Collection.USERS, {})

    assert cache.get(Collection.POSTS) == []
    assert cache.get(Collection.USERS) == {}


def test_entries_are_timestamped_independently(cache, clock):
    cache.put(Collection.FORUMS, ["old"])
    clock.advance(3)
    cache.put(Collection.POSTS, ["new"])
    clock.advance(3)

    assert cache.get(Collection.FORUMS) is None
    assert cache.get(Collection.POSTS) == ["new"]


def test_put_refreshes_timestamp(cache, clock):
    cache.put(Collection.TOPICS, ["a"])
    clock.advance(4)
    cache.put(Collection.TOPICS, ["b"])
    clock.advance(4)

    assert cache.get(Collection.TOPICS) == ["b"]


def test_clear_drops_everything(cache):
    cache.put(Collection.TOPICS, ["a"])
    cache.put(Collection.USERS, {"u": 1})

    cache.clear()

    assert cache.get(Collection.TOPICS) is None
    assert cache.get(Collection.USERS) is None


def test_ttl_is_configurable(clock):
    cache = CollectionCache(ttl_ms=100, clock=clock)
    cache.put(Collection.MESSAGES, ["m"])
    clock.advance(0.1)

    assert cache.ttl_ms == 100
    assert cache.get(Collection.MESSAGES) is None
