import pytest
from hypothesis import given, strategies as st

import config
from tagevents.cache import LRUCache
from tagevents.emitter import Emitter


def make_cache(capacity=3):
    return LRUCache(capacity)


def test_default_capacity_comes_from_config():
    assert LRUCache().capacity == config.STREAM_CACHE_SIZE == 25
    assert Emitter().views.capacity == 25


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        LRUCache(0)


def test_get_or_create_builds_once():
    cache = make_cache()
    built = []

    def factory(key):
        built.append(key)
        return object()

    first = cache.get_or_create("a", factory)
    second = cache.get_or_create("a", factory)
    assert first is second
    assert built == ["a"]


def test_eviction_is_by_access_not_insertion():
    cache = make_cache(3)
    for key in ("a", "b", "c"):
        cache.put(key, key.upper())

    assert cache.get("a") == "A"   # "b" is now the least recently used
    cache.put("d", "D")

    assert "b" not in cache
    assert cache.keys() == ["c", "a", "d"]


def test_membership_check_does_not_refresh():
    cache = make_cache(2)
    cache.put("a", 1)
    cache.put("b", 2)
    assert "a" in cache
    cache.put("c", 3)
    assert "a" not in cache


def test_none_key_is_cached_like_any_other():
    cache = make_cache(2)
    cache.put(None, "all")
    assert cache.get(None) == "all"
    assert None in cache


def test_same_tag_returns_same_view():
    emitter = Emitter()
    assert emitter.on("t") is emitter.on("t")
    assert emitter.on() is emitter.on(None)


def test_view_reused_by_once_and_listen():
    emitter = Emitter()
    view = emitter.on("t")
    emitter.once("t")
    assert emitter.views.keys() == ["t"]
    assert emitter.on("t") is view


def test_least_recent_view_evicted_after_capacity():
    emitter = Emitter(cache_size=25)
    first = emitter.on("tag-0")
    for i in range(1, 26):
        emitter.on(f"tag-{i}")

    assert len(emitter.views) == 25
    assert "tag-0" not in emitter.views
    assert emitter.on("tag-0") is not first


def test_recently_used_view_survives_eviction():
    emitter = Emitter(cache_size=25)
    first = emitter.on("tag-0")
    for i in range(1, 25):
        emitter.on(f"tag-{i}")
    emitter.on("tag-0")          # refresh
    emitter.on("tag-25")         # evicts tag-1 instead

    assert emitter.on("tag-0") is first
    assert "tag-1" not in emitter.views


def test_evicted_view_keeps_existing_subscriptions():
    emitter = Emitter(cache_size=1)
    seen = []
    emitter.on("a", seen.append)
    emitter.on("b")              # evicts the "a" view
    emitter.emit("a", 1)
    assert seen == [1]


@given(
    capacity=st.integers(1, 8),
    keys=st.lists(st.integers(0, 12), max_size=60),
)
def test_cache_never_exceeds_capacity_and_keeps_most_recent(capacity, keys):
    cache = LRUCache(capacity)
    for key in keys:
        cache.get_or_create(key, lambda k: k * 10)
        assert len(cache) <= capacity

    # The surviving keys are exactly the most recently touched distinct ones.
    recent = []
    for key in reversed(keys):
        if key not in recent:
            recent.append(key)
    assert cache.keys() == list(reversed(recent[:capacity]))
