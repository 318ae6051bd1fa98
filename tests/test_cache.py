"""Tests for the query cache."""

from pantrypal.scanner.cache import QueryCache


def test_get_or_load_caches():
    cache = QueryCache()
    calls = []

    def loader():
        calls.append(1)
        return [1, 2]

    assert cache.get_or_load("inventory", loader) == [1, 2]
    assert cache.get_or_load("inventory", loader) == [1, 2]
    assert len(calls) == 1


def test_invalidate_forces_reload():
    cache = QueryCache()
    cache.get_or_load("inventory", lambda: "old")
    cache.invalidate("inventory")
    assert not cache.is_cached("inventory")
    assert cache.get_or_load("inventory", lambda: "new") == "new"


def test_invalidate_uncached_key_notifies():
    cache = QueryCache()
    seen = []
    cache.subscribe("inventory", seen.append)
    cache.invalidate("inventory")
    assert seen == ["inventory"]


def test_failing_listener_does_not_block_others():
    cache = QueryCache()
    seen = []

    def broken(key):
        raise RuntimeError("view gone")

    cache.subscribe("inventory", broken)
    cache.subscribe("inventory", seen.append)
    cache.invalidate("inventory")
    assert seen == ["inventory"]
