"""Tests for the resolved-link cache."""

from __future__ import annotations

from feedlinker.core.search.cache import ResultCache, make_cache_key


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_make_cache_key() -> None:
    assert make_cache_key("Wednesday", "星期三") == "Wednesday|星期三"
    assert make_cache_key("Wednesday") == "Wednesday|"
    assert make_cache_key("Wednesday", "") == "Wednesday|"


def test_set_and_get() -> None:
    cache = ResultCache()
    cache.set("Wednesday|星期三", "https://www.themoviedb.org/tv/119051")

    entry = cache.get("Wednesday|星期三")

    assert entry is not None
    assert entry.resolved_link == "https://www.themoviedb.org/tv/119051"
    assert entry.key == "Wednesday|星期三"


def test_miss_returns_none() -> None:
    assert ResultCache().get("missing|") is None


def test_negative_result_is_an_entry() -> None:
    cache = ResultCache()
    cache.set("Unknown Show|", None)

    entry = cache.get("Unknown Show|")

    assert entry is not None
    assert entry.resolved_link is None
    assert "Unknown Show|" in cache


def test_positive_entry_expires_after_ttl() -> None:
    clock = FakeClock()
    cache = ResultCache(ttl_seconds=100, clock=clock)
    cache.set("a|", "link")

    clock.now += 100
    assert cache.get("a|") is not None

    clock.now += 1
    assert cache.get("a|") is None
    assert len(cache) == 0


def test_negative_entry_uses_shorter_ttl() -> None:
    clock = FakeClock()
    cache = ResultCache(ttl_seconds=100, negative_ttl_seconds=10, clock=clock)
    cache.set("found|", "link")
    cache.set("missing|", None)

    clock.now += 11

    assert cache.get("found|") is not None
    assert cache.get("missing|") is None


def test_capacity_evicts_oldest_first() -> None:
    cache = ResultCache(max_entries=2)
    cache.set("first|", "1")
    cache.set("second|", "2")
    cache.set("third|", "3")

    assert len(cache) == 2
    assert cache.get("first|") is None
    assert cache.get("second|") is not None
    assert cache.get("third|") is not None


def test_refreshing_a_key_moves_it_to_newest() -> None:
    cache = ResultCache(max_entries=2)
    cache.set("first|", "1")
    cache.set("second|", "2")
    cache.set("first|", "1b")
    cache.set("third|", "3")

    assert cache.get("second|") is None
    assert cache.get("first|").resolved_link == "1b"


def test_last_writer_wins() -> None:
    cache = ResultCache()
    cache.set("a|", None)
    cache.set("a|", "link")

    assert cache.get("a|").resolved_link == "link"
    assert len(cache) == 1

