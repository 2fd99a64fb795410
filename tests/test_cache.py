import pytest

from presales_research.cache.store import ContentCache, cache_key


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_cache_key_uses_compact_json():
    assert cache_key("url-content", {"url": "https://acme.com"}) == 'url-content:{"url":"https://acme.com"}'
    assert cache_key("search", ["a", 1]) == 'search:["a",1]'


def test_cache_key_falls_back_to_str_for_unserializable_params():
    marker = object()
    assert cache_key("obj", marker) == f"obj:{marker}"


def test_entries_expire_lazily():
    clock = FakeClock()
    cache = ContentCache(clock=clock)
    cache.set("k", "v", ttl=10)

    assert cache.get("k") == "v"
    clock.now += 10
    assert len(cache) == 1
    assert cache.get("k") is None
    assert len(cache) == 0


def test_purge_expired_counts_removed_entries():
    clock = FakeClock()
    cache = ContentCache(clock=clock)
    cache.set("old", 1, ttl=5)
    cache.set("new", 2, ttl=60)
    clock.now += 30

    assert cache.purge_expired() == 1
    assert "new" in cache
    assert "old" not in cache


@pytest.mark.asyncio
async def test_get_or_fetch_calls_fetcher_once_and_tracks_hit_rate():
    cache = ContentCache()
    calls = []

    async def fetcher():
        calls.append(1)
        return {"title": "Acme"}

    first = await cache.get_or_fetch("k", fetcher)
    second = await cache.get_or_fetch("k", fetcher)

    assert first == second == {"title": "Acme"}
    assert len(calls) == 1
    assert cache.hits == 1 and cache.misses == 1
    assert cache.hit_rate == 0.5


@pytest.mark.asyncio
async def test_get_or_fetch_does_not_store_on_error():
    cache = ContentCache()

    async def failing():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await cache.get_or_fetch("k", failing)
    assert "k" not in cache
    assert len(cache) == 0


def test_hit_rate_is_zero_without_lookups():
    assert ContentCache().hit_rate == 0.0
