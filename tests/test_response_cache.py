import pytest

from src.platforms.response_cache import CacheCategory, ResponseCache


def test_set_then_get_returns_entry(clock):
    cache = ResponseCache(clock=clock)
    cache.set("coingecko:bitcoin:kind=price", {"usd": 50000})

    entry = cache.get("coingecko:bitcoin:kind=price")
    assert entry.data == {"usd": 50000}
    assert entry.timestamp == clock.now
    assert "coingecko:bitcoin:kind=price" in cache
    assert len(cache) == 1


def test_entry_expires_after_ttl(clock):
    cache = ResponseCache(clock=clock)
    cache.set("k", 1)

    clock.advance(4 * 60)
    assert cache.get_fresh("k", CacheCategory.PRICE) is not None

    clock.advance(60)
    # Age equal to the TTL is no longer fresh
    assert cache.get_fresh("k", CacheCategory.PRICE) is None
    # Expired entries stay available as fallbacks
    assert cache.get("k").data == 1


def test_configured_ttls_override_defaults(clock):
    cache = ResponseCache(ttls={"price": 10}, clock=clock)
    assert cache.ttl_for("price") == 10
    assert cache.ttl_for(CacheCategory.NEWS) == 30 * 60
    assert cache.ttl_for(CacheCategory.HISTORY) == 30 * 60


def test_unknown_category_rejected():
    with pytest.raises(ValueError):
        ResponseCache().ttl_for("orderbook")


def test_make_key_is_order_independent():
    first = ResponseCache.make_key("newsdata", "Bitcoin", page=2, limit=5)
    second = ResponseCache.make_key("newsdata", "bitcoin", limit=5, page=2)
    assert first == second == "newsdata:bitcoin:limit=5:page=2"


def test_set_replaces_existing_entry(clock):
    cache = ResponseCache(clock=clock)
    cache.set("k", "old")
    clock.advance(30)
    cache.set("k", "new")
    assert cache.get("k").data == "new"
    assert cache.get("k").timestamp == clock.now
    cache.clear()
    assert len(cache) == 0
