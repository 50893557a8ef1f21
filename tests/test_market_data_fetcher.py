import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import numpy as np

from conftest import market_chart_payload, news_payload
from src.platforms.dataclasses import PriceQuote
from src.platforms.errors import RateLimitExceeded, UpstreamUnavailable
from src.platforms.market_data_fetcher import MarketDataFetcher, calculate_price_change
from src.platforms.rate_limiter import RateLimiter
from src.platforms.response_cache import ResponseCache

PRICE_PAYLOAD = {"usd": 50000.0, "usd_24h_change": 2.5, "usd_market_cap": 1e12, "last_updated_at": 1700000000}


def make_provider(name, **methods):
    provider = MagicMock()
    provider.name = name
    for method, mock in methods.items():
        setattr(provider, method, mock)
    return provider


@pytest.fixture
def coingecko():
    return make_provider(
        "coingecko",
        fetch_spot_price=AsyncMock(return_value=dict(PRICE_PAYLOAD)),
        fetch_market_chart=AsyncMock(return_value=market_chart_payload([100, 101, 102])),
    )


@pytest.fixture
def newsdata():
    return make_provider("newsdata", fetch_news=AsyncMock(return_value=news_payload(["Bitcoin rallies"])))


@pytest.fixture
def cache(clock):
    return ResponseCache(clock=clock)


@pytest.fixture
def fetcher(logger, coingecko, newsdata, cache, clock):
    return MarketDataFetcher(
        logger=logger,
        price_provider=coingecko,
        history_provider=coingecko,
        news_provider=newsdata,
        cache=cache,
        price_limiter=RateLimiter("coingecko", 0, clock=clock),
        news_limiter=RateLimiter("newsdata", 0, clock=clock),
    )


PRICE_KEY = "coingecko:bitcoin:kind=price"


@pytest.mark.asyncio
async def test_fresh_price_is_fetched_and_cached(fetcher, coingecko, cache):
    result = await fetcher.get_price("bitcoin")

    assert result.data == PriceQuote(price=50000.0, change_24h=2.5, market_cap=1e12, last_updated=1700000000.0)
    assert not result.cached
    assert result.error is None
    coingecko.fetch_spot_price.assert_awaited_once_with("bitcoin")
    assert cache.get(PRICE_KEY).data.price == 50000.0


@pytest.mark.asyncio
async def test_fresh_cache_entry_skips_provider(fetcher, coingecko, cache, clock):
    cache.set(PRICE_KEY, PriceQuote(price=42000.0, change_24h=1.0, market_cap=0.0, last_updated=0.0))
    clock.advance(120)
    coingecko.fetch_spot_price.side_effect = UpstreamUnavailable("down", provider="coingecko")

    result = await fetcher.get_price("bitcoin")

    assert result.data.price == 42000.0
    assert result.cached
    assert not result.stale
    assert result.error is None
    coingecko.fetch_spot_price.assert_not_called()


@pytest.mark.asyncio
async def test_expired_entry_is_fallback_on_upstream_error(fetcher, coingecko, cache, clock):
    cache.set(PRICE_KEY, PriceQuote(price=42000.0, change_24h=1.0, market_cap=0.0, last_updated=0.0))
    clock.advance(10 * 60)
    coingecko.fetch_spot_price.side_effect = RateLimitExceeded("429", provider="coingecko", retry_after=60)

    result = await fetcher.get_price("bitcoin")

    assert result.data.price == 42000.0
    assert result.cached and result.stale
    assert result.error
    assert result.degraded


@pytest.mark.asyncio
async def test_error_without_cache_returns_empty_default(fetcher, coingecko):
    coingecko.fetch_spot_price.side_effect = UpstreamUnavailable("timeout", provider="coingecko")

    result = await fetcher.get_price("bitcoin")

    assert result.data == PriceQuote.empty()
    assert not result.cached
    assert "timeout" in result.error


@pytest.mark.asyncio
async def test_malformed_payload_does_not_poison_cache(fetcher, coingecko, cache):
    coingecko.fetch_spot_price.return_value = {"eur": 1.0}

    result = await fetcher.get_price("bitcoin")

    assert result.data == PriceQuote.empty()
    assert result.error
    assert PRICE_KEY not in cache


@pytest.mark.asyncio
async def test_rate_limited_request_serves_stale_entry(logger, coingecko, newsdata, cache, clock):
    limiter = RateLimiter("coingecko", 6.0, clock=clock)
    fetcher = MarketDataFetcher(logger, coingecko, coingecko, newsdata, cache, limiter,
                                RateLimiter("newsdata", 0, clock=clock))
    cache.set(PRICE_KEY, PriceQuote(price=42000.0, change_24h=0.0, market_cap=0.0, last_updated=0.0))
    clock.advance(10 * 60)
    await limiter.wait_for_next()

    result = await fetcher.get_price("bitcoin")

    assert result.data.price == 42000.0
    assert result.cached and result.stale
    assert result.error is None
    coingecko.fetch_spot_price.assert_not_called()


@pytest.mark.asyncio
async def test_ticker_resolves_to_coin_id(fetcher, coingecko):
    await fetcher.get_price("BTC")
    coingecko.fetch_spot_price.assert_awaited_once_with("bitcoin")


@pytest.mark.asyncio
async def test_history_interval_depends_on_days(fetcher, coingecko):
    await fetcher.get_history("bitcoin", 200)
    coingecko.fetch_market_chart.assert_awaited_with("bitcoin", 200, "daily")

    await fetcher.get_history("bitcoin", 7)
    coingecko.fetch_market_chart.assert_awaited_with("bitcoin", 7, "hourly")


@pytest.mark.asyncio
async def test_history_aligns_sorts_and_caps_series(fetcher, coingecko):
    prices = list(range(1, 251))
    payload = market_chart_payload(prices)
    payload["prices"].reverse()
    payload["total_volumes"] = payload["total_volumes"][1:]
    coingecko.fetch_market_chart.return_value = payload

    history = (await fetcher.get_history("bitcoin", 250)).data

    assert len(history) == 200
    assert len(history.volumes) == len(history.timestamps) == 200
    assert np.all(np.diff(history.timestamps) > 0)
    assert history.current_price == 250.0
    assert history.price_change_24h == round((250 - 249) / 249 * 100, 2)
    assert history.market_cap == 250.0 * 1_000_000
    assert history.total_volume == 1000.0


@pytest.mark.asyncio
async def test_history_without_volumes_uses_zeros(fetcher, coingecko):
    payload = market_chart_payload([10, 11, 12])
    payload["total_volumes"] = []
    coingecko.fetch_market_chart.return_value = payload

    history = (await fetcher.get_history("bitcoin", 3)).data

    assert history.prices.tolist() == [10.0, 11.0, 12.0]
    assert history.volumes.tolist() == [0.0, 0.0, 0.0]


def test_calculate_price_change():
    assert calculate_price_change(np.array([100.0, 105.0])) == 5.0
    assert calculate_price_change(np.array([100.0])) == 0.0
    assert calculate_price_change(np.array([0.0, 5.0])) == 0.0
    assert calculate_price_change(np.array([300.0, 100.0, 90.0])) == -10.0


@pytest.mark.asyncio
async def test_news_limit_is_capped(fetcher, newsdata):
    result = await fetcher.get_news("bitcoin", limit=50)

    newsdata.fetch_news.assert_awaited_once_with("bitcoin OR BTC", 10, None)
    assert result.data.articles[0].title == "Bitcoin rallies"
    assert result.data.articles[0].source == "example"


@pytest.mark.asyncio
async def test_news_page_uses_cursor_from_previous_page(fetcher, newsdata):
    newsdata.fetch_news.return_value = news_payload(["First"], next_page="cursor-2")
    first = await fetcher.get_news("bitcoin", page=1)
    assert first.data.has_more

    newsdata.fetch_news.return_value = news_payload(["Second"])
    second = await fetcher.get_news("bitcoin", page=2)

    newsdata.fetch_news.assert_awaited_with("bitcoin OR BTC", 5, "cursor-2")
    assert second.data.page == 2
    assert second.data.articles[0].title == "Second"
    assert not second.data.has_more


@pytest.mark.asyncio
async def test_news_page_unavailable_before_previous_page(fetcher, newsdata):
    result = await fetcher.get_news("bitcoin", page=3)

    assert result.data.articles == ()
    assert result.error
    newsdata.fetch_news.assert_not_called()


@pytest.mark.asyncio
async def test_history_waits_for_limiter_instead_of_going_stale(logger, coingecko, newsdata, cache, clock):
    limiter = RateLimiter("coingecko", 6.0, clock=clock)
    fetcher = MarketDataFetcher(logger, coingecko, coingecko, newsdata, cache, limiter,
                                RateLimiter("newsdata", 0, clock=clock))

    with patch("src.platforms.rate_limiter.asyncio.sleep", side_effect=clock.sleep):
        for _ in range(5):
            price, history = await asyncio.gather(
                fetcher.get_price("bitcoin"),
                fetcher.get_history("bitcoin", 200, allow_stale=False),
            )
            assert not price.stale
            assert not history.cached and not history.stale
            clock.advance(40 * 60)

    assert coingecko.fetch_spot_price.await_count == 5
    assert coingecko.fetch_market_chart.await_count == 5


@pytest.mark.asyncio
async def test_history_defaults_to_stale_when_limiter_is_busy(logger, coingecko, newsdata, cache, clock):
    limiter = RateLimiter("coingecko", 6.0, clock=clock)
    fetcher = MarketDataFetcher(logger, coingecko, coingecko, newsdata, cache, limiter,
                                RateLimiter("newsdata", 0, clock=clock))
    await fetcher.get_history("bitcoin", 200)
    clock.advance(40 * 60)

    await fetcher.get_price("bitcoin")
    history = await fetcher.get_history("bitcoin", 200)

    assert history.cached and history.stale
    assert coingecko.fetch_market_chart.await_count == 1


@pytest.mark.asyncio
async def test_news_cursor_expires_with_news_ttl(fetcher, newsdata, clock):
    newsdata.fetch_news.return_value = news_payload(["First"], next_page="cursor-2")
    await fetcher.get_news("bitcoin", page=1)
    clock.advance(31 * 60)

    result = await fetcher.get_news("bitcoin", page=2)

    assert result.data.articles == ()
    assert result.error
    newsdata.fetch_news.assert_awaited_once_with("bitcoin OR BTC", 5, None)


@pytest.mark.asyncio
async def test_expired_news_cursors_are_pruned(fetcher, newsdata, clock):
    newsdata.fetch_news.return_value = news_payload(["First"], next_page="cursor-btc")
    await fetcher.get_news("bitcoin", page=1)
    clock.advance(31 * 60)

    newsdata.fetch_news.return_value = news_payload(["Other"], next_page="cursor-eth")
    await fetcher.get_news("ethereum", page=1)

    assert list(fetcher._news_page_tokens) == [("ethereum", 2)]


@pytest.mark.asyncio
async def test_cached_news_page_served_after_cursor_expires(fetcher, newsdata, clock):
    newsdata.fetch_news.return_value = news_payload(["First"], next_page="cursor-2")
    await fetcher.get_news("bitcoin", page=1)
    newsdata.fetch_news.return_value = news_payload(["Second"])
    await fetcher.get_news("bitcoin", page=2)
    clock.advance(31 * 60)

    result = await fetcher.get_news("bitcoin", page=2)

    assert result.data.articles[0].title == "Second"
    assert result.cached and result.stale
    assert newsdata.fetch_news.await_count == 2
