"""
Market Data Fetcher
Rate-limited, cached access to spot prices, price history and news.

Every public method returns a FetchResult and never raises: a failed upstream call falls
back to the previous cache entry, and without one to an empty default.
"""
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar

import numpy as np

from src.contracts.providers import HistoryProvider, NewsProvider, PriceProvider
from src.logger.logger import Logger
from src.platforms.dataclasses import (
    FetchResult, HistoricalData, NewsPage, PriceQuote, news_from_results,
)
from src.platforms.errors import InvalidUpstreamShape, MarketDataError
from src.platforms.rate_limiter import RateLimiter
from src.platforms.response_cache import CacheCategory, ResponseCache
from src.platforms.symbols import news_query_for, normalize_symbol

T = TypeVar("T")

MAX_HISTORY_POINTS = 200
MAX_NEWS_LIMIT = 10
DAILY_INTERVAL_THRESHOLD_DAYS = 30


class MarketDataFetcher:
    """Fetch facade over the price, history and news providers."""

    def __init__(
        self,
        logger: Logger,
        price_provider: PriceProvider,
        history_provider: HistoryProvider,
        news_provider: NewsProvider,
        cache: ResponseCache,
        price_limiter: RateLimiter,
        news_limiter: RateLimiter,
    ) -> None:
        """
        Args:
            price_provider: Source of spot quotes
            history_provider: Source of market charts, usually the same client as prices
            news_provider: Source of news articles
            cache: Shared response cache
            price_limiter: Limiter shared by the price and history providers
            news_limiter: Limiter for the news provider
        """
        self.logger = logger
        self.price_provider = price_provider
        self.history_provider = history_provider
        self.news_provider = news_provider
        self.cache = cache
        self.price_limiter = price_limiter
        self.news_limiter = news_limiter
        # (symbol, page) -> (provider cursor that fetches that page, time it was stored)
        self._news_page_tokens: Dict[Tuple[str, int], Tuple[str, float]] = {}

    async def get_price(self, symbol: str, allow_stale: bool = True) -> FetchResult[PriceQuote]:
        coin_id = normalize_symbol(symbol)
        key = self.cache.make_key(self._provider_name(self.price_provider), coin_id, kind="price")
        return await self._fetch(
            key=key,
            category=CacheCategory.PRICE,
            limiter=self.price_limiter,
            call=lambda: self.price_provider.fetch_spot_price(coin_id),
            parse=_parse_price,
            default=PriceQuote.empty,
            label=f"price for {coin_id}",
            allow_stale=allow_stale,
        )

    async def get_history(
        self, symbol: str, days: int = MAX_HISTORY_POINTS, allow_stale: bool = True
    ) -> FetchResult[HistoricalData]:
        coin_id = normalize_symbol(symbol)
        days = max(1, int(days))
        interval = "daily" if days > DAILY_INTERVAL_THRESHOLD_DAYS else "hourly"
        key = self.cache.make_key(self._provider_name(self.history_provider), coin_id, kind="history", days=days)
        return await self._fetch(
            key=key,
            category=CacheCategory.HISTORY,
            limiter=self.price_limiter,
            call=lambda: self.history_provider.fetch_market_chart(coin_id, days, interval),
            parse=_parse_history,
            default=HistoricalData.empty,
            label=f"history for {coin_id} ({days}d, {interval})",
            allow_stale=allow_stale,
        )

    async def get_news(
        self, symbol: str, page: int = 1, limit: int = 5, allow_stale: bool = True
    ) -> FetchResult[NewsPage]:
        coin_id = normalize_symbol(symbol)
        page = max(1, int(page))
        limit = min(max(1, int(limit)), MAX_NEWS_LIMIT)
        key = self.cache.make_key(self._provider_name(self.news_provider), coin_id, kind="news", page=page, limit=limit)

        token = None
        if page > 1:
            token = self._page_token(coin_id, page)
            if token is None:
                entry = self.cache.get(key)
                if entry is None:
                    # Provider pages are cursor based; page N is reachable only after page N-1
                    self.logger.warning(f"News page {page} for {coin_id} requested before page {page - 1}")
                    return FetchResult(data=NewsPage.empty(page), error=f"Page {page} is not available yet")
                # Without a live cursor the cached page is all there is
                fresh = self.cache.is_fresh(entry, self.cache.ttl_for(CacheCategory.NEWS))
                return FetchResult(data=entry.data, cached=True, stale=not fresh, fetched_at=_entry_time(entry))

        async def call() -> Dict[str, Any]:
            return await self.news_provider.fetch_news(news_query_for(coin_id), limit, token)

        def parse(raw: Dict[str, Any]) -> NewsPage:
            news_page = _parse_news(raw, page)
            next_token = raw.get("nextPage")
            if next_token:
                self._remember_page_token(coin_id, page + 1, str(next_token))
            return news_page

        return await self._fetch(
            key=key,
            category=CacheCategory.NEWS,
            limiter=self.news_limiter,
            call=call,
            parse=parse,
            default=lambda: NewsPage.empty(page),
            label=f"news for {coin_id} (page {page})",
            allow_stale=allow_stale,
        )

    def _remember_page_token(self, coin_id: str, page: int, token: str) -> None:
        """Store the cursor for ``page`` and drop cursors older than the news TTL."""
        now = self.cache.now()
        ttl = self.cache.ttl_for(CacheCategory.NEWS)
        self._news_page_tokens = {
            key: stored for key, stored in self._news_page_tokens.items() if now - stored[1] < ttl
        }
        self._news_page_tokens[(coin_id, page)] = (token, now)

    def _page_token(self, coin_id: str, page: int) -> Optional[str]:
        stored = self._news_page_tokens.get((coin_id, page))
        if stored is None:
            return None
        token, saved_at = stored
        if self.cache.now() - saved_at >= self.cache.ttl_for(CacheCategory.NEWS):
            del self._news_page_tokens[(coin_id, page)]
            return None
        return token

    async def _fetch(
        self,
        key: str,
        category: CacheCategory,
        limiter: RateLimiter,
        call: Callable[[], Awaitable[Any]],
        parse: Callable[[Any], T],
        default: Callable[[], T],
        label: str,
        allow_stale: bool = True,
    ) -> FetchResult[T]:
        entry = self.cache.get(key)
        if self.cache.is_fresh(entry, self.cache.ttl_for(category)):
            self.logger.debug(f"Using cached {label}")
            return FetchResult(data=entry.data, cached=True, fetched_at=_entry_time(entry))

        # allow_stale=False queues behind the limiter instead of reusing an expired entry
        if allow_stale and entry is not None and not limiter.can_make_request():
            self.logger.debug(f"Rate limited, using stale cached {label}")
            return FetchResult(data=entry.data, cached=True, stale=True, fetched_at=_entry_time(entry))

        await limiter.wait_for_next()
        self.logger.debug(f"Fetching fresh {label}...")
        try:
            data = parse(await call())
        except MarketDataError as e:
            self.logger.error(f"Error fetching {label}: {e}")
            if entry is not None:
                self.logger.warning(f"Using cached {label} as fallback after API failure")
                return FetchResult(
                    data=entry.data, cached=True, stale=True, error=str(e), fetched_at=_entry_time(entry)
                )
            return FetchResult(data=default(), error=str(e))

        self.cache.set(key, data)
        return FetchResult(data=data)

    @staticmethod
    def _provider_name(provider: Any) -> str:
        return getattr(provider, "name", type(provider).__name__.lower())


def _entry_time(entry) -> datetime:
    return datetime.fromtimestamp(entry.timestamp, tz=timezone.utc)


def _parse_price(raw: Dict[str, Any]) -> PriceQuote:
    try:
        return PriceQuote(
            price=float(raw["usd"]),
            change_24h=float(raw.get("usd_24h_change") or 0.0),
            market_cap=float(raw.get("usd_market_cap") or 0.0),
            last_updated=float(raw.get("last_updated_at") or 0.0),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidUpstreamShape(f"Malformed price payload: {e}") from e


def _series(raw: Dict[str, Any], name: str) -> List[List[float]]:
    points = raw.get(name) or []
    if not isinstance(points, list):
        raise InvalidUpstreamShape(f"'{name}' is not a list")
    return points


def _parse_history(raw: Dict[str, Any]) -> HistoricalData:
    try:
        prices = np.asarray(_series(raw, "prices"), dtype=np.float64).reshape(-1, 2)
        volumes = np.asarray(_series(raw, "total_volumes"), dtype=np.float64).reshape(-1, 2)
        market_caps = np.asarray(_series(raw, "market_caps"), dtype=np.float64).reshape(-1, 2)
    except (TypeError, ValueError) as e:
        raise InvalidUpstreamShape(f"Malformed market chart payload: {e}") from e

    order = np.argsort(prices[:, 0], kind="stable")
    prices = prices[order]
    if len(volumes):
        volumes = volumes[np.argsort(volumes[:, 0], kind="stable")]
        # Providers occasionally return one extra or one missing point per series
        n = min(len(prices), len(volumes))
        prices, volumes = prices[-n:], volumes[-n:]
        volume_values = volumes[:, 1].copy()
    else:
        volume_values = np.zeros(len(prices), dtype=np.float64)

    prices = prices[-MAX_HISTORY_POINTS:]
    volume_values = volume_values[-MAX_HISTORY_POINTS:]

    return HistoricalData(
        prices=prices[:, 1].copy(),
        volumes=volume_values.copy(),
        timestamps=prices[:, 0].astype(np.int64),
        market_cap=float(market_caps[np.argmax(market_caps[:, 0]), 1]) if len(market_caps) else 0.0,
        price_change_24h=calculate_price_change(prices[:, 1]),
        total_volume=float(volume_values[-1]) if len(volume_values) else 0.0,
    )


def calculate_price_change(prices: np.ndarray) -> float:
    """Percent change between the last two points, rounded to 2 decimals."""
    if len(prices) < 2 or prices[-2] == 0:
        return 0.0
    return round(float((prices[-1] - prices[-2]) / prices[-2] * 100), 2)


def _parse_news(raw: Dict[str, Any], page: int) -> NewsPage:
    results = raw.get("results")
    if not isinstance(results, list):
        raise InvalidUpstreamShape("News payload has no results list")
    articles = news_from_results([item for item in results if isinstance(item, dict)])
    return NewsPage(articles=tuple(articles), has_more=raw.get("nextPage") is not None, page=page)
