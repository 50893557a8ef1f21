"""Router for raw market data: spot price, price history and scored news."""
import time
from typing import Any, Dict

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from src.platforms.dataclasses import FetchResult
from src.utils.serialize import serialize_for_json


def _fetch_response(result: FetchResult, body: Dict[str, Any]) -> Any:
    """Attach fetch metadata to ``body``; an error with nothing cached becomes a 503."""
    body["cached"] = result.cached
    body["timestamp"] = int(time.time() * 1000)
    if result.stale:
        body["stale"] = True
    if result.error:
        body["error"] = (
            "Using cached data due to API error" if result.cached
            else f"Failed to fetch data. Please try again later. ({result.error})"
        )
        if not result.cached:
            return JSONResponse(status_code=503, content=serialize_for_json(body))
    return serialize_for_json(body)


class MarketRouter:
    """Handles endpoints for prices, history and news."""
    def __init__(self, logger, data_fetcher, sentiment_engine):
        self.router = APIRouter(prefix="/api", tags=["market"])
        self.logger = logger
        self.data_fetcher = data_fetcher
        self.sentiment_engine = sentiment_engine

        self.router.add_api_route("/crypto/price/{coin_id}", self.get_price, methods=["GET"])
        self.router.add_api_route("/crypto/history/{coin_id}", self.get_history, methods=["GET"])
        self.router.add_api_route("/news/{coin_id}", self.get_news, methods=["GET"])

    async def get_price(self, coin_id: str):
        """Get the USD spot price, 24h change and market cap."""
        result = await self.data_fetcher.get_price(coin_id)
        return _fetch_response(result, result.data.to_dict())

    async def get_history(self, coin_id: str, days: int = Query(1, ge=1, le=365)):
        """Get aligned price, volume and timestamp series for the last ``days`` days."""
        result = await self.data_fetcher.get_history(coin_id, days)
        return _fetch_response(result, result.data.to_dict())

    async def get_news(self, coin_id: str, page: int = Query(1, ge=1), limit: int = Query(5, ge=1)):
        """Get recent news with per-article sentiment. ``limit`` is capped at 10."""
        result = await self.data_fetcher.get_news(coin_id, page=page, limit=limit)
        news_page = result.data
        scored = self.sentiment_engine.analyze_articles(news_page.articles, coin_id)
        return _fetch_response(result, {
            "articles": [item.to_dict() for item in scored],
            "page": news_page.page,
            "hasMore": news_page.has_more,
        })
