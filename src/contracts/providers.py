"""
Provider Protocols - collaborator interfaces consumed by the analysis core.

Upstream schemas belong to third parties; only the fields the pipeline reads are named here.
"""

from typing import Any, Dict, Protocol, TYPE_CHECKING, runtime_checkable

if TYPE_CHECKING:
    from src.analyzer.dataclasses import MarketSentiment, TechnicalIndicators


@runtime_checkable
class PriceProvider(Protocol):
    """Returns ``{usd, usd_24h_change, usd_market_cap, last_updated_at}`` for one coin id."""

    name: str

    async def fetch_spot_price(self, symbol_id: str) -> Dict[str, Any]: ...


@runtime_checkable
class HistoryProvider(Protocol):
    """Returns ``{prices, total_volumes, market_caps}``, each a list of ``[timestamp_ms, value]``."""

    name: str

    async def fetch_market_chart(self, symbol_id: str, days: int, interval: str) -> Dict[str, Any]: ...


@runtime_checkable
class NewsProvider(Protocol):
    """Returns ``{status, results: [{title, description, link, source_name, pubDate, image_url}], nextPage}``."""

    name: str

    async def fetch_news(self, query: str, size: int, page: str | None = None) -> Dict[str, Any]: ...


@runtime_checkable
class NarrativeFormatter(Protocol):
    """Turns computed indicators and sentiment into a human-readable market summary."""

    def generate_narrative(self, indicators: "TechnicalIndicators", sentiment: "MarketSentiment") -> str: ...
