"""Value objects produced by the market data fetch layer."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

import numpy as np

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class PriceQuote:
    """Spot price snapshot for one coin."""
    price: float
    change_24h: float
    market_cap: float
    last_updated: float              # Provider timestamp, unix seconds

    @classmethod
    def empty(cls) -> "PriceQuote":
        return cls(price=0.0, change_24h=0.0, market_cap=0.0, last_updated=0.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "price": self.price,
            "change24h": self.change_24h,
            "marketCap": self.market_cap,
            "lastUpdated": self.last_updated,
        }


@dataclass(frozen=True, eq=False)
class HistoricalData:
    """Aligned, chronologically ascending price/volume series.

    ``prices``, ``volumes`` and ``timestamps`` always have the same length.
    """
    prices: np.ndarray
    volumes: np.ndarray
    timestamps: np.ndarray           # Unix milliseconds
    market_cap: float = 0.0
    price_change_24h: float = 0.0
    total_volume: float = 0.0

    def __post_init__(self) -> None:
        if not (len(self.prices) == len(self.volumes) == len(self.timestamps)):
            raise ValueError(
                f"Series length mismatch: prices={len(self.prices)}, "
                f"volumes={len(self.volumes)}, timestamps={len(self.timestamps)}"
            )
        for name in ("prices", "volumes", "timestamps"):
            arr = getattr(self, name)
            arr.setflags(write=False)

    @classmethod
    def empty(cls) -> "HistoricalData":
        return cls(prices=np.array([], dtype=np.float64),
                   volumes=np.array([], dtype=np.float64),
                   timestamps=np.array([], dtype=np.int64))

    @property
    def current_price(self) -> float:
        return float(self.prices[-1]) if len(self.prices) else 0.0

    def __len__(self) -> int:
        return len(self.prices)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prices": self.prices.tolist(),
            "volumes": self.volumes.tolist(),
            "timestamps": self.timestamps.tolist(),
            "market_cap": self.market_cap,
            "price_change_24h": self.price_change_24h,
            "total_volume": self.total_volume,
        }


@dataclass(frozen=True, slots=True)
class NewsArticle:
    title: str
    description: str
    url: str
    source: str
    timestamp: float                 # Unix milliseconds
    image_url: Optional[str] = None

    @property
    def text(self) -> str:
        """Title and description joined, the unit scored for sentiment."""
        return f"{self.title} {self.description}".strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "source": self.source,
            "timestamp": self.timestamp,
            "imageUrl": self.image_url,
        }


@dataclass(frozen=True, slots=True)
class NewsPage:
    articles: Tuple[NewsArticle, ...] = ()
    has_more: bool = False
    page: int = 1

    @classmethod
    def empty(cls, page: int = 1) -> "NewsPage":
        return cls(articles=(), has_more=False, page=page)


@dataclass(frozen=True, slots=True)
class FetchResult(Generic[T]):
    """Fetched payload plus where it came from.

    ``cached`` marks data served from the cache because the upstream call was skipped or
    failed; ``stale`` additionally marks that the entry was past its TTL.
    """
    data: T
    cached: bool = False
    stale: bool = False
    error: Optional[str] = None
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def degraded(self) -> bool:
        return self.error is not None or self.stale


def news_from_results(results: List[Dict[str, Any]]) -> List[NewsArticle]:
    """Map provider result dicts to NewsArticle, applying the documented placeholders."""
    articles = []
    for item in results:
        articles.append(NewsArticle(
            title=item.get("title") or "No title available",
            description=item.get("description") or "",
            url=item.get("link") or "#",
            source=item.get("source_name") or item.get("source_id") or "Unknown source",
            timestamp=_parse_pub_date(item.get("pubDate")),
            image_url=item.get("image_url"),
        ))
    return articles


def _parse_pub_date(value: Any) -> float:
    if not value:
        return datetime.now(timezone.utc).timestamp() * 1000
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return datetime.now(timezone.utc).timestamp() * 1000
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp() * 1000
