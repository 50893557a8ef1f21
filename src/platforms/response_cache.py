"""
Response Cache
In-memory store of raw upstream responses with per-category freshness windows.
"""
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from src.logger.logger import Logger


class CacheCategory(str, Enum):
    PRICE = "price"
    NEWS = "news"
    HISTORY = "history"


DEFAULT_TTLS: Dict[str, float] = {
    CacheCategory.PRICE.value: 5 * 60,
    CacheCategory.NEWS.value: 30 * 60,
    CacheCategory.HISTORY.value: 30 * 60,
}


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Cached payload and the wall-clock second it was stored."""
    data: Any
    timestamp: float

    def age(self, now: float) -> float:
        return now - self.timestamp


class ResponseCache:
    """Key -> CacheEntry map. Entries are replaced on ``set`` and never evicted."""

    def __init__(
        self,
        ttls: Optional[Mapping[str, float]] = None,
        logger: Optional[Logger] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttls: Dict[str, float] = dict(DEFAULT_TTLS)
        if ttls:
            self.ttls.update({str(k): float(v) for k, v in ttls.items()})
        self.logger = logger
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    @staticmethod
    def make_key(provider: str, symbol: str, **params: Any) -> str:
        """Build ``provider:symbol[:k=v...]`` with params sorted so call order never matters."""
        key = f"{provider}:{symbol.lower()}"
        if params:
            key += ":" + ":".join(f"{name}={params[name]}" for name in sorted(params))
        return key

    def ttl_for(self, category: CacheCategory | str) -> float:
        name = category.value if isinstance(category, CacheCategory) else str(category)
        try:
            return self.ttls[name]
        except KeyError:
            raise ValueError(f"Unknown cache category: {name}") from None

    def now(self) -> float:
        return self._clock()

    def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def set(self, key: str, data: Any) -> CacheEntry:
        entry = CacheEntry(data=data, timestamp=self._clock())
        self._entries[key] = entry
        if self.logger:
            self.logger.debug(f"Cached response for {key}")
        return entry

    def is_fresh(self, entry: Optional[CacheEntry], ttl: float) -> bool:
        """An entry is usable while its age is strictly below the TTL."""
        if entry is None:
            return False
        return entry.age(self._clock()) < ttl

    def get_fresh(self, key: str, category: CacheCategory | str) -> Optional[CacheEntry]:
        entry = self.get(key)
        return entry if self.is_fresh(entry, self.ttl_for(category)) else None

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
