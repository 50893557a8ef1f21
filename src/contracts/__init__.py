"""Contracts and protocols for dependency injection"""

from .config import ConfigProtocol
from .providers import HistoryProvider, NarrativeFormatter, NewsProvider, PriceProvider

__all__ = ["ConfigProtocol", "PriceProvider", "HistoryProvider", "NewsProvider", "NarrativeFormatter"]
