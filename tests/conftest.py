import sys
import pytest
from unittest.mock import MagicMock

import numpy as np

# Create the mock config object
mock_config = MagicMock()
mock_config.LOGGER_DEBUG = False
mock_config.LOG_DIR = "logs"
mock_config.HISTORY_DAYS = 200
mock_config.NEWS_LIMIT = 5
mock_config.DEFAULT_SYMBOL = "bitcoin"
mock_config.COINGECKO_API_KEY = None
mock_config.NEWSDATA_API_KEY = "test-key"
mock_config.DASHBOARD_CORS_ORIGINS = []
mock_config.get_config.return_value = {}
mock_config.get_env.return_value = None

# Create a mock module for src.config.loader
mock_loader_module = MagicMock()
mock_loader_module.config = mock_config
mock_loader_module.Config = MagicMock(return_value=mock_config)

# Patch sys.modules to return our mock
sys.modules['src.config.loader'] = mock_loader_module


class FakeClock:
    """Manually advanced clock; ``sleep`` moves time forward instead of waiting."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def logger():
    return MagicMock()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sample_prices():
    return np.array([100, 102, 101, 105, 110, 108, 115, 120, 118, 125], dtype=np.float64)


def market_chart_payload(prices, volumes=None, start_ms=1_700_000_000_000, step_ms=86_400_000):
    """CoinGecko market_chart shaped payload for ``prices``."""
    timestamps = [start_ms + i * step_ms for i in range(len(prices))]
    volumes = volumes if volumes is not None else [1000.0] * len(prices)
    return {
        "prices": [[t, float(p)] for t, p in zip(timestamps, prices)],
        "total_volumes": [[t, float(v)] for t, v in zip(timestamps, volumes)],
        "market_caps": [[t, float(p) * 1_000_000] for t, p in zip(timestamps, prices)],
    }


def news_payload(titles, next_page=None):
    """NewsData shaped payload with one result per title."""
    return {
        "status": "success",
        "totalResults": len(titles),
        "results": [
            {
                "title": title,
                "description": "",
                "link": f"https://news.example/{i}",
                "source_id": "example",
                "pubDate": "2024-03-01 12:00:00",
            }
            for i, title in enumerate(titles)
        ],
        "nextPage": next_page,
    }
