import pytest
from unittest.mock import AsyncMock, MagicMock

from src.analyzer.analysis_engine import AnalysisEngine
from src.app import CryptoSenseiApp
from src.platforms.market_data_fetcher import MarketDataFetcher


@pytest.fixture
def app_config():
    cfg = MagicMock()
    cfg.COINGECKO_BASE_URL = "https://api.coingecko.com/api/v3"
    cfg.COINGECKO_API_KEY = None
    cfg.NEWSDATA_BASE_URL = "https://newsdata.io/api/1/news"
    cfg.NEWSDATA_API_KEY = None
    cfg.REQUEST_TIMEOUT = 15.0
    cfg.COINGECKO_REQUEST_DELAY = 6.0
    cfg.NEWSDATA_REQUEST_DELAY = 12.0
    cfg.CACHE_TTLS = {"price": 300.0, "news": 1800.0, "history": 1800.0}
    cfg.RSI_PERIOD = 14
    cfg.VOLUME_PERIOD = 20
    cfg.SENTIMENT_WEIGHTS = {"lexical": 0.25, "contextual": 0.25, "technical": 0.25, "impact": 0.25}
    cfg.SENTIMENT_THRESHOLD = 0.15
    cfg.PRICE_CHANGE_THRESHOLD = 5.0
    cfg.HISTORY_DAYS = 200
    cfg.NEWS_LIMIT = 5
    cfg.DEFAULT_SYMBOL = "ethereum"
    return cfg


@pytest.mark.asyncio
async def test_initialize_wires_components_from_config(logger, app_config):
    shutdown_manager = MagicMock()
    app = CryptoSenseiApp(logger, app_config, shutdown_manager)

    await app.initialize()

    assert isinstance(app.data_fetcher, MarketDataFetcher)
    assert isinstance(app.analysis_engine, AnalysisEngine)
    assert app.data_fetcher.price_limiter.delay == 6.0
    assert app.data_fetcher.news_limiter.delay == 12.0
    assert app.data_fetcher.price_provider is app.data_fetcher.history_provider
    assert app.cache.ttl_for("price") == 300.0
    assert app.sentiment_engine.threshold == 0.15
    assert app.sentiment_engine.price_change_threshold == 5.0
    shutdown_manager.register_shutdown_callback.assert_called_once_with(app.shutdown)
    logger.warning.assert_called()  # missing NewsData key


@pytest.mark.asyncio
async def test_analyze_uses_default_symbol(logger, app_config):
    app = CryptoSenseiApp(logger, app_config)
    await app.initialize()
    app.analysis_engine.get_full_analysis = AsyncMock(return_value="result")

    assert await app.analyze() == "result"
    app.analysis_engine.get_full_analysis.assert_awaited_once_with("ethereum")


@pytest.mark.asyncio
async def test_shutdown_closes_clients(logger, app_config):
    app = CryptoSenseiApp(logger, app_config)
    await app.initialize()
    app.coingecko_api.close = AsyncMock()
    app.newsdata_api.close = AsyncMock()

    await app.shutdown()

    app.coingecko_api.close.assert_awaited_once()
    app.newsdata_api.close.assert_awaited_once()
