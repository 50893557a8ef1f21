import time
from typing import Any, Optional

from src.analyzer.analysis_engine import AnalysisEngine
from src.analyzer.dataclasses import AnalysisResult
from src.analyzer.market_phase import MarketPhaseClassifier
from src.analyzer.prediction_engine import PredictionEngine
from src.analyzer.sentiment import SentimentEngine
from src.analyzer.strategy_generator import StrategyGenerator
from src.analyzer.technical_calculator import TechnicalCalculator
from src.logger.logger import Logger
from src.platforms.coingecko import CoinGeckoAPI
from src.platforms.market_data_fetcher import MarketDataFetcher
from src.platforms.newsdata import NewsDataAPI
from src.platforms.rate_limiter import RateLimiter
from src.platforms.response_cache import ResponseCache


class CryptoSenseiApp:
    """Composition root: builds the fetch layer and analysis pipeline and owns their lifetime."""

    def __init__(self, logger: Logger, config, shutdown_manager: Optional[Any] = None):
        self.logger = logger
        self.config = config
        self.shutdown_manager = shutdown_manager
        self.coingecko_api: Optional[CoinGeckoAPI] = None
        self.newsdata_api: Optional[NewsDataAPI] = None
        self.cache: Optional[ResponseCache] = None
        self.data_fetcher: Optional[MarketDataFetcher] = None
        self.sentiment_engine: Optional[SentimentEngine] = None
        self.analysis_engine: Optional[AnalysisEngine] = None
        self._initialized = False

    async def initialize(self):
        """Initialize all components."""
        if self._initialized:
            return
        start_time = time.perf_counter()

        if self.shutdown_manager:
            self.shutdown_manager.register_shutdown_callback(self.shutdown)

        self.logger.info("Initializing CryptoSensei...")

        # Initialize API Clients
        self.coingecko_api = CoinGeckoAPI(
            logger=self.logger,
            base_url=self.config.COINGECKO_BASE_URL,
            api_key=self.config.COINGECKO_API_KEY,
            timeout=self.config.REQUEST_TIMEOUT,
        )
        self.newsdata_api = NewsDataAPI(
            logger=self.logger,
            api_key=self.config.NEWSDATA_API_KEY,
            base_url=self.config.NEWSDATA_BASE_URL,
            timeout=self.config.REQUEST_TIMEOUT,
        )
        if not self.config.NEWSDATA_API_KEY:
            self.logger.warning("NEWSDATA_API_KEY not set - news and sentiment will be empty")

        # One limiter per upstream provider; prices and history share CoinGecko's
        self.cache = ResponseCache(ttls=self.config.CACHE_TTLS, logger=self.logger)
        coingecko_limiter = RateLimiter("coingecko", self.config.COINGECKO_REQUEST_DELAY, logger=self.logger)
        newsdata_limiter = RateLimiter("newsdata", self.config.NEWSDATA_REQUEST_DELAY, logger=self.logger)

        self.data_fetcher = MarketDataFetcher(
            logger=self.logger,
            price_provider=self.coingecko_api,
            history_provider=self.coingecko_api,
            news_provider=self.newsdata_api,
            cache=self.cache,
            price_limiter=coingecko_limiter,
            news_limiter=newsdata_limiter,
        )
        self.logger.debug("MarketDataFetcher initialized")

        phase_classifier = MarketPhaseClassifier()
        technical_calculator = TechnicalCalculator(
            logger=self.logger,
            rsi_period=self.config.RSI_PERIOD,
            volume_period=self.config.VOLUME_PERIOD,
            phase_classifier=phase_classifier,
        )
        self.sentiment_engine = SentimentEngine(
            logger=self.logger,
            weights=self.config.SENTIMENT_WEIGHTS,
            threshold=self.config.SENTIMENT_THRESHOLD,
            price_change_threshold=self.config.PRICE_CHANGE_THRESHOLD,
        )

        self.analysis_engine = AnalysisEngine(
            logger=self.logger,
            config=self.config,
            data_fetcher=self.data_fetcher,
            technical_calculator=technical_calculator,
            sentiment_engine=self.sentiment_engine,
            prediction_engine=PredictionEngine(logger=self.logger),
            strategy_generator=StrategyGenerator(logger=self.logger),
            phase_classifier=phase_classifier,
        )

        self._initialized = True
        elapsed = time.perf_counter() - start_time
        self.logger.info(f"CryptoSensei initialized in {elapsed:.2f}s")

    async def analyze(self, symbol: Optional[str] = None) -> AnalysisResult:
        """Run a full analysis for ``symbol`` (config default when omitted)."""
        if not self._initialized:
            await self.initialize()
        symbol = symbol or self.config.DEFAULT_SYMBOL
        self.logger.info(f"Analyzing {symbol}...")
        return await self.analysis_engine.get_full_analysis(symbol)

    async def shutdown(self):
        self.logger.info("Shutting down gracefully...")
        for client in (self.coingecko_api, self.newsdata_api):
            if client is not None:
                await client.close()
        self._initialized = False
        self.logger.info("Shutdown complete")
