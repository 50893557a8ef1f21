import asyncio
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING

from src.analyzer.dataclasses import AnalysisResult, MarketSentiment, TechnicalIndicators
from src.analyzer.formatting import TemplateNarrativeFormatter, market_summary
from src.analyzer.market_phase import MarketPhaseClassifier
from src.analyzer.prediction_engine import PredictionEngine
from src.analyzer.sentiment import SentimentEngine
from src.analyzer.strategy_generator import StrategyGenerator
from src.analyzer.technical_calculator import TechnicalCalculator
from src.indicators.constants import MA_PERIODS
from src.logger.logger import Logger
from src.platforms.dataclasses import FetchResult
from src.platforms.errors import InsufficientData
from src.platforms.market_data_fetcher import MarketDataFetcher
from src.platforms.symbols import normalize_symbol

if TYPE_CHECKING:
    from src.contracts.config import ConfigProtocol
    from src.contracts.providers import NarrativeFormatter


class AnalysisEngine:
    """Orchestrates market data collection, analysis, and result assembly"""

    def __init__(
        self,
        logger: Logger,
        config: "ConfigProtocol",
        data_fetcher: MarketDataFetcher,
        technical_calculator: TechnicalCalculator,
        sentiment_engine: SentimentEngine,
        prediction_engine: PredictionEngine,
        strategy_generator: StrategyGenerator,
        phase_classifier: Optional[MarketPhaseClassifier] = None,
        narrative_formatter: Optional["NarrativeFormatter"] = None,
    ) -> None:
        """
        Initialize AnalysisEngine with injected dependencies (DI pattern).

        Args:
            logger: Logger instance
            config: Configuration instance (Protocol-based)
            data_fetcher: Rate-limited, cached market data access
            technical_calculator: TechnicalCalculator instance (injected from app.py)
            sentiment_engine: SentimentEngine instance (injected from app.py)
            prediction_engine: PredictionEngine instance (injected from app.py)
            strategy_generator: StrategyGenerator instance (injected from app.py)
            phase_classifier: Market phase and trend classifier, defaults to MarketPhaseClassifier
            narrative_formatter: Optional narrative collaborator; the template formatter is the fallback
        """
        self.logger = logger

        if config is None:
            raise ValueError("config is a required parameter and cannot be None")
        self.config = config

        if data_fetcher is None:
            raise ValueError("data_fetcher is required - must be injected from app.py")
        if technical_calculator is None:
            raise ValueError("technical_calculator is required - must be injected from app.py")
        if sentiment_engine is None:
            raise ValueError("sentiment_engine is required - must be injected from app.py")
        if prediction_engine is None:
            raise ValueError("prediction_engine is required - must be injected from app.py")
        if strategy_generator is None:
            raise ValueError("strategy_generator is required - must be injected from app.py")

        self.history_days = self.config.HISTORY_DAYS
        self.news_limit = self.config.NEWS_LIMIT

        self.data_fetcher = data_fetcher
        self.technical_calculator = technical_calculator
        self.sentiment_engine = sentiment_engine
        self.prediction_engine = prediction_engine
        self.strategy_generator = strategy_generator
        self.phase_classifier = phase_classifier or MarketPhaseClassifier()
        self.template_formatter = TemplateNarrativeFormatter(logger)
        self.narrative_formatter = narrative_formatter or self.template_formatter

        # Latest committed analysis per symbol and the request counters guarding it
        self.latest_results: Dict[str, AnalysisResult] = {}
        self._issued: Dict[str, int] = {}
        self._committed: Dict[str, int] = {}

    async def get_full_analysis(self, symbol: str) -> AnalysisResult:
        """
        Fetch price, history and news concurrently, then run the whole analysis pipeline.

        Never raises for upstream problems: degraded inputs produce a degraded result whose
        ``data_quality`` section lists what went wrong.

        Args:
            symbol: Coin id, e.g. ``bitcoin``

        Returns:
            AnalysisResult for ``symbol``
        """
        coin_id = normalize_symbol(symbol)
        sequence = self._next_sequence(coin_id)
        self.logger.debug(f"Starting analysis #{sequence} for {coin_id}")

        price_result, history_result, news_result = await asyncio.gather(
            self.data_fetcher.get_price(coin_id),
            # History shares the price limiter; wait for it rather than reuse an expired chart
            self.data_fetcher.get_history(coin_id, self.history_days, allow_stale=False),
            self.data_fetcher.get_news(coin_id, page=1, limit=self.news_limit),
        )
        warnings, cached_sources = self._collect_data_quality(
            {"price": price_result, "history": history_result, "news": news_result}
        )

        quote = price_result.data
        history = history_result.data

        for required, purpose in ((2, "Indicator calculation"), (max(MA_PERIODS), "MA200")):
            try:
                self.technical_calculator.check_depth(history.prices, required, purpose)
            except InsufficientData as e:
                self.logger.warning(f"{coin_id}: {e}")
                warnings.append(str(e))
                break

        indicators = self.technical_calculator.get_indicators(
            history.prices, history.volumes, current_price=quote.price
        )
        price_change = quote.change_24h if quote.price > 0 else history.price_change_24h

        scored_news = self.sentiment_engine.analyze_articles(news_result.data.articles, coin_id)
        sentiment = self.sentiment_engine.aggregate([item.sentiment for item in scored_news], price_change)

        trend = self.phase_classifier.assess_trend(indicators.current_price, indicators.ma20, indicators.ma50)
        predictions = self.prediction_engine.predict(indicators, sentiment)
        strategy = self.strategy_generator.generate(indicators, trend, sentiment)

        result = AnalysisResult(
            symbol=coin_id,
            summary=market_summary(coin_id, indicators),
            indicators=indicators,
            sentiment=sentiment,
            predictions=predictions,
            strategy=strategy,
            signals=self.technical_calculator.get_signals(indicators),
            recent_news=scored_news,
            price_change_24h=price_change,
            breakout_potential=self.phase_classifier.breakout_potential(
                indicators.current_price, indicators.support, indicators.resistance
            ),
            warnings=warnings,
            cached_sources=cached_sources,
            sequence=sequence,
            narrative=self._generate_narrative(indicators, sentiment),
        )
        self._commit(coin_id, sequence, result)
        return result

    def get_latest(self, symbol: str) -> Optional[AnalysisResult]:
        return self.latest_results.get(normalize_symbol(symbol))

    def _next_sequence(self, coin_id: str) -> int:
        self._issued[coin_id] = self._issued.get(coin_id, 0) + 1
        return self._issued[coin_id]

    def _commit(self, coin_id: str, sequence: int, result: AnalysisResult) -> None:
        """Store ``result`` unless a later request for the same symbol already completed."""
        if sequence < self._committed.get(coin_id, 0):
            self.logger.debug(
                f"Discarding analysis #{sequence} for {coin_id}; #{self._committed[coin_id]} is newer"
            )
            return
        self._committed[coin_id] = sequence
        self.latest_results[coin_id] = result

    def _collect_data_quality(self, results: Dict[str, FetchResult]) -> Tuple[List[str], List[str]]:
        warnings = []
        cached_sources = []
        for name, result in results.items():
            if result.cached:
                cached_sources.append(name)
            if result.error:
                source = "cached" if result.cached else "empty"
                warnings.append(f"{name}: {result.error} (using {source} data)")
            elif result.stale:
                warnings.append(f"{name}: rate limited, serving stale cached data")
        return warnings, cached_sources

    def _generate_narrative(self, indicators: TechnicalIndicators, sentiment: MarketSentiment) -> str:
        if self.narrative_formatter is not self.template_formatter:
            try:
                narrative = self.narrative_formatter.generate_narrative(indicators, sentiment)
                if isinstance(narrative, str) and narrative.strip():
                    return narrative
                self.logger.warning("Narrative formatter returned no text, using template narrative")
            except Exception as e:
                self.logger.warning(f"Narrative formatter failed, using template narrative: {e}")
        return self.template_formatter.generate_narrative(indicators, sentiment)
