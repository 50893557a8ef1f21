import math
from typing import List, Optional, Tuple

from src.analyzer.dataclasses import MarketSentiment, TechnicalIndicators, TradingStrategy, TrendAssessment
from src.analyzer.technical_calculator import interpret_rsi, interpret_stoch_rsi
from src.indicators.constants import INDICATOR_THRESHOLDS, VOLUME_PERIOD
from src.logger.logger import Logger
from src.utils.format_utils import round_price

STOP_LOSS_PCTS = {"tight": 0.02, "normal": 0.03, "wide": 0.05}
TARGET_PCTS = {"primary": 0.03, "secondary": 0.05, "final": 0.08}
MAX_CONSERVATIVE_DISCOUNT = 0.05
MAX_AGGRESSIVE_PREMIUM = 0.03
FALLBACK_AGGRESSIVE_PREMIUM = 0.02
MAX_CONFIDENCE = 95.0


class StrategyGenerator:
    """Derives entries, stops, targets and a recommendation from the analysis outputs."""

    def __init__(self, logger: Optional[Logger] = None) -> None:
        self.logger = logger

    def generate(
        self,
        indicators: TechnicalIndicators,
        trend: TrendAssessment,
        sentiment: Optional[MarketSentiment] = None,
    ) -> TradingStrategy:
        price = indicators.current_price
        if not price or math.isnan(price) or price < 0:
            if self.logger:
                self.logger.warning(f"Invalid current price {price!r}, using default strategy")
            return self.default_strategy()

        volatility = indicators.volatility / 100
        conservative = max(indicators.support, price * (1 - min(MAX_CONSERVATIVE_DISCOUNT, volatility)))
        aggressive = min(price * (1 + min(MAX_AGGRESSIVE_PREMIUM, volatility)), indicators.resistance)
        if not aggressive or math.isnan(aggressive):
            aggressive = price * (1 + FALLBACK_AGGRESSIVE_PREMIUM)

        recommendation, confidence = self.determine_recommendation(indicators, trend)

        return TradingStrategy(
            recommendation=recommendation,
            confidence=confidence,
            entries={
                "conservative": round_price(conservative),
                "moderate": round_price(price),
                "aggressive": round_price(aggressive),
            },
            stop_loss={name: round_price(price * (1 - pct)) for name, pct in STOP_LOSS_PCTS.items()},
            targets={name: round_price(price * (1 + pct)) for name, pct in TARGET_PCTS.items()},
            timeframe=self.determine_timeframe(indicators, trend),
            rationale=tuple(self.generate_rationale(indicators, trend, sentiment)),
        )

    @staticmethod
    def determine_recommendation(indicators: TechnicalIndicators, trend: TrendAssessment) -> Tuple[str, float]:
        rsi = indicators.rsi
        rsi_th = INDICATOR_THRESHOLDS['rsi']
        phase = indicators.market_phase.lower()

        if rsi > rsi_th['overbought'] and trend.primary == "bullish":
            recommendation, confidence = "Take Profit", min(85.0, rsi)
        elif rsi < rsi_th['oversold'] and trend.primary == "bearish":
            recommendation, confidence = "Buy", min(85.0, 100 - rsi)
        elif phase == "accumulation" and rsi < rsi_th['bearish']:
            recommendation, confidence = "Buy", 65.0
        elif phase == "distribution" and rsi > rsi_th['bullish']:
            recommendation, confidence = "Sell", 65.0
        else:
            recommendation, confidence = "Hold", 50.0

        histogram = indicators.macd.histogram
        if (recommendation == "Buy" and histogram > 0) or (recommendation == "Sell" and histogram < 0):
            confidence += 10

        return recommendation, min(MAX_CONFIDENCE, round(confidence, 2))

    @staticmethod
    def determine_timeframe(indicators: TechnicalIndicators, trend: TrendAssessment) -> str:
        if indicators.volatility > INDICATOR_THRESHOLDS['volatility']['high']:
            return "Short-term"
        if trend.strength > 0.7:
            return "Long-term"
        return "Medium-term"

    @staticmethod
    def generate_rationale(
        indicators: TechnicalIndicators, trend: TrendAssessment, sentiment: Optional[MarketSentiment] = None
    ) -> List[str]:
        """Indicator readouts, strongest first. Ties keep their listed order."""
        macd = indicators.macd
        macd_strength = min(1.0, abs(macd.histogram) / abs(macd.signal)) if macd.signal else float(macd.histogram != 0)
        phase_label = f"Strong {indicators.market_phase} phase" if trend.strength > 0.6 else f"{indicators.market_phase} phase"

        readouts = [
            (abs(indicators.rsi - 50) / 50, f"RSI: {interpret_rsi(indicators.rsi)}"),
            (macd_strength, f"MACD: {macd.interpretation}"),
            (abs(indicators.stoch_rsi - 50) / 50, f"STOCHRSI: {interpret_stoch_rsi(indicators.stoch_rsi)}"),
            (trend.strength, phase_label),
            (min(1.0, abs(indicators.volume_ratio - 1)),
             f"Volume: {indicators.volume_ratio:.2f}x the {VOLUME_PERIOD}-period average ({indicators.obv_trend} OBV)"),
        ]
        if sentiment is not None:
            readouts.append((
                abs(sentiment.average_score),
                f"Sentiment: {sentiment.market_mood} news ({sentiment.news_score:.0f}% positive), "
                f"{sentiment.price_sentiment} price action",
            ))

        return [text for _, text in sorted(readouts, key=lambda item: -item[0])]

    @staticmethod
    def default_strategy() -> TradingStrategy:
        return TradingStrategy(
            recommendation="Hold",
            confidence=50.0,
            entries={"conservative": 0.0, "moderate": 0.0, "aggressive": 0.0},
            stop_loss={"tight": 0.0, "normal": 0.0, "wide": 0.0},
            targets={"primary": 0.0, "secondary": 0.0, "final": 0.0},
            timeframe="Medium-term",
            rationale=("Using default strategy due to insufficient data",),
        )
