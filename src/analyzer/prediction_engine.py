from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from src.analyzer.dataclasses import HORIZONS, MarketSentiment, PredictionSet, PriceTarget, TechnicalIndicators
from src.indicators.constants import INDICATOR_THRESHOLDS
from src.logger.logger import Logger


@dataclass(frozen=True, slots=True)
class HorizonProfile:
    volatility_factor: float         # Share of annualized volatility applied to the price
    boundary_factor: float           # Share of the distance to support/resistance
    momentum_multiplier: float
    support_clamp: float             # low >= support * support_clamp
    resistance_clamp: float          # high <= resistance * resistance_clamp
    weights: Tuple[float, float, float, float]  # rsi, macd, trend, volatility
    time_decay: float


HORIZON_PROFILES: Dict[str, HorizonProfile] = {
    "24H": HorizonProfile(0.1, 0.2, 1, 1.0, 1.0, (0.4, 0.3, 0.2, 0.1), 1.0),
    "7D": HorizonProfile(0.2, 0.4, 2, 0.95, 1.05, (0.3, 0.3, 0.3, 0.1), 0.9),
    "30D": HorizonProfile(0.3, 0.6, 3, 0.9, 1.1, (0.2, 0.2, 0.4, 0.2), 0.8),
}

MIN_CONFIDENCE = 30.0
MAX_CONFIDENCE = 95.0


class PredictionEngine:
    """Heuristic price ranges and confidence for the 24H, 7D and 30D horizons."""

    def __init__(self, logger: Optional[Logger] = None) -> None:
        self.logger = logger

    def predict(self, indicators: TechnicalIndicators, sentiment: Optional[MarketSentiment] = None) -> PredictionSet:
        price = indicators.current_price
        volatility_fraction = indicators.volatility / 100
        momentum = _relative(indicators.ma20 - indicators.ma50, indicators.ma50)
        trend_strength = abs(_relative(price - indicators.ma50, indicators.ma50))
        momentum_bias = momentum * price * 0.1

        targets = {}
        for horizon in HORIZONS:
            profile = HORIZON_PROFILES[horizon]
            volatility_range = price * volatility_fraction * profile.volatility_factor
            support_range = abs(price - indicators.support) * profile.boundary_factor
            resistance_range = abs(indicators.resistance - price) * profile.boundary_factor
            bias = momentum_bias * profile.momentum_multiplier

            low = max(indicators.support * profile.support_clamp, price - volatility_range - support_range + bias)
            high = min(indicators.resistance * profile.resistance_clamp,
                       price + volatility_range + resistance_range + bias)
            # The clamps can cross when momentum pushes the band past a boundary
            low = min(low, high)

            targets[horizon] = PriceTarget(
                low=float(low),
                high=float(high),
                confidence=self.horizon_confidence(indicators, profile, momentum, trend_strength),
            )

        signal_confidence = self.signal_confidence(indicators, sentiment)
        if self.logger:
            self.logger.debug(
                f"Predictions: 24H {targets['24H'].range_text}, 7D {targets['7D'].range_text}, "
                f"30D {targets['30D'].range_text}, signal confidence {signal_confidence:.1f}"
            )
        return PredictionSet(targets=targets, signal_confidence=signal_confidence)

    @staticmethod
    def horizon_confidence(
        indicators: TechnicalIndicators, profile: HorizonProfile, momentum: float, trend_strength: float
    ) -> float:
        rsi_conf = abs(50 - indicators.rsi) / 50
        macd_conf = min(1.0, _ratio(indicators.macd.histogram, indicators.macd.signal))
        trend_conf = min(1.0, trend_strength * 2)
        volatility_conf = 1 - min(1.0, indicators.volatility / 100)

        w_rsi, w_macd, w_trend, w_vol = profile.weights
        base = (rsi_conf * w_rsi + macd_conf * w_macd + trend_conf * w_trend + volatility_conf * w_vol) * 100

        market_factor = 1.1 if momentum > 0 else 0.9 if momentum < 0 else 1.0
        return float(np.clip(base * market_factor * profile.time_decay, MIN_CONFIDENCE, MAX_CONFIDENCE))

    @staticmethod
    def signal_confidence(indicators: TechnicalIndicators, sentiment: Optional[MarketSentiment] = None) -> float:
        """Overall confidence in the current signals: RSI, MACD, volume and news, damped by volatility."""
        rsi = indicators.rsi
        rsi_th = INDICATOR_THRESHOLDS['rsi']
        if rsi > rsi_th['overbought'] or rsi < rsi_th['oversold']:
            rsi_conf = 90.0
        elif rsi > rsi_th['bullish'] or rsi < rsi_th['bearish']:
            rsi_conf = 75.0
        else:
            rsi_conf = 50.0

        macd_conf = min(100.0, _ratio(indicators.macd.histogram, indicators.macd.signal) * 100)

        vol_th = INDICATOR_THRESHOLDS['volume_ratio']
        ratio = indicators.volume_ratio
        if ratio > vol_th['very_high']:
            volume_conf = 90.0
        elif ratio > vol_th['high']:
            volume_conf = 80.0
        elif ratio > vol_th['above_average']:
            volume_conf = 70.0
        elif ratio > vol_th['normal']:
            volume_conf = 50.0
        else:
            volume_conf = 30.0

        sentiment_conf = sentiment.news_score if sentiment is not None else 50.0
        volatility_factor = max(0.5, 1 - indicators.volatility / 100)

        weighted = (rsi_conf * 0.25 + macd_conf * 0.25 + volume_conf * 0.2 + sentiment_conf * 0.2) * volatility_factor
        return float(np.clip(weighted, MIN_CONFIDENCE, MAX_CONFIDENCE))


def _relative(delta: float, base: float) -> float:
    return delta / base if base > 0 else 0.0


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return 1.0 if numerator != 0 else 0.0
    return abs(numerator) / abs(denominator)
