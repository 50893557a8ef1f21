from typing import List, Optional

import numpy as np

from src.analyzer.dataclasses import MacdResult, Signal, TechnicalIndicators
from src.analyzer.market_phase import MarketPhaseClassifier
from src.indicators.constants import (
    INDICATOR_THRESHOLDS, MACD_FAST, MACD_SIGNAL, MACD_SLOW, OBV_LOOKBACK, RSI_PERIOD, VOLUME_PERIOD,
)
from src.indicators.momentum import macd_numba, rsi_numba, stoch_rsi_numba
from src.indicators.overlap import ema_numba, sma_last_numba
from src.indicators.volatility import support_resistance, volatility_numba
from src.indicators.volume import obv_trend, volume_ratio_numba
from src.logger.logger import Logger
from src.platforms.errors import InsufficientData


class TechnicalCalculator:
    """Core calculator for technical indicators"""

    def __init__(
        self,
        logger: Optional[Logger] = None,
        rsi_period: int = RSI_PERIOD,
        volume_period: int = VOLUME_PERIOD,
        phase_classifier: Optional[MarketPhaseClassifier] = None,
    ):
        """Initialize the technical indicator calculator"""
        self.logger = logger
        self.rsi_period = rsi_period
        self.volume_period = volume_period
        self.phase_classifier = phase_classifier or MarketPhaseClassifier()

    def get_indicators(
        self,
        prices: np.ndarray,
        volumes: Optional[np.ndarray] = None,
        current_price: Optional[float] = None,
    ) -> TechnicalIndicators:
        """Calculate all technical indicators - no caching, always fresh

        Args:
            prices: Closing prices, oldest first
            volumes: Volumes aligned with ``prices``
            current_price: Live spot price; replaces the last close for price-relative values when positive
        """
        close = _as_float_array(prices)
        volume = _as_float_array(volumes) if volumes is not None else np.zeros(len(close))

        if len(close) < self.rsi_period + 1 and self.logger:
            self.logger.debug(
                f"Only {len(close)} price points available, indicators use the shorter history"
            )

        if not current_price or current_price <= 0:
            current_price = float(close[-1]) if len(close) else 0.0
        ma20 = self.sma(close, 20)
        ma50 = self.sma(close, 50)
        ma200 = self.sma(close, 200)
        support, resistance = support_resistance(close)

        return TechnicalIndicators(
            current_price=current_price,
            rsi=self.rsi(close, self.rsi_period),
            macd=self.macd(close),
            ma20=ma20,
            ma50=ma50,
            ma200=ma200,
            volume_ratio=self.volume_ratio(volume, self.volume_period),
            volatility=self.volatility(close),
            support=support,
            resistance=resistance,
            market_phase=self.phase_classifier.classify(current_price, ma50, ma200),
            stoch_rsi=self.stoch_rsi(close, self.rsi_period),
            obv_trend=self.obv_trend(close, volume),
            current_volume=float(volume[-1]) if len(volume) else 0.0,
            data_points=len(close),
        )

    @staticmethod
    def check_depth(prices: np.ndarray, required: int, purpose: str) -> None:
        """Raise InsufficientData when fewer than ``required`` points are available."""
        available = len(prices)
        if available < required:
            raise InsufficientData(
                f"{purpose} needs {required} price points, only {available} available; "
                f"using the shorter history",
                required=required,
                available=available,
            )

    @staticmethod
    def rsi(prices: np.ndarray, period: int = RSI_PERIOD) -> float:
        return float(rsi_numba(_as_float_array(prices), period))

    @staticmethod
    def ema(prices: np.ndarray, period: int) -> np.ndarray:
        return ema_numba(_as_float_array(prices), period)

    @staticmethod
    def sma(prices: np.ndarray, period: int) -> float:
        return float(sma_last_numba(_as_float_array(prices), period))

    @staticmethod
    def macd(prices: np.ndarray) -> MacdResult:
        close = _as_float_array(prices)
        if len(close) == 0:
            return MacdResult(value=0.0, signal=0.0, histogram=0.0, interpretation=interpret_macd(0.0, 0.0, 0.0))

        macd_line, signal_line, histogram = macd_numba(close, MACD_FAST, MACD_SLOW, MACD_SIGNAL)
        value, signal, hist = float(macd_line[-1]), float(signal_line[-1]), float(histogram[-1])
        return MacdResult(value=value, signal=signal, histogram=hist, interpretation=interpret_macd(value, signal, hist))

    @staticmethod
    def stoch_rsi(prices: np.ndarray, period: int = RSI_PERIOD) -> float:
        return float(stoch_rsi_numba(_as_float_array(prices), period))

    @staticmethod
    def obv_trend(prices: np.ndarray, volumes: np.ndarray) -> str:
        close = _as_float_array(prices)
        volume = _as_float_array(volumes)
        n = min(len(close), len(volume))
        return obv_trend(close[-n:] if n else close[:0], volume[-n:] if n else volume[:0], OBV_LOOKBACK)

    @staticmethod
    def volume_ratio(volumes: np.ndarray, period: int = VOLUME_PERIOD) -> float:
        return float(volume_ratio_numba(_as_float_array(volumes), period))

    @staticmethod
    def volatility(prices: np.ndarray) -> float:
        return float(volatility_numba(_as_float_array(prices)))

    @staticmethod
    def support_resistance(prices: np.ndarray):
        return support_resistance(_as_float_array(prices))

    def get_signals(self, indicators: TechnicalIndicators) -> List[Signal]:
        """Readable indicator signals with a 0-1 strength each."""
        rsi_th = INDICATOR_THRESHOLDS['rsi']
        stoch_th = INDICATOR_THRESHOLDS['stoch_rsi']
        rsi = indicators.rsi
        stoch = indicators.stoch_rsi
        return [
            Signal("RSI", rsi, interpret_rsi(rsi),
                   0.8 if rsi > rsi_th['overbought'] or rsi < rsi_th['oversold'] else 0.5),
            Signal("MACD", indicators.macd.value, indicators.macd.interpretation,
                   0.8 if abs(indicators.macd.histogram) > INDICATOR_THRESHOLDS['macd']['strong_histogram'] else 0.5),
            Signal("StochRSI", stoch, interpret_stoch_rsi(stoch),
                   0.8 if stoch > stoch_th['extremely_overbought'] or stoch < stoch_th['extremely_oversold'] else 0.5),
            Signal("OBV", 0.0, indicators.obv_trend, 0.5),
            Signal("Market Phase", 0.0, indicators.market_phase, 0.7),
        ]


def interpret_rsi(rsi: float) -> str:
    th = INDICATOR_THRESHOLDS['rsi']
    if rsi >= th['overbought']:
        return 'Overbought - Consider taking profits'
    if rsi <= th['oversold']:
        return 'Oversold - Potential buying opportunity'
    if rsi >= th['bullish']:
        return 'Bullish momentum building'
    if rsi <= th['bearish']:
        return 'Bearish pressure present'
    return 'Neutral momentum'


def interpret_stoch_rsi(stoch_rsi: float) -> str:
    th = INDICATOR_THRESHOLDS['stoch_rsi']
    if stoch_rsi > th['extremely_overbought']:
        return 'Extremely overbought'
    if stoch_rsi > th['overbought']:
        return 'Overbought'
    if stoch_rsi < th['extremely_oversold']:
        return 'Extremely oversold'
    if stoch_rsi < th['oversold']:
        return 'Oversold'
    return 'Neutral'


def interpret_macd(macd: float, signal: float, histogram: float) -> str:
    th = INDICATOR_THRESHOLDS['macd']
    strong = abs(histogram) > th['strong_histogram_ratio'] * abs(macd)
    if histogram > 0:
        interpretation = 'Strong bullish momentum' if strong else 'Bullish momentum'
    else:
        interpretation = 'Strong bearish momentum' if strong else 'Bearish momentum'

    if macd > 0 and signal > 0:
        interpretation += ', upward trend'
    elif macd < 0 and signal < 0:
        interpretation += ', downward trend'

    if abs(macd - signal) < th['reversal_gap']:
        interpretation += ', potential trend reversal'

    return interpretation


def _as_float_array(values) -> np.ndarray:
    if values is None:
        return np.empty(0, dtype=np.float64)
    return np.ascontiguousarray(values, dtype=np.float64)
