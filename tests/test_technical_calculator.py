import numpy as np
import pytest

from src.analyzer.market_phase import ACCUMULATION, BULL_MARKET
from src.analyzer.technical_calculator import TechnicalCalculator, interpret_macd, interpret_rsi, interpret_stoch_rsi
from src.platforms.errors import InsufficientData


@pytest.fixture
def calculator(logger):
    return TechnicalCalculator(logger=logger)


def test_short_series_produces_full_snapshot(calculator, sample_prices):
    volumes = np.full(len(sample_prices), 1000.0)
    indicators = calculator.get_indicators(sample_prices, volumes)

    assert indicators.data_points == 10
    assert indicators.current_price == 125.0
    assert 0 <= indicators.rsi <= 100
    # Every moving average falls back to the mean of the whole series
    assert indicators.ma20 == pytest.approx(110.4)
    assert indicators.ma50 == pytest.approx(110.4)
    assert indicators.ma200 == pytest.approx(110.4)
    assert (indicators.support, indicators.resistance) == (102.0, 118.0)
    assert indicators.market_phase == ACCUMULATION
    assert indicators.stoch_rsi == 50.0
    assert indicators.volume_ratio == pytest.approx(1.0)
    assert indicators.current_volume == 1000.0


def test_live_price_replaces_last_close(calculator, sample_prices):
    indicators = calculator.get_indicators(sample_prices, current_price=130.0)
    assert indicators.current_price == 130.0

    indicators = calculator.get_indicators(sample_prices, current_price=0.0)
    assert indicators.current_price == 125.0


def test_flat_series(calculator):
    indicators = calculator.get_indicators(np.full(30, 250.0), np.full(30, 10.0))
    assert indicators.volatility == 0.0
    assert indicators.support == indicators.resistance == 250.0
    assert indicators.macd.value == pytest.approx(0.0)


def test_long_uptrend_is_bull_market(calculator):
    prices = np.linspace(100, 300, 250)
    indicators = calculator.get_indicators(prices, np.full(250, 5.0))
    assert indicators.market_phase == BULL_MARKET
    assert indicators.ma20 > indicators.ma50 > indicators.ma200
    assert indicators.rsi == 100.0


def test_empty_series_does_not_raise(calculator):
    indicators = calculator.get_indicators(np.array([]), np.array([]))
    assert indicators.current_price == 0.0
    assert indicators.rsi == 50.0
    assert indicators.data_points == 0


def test_check_depth():
    TechnicalCalculator.check_depth(np.arange(200), 200, "MA200")
    with pytest.raises(InsufficientData) as ctx:
        TechnicalCalculator.check_depth(np.arange(10), 200, "MA200")
    assert ctx.value.required == 200
    assert ctx.value.available == 10


def test_signals(calculator, sample_prices):
    indicators = calculator.get_indicators(sample_prices)
    signals = calculator.get_signals(indicators)

    assert [s.indicator for s in signals] == ["RSI", "MACD", "StochRSI", "OBV", "Market Phase"]
    assert all(0 <= s.strength <= 1 for s in signals)
    assert signals[-1].signal == indicators.market_phase
    assert signals[-1].importance == "medium"


@pytest.mark.parametrize("rsi, expected", [
    (75, "Overbought - Consider taking profits"),
    (70, "Overbought - Consider taking profits"),
    (25, "Oversold - Potential buying opportunity"),
    (65, "Bullish momentum building"),
    (35, "Bearish pressure present"),
    (50, "Neutral momentum"),
])
def test_interpret_rsi(rsi, expected):
    assert interpret_rsi(rsi) == expected


@pytest.mark.parametrize("value, expected", [
    (85, "Extremely overbought"),
    (65, "Overbought"),
    (15, "Extremely oversold"),
    (35, "Oversold"),
    (50, "Neutral"),
])
def test_interpret_stoch_rsi(value, expected):
    assert interpret_stoch_rsi(value) == expected


def test_interpret_macd():
    assert interpret_macd(2.0, 1.0, 1.0) == "Strong bullish momentum, upward trend"
    assert interpret_macd(-2.0, -1.0, -1.0) == "Strong bearish momentum, downward trend"
    assert interpret_macd(0.05, 0.0, 0.05).endswith("potential trend reversal")
