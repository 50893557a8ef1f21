import pytest

from src.analyzer.dataclasses import MacdResult, MarketSentiment, TechnicalIndicators, TrendAssessment
from src.analyzer.strategy_generator import StrategyGenerator


def make_indicators(**overrides):
    values = dict(
        current_price=100.0,
        rsi=50.0,
        macd=MacdResult(value=0.0, signal=0.0, histogram=0.0, interpretation="Bearish momentum"),
        ma20=100.0,
        ma50=100.0,
        ma200=100.0,
        volume_ratio=1.0,
        volatility=20.0,
        support=90.0,
        resistance=110.0,
        market_phase="Accumulation",
        stoch_rsi=50.0,
        obv_trend="Bullish",
    )
    values.update(overrides)
    return TechnicalIndicators(**values)


NEUTRAL_TREND = TrendAssessment(primary="neutral", strength=0.5)
BULLISH_MACD = MacdResult(value=1.0, signal=0.5, histogram=0.5, interpretation="Strong bullish momentum")
BEARISH_MACD = MacdResult(value=-1.0, signal=-0.5, histogram=-0.5, interpretation="Strong bearish momentum")


@pytest.fixture
def generator(logger):
    return StrategyGenerator(logger=logger)


def test_levels_from_price(generator):
    strategy = generator.generate(make_indicators(), NEUTRAL_TREND)

    assert strategy.stop_loss == {"tight": 98.0, "normal": 97.0, "wide": 95.0}
    assert strategy.targets == {"primary": 103.0, "secondary": 105.0, "final": 108.0}
    assert strategy.entries == {"conservative": 95.0, "moderate": 100.0, "aggressive": 103.0}


@pytest.mark.parametrize("price", [2e-05, 0.1, 0.5, 1.5, 100.0, 64321.12])
def test_stops_below_price_and_ordered(generator, price):
    strategy = generator.generate(
        make_indicators(current_price=price, support=price * 0.9, resistance=price * 1.1), NEUTRAL_TREND
    )
    stops = strategy.stop_loss
    targets = strategy.targets
    entries = strategy.entries

    d_tight, d_normal, d_wide = (price - stops[name] for name in ("tight", "normal", "wide"))
    assert 0 < d_tight < d_normal < d_wide
    assert price < targets["primary"] < targets["secondary"] < targets["final"]
    assert entries["conservative"] < entries["moderate"] < entries["aggressive"]
    assert entries["moderate"] == pytest.approx(price)


def test_sub_cent_levels_keep_their_precision(generator):
    strategy = generator.generate(
        make_indicators(current_price=2e-05, support=1.8e-05, resistance=2.2e-05), NEUTRAL_TREND
    )

    assert strategy.stop_loss == {"tight": 1.96e-05, "normal": 1.94e-05, "wide": 1.9e-05}
    assert strategy.targets["final"] == pytest.approx(2.16e-05)


def test_entries_respect_support_and_resistance(generator):
    strategy = generator.generate(make_indicators(support=98.0, resistance=101.0), NEUTRAL_TREND)
    assert strategy.entries["conservative"] == 98.0
    assert strategy.entries["aggressive"] == 101.0


@pytest.mark.parametrize("price", [0.0, float("nan"), -5.0])
def test_invalid_price_returns_default(generator, price):
    strategy = generator.generate(make_indicators(current_price=price), NEUTRAL_TREND)

    assert strategy.recommendation == "Hold"
    assert strategy.confidence == 50.0
    assert strategy.timeframe == "Medium-term"
    assert strategy.rationale == ("Using default strategy due to insufficient data",)
    assert set(strategy.stop_loss.values()) == {0.0}


@pytest.mark.parametrize("overrides, trend, expected", [
    (dict(rsi=75.0), TrendAssessment("bullish", 0.5), ("Take Profit", 75.0)),
    (dict(rsi=75.0, macd=BULLISH_MACD), TrendAssessment("bullish", 0.5), ("Take Profit", 75.0)),
    (dict(rsi=25.0), TrendAssessment("bearish", 0.5), ("Buy", 75.0)),
    (dict(rsi=25.0, macd=BULLISH_MACD), TrendAssessment("bearish", 0.5), ("Buy", 85.0)),
    (dict(rsi=5.0, macd=BULLISH_MACD), TrendAssessment("bearish", 0.5), ("Buy", 95.0)),
    (dict(rsi=35.0, market_phase="Accumulation"), NEUTRAL_TREND, ("Buy", 65.0)),
    (dict(rsi=65.0, market_phase="Distribution", macd=BEARISH_MACD), NEUTRAL_TREND, ("Sell", 75.0)),
    (dict(rsi=65.0, market_phase="Distribution", macd=BULLISH_MACD), NEUTRAL_TREND, ("Sell", 65.0)),
    (dict(rsi=50.0, market_phase="Bull Market"), NEUTRAL_TREND, ("Hold", 50.0)),
])
def test_recommendation_rules(overrides, trend, expected):
    assert StrategyGenerator.determine_recommendation(make_indicators(**overrides), trend) == expected


def test_timeframe():
    assert StrategyGenerator.determine_timeframe(make_indicators(volatility=60.0), NEUTRAL_TREND) == "Short-term"
    assert StrategyGenerator.determine_timeframe(make_indicators(), TrendAssessment("bullish", 0.8)) == "Long-term"
    assert StrategyGenerator.determine_timeframe(make_indicators(), NEUTRAL_TREND) == "Medium-term"


def test_rationale_strongest_first_with_stable_ties():
    rationale = StrategyGenerator.generate_rationale(make_indicators(rsi=90.0), NEUTRAL_TREND)

    assert rationale[0].startswith("RSI: Overbought")
    assert rationale[1] == "Accumulation phase"
    # MACD, StochRSI and volume all have zero strength and keep their listed order
    assert rationale[2].startswith("MACD")
    assert rationale[3].startswith("STOCHRSI")
    assert rationale[4].startswith("Volume: 1.00x")


def test_rationale_includes_sentiment(generator):
    sentiment = MarketSentiment(
        overall="positive", news_score=80.0, sentiment_index=70.0, average_score=0.4,
        market_mood="Bullish", price_sentiment="Bullish", article_count=5,
    )
    strategy = generator.generate(make_indicators(), TrendAssessment("bullish", 0.9), sentiment)

    assert any(line.startswith("Sentiment: Bullish news (80% positive)") for line in strategy.rationale)
    assert "Strong Accumulation phase" in strategy.rationale
