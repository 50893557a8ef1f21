"""
Narrative Formatter.
Renders the computed indicators and sentiment as plain-language market commentary.
"""
from datetime import datetime, timezone
from typing import Optional

from src.analyzer.dataclasses import MarketSentiment, TechnicalIndicators
from src.analyzer.technical_calculator import interpret_rsi, interpret_stoch_rsi
from src.logger.logger import Logger
from src.utils.format_utils import fmt_usd


def display_name(symbol: str) -> str:
    """``bitcoin`` -> ``Bitcoin``, ``avalanche-2`` -> ``Avalanche-2``."""
    return symbol[:1].upper() + symbol[1:] if symbol else symbol


def market_summary(symbol: str, indicators: TechnicalIndicators, as_of: Optional[datetime] = None) -> str:
    """One-paragraph summary of where the market stands."""
    as_of = as_of or datetime.now(timezone.utc)
    return (
        f"{display_name(symbol)} as of {as_of:%Y-%m-%d} is in a {indicators.market_phase} phase, "
        f"trading at {fmt_usd(indicators.current_price)}. RSI is {indicators.rsi:.2f} "
        f"({interpret_rsi(indicators.rsi)}), with MACD indicating {indicators.macd.interpretation}. "
        f"The volume trend is {indicators.obv_trend} with a {indicators.volume_ratio:.2f}x change "
        f"compared to the average volume."
    )


class TemplateNarrativeFormatter:
    """Default narrative formatter, built only from computed values."""

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger

    def generate_narrative(self, indicators: TechnicalIndicators, sentiment: MarketSentiment) -> str:
        sections = [
            f"Price {fmt_usd(indicators.current_price)} sits between support {fmt_usd(indicators.support)} "
            f"and resistance {fmt_usd(indicators.resistance)} in a {indicators.market_phase} phase.",
            f"Momentum: RSI {indicators.rsi:.1f} ({interpret_rsi(indicators.rsi)}), "
            f"StochRSI {indicators.stoch_rsi:.1f} ({interpret_stoch_rsi(indicators.stoch_rsi)}), "
            f"MACD {indicators.macd.interpretation}.",
            (f"Moving averages: MA20 {fmt_usd(indicators.ma20)}, MA50 {fmt_usd(indicators.ma50)}, "
             f"MA200 {fmt_usd(indicators.ma200)}."),
            f"Annualized volatility is {indicators.volatility:.1f}% and volume runs at "
            f"{indicators.volume_ratio:.2f}x its average with a {indicators.obv_trend} OBV trend.",
        ]
        if sentiment.article_count:
            sections.append(
                f"News mood is {sentiment.market_mood} across {sentiment.article_count} articles "
                f"({sentiment.news_score:.0f}% positive, sentiment index {sentiment.sentiment_index:.0f}/100)."
            )
        else:
            sections.append(f"No recent news; price action alone reads {sentiment.price_sentiment}.")
        return " ".join(sections)
