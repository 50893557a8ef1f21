"""Value objects produced by the analysis pipeline."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from src.utils.format_utils import fmt_usd

HORIZONS = ("24H", "7D", "30D")


@dataclass(frozen=True, slots=True)
class MacdResult:
    value: float
    signal: float
    histogram: float
    interpretation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "signal": self.signal,
            "histogram": self.histogram,
            "interpretation": self.interpretation,
        }


@dataclass(frozen=True, slots=True)
class TechnicalIndicators:
    """Indicator snapshot for the latest point of a price series."""
    current_price: float
    rsi: float
    macd: MacdResult
    ma20: float
    ma50: float
    ma200: float
    volume_ratio: float
    volatility: float                # Annualized, percent
    support: float
    resistance: float
    market_phase: str
    stoch_rsi: float = 50.0
    obv_trend: str = "Bearish"
    current_volume: float = 0.0
    data_points: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_price": self.current_price,
            "rsi": self.rsi,
            "macd": self.macd.to_dict(),
            "ma20": self.ma20,
            "ma50": self.ma50,
            "ma200": self.ma200,
            "volume_ratio": self.volume_ratio,
            "volatility": self.volatility,
            "support": self.support,
            "resistance": self.resistance,
            "market_phase": self.market_phase,
            "stoch_rsi": self.stoch_rsi,
            "obv_trend": self.obv_trend,
            "current_volume": self.current_volume,
            "data_points": self.data_points,
        }


@dataclass(frozen=True, slots=True)
class SentimentStats:
    positive: float
    negative: float
    neutral: float

    def to_dict(self) -> Dict[str, float]:
        return {"positive": self.positive, "negative": self.negative, "neutral": self.neutral}


@dataclass(frozen=True, slots=True)
class SentimentResult:
    """Sentiment of one text. ``score`` is signed in [-1, 1]."""
    sentiment: str                   # positive | negative | neutral
    score: float
    confidence: float                # 0-100
    stats: SentimentStats
    impact: str                      # high | medium | low
    components: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def neutral(cls) -> "SentimentResult":
        return cls(
            sentiment="neutral",
            score=0.0,
            confidence=50.0,
            stats=SentimentStats(positive=0.0, negative=0.0, neutral=100.0),
            impact="low",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sentiment": self.sentiment,
            "score": self.score,
            "confidence": self.confidence,
            "stats": self.stats.to_dict(),
            "impact": self.impact,
            "components": dict(self.components),
        }


@dataclass(frozen=True, slots=True)
class ScoredArticle:
    """A news article with its sentiment attached."""
    article: Any                     # src.platforms.dataclasses.NewsArticle
    sentiment: SentimentResult

    def to_dict(self) -> Dict[str, Any]:
        data = self.article.to_dict()
        data.update({
            "sentiment": self.sentiment.sentiment,
            "sentimentStats": self.sentiment.stats.to_dict(),
            "impact": self.sentiment.impact,
            "confidence": self.sentiment.confidence,
        })
        return data


@dataclass(frozen=True, slots=True)
class MarketSentiment:
    """Aggregate sentiment over a set of articles plus the recent price move."""
    overall: str                     # positive | negative | neutral
    news_score: float                # Share of positive articles, 0-100
    sentiment_index: float           # (average_score + 1) * 50, 0-100
    average_score: float             # -1..1
    market_mood: str                 # Bullish | Bearish | Neutral
    price_sentiment: str             # Bullish | Bearish | Neutral from the 24h change
    article_count: int = 0

    @classmethod
    def neutral(cls, price_sentiment: str = "Neutral", market_mood: str = "Neutral") -> "MarketSentiment":
        return cls(
            overall="neutral",
            news_score=50.0,
            sentiment_index=50.0,
            average_score=0.0,
            market_mood=market_mood,
            price_sentiment=price_sentiment,
            article_count=0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall,
            "news_score": self.news_score,
            "sentiment_index": self.sentiment_index,
            "average_score": self.average_score,
            "market_mood": self.market_mood,
            "price_sentiment": self.price_sentiment,
            "article_count": self.article_count,
        }


@dataclass(frozen=True, slots=True)
class TrendAssessment:
    primary: str                     # bullish | bearish | neutral
    strength: float                  # 0-1


@dataclass(frozen=True, slots=True)
class PriceTarget:
    low: float
    high: float
    confidence: float

    @property
    def range_text(self) -> str:
        return f"{fmt_usd(self.low)} - {fmt_usd(self.high)}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "low": self.low,
            "high": self.high,
            "range": self.range_text,
            "confidence": self.confidence,
        }


@dataclass(frozen=True, slots=True)
class PredictionSet:
    targets: Dict[str, PriceTarget]  # Keyed by HORIZONS
    signal_confidence: float         # Overall confidence of the current indicator signals

    def __getitem__(self, horizon: str) -> PriceTarget:
        return self.targets[horizon]

    def to_dict(self) -> Dict[str, Any]:
        return {horizon: self.targets[horizon].to_dict() for horizon in HORIZONS if horizon in self.targets}


@dataclass(frozen=True, slots=True)
class Signal:
    indicator: str
    value: float
    signal: str
    strength: float                  # 0-1

    @property
    def importance(self) -> str:
        if self.strength > 0.7:
            return "high"
        if self.strength > 0.4:
            return "medium"
        return "low"

    @property
    def text(self) -> str:
        return f"{self.indicator}: {self.signal}"

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "importance": self.importance}


@dataclass(frozen=True, slots=True)
class TradingStrategy:
    recommendation: str
    confidence: float
    entries: Dict[str, float]        # conservative, moderate, aggressive
    stop_loss: Dict[str, float]      # tight, normal, wide
    targets: Dict[str, float]        # primary, secondary, final
    timeframe: str
    rationale: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recommendation": self.recommendation,
            "confidence": self.confidence,
            "entries": dict(self.entries),
            "stop_loss": dict(self.stop_loss),
            "targets": dict(self.targets),
            "timeframe": self.timeframe,
            "rationale": list(self.rationale),
        }


@dataclass(slots=True)
class AnalysisResult:
    """Full analysis for one symbol, assembled by AnalysisEngine."""
    symbol: str
    summary: str
    indicators: TechnicalIndicators
    sentiment: MarketSentiment
    predictions: PredictionSet
    strategy: TradingStrategy
    signals: List[Signal]
    recent_news: List[ScoredArticle]
    price_change_24h: float = 0.0
    breakout_potential: str = "Range Bound"
    warnings: List[str] = field(default_factory=list)
    cached_sources: List[str] = field(default_factory=list)
    sequence: int = 0
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    narrative: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        ind = self.indicators
        price = ind.current_price
        return {
            "symbol": self.symbol,
            "generated_at": self.generated_at.isoformat(),
            "summary": self.summary,
            "technical_analysis": {
                "rsi": {"value": ind.rsi, "interpretation": _interpretation(self.signals, "RSI")},
                "macd": ind.macd.to_dict(),
                "moving_averages": {
                    "ma20": ind.ma20, "ma50": ind.ma50, "ma200": ind.ma200, "interpretation": ind.market_phase,
                },
                "volume": {"current": ind.current_volume, "change": ind.volume_ratio, "interpretation": ind.obv_trend},
                "stoch_rsi": {"value": ind.stoch_rsi, "interpretation": _interpretation(self.signals, "StochRSI")},
                "volatility": ind.volatility,
            },
            "sentiment_analysis": self.sentiment.to_dict(),
            "ai_prediction": {
                "short_term": self.predictions["24H"].range_text,
                "mid_term": self.predictions["7D"].range_text,
                "long_term": self.predictions["30D"].range_text,
                "confidence": round(self.predictions.signal_confidence, 2),
                "reasoning": [self.summary] + [s.text for s in self.signals],
            },
            "market_structure": {
                "trend": ind.market_phase,
                "support": round(ind.support, 2),
                "resistance": round(ind.resistance, 2),
                "breakout_potential": self.breakout_potential,
            },
            "price_targets": self.predictions.to_dict(),
            "signals": [s.to_dict() for s in self.signals],
            "strategy": self.strategy.to_dict(),
            "market_conditions": {
                "trend": ind.market_phase,
                "support": round(ind.support, 2),
                "resistance": round(ind.resistance, 2),
                "distance_to_resistance": round((ind.resistance - price) / price * 100, 2) if price else 0.0,
                "distance_to_support": round((price - ind.support) / price * 100, 2) if price else 0.0,
            },
            "sentiment": {
                "overall": self.sentiment.market_mood,
                "news_score": self.sentiment.news_score,
                "recent_news": [
                    {"title": item.article.title, "sentiment": item.sentiment.sentiment}
                    for item in self.recent_news[:3]
                ],
            },
            "narrative": self.narrative,
            "data_quality": {
                "degraded": bool(self.warnings),
                "warnings": list(self.warnings),
                "cached_sources": list(self.cached_sources),
                "data_points": ind.data_points,
                "price_change_24h": self.price_change_24h,
            },
        }


def _interpretation(signals: List[Signal], indicator: str) -> str:
    for s in signals:
        if s.indicator == indicator:
            return s.signal
    return ""
