import re
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from src.analyzer.dataclasses import MarketSentiment, ScoredArticle, SentimentResult, SentimentStats
from src.analyzer.sentiment.lexicon import (
    CONTEXT_WINDOW, GENERIC_CRYPTO_TERMS, IMPACT_MULTIPLIERS, IMPACT_TERMS, MARKET_LEXICON,
    NUMERIC_MENTION_PATTERN, PHRASE_IMPACTS, PROXIMITY_DECAY, TECHNICAL_TERMS,
)
from src.logger.logger import Logger
from src.platforms.dataclasses import NewsArticle
from src.platforms.symbols import KNOWN_ALIASES, normalize_symbol, ticker_for

DEFAULT_WEIGHTS: Dict[str, float] = {"lexical": 0.2, "contextual": 0.3, "technical": 0.3, "impact": 0.2}

_TOKEN_SPLIT = re.compile(r"\W+")
_NUMERIC_MENTION = re.compile(NUMERIC_MENTION_PATTERN)


class SentimentEngine:
    """
    Lexicon and rule based sentiment scoring for news text.

    Each text gets four sub-scores (lexical polarity, phrases near coin mentions, technical
    vocabulary, magnitude of the move described). Their weighted sum is a signed score in
    [-1, 1], labelled positive/negative beyond +/-``threshold``. The 0-100 scale is used
    only for MarketSentiment.sentiment_index, so +/-0.2 corresponds to 60/40 there.
    """

    def __init__(
        self,
        logger: Optional[Logger] = None,
        weights: Optional[Mapping[str, float]] = None,
        threshold: float = 0.2,
        price_change_threshold: float = 3.0,
        analyzer: Optional[SentimentIntensityAnalyzer] = None,
    ) -> None:
        self.logger = logger
        self.weights = dict(DEFAULT_WEIGHTS)
        if weights:
            self.weights.update(weights)
        self.threshold = threshold
        self.price_change_threshold = price_change_threshold

        analyzer = analyzer or SentimentIntensityAnalyzer()
        self._lexicon: Dict[str, float] = dict(analyzer.lexicon)
        self._lexicon.update(MARKET_LEXICON)

    @staticmethod
    def tokenize(text: str) -> List[str]:
        return [token for token in _TOKEN_SPLIT.split(text.lower()) if token]

    def analyze(self, text: str, symbol: str = "") -> SentimentResult:
        tokens = self.tokenize(text or "")
        if not tokens:
            return SentimentResult.neutral()

        lexical = self._lexical_score(tokens)
        contextual, relevance = self._contextual_score(tokens, symbol)
        technical, term_count = self._technical_score(tokens)
        directional = (
            lexical * self.weights["lexical"]
            + contextual * self.weights["contextual"]
            + technical * self.weights["technical"]
        )
        impact, impact_tier = self._impact_score(text, tokens, directional)

        score = float(np.clip(directional + impact * self.weights["impact"], -1.0, 1.0))
        sub_scores = (lexical, contextual, technical, impact)
        confidence = self._confidence(sub_scores, term_count / len(tokens), relevance)

        positive = round(max(0.0, score) * confidence, 2)
        negative = round(max(0.0, -score) * confidence, 2)
        stats = SentimentStats(positive=positive, negative=negative, neutral=round(100.0 - positive - negative, 2))

        return SentimentResult(
            sentiment=self.label(score),
            score=score,
            confidence=confidence,
            stats=stats,
            impact=impact_tier,
            components={
                "lexical": lexical,
                "contextual": contextual,
                "technical": technical,
                "impact": impact,
                "relevance": relevance,
            },
        )

    def analyze_articles(self, articles: Iterable[NewsArticle], symbol: str) -> List[ScoredArticle]:
        return [ScoredArticle(article=article, sentiment=self.analyze(article.text, symbol)) for article in articles]

    def label(self, score: float) -> str:
        if score > self.threshold:
            return "positive"
        if score < -self.threshold:
            return "negative"
        return "neutral"

    def classify_price_change(self, change_pct: float) -> str:
        """Bullish/Bearish when the move exceeds the threshold, Neutral inside it (inclusive)."""
        if change_pct > self.price_change_threshold:
            return "Bullish"
        if change_pct < -self.price_change_threshold:
            return "Bearish"
        return "Neutral"

    def aggregate(self, results: Sequence[SentimentResult], price_change_pct: float = 0.0) -> MarketSentiment:
        price_sentiment = self.classify_price_change(price_change_pct)
        if not results:
            # Without news the price move is the only mood signal
            return MarketSentiment.neutral(price_sentiment, market_mood=price_sentiment)

        positive = sum(1 for r in results if r.sentiment == "positive")
        negative = sum(1 for r in results if r.sentiment == "negative")
        average = float(np.mean([r.score for r in results]))

        if positive > negative:
            mood = "Bullish"
        elif negative > positive:
            mood = "Bearish"
        else:
            mood = "Neutral"

        return MarketSentiment(
            overall=self.label(average),
            news_score=positive / len(results) * 100,
            sentiment_index=(average + 1) * 50,
            average_score=average,
            market_mood=mood,
            price_sentiment=price_sentiment,
            article_count=len(results),
        )

    def _lexical_score(self, tokens: List[str]) -> float:
        positive = sum(1 for t in tokens if self._lexicon.get(t, 0.0) > 0)
        negative = sum(1 for t in tokens if self._lexicon.get(t, 0.0) < 0)
        return (positive - negative) / len(tokens) * 2

    def _contextual_score(self, tokens: List[str], symbol: str) -> Tuple[float, float]:
        terms = self._context_terms(symbol)
        mentions = [i for i, token in enumerate(tokens) if token in terms]
        if not mentions:
            return 0.0, 0.0

        total = 0.0
        for index in mentions:
            start = max(0, index - CONTEXT_WINDOW)
            end = min(len(tokens), index + CONTEXT_WINDOW + 1)
            for j in range(start, end - 1):
                impact = PHRASE_IMPACTS.get((tokens[j], tokens[j + 1]))
                if impact:
                    total += impact * max(0.0, 1 - abs(j - index) / PROXIMITY_DECAY)

        # Strongest phrase impact is 2, halving keeps the average in [-1, 1]
        score = float(np.clip(total / len(mentions) / 2, -1.0, 1.0))
        return score, len(mentions) / len(tokens)

    @staticmethod
    def _context_terms(symbol: str) -> frozenset:
        terms = set(GENERIC_CRYPTO_TERMS)
        if symbol:
            coin_id = normalize_symbol(symbol)
            terms.add(coin_id)
            terms.add(ticker_for(coin_id).lower())
            terms.update(alias for alias in KNOWN_ALIASES.get(coin_id, ()) if " " not in alias)
        return frozenset(terms)

    @staticmethod
    def _technical_score(tokens: List[str]) -> Tuple[float, int]:
        bullish = sum(1 for t in tokens if t in TECHNICAL_TERMS["bullish"])
        bearish = sum(1 for t in tokens if t in TECHNICAL_TERMS["bearish"])
        neutral = sum(1 for t in tokens if t in TECHNICAL_TERMS["neutral"])
        term_count = bullish + bearish + neutral
        if term_count == 0:
            return 0.0, 0
        return (bullish - bearish) / term_count, term_count

    @staticmethod
    def _impact_score(text: str, tokens: List[str], direction: float) -> Tuple[float, str]:
        tier = "medium"
        for token in tokens:
            if token in IMPACT_TERMS["high"]:
                tier = "high"
            elif token in IMPACT_TERMS["low"]:
                tier = "low"

        mentions = len(_NUMERIC_MENTION.findall(text.lower()))
        magnitude = min(1.0, mentions * IMPACT_MULTIPLIERS[tier] / max(len(tokens) / 10, 1))
        return float(np.sign(direction)) * magnitude, tier

    @staticmethod
    def _confidence(sub_scores: Sequence[float], technical_density: float, relevance: float) -> float:
        signs = np.sign(sub_scores)
        agreement = float(np.count_nonzero(signs == signs[0])) / len(signs)
        depth = 0.7 + 0.15 * min(1.0, 5 * technical_density) + 0.15 * min(1.0, 5 * relevance)
        return float(np.clip(agreement * 100 * depth, 30, 95))
