"""
Sentiment vocabulary

Word and phrase tables used by the sentiment engine. General polarity comes from the
VADER lexicon; the tables below add market vocabulary VADER does not score.
"""
from typing import Dict, Tuple

# Added to the VADER lexicon (valence on VADER's -4..4 scale)
MARKET_LEXICON: Dict[str, float] = {
    "bullish": 2.0,
    "rally": 1.8,
    "rallies": 1.8,
    "surge": 1.8,
    "surges": 1.8,
    "soar": 2.0,
    "soars": 2.0,
    "gain": 1.2,
    "gains": 1.2,
    "adoption": 1.0,
    "uptrend": 1.5,
    "moon": 1.5,
    "bearish": -2.0,
    "crash": -2.5,
    "crashes": -2.5,
    "plunge": -2.2,
    "plunges": -2.2,
    "dump": -1.8,
    "selloff": -1.8,
    "downtrend": -1.5,
    "hack": -2.0,
    "hacked": -2.2,
    "liquidation": -1.5,
    "liquidations": -1.5,
}

TECHNICAL_TERMS: Dict[str, Tuple[str, ...]] = {
    "bullish": ("breakout", "support", "accumulation", "long", "buy"),
    "bearish": ("breakdown", "resistance", "distribution", "short", "sell"),
    "neutral": ("consolidation", "range", "sideways", "hold"),
}

IMPACT_TERMS: Dict[str, Tuple[str, ...]] = {
    "high": ("massive", "significant", "major", "substantial", "dramatic"),
    "medium": ("notable", "moderate", "considerable"),
    "low": ("slight", "minor", "small", "modest"),
}

IMPACT_MULTIPLIERS: Dict[str, float] = {"high": 1.5, "medium": 1.0, "low": 0.5}

# Two-word phrase -> impact
PHRASE_IMPACTS: Dict[Tuple[str, str], int] = {
    ("strong", "buy"): 2,
    ("massive", "growth"): 2,
    ("highly", "bullish"): 2,
    ("going", "up"): 1,
    ("price", "increase"): 1,
    ("good", "news"): 1,
    ("going", "down"): -1,
    ("price", "decrease"): -1,
    ("bad", "news"): -1,
    ("strong", "sell"): -2,
    ("massive", "drop"): -2,
    ("highly", "bearish"): -2,
}

GENERIC_CRYPTO_TERMS: Tuple[str, ...] = ("crypto", "cryptocurrency")

CONTEXT_WINDOW = 3
PROXIMITY_DECAY = 10

# $1.2k, 15%, 42000
NUMERIC_MENTION_PATTERN = r"\$?\d+(?:\.\d+)?[kmb]?%?"
