"""
Analyzer module: turns fetched market data into a full analysis.

- technical_calculator: Indicator facade over the numba kernels in src.indicators
- market_phase: Market regime, trend direction and breakout classification
- sentiment/: Lexicon and rule based news sentiment
- prediction_engine: Price ranges and confidence per horizon
- strategy_generator: Entries, stops, targets and recommendation
- formatting/: Summary and narrative text
- analysis_engine: Orchestrates the pipeline for one symbol

Key Components:
- AnalysisEngine: Main analysis orchestrator
- TechnicalCalculator: Technical indicator calculations
- SentimentEngine: News sentiment scoring and aggregation
"""

from .analysis_engine import AnalysisEngine
from .market_phase import MarketPhaseClassifier
from .prediction_engine import PredictionEngine
from .sentiment import SentimentEngine
from .strategy_generator import StrategyGenerator
from .technical_calculator import TechnicalCalculator

__all__ = [
    'AnalysisEngine',
    'MarketPhaseClassifier',
    'PredictionEngine',
    'SentimentEngine',
    'StrategyGenerator',
    'TechnicalCalculator',
]
