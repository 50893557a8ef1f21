from .sentiment_engine import SentimentEngine

__all__ = ['SentimentEngine']
