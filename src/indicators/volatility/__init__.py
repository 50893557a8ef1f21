from .volatility_indicators import support_resistance, volatility_numba

__all__ = ['support_resistance', 'volatility_numba']
