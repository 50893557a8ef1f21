from .momentum_indicators import macd_numba, rolling_rsi_numba, rsi_numba, stoch_rsi_numba

__all__ = ['macd_numba', 'rolling_rsi_numba', 'rsi_numba', 'stoch_rsi_numba']
