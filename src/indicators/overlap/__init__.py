from .overlap_indicators import ema_numba, sma_last_numba

__all__ = ['ema_numba', 'sma_last_numba']
