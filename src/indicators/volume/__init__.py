from .volume_indicators import obv_numba, obv_trend, volume_ratio_numba

__all__ = ['obv_numba', 'obv_trend', 'volume_ratio_numba']
