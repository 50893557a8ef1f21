import numpy as np
from numba import njit


@njit(cache=True)
def obv_numba(close, volume):
    """On-Balance Volume: adds volume on up moves, subtracts it on down moves."""
    n = len(close)
    obv = np.zeros(n, dtype=np.float64)
    for i in range(1, n):
        if close[i] > close[i - 1]:
            obv[i] = obv[i - 1] + volume[i]
        elif close[i] < close[i - 1]:
            obv[i] = obv[i - 1] - volume[i]
        else:
            obv[i] = obv[i - 1]
    return obv


def obv_trend(close: np.ndarray, volume: np.ndarray, lookback: int = 5) -> str:
    obv = obv_numba(close, volume)
    recent = obv[-lookback:]
    if len(recent) < 2:
        return "Bearish"
    return "Bullish" if recent[-1] > recent[0] else "Bearish"


@njit(cache=True)
def volume_ratio_numba(volume, length):
    """Latest volume over the mean of the trailing ``length`` volumes (fewer if short)."""
    n = len(volume)
    if n == 0:
        return 1.0
    start = n - length if n > length else 0
    total = 0.0
    for i in range(start, n):
        total += volume[i]
    mean = total / (n - start)
    if mean == 0:
        return 1.0
    return volume[n - 1] / mean
