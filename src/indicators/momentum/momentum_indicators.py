from typing import Tuple

import numpy as np
from numba import njit

from src.indicators.overlap import ema_numba


@njit(cache=True)
def rsi_numba(close: np.ndarray, length: int) -> float:
    """Wilder RSI of the whole series, returned for the last point.

    The averages are seeded from the first ``length`` deltas, or from every delta when the
    series is shorter. Fewer than two points give the neutral 50; no losses give 100.
    """
    n = len(close)
    if n < 2:
        return 50.0

    seed = min(length, n - 1)
    avg_gain = 0.0
    avg_loss = 0.0
    for i in range(1, seed + 1):
        diff = float(close[i] - close[i - 1])
        if diff > 0:
            avg_gain += diff
        else:
            avg_loss -= diff
    avg_gain /= seed
    avg_loss /= seed

    for i in range(seed + 1, n):
        diff = float(close[i] - close[i - 1])
        gain = diff if diff > 0 else 0.0
        loss = -diff if diff < 0 else 0.0
        avg_gain = ((avg_gain * (length - 1)) + gain) / length
        avg_loss = ((avg_loss * (length - 1)) + loss) / length

    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


@njit(cache=True)
def rolling_rsi_numba(close: np.ndarray, length: int) -> np.ndarray:
    """RSI of every ``length + 1`` point window, oldest window first."""
    n = len(close)
    windows = n - length
    if windows <= 0:
        return np.empty(0, dtype=np.float64)
    out = np.empty(windows, dtype=np.float64)
    for i in range(windows):
        out[i] = rsi_numba(close[i:i + length + 1], length)
    return out


@njit(cache=True)
def stoch_rsi_numba(close: np.ndarray, length: int) -> float:
    """Position of the latest RSI within the observed RSI range, 0-100."""
    rsi_values = rolling_rsi_numba(close, length)
    if len(rsi_values) == 0:
        return 50.0
    lo = rsi_values.min()
    hi = rsi_values.max()
    if hi == lo:
        return 50.0
    return (rsi_values[-1] - lo) / (hi - lo) * 100.0


@njit(cache=True)
def macd_numba(close: np.ndarray, fast_length: int = 12, slow_length: int = 26,
               signal_length: int = 9) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    macd_line = ema_numba(close, fast_length) - ema_numba(close, slow_length)
    signal_line = ema_numba(macd_line, signal_length)
    histogram = macd_line - signal_line
    return macd_line, signal_line, histogram
