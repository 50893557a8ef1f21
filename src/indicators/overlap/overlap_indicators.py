import numpy as np
from numba import njit


@njit(cache=True)
def ema_numba(arr, length):
    """EMA seeded with the first value: ``ema[i] = (p[i] - ema[i-1]) * 2/(length+1) + ema[i-1]``."""
    n = len(arr)
    ema_arr = np.empty(n, dtype=np.float64)
    if n == 0:
        return ema_arr

    multiplier = 2.0 / (length + 1)
    ema_arr[0] = arr[0]
    for i in range(1, n):
        ema_arr[i] = ((arr[i] - ema_arr[i - 1]) * multiplier) + ema_arr[i - 1]

    return ema_arr


@njit(cache=True)
def sma_last_numba(arr, length):
    """Mean of the last ``length`` values, or of all values when the series is shorter."""
    n = len(arr)
    if n == 0:
        return 0.0
    start = n - length if n > length else 0
    total = 0.0
    for i in range(start, n):
        total += arr[i]
    return total / (n - start)
