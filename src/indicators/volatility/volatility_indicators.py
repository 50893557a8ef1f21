import math
from typing import Tuple

import numpy as np
from numba import njit

TRADING_DAYS_PER_YEAR = 365


@njit(cache=True)
def volatility_numba(close, periods_per_year=TRADING_DAYS_PER_YEAR):
    """Annualized volatility in percent: population stdev of log returns."""
    n = len(close)
    if n < 2:
        return 0.0
    returns = np.empty(n - 1, dtype=np.float64)
    for i in range(1, n):
        returns[i - 1] = np.log(close[i] / close[i - 1])
    return np.std(returns) * math.sqrt(periods_per_year) * 100.0


def support_resistance(close: np.ndarray) -> Tuple[float, float]:
    """Lower and upper quartile of the observed prices."""
    n = len(close)
    if n == 0:
        return 0.0, 0.0
    ordered = np.sort(close)
    return float(ordered[int(n * 0.25)]), float(ordered[int(n * 0.75)])
