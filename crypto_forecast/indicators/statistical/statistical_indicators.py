import math

import numpy as np
from numba import njit

from crypto_forecast.analyzer.dataclasses import Candle
from crypto_forecast.indicators.base import Indicator


class SupportResistance(Indicator):
    """Running minimum (support) and maximum (resistance) of closes over the whole series."""
    name = "support_resistance"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.support = math.inf
        self.resistance = -math.inf

    @property
    def min_length(self) -> int:
        return 1

    def _next(self, candle: Candle) -> float:
        self.support = min(self.support, candle.close)
        self.resistance = max(self.resistance, candle.close)
        return candle.close


@njit(cache=True)
def mean_numba(arr):
    n = len(arr)
    if n == 0:
        return 0.0
    total = 0.0
    for i in range(n):
        total += arr[i]
    return total / n


@njit(cache=True)
def sum_numba(arr):
    total = 0.0
    for i in range(len(arr)):
        total += arr[i]
    return total


@njit(cache=True)
def range_numba(lows, highs):
    """Lowest low and highest high."""
    n = len(lows)
    if n == 0:
        return 0.0, 0.0
    lowest = lows[0]
    highest = highs[0]
    for i in range(1, n):
        if lows[i] < lowest:
            lowest = lows[i]
        if highs[i] > highest:
            highest = highs[i]
    return lowest, highest


@njit(cache=True)
def pct_returns_numba(closes):
    n = len(closes)
    if n < 2:
        return np.empty(0, dtype=np.float64)
    returns = np.empty(n - 1, dtype=np.float64)
    for i in range(1, n):
        prev = closes[i - 1]
        denom = prev if prev != 0.0 else 1.0
        returns[i - 1] = (closes[i] - prev) / denom * 100.0
    return returns


@njit(cache=True)
def stdev_numba(arr):
    """Population standard deviation, 0.0 for fewer than two values."""
    n = len(arr)
    if n < 2:
        return 0.0
    mean = mean_numba(arr)
    acc = 0.0
    for i in range(n):
        diff = arr[i] - mean
        acc += diff * diff
    return np.sqrt(acc / n)
