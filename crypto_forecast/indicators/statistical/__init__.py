from .statistical_indicators import (
    SupportResistance,
    mean_numba,
    pct_returns_numba,
    range_numba,
    stdev_numba,
    sum_numba,
)

__all__ = [
    'SupportResistance',
    'mean_numba',
    'pct_returns_numba',
    'range_numba',
    'stdev_numba',
    'sum_numba',
]
