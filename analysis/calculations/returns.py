"""
Returns calculation utilities.
Pure functions for daily log returns and their annualized mean.
"""

import math
import numpy as np
from typing import Sequence


def log_returns(prices: Sequence[float]) -> np.ndarray:
    """
    Calculate daily log returns from a price series.

    Formula: r_t = ln(P_t / P_{t-1})

    Steps where either adjacent price is zero or negative are skipped, so the
    result can be shorter than len(prices) - 1.

    Args:
        prices: Prices in chronological order

    Returns:
        Numpy array of log returns (empty if fewer than 2 prices)

    Example:
        [100, 102, 101, 105] -> [0.0198, -0.0099, 0.0388]
    """
    if len(prices) < 2:
        return np.array([], dtype=np.float64)

    returns = []
    for i in range(1, len(prices)):
        previous = prices[i - 1]
        current = prices[i]
        if previous > 0 and current > 0:
            returns.append(math.log(current / previous))

    return np.array(returns, dtype=np.float64)


def mean_return(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for empty input."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def annualize_return(daily_mean: float, trading_days: int = 252) -> float:
    """
    Annualize an average daily return.

    Formula: mu_annual = mu_daily * trading_days
    """
    return daily_mean * trading_days
