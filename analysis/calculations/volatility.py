"""
Volatility calculation utilities.
Pure functions for sample standard deviation and annualized volatility.
"""

import math
import numpy as np
from typing import Sequence


def sample_std(values: Sequence[float]) -> float:
    """
    Calculate sample standard deviation (Bessel's correction, ddof=1).

    Formula: sqrt(sum((x_i - mean)^2) / (n - 1))

    Args:
        values: Observations (typically daily log returns)

    Returns:
        Sample standard deviation, 0.0 when fewer than 2 observations
    """
    if len(values) < 2:
        return 0.0
    return float(np.std(np.asarray(values, dtype=np.float64), ddof=1))


def annualize_vol(daily_std: float, trading_days: int = 252) -> float:
    """
    Annualize daily volatility.

    Formula: sigma_annual = sigma_daily * sqrt(trading_days)
    """
    return daily_std * math.sqrt(trading_days)


def annualized_volatility(daily_returns: Sequence[float], trading_days: int = 252) -> float:
    """Annualized volatility straight from daily returns."""
    return annualize_vol(sample_std(daily_returns), trading_days)
