"""
Value at Risk utilities.
Parametric (normal) VaR from annualized portfolio volatility.
"""

import math


def var_95(
    annual_volatility: float,
    portfolio_value: float,
    horizon_days: int = 1,
    trading_days: int = 252,
    z_score: float = 1.645
) -> float:
    """
    Calculate parametric Value at Risk at 95% confidence.

    Formula: VaR = z * (sigma_annual / sqrt(trading_days)) * sqrt(horizon) * value

    Assumes normally distributed returns; an approximation rather than a
    historical or simulated VaR.

    Args:
        annual_volatility: Annualized portfolio volatility
        portfolio_value: Portfolio value in currency units
        horizon_days: VaR horizon in trading days
        trading_days: Trading days per year
        z_score: One-tailed z-score (1.645 for 95%)

    Returns:
        Loss threshold in currency units (non-negative)

    Example:
        20% annual vol, $10,000, 1 day -> ~$207
    """
    daily_vol = annual_volatility / math.sqrt(trading_days)
    horizon_vol = daily_vol * math.sqrt(horizon_days)

    return abs(z_score * horizon_vol * portfolio_value)
