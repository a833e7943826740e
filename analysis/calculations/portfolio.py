"""
Portfolio aggregation utilities.
Pure functions combining weights with asset statistics into portfolio-level figures.
"""

import math
import numpy as np
from typing import Dict, List, Optional, Sequence


class PortfolioError(Exception):
    """Raised when portfolio aggregation inputs are inconsistent."""
    pass


def portfolio_return(weights: Sequence[float], asset_returns: Sequence[float]) -> float:
    """
    Calculate portfolio expected return.

    Formula: mu_p = sum(w_i * mu_i)

    Args:
        weights: Weight vector
        asset_returns: Annualized return per asset, same order as weights

    Returns:
        Portfolio expected annualized return

    Raises:
        PortfolioError: If the vectors differ in length
    """
    if len(weights) != len(asset_returns):
        raise PortfolioError(
            f"Weight and return vectors differ in length: {len(weights)} vs {len(asset_returns)}"
        )

    total = 0.0
    for w, mu in zip(weights, asset_returns):
        total += w * mu

    return total


def portfolio_volatility(weights: Sequence[float], cov_matrix: np.ndarray) -> float:
    """
    Calculate portfolio volatility from the covariance matrix.

    Formula: sigma_p = sqrt(w^T * Sigma * w), summed over every (i, j) pair.
    Variance pushed slightly negative by rounding is clamped to 0.

    Args:
        weights: Weight vector
        cov_matrix: Annualized covariance matrix in the same order

    Returns:
        Portfolio annualized volatility (0.0 for an empty portfolio)

    Raises:
        PortfolioError: If the matrix is not N x N for N weights
    """
    n = len(weights)
    if n == 0:
        return 0.0

    cov = np.asarray(cov_matrix, dtype=np.float64)
    if cov.shape != (n, n):
        raise PortfolioError(f"Covariance matrix shape {cov.shape} does not match {n} weights")

    variance = 0.0
    for i in range(n):
        for j in range(n):
            variance += weights[i] * weights[j] * cov[i, j]

    if variance < 0:
        variance = 0.0

    return math.sqrt(variance)


def sharpe_ratio(
    annual_return: float,
    annual_volatility: float,
    risk_free_rate: float = 0.04
) -> Optional[float]:
    """
    Calculate Sharpe ratio.

    Formula: Sharpe = (mu_p - rf) / sigma_p

    Returns:
        Sharpe ratio, or None when volatility is zero (ratio not applicable)
    """
    if annual_volatility == 0:
        return None

    return (annual_return - risk_free_rate) / annual_volatility


def portfolio_daily_returns(
    returns_by_ticker: Dict[str, Sequence[float]],
    weights: Dict[str, float],
    tickers: List[str]
) -> np.ndarray:
    """
    Calculate weighted daily portfolio returns.

    Each day i sums weight[t] * returns[t][i]. The output runs to the shortest
    series among tickers that have one; tickers without a series, or without
    a weight, contribute nothing.

    Args:
        returns_by_ticker: Dictionary mapping ticker to daily returns
        weights: Dictionary mapping ticker to weight
        tickers: Tickers to include

    Returns:
        Numpy array of daily portfolio returns (empty if any series is empty)
    """
    series = [returns_by_ticker.get(t) for t in tickers]
    lengths = [len(s) for s in series if s is not None]

    if not lengths or min(lengths) == 0:
        return np.array([], dtype=np.float64)

    min_length = min(lengths)
    ticker_weights = [weights.get(t, 0.0) for t in tickers]

    daily = np.zeros(min_length, dtype=np.float64)
    for i in range(min_length):
        total = 0.0
        for s, w in zip(series, ticker_weights):
            if s is not None and i < len(s):
                total += w * s[i]
        daily[i] = total

    return daily
