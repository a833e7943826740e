"""
Covariance matrix utilities.
Pure functions for pairwise sample covariance and annualized covariance matrices.
"""

import numpy as np
from typing import Dict, List, Sequence


def sample_covariance(returns_a: Sequence[float], returns_b: Sequence[float]) -> float:
    """
    Calculate sample covariance of two return series.

    Formula: cov(X, Y) = sum((x_i - mean_x)(y_i - mean_y)) / (n - 1)

    Only the leading overlap n = min(len_a, len_b) is used, so series of
    different lengths are compared on their common prefix.

    Args:
        returns_a: First return series
        returns_b: Second return series

    Returns:
        Sample covariance, 0.0 when the overlap has fewer than 2 points
    """
    n = min(len(returns_a), len(returns_b))
    if n < 2:
        return 0.0

    a = np.asarray(returns_a[:n], dtype=np.float64)
    b = np.asarray(returns_b[:n], dtype=np.float64)

    return float(np.sum((a - a.mean()) * (b - b.mean())) / (n - 1))


def build_covariance_matrix(
    returns_by_ticker: Dict[str, Sequence[float]],
    tickers: List[str],
    trading_days: int = 252
) -> np.ndarray:
    """
    Build annualized covariance matrix in the given ticker order.

    Every cell, diagonal included, is daily sample covariance x trading_days,
    so cell (i, i) is the annualized variance of ticker i. Cells are computed
    with the same formula in both orders, which keeps the matrix symmetric.

    Args:
        returns_by_ticker: Dictionary mapping ticker to daily returns
        tickers: Row/column order of the matrix
        trading_days: Annualization factor

    Returns:
        N x N numpy array
    """
    # Resolve each ticker to a positional slot once; missing tickers get no data
    series = [np.asarray(returns_by_ticker.get(t, []), dtype=np.float64) for t in tickers]

    n = len(series)
    matrix = np.zeros((n, n), dtype=np.float64)

    for i in range(n):
        for j in range(n):
            matrix[i, j] = sample_covariance(series[i], series[j]) * trading_days

    return matrix
