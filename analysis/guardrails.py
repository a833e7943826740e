"""
Guardrails for the portfolio analysis engine - validation and safety checks.
Stops the pipeline on unusable inputs and collects warnings for questionable ones.
"""

import math
import warnings
import numpy as np
from datetime import date
from typing import Any, Dict, List, Optional

from analysis.calculations.alignment import AlignedDataset


class DataQualityError(Exception):
    """Raised when data quality issues prevent a meaningful analysis."""
    pass


class DataQualityWarning(UserWarning):
    """Raised when data quality issues should be noted but don't block execution."""
    pass


def validate_weights(weights: Dict[str, float], tolerance: float = 1e-3) -> None:
    """
    Validate portfolio weights before they enter the engine.

    The engine never renormalizes: weights must already sum to 1.

    Args:
        weights: Dictionary mapping ticker to weight
        tolerance: Allowed deviation of the sum from 1.0

    Raises:
        DataQualityError: If weights are empty, negative, non-finite or don't sum to 1
    """
    if not weights:
        raise DataQualityError("No holdings provided for analysis")

    for ticker, weight in weights.items():
        if not isinstance(weight, (int, float)) or not math.isfinite(weight):
            raise DataQualityError(f"Weight for {ticker} must be a finite number, got {weight}")
        if weight < 0:
            raise DataQualityError(f"Negative weight for {ticker}: {weight}")

    total = sum(weights.values())
    if abs(total - 1.0) > tolerance:
        raise DataQualityError(
            f"Weights must sum to 1.0 (within {tolerance}), got {total:.6f}"
        )


def validate_sufficient_trading_days(dataset: AlignedDataset, min_trading_days: int = 20) -> None:
    """
    Require enough common trading days for meaningful statistics.

    Args:
        dataset: Aligned price dataset
        min_trading_days: Minimum number of common dates

    Raises:
        DataQualityError: If fewer common dates than required
    """
    if not dataset.tickers:
        raise DataQualityError("No tickers with usable price history")

    if dataset.trading_days < min_trading_days:
        raise DataQualityError(
            f"Insufficient historical data: only {dataset.trading_days} common trading days found. "
            f"Need at least {min_trading_days}."
        )


def validate_numeric_inputs(result: Dict[str, Any]) -> None:
    """
    Validate that all numeric portfolio metrics are finite.

    Args:
        result: Composed analysis dictionary

    Raises:
        DataQualityError: If NaN or infinite values found
    """
    def check_value(value, path: str):
        if value is None:
            return  # None means "not applicable"

        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if math.isnan(value):
                raise DataQualityError(f"NaN value found in {path}")
            if math.isinf(value):
                raise DataQualityError(f"Infinite value found in {path}")

    portfolio = result.get('portfolio', {})
    for key, value in portfolio.items():
        check_value(value, f'portfolio.{key}')

    for holding in result.get('holdings', []):
        ticker = holding.get('ticker', '?')
        check_value(holding.get('annual_return'), f'holdings.{ticker}.annual_return')
        check_value(holding.get('annual_volatility'), f'holdings.{ticker}.annual_volatility')

    timeseries = result.get('timeseries', {})
    for series_name in ('portfolio_values', 'drawdowns'):
        values = timeseries.get(series_name, [])
        if values and not np.all(np.isfinite(values)):
            raise DataQualityError(f"Non-finite value found in timeseries.{series_name}")

    health = portfolio.get('health_score')
    if health is not None and not (0 <= health <= 100):
        raise DataQualityError(f"Health score out of bounds: {health}")


def check_data_freshness(
    dates: List[date],
    max_age_days: int = 7,
    today: Optional[date] = None
) -> List[str]:
    """
    Warn when the latest common price date is stale.

    Args:
        dates: Aligned trading dates
        max_age_days: Maximum acceptable age of the latest date
        today: Reference date (defaults to today)

    Returns:
        List of freshness warnings
    """
    if not dates:
        return []

    today = today or date.today()
    latest = max(dates)
    age = (today - latest).days

    if age > max_age_days:
        return [
            f"Price data is {age} days old (latest common date: {latest}). "
            f"Consider refreshing market data."
        ]
    return []


def validate_price_data_integrity(dataset: AlignedDataset, max_daily_move: float = 0.20) -> List[str]:
    """
    Flag suspicious daily price moves in aligned data.

    Args:
        dataset: Aligned price dataset
        max_daily_move: Absolute daily move that triggers a warning

    Returns:
        List of integrity warnings
    """
    integrity_warnings = []

    for ticker in dataset.tickers:
        prices = dataset.prices_for(ticker)
        for i in range(1, len(prices)):
            if prices[i - 1] <= 0 or prices[i] <= 0:
                integrity_warnings.append(
                    f"{ticker}: non-positive price around {dataset.dates[i]}; step skipped"
                )
                continue
            change = abs(prices[i] / prices[i - 1] - 1)
            if change > max_daily_move:
                integrity_warnings.append(
                    f"{ticker}: large price movement on {dataset.dates[i]}: {change:.1%} change"
                )

    return integrity_warnings


def run_all_guardrails(
    weights: Dict[str, float],
    dataset: AlignedDataset,
    min_trading_days: int = 20,
    tolerance: float = 1e-3
) -> Dict[str, Any]:
    """
    Run pre-computation guardrail checks and compile results.

    Args:
        weights: Dictionary mapping ticker to weight
        dataset: Aligned price dataset
        min_trading_days: Minimum common trading days
        tolerance: Weight sum tolerance

    Returns:
        Dictionary with check results and warnings

    Raises:
        DataQualityError: If critical issues make the analysis meaningless
    """
    validate_weights(weights, tolerance)
    validate_sufficient_trading_days(dataset, min_trading_days)

    freshness = check_data_freshness(dataset.dates)
    integrity = validate_price_data_integrity(dataset)

    all_warnings = freshness + integrity
    for message in all_warnings:
        warnings.warn(message, DataQualityWarning)

    return {
        'trading_days': dataset.trading_days,
        'freshness_check': freshness,
        'price_integrity': integrity,
        'warnings': all_warnings
    }
