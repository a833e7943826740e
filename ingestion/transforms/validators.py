"""
Core validators for collaborator data entering the engine.
Pure functions - no IO, network, or side effects.
"""

import math
from datetime import date
from typing import Any, Dict, List, Sequence, Tuple


class ValidationError(ValueError):
    """Raised when data validation fails."""
    pass


def validate_price_point(ticker: str, point: Tuple[date, float]) -> None:
    """
    Validate one (date, adjusted close) observation.

    Args:
        ticker: Ticker the observation belongs to
        point: (date, price) tuple

    Raises:
        ValidationError: If validation fails
    """
    if not isinstance(point, (tuple, list)) or len(point) != 2:
        raise ValidationError(f"{ticker}: price point must be (date, price), got {point!r}")

    obs_date, price = point

    if not isinstance(obs_date, date):
        raise ValidationError(f"{ticker}: date must be date, got {type(obs_date)}")

    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise ValidationError(f"{ticker}: price must be numeric, got {type(price)}")

    if not math.isfinite(price):
        raise ValidationError(f"{ticker}: price must be finite, got {price}")

    if price <= 0:
        raise ValidationError(f"{ticker}: price must be positive, got {price}")


def validate_price_series(ticker: str, series: Sequence[Tuple[date, float]]) -> None:
    """
    Validate a full price series: valid points, strictly increasing dates.

    Args:
        ticker: Ticker symbol
        series: (date, price) observations in chronological order

    Raises:
        ValidationError: If any point is invalid or dates are not monotonic
    """
    previous = None
    for point in series:
        validate_price_point(ticker, point)
        current = point[0]

        if previous is not None:
            if current == previous:
                raise ValidationError(f"Duplicate date found for ticker {ticker}: {current}")
            if current < previous:
                raise ValidationError(
                    f"Ticker {ticker} dates not monotonic: {previous} >= {current}"
                )
        previous = current


def validate_holding(holding: Dict[str, Any]) -> None:
    """
    Validate a parsed holding row.

    Args:
        holding: Dictionary with 'ticker' and 'weight'

    Raises:
        ValidationError: If validation fails
    """
    missing = {'ticker', 'weight'} - set(holding.keys())
    if missing:
        raise ValidationError(f"Missing required keys: {missing}")

    if not isinstance(holding['ticker'], str) or not holding['ticker']:
        raise ValidationError(f"ticker must be non-empty string, got {holding['ticker']!r}")

    weight = holding['weight']
    if isinstance(weight, bool) or not isinstance(weight, (int, float)):
        raise ValidationError(f"weight must be numeric, got {type(weight)}")

    if not math.isfinite(weight):
        raise ValidationError(f"weight must be finite, got {weight}")

    if weight < 0:
        raise ValidationError(f"weight must be non-negative, got {weight}")


def validate_holdings(holdings: List[Dict[str, Any]]) -> None:
    """
    Validate parsed holdings as a set: valid rows, unique tickers.

    Raises:
        ValidationError: If any row is invalid or a ticker repeats
    """
    seen = set()
    for holding in holdings:
        validate_holding(holding)
        if holding['ticker'] in seen:
            raise ValidationError(f"Duplicate ticker in holdings: {holding['ticker']}")
        seen.add(holding['ticker'])
