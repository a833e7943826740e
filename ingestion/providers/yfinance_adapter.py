"""
yfinance adapter - fetch adjusted closes and issuer metadata from Yahoo Finance.
Network IO allowed here, but minimal business logic.
"""

import logging
import math
import yfinance as yf
import pandas as pd
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple


logger = logging.getLogger(__name__)

MIN_OBSERVATIONS = 20


class YFinanceError(Exception):
    """Raised when yfinance operations fail."""
    pass


def fetch_adjusted_closes(ticker: str, start: date, end: date) -> List[Tuple[date, float]]:
    """
    Fetch adjusted close prices for a ticker within a date window.

    Args:
        ticker: Stock/ETF ticker symbol (e.g., 'AAPL')
        start: Start date (inclusive)
        end: End date (inclusive)

    Returns:
        List of (date, adjusted close) tuples sorted by date; rows with
        missing or non-positive prices are dropped

    Raises:
        YFinanceError: If fetch fails or validation fails
    """
    _validate_date_range(start, end)
    _validate_ticker(ticker)

    try:
        # yfinance uses exclusive end dates, so add 1 day
        yf_end = end + timedelta(days=1)

        data = yf.download(
            ticker,
            start=start.isoformat(),
            end=yf_end.isoformat(),
            progress=False,
            auto_adjust=False
        )
    except Exception as e:
        raise YFinanceError(f"Failed to fetch prices for {ticker}: {str(e)}") from e

    if data is None or len(data) == 0:
        return []

    # Flatten multi-level columns (field, ticker)
    if isinstance(data.columns, pd.MultiIndex):
        data.columns = data.columns.get_level_values(0)

    if 'Adj Close' in data.columns:
        column = 'Adj Close'
    elif 'Close' in data.columns:
        column = 'Close'
    else:
        raise YFinanceError(f"No close prices returned for {ticker}")

    rows = {}
    for date_idx, value in data[column].items():
        if pd.isna(value):
            continue
        price = float(value)
        if not math.isfinite(price) or price <= 0:
            continue
        obs_date = pd.Timestamp(date_idx).date()
        if obs_date not in rows:
            rows[obs_date] = price

    return sorted(rows.items())


def fetch_ticker_metadata(ticker: str) -> Dict[str, Any]:
    """
    Fetch issuer name, sector and industry.

    Metadata is informational only, so failures fall back to defaults
    instead of raising.

    Args:
        ticker: Stock/ETF ticker symbol

    Returns:
        Dictionary with ticker, name, sector, industry
    """
    try:
        info = yf.Ticker(ticker).info or {}
    except Exception as e:
        logger.warning(f"Could not fetch metadata for {ticker}: {e}")
        info = {}

    return {
        'ticker': ticker,
        'name': info.get('longName') or info.get('shortName') or ticker,
        'sector': info.get('sector') or 'Unknown',
        'industry': info.get('industry') or 'Unknown'
    }


def fetch_all_price_histories(
    tickers: List[str],
    start: date,
    end: date,
    min_observations: int = MIN_OBSERVATIONS
) -> Dict[str, List[Tuple[date, float]]]:
    """
    Fetch price histories for several tickers, skipping unusable ones.

    Tickers that fail to fetch or return fewer than min_observations rows are
    logged and left out.

    Args:
        tickers: Ticker symbols
        start: Start date (inclusive)
        end: End date (inclusive)
        min_observations: Minimum rows required per ticker

    Returns:
        Dictionary mapping ticker to (date, price) list, in input order

    Raises:
        YFinanceError: If no ticker produced usable data
    """
    results = {}
    errors = []

    for ticker in tickers:
        try:
            series = fetch_adjusted_closes(ticker, start, end)
        except YFinanceError as e:
            errors.append(f"{ticker}: {e}")
            continue

        if len(series) < min_observations:
            errors.append(f"{ticker}: Insufficient historical data (only {len(series)} days)")
            continue

        results[ticker] = series
        logger.info(f"Fetched {len(series)} prices for {ticker}")

    if not results:
        details = "\n".join(errors)
        raise YFinanceError(f"Could not fetch data for any tickers:\n{details}")

    if errors:
        logger.warning(f"Some tickers had errors: {errors}")

    return results


def fetch_all_metadata(tickers: List[str]) -> Dict[str, Dict[str, Any]]:
    """Fetch metadata for each ticker (never raises)."""
    return {ticker: fetch_ticker_metadata(ticker) for ticker in tickers}


def history_window(years_back: int = 1, end: Optional[date] = None) -> Tuple[date, date]:
    """Start/end dates covering the last years_back years."""
    if years_back <= 0:
        raise YFinanceError("years_back must be positive")

    end = end or date.today()
    try:
        start = end.replace(year=end.year - years_back)
    except ValueError:
        # Feb 29 -> Feb 28
        start = end.replace(year=end.year - years_back, day=28)

    return start, end


def _validate_date_range(start: date, end: date) -> None:
    """
    Validate date range parameters.

    Raises:
        YFinanceError: If validation fails
    """
    if start > end:
        raise YFinanceError(f"start date ({start}) must be <= end date ({end})")

    today = date.today()
    if start > today or end > today:
        raise YFinanceError("Future dates not allowed for historical data")

    max_days = 365 * 10
    if (end - start).days > max_days:
        raise YFinanceError(f"Date range too long (max {max_days} days)")


def _validate_ticker(ticker: str) -> None:
    """
    Basic ticker validation.

    Raises:
        YFinanceError: If ticker is invalid
    """
    if not ticker or not isinstance(ticker, str):
        raise YFinanceError("Ticker must be non-empty string")

    if len(ticker) > 10:
        raise YFinanceError("Ticker too long (max 10 characters)")

    allowed_chars = set('ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789.-^=')
    if not set(ticker.upper()).issubset(allowed_chars):
        raise YFinanceError(f"Ticker contains invalid characters: {ticker}")
