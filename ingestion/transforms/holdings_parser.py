"""
Holdings text parser.
Pure functions turning free-text holdings into tickers with normalized weights.

Supported line formats:
    AAPL 30%
    NVDA 0.25
    MSFT 25
    VOO          (no weight - equal-weighted if no line has a weight)
"""

import re
from typing import Any, Dict, List, Optional, Tuple


class HoldingsParseError(ValueError):
    """Raised when holdings text cannot be parsed."""
    pass


LINE_PATTERN = re.compile(r'^([A-Z][A-Z0-9.]{0,9})\s*(\d*\.?\d*)\s*(%)?$', re.IGNORECASE)
TICKER_PATTERN = re.compile(r'^[A-Z][A-Z0-9.]{0,9}$')

EXAMPLE_FORMAT = "Example format:\nAAPL 30%\nNVDA 20%\nVOO 50%"


def parse_holdings_text(text: str) -> List[Dict[str, Any]]:
    """
    Parse holdings text into holdings with weights summing to 1.0.

    Duplicate tickers are merged. If no line carries a weight the portfolio
    is equal-weighted; otherwise weights are normalized by their total.

    Args:
        text: Raw text with one holding per line

    Returns:
        List of {'ticker': str, 'weight': float} in first-seen order

    Raises:
        HoldingsParseError: If no valid holdings are found
    """
    if not text or not isinstance(text, str):
        raise HoldingsParseError("Holdings text is required")

    lines = [line.strip() for line in re.split(r'[\n\r]+', text)]
    lines = [line for line in lines if line]

    if not lines:
        raise HoldingsParseError("No holdings provided. Please enter at least one ticker.")

    merged: Dict[str, float] = {}
    errors = []

    for line in lines:
        try:
            parsed = parse_line(line)
        except HoldingsParseError as e:
            errors.append(f'Line "{line}": {e}')
            continue

        if parsed is None:
            continue

        ticker, weight = parsed
        merged[ticker] = merged.get(ticker, 0.0) + weight

    if not merged:
        details = "\n".join(errors)
        raise HoldingsParseError(f"No valid holdings found.\n{details}\n\n{EXAMPLE_FORMAT}")

    total = sum(merged.values())

    if total <= 0:
        equal = 1 / len(merged)
        holdings = [{'ticker': t, 'weight': equal} for t in merged]
    else:
        holdings = [{'ticker': t, 'weight': w / total} for t, w in merged.items()]

    final_sum = sum(h['weight'] for h in holdings)
    if abs(final_sum - 1.0) > 0.001:
        raise HoldingsParseError("Internal error: weights do not sum to 1.0")

    return holdings


def parse_line(line: str) -> Optional[Tuple[str, float]]:
    """
    Parse a single holdings line.

    Args:
        line: A line like "AAPL 30%" or "MSFT 0.25"; text after '#' is ignored

    Returns:
        (ticker, weight) tuple, or None for blank/comment lines

    Raises:
        HoldingsParseError: If the line is malformed
    """
    clean = line.split('#')[0].strip()
    if not clean:
        return None

    match = LINE_PATTERN.match(clean)
    if not match:
        raise HoldingsParseError('Invalid format. Expected "TICKER" or "TICKER weight%"')

    ticker = match.group(1).upper()
    number = match.group(2)
    has_percent = match.group(3) == '%'

    if not is_valid_ticker(ticker):
        raise HoldingsParseError(f"Invalid ticker symbol: {ticker}")

    if number == '.':
        raise HoldingsParseError(f"Invalid weight: {number}")

    if not number:
        weight = 0.0
    else:
        value = float(number)
        if has_percent or value > 1:
            # "30%" and bare "30" are both percentages
            weight = value / 100
        else:
            weight = value

    return ticker, min(weight, 1.0)


def is_valid_ticker(ticker: str) -> bool:
    """1-10 chars, starts with a letter, letters/digits/dots only."""
    if not ticker or not isinstance(ticker, str):
        return False
    return bool(TICKER_PATTERN.match(ticker))


def format_holdings(holdings: List[Dict[str, Any]]) -> str:
    """Render holdings as 'TICKER: 12.50%' lines."""
    return "\n".join(f"{h['ticker']}: {h['weight'] * 100:.2f}%" for h in holdings)
