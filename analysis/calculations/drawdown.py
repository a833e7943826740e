"""
Value path and drawdown calculation utilities.
Pure functions for compounding returns and measuring declines from running peaks.
"""

import math
import numpy as np
from datetime import date
from typing import Dict, List, Optional, Sequence, Union


class DrawdownError(Exception):
    """Raised when drawdown calculation fails."""
    pass


def simulate_values(daily_returns: Sequence[float], initial_value: float = 1.0) -> np.ndarray:
    """
    Compound daily log returns into a value path.

    Each log return is bridged to a simple return exp(r) - 1 before being
    applied, so value[k] = value[k-1] * (1 + (exp(r_k) - 1)).

    Args:
        daily_returns: Daily log returns in chronological order
        initial_value: Starting value

    Returns:
        Numpy array of values (length = len(daily_returns) + 1)
    """
    values = [initial_value]

    for ret in daily_returns:
        simple_return = math.exp(ret) - 1
        values.append(values[-1] * (1 + simple_return))

    return np.array(values, dtype=np.float64)


def drawdown_series(values: Sequence[float]) -> np.ndarray:
    """
    Calculate drawdown at every point of a value path.

    Formula: drawdown_t = value_t / running_max_t - 1

    The running maximum starts at values[0]; entries are <= 0 and exactly 0
    at each new high.

    Args:
        values: Value path in chronological order

    Returns:
        Numpy array of drawdowns (same length as values)
    """
    if len(values) == 0:
        return np.array([], dtype=np.float64)

    drawdowns = []
    running_max = values[0]

    for value in values:
        if value > running_max:
            running_max = value
        drawdowns.append(value / running_max - 1)

    return np.array(drawdowns, dtype=np.float64)


def max_drawdown(values: Sequence[float]) -> float:
    """
    Calculate maximum drawdown of a value path.

    Returns:
        Most negative drawdown (e.g. -0.15 for -15%), 0.0 for empty input
    """
    drawdowns = drawdown_series(values)
    if len(drawdowns) == 0:
        return 0.0

    return float(drawdowns.min())


def drawdown_stats(
    values: Sequence[float],
    dates: Optional[List[date]] = None
) -> Dict[str, Union[float, int, date, None]]:
    """
    Locate the peak, trough and recovery of the maximum drawdown.

    Args:
        values: Value path in chronological order
        dates: Optional dates aligned with values

    Returns:
        Dictionary with drawdown statistics:
        - max_drawdown_pct: Largest decline as decimal (negative or 0)
        - peak_index / trough_index / recovery_index (None if no recovery)
        - peak_date / trough_date / recovery_date (None without dates)
        - drawdown_days: Periods from peak to trough
        - recovery_days: Periods from trough to recovery (None if no recovery)

    Raises:
        DrawdownError: If insufficient data or mismatched dates
    """
    if len(values) < 2:
        raise DrawdownError("Insufficient data: need at least 2 values")

    if dates is not None and len(dates) != len(values):
        raise DrawdownError("Values and dates must have same length")

    values_array = np.asarray(values, dtype=np.float64)
    drawdowns = drawdown_series(values_array)

    trough_idx = int(np.argmin(drawdowns))
    max_drawdown_pct = float(drawdowns[trough_idx])

    # Peak is the last point at or before the trough with zero drawdown
    peak_idx = 0
    for i in range(trough_idx, -1, -1):
        if drawdowns[i] == 0:
            peak_idx = i
            break

    peak_value = values_array[peak_idx]
    recovery_idx = None

    if max_drawdown_pct == 0:
        recovery_idx = peak_idx
    else:
        for i in range(trough_idx + 1, len(values_array)):
            if values_array[i] >= peak_value:
                recovery_idx = i
                break

    def _date_at(idx):
        if dates is None or idx is None:
            return None
        return dates[idx]

    return {
        'max_drawdown_pct': max_drawdown_pct,
        'peak_index': peak_idx,
        'trough_index': trough_idx,
        'recovery_index': recovery_idx,
        'peak_date': _date_at(peak_idx),
        'trough_date': _date_at(trough_idx),
        'recovery_date': _date_at(recovery_idx),
        'drawdown_days': trough_idx - peak_idx,
        'recovery_days': (recovery_idx - trough_idx) if recovery_idx is not None else None
    }
