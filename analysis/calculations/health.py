"""
Composite health score utilities.
Maps diversification, volatility, drawdown and Sharpe onto 0-100 sub-scores
and blends them into one integer score.
"""

import math
from typing import Dict, Optional


HEALTH_WEIGHTS = {
    'diversification': 0.30,
    'volatility': 0.20,
    'drawdown': 0.20,
    'sharpe': 0.30
}


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def volatility_subscore(annual_volatility: float) -> float:
    """100 at or below 10% vol, 0 at or above 50%, linear in between."""
    if annual_volatility <= 0.10:
        return 100.0
    if annual_volatility >= 0.50:
        return 0.0
    return 100 - ((annual_volatility - 0.10) / 0.40) * 100


def drawdown_subscore(max_drawdown: float) -> float:
    """100 with no drawdown, 0 at a 50% or deeper drawdown, linear in between."""
    abs_drawdown = abs(max_drawdown)
    if abs_drawdown <= 0:
        return 100.0
    if abs_drawdown >= 0.50:
        return 0.0
    return 100 - (abs_drawdown / 0.50) * 100


def sharpe_subscore(sharpe: Optional[float]) -> float:
    """
    Score a Sharpe ratio.

    Unknown Sharpe is neutral (50); negative Sharpe decays from 20 toward 0;
    0..2 maps linearly onto 40..100; 2 and above is 100.
    """
    if sharpe is None:
        return 50.0
    if sharpe < 0:
        return max(0.0, 20 + sharpe * 20)
    if sharpe >= 2:
        return 100.0
    return 40 + (sharpe / 2) * 60


def health_components(
    diversification: float,
    annual_volatility: float,
    max_drawdown: float,
    sharpe: Optional[float]
) -> Dict[str, float]:
    """
    Calculate the four health sub-scores, each clamped to [0, 100].

    Args:
        diversification: Diversification score (already 0-100)
        annual_volatility: Annualized portfolio volatility
        max_drawdown: Maximum drawdown (negative decimal)
        sharpe: Sharpe ratio, None when not applicable

    Returns:
        Dictionary with diversification, volatility, drawdown and sharpe scores
    """
    return {
        'diversification': _clamp(diversification),
        'volatility': _clamp(volatility_subscore(annual_volatility)),
        'drawdown': _clamp(drawdown_subscore(max_drawdown)),
        'sharpe': _clamp(sharpe_subscore(sharpe))
    }


def health_score(components: Dict[str, float]) -> int:
    """
    Blend sub-scores into the composite health score.

    Weights: diversification 30%, volatility 20%, drawdown 20%, Sharpe 30%.

    Returns:
        Integer score in [0, 100]
    """
    score = sum(HEALTH_WEIGHTS[name] * components[name] for name in HEALTH_WEIGHTS)
    # Half-up rounding
    return int(math.floor(_clamp(score) + 0.5))


def health_rating(score: int) -> str:
    """Plain-language rating for a health score."""
    if score >= 70:
        return "good"
    elif score >= 50:
        return "moderate"
    else:
        return "needs attention"
