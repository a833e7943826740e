"""
Portfolio concentration calculation utilities.
Pure functions for HHI, normalized diversification and top-holding weights.
"""

from typing import Any, Dict, List, Optional, Sequence


def herfindahl_index(weights: Sequence[float]) -> float:
    """
    Calculate Herfindahl-Hirschman Index (HHI).

    HHI = sum(w_i^2)

    For n positions summing to 1 the range is [1/n, 1]: 1/n for equal
    weights, 1 for a single position.

    Args:
        weights: Portfolio weights

    Returns:
        HHI as decimal
    """
    hhi = 0.0
    for w in weights:
        hhi += w * w
    return hhi


def diversification_score(weights: Sequence[float]) -> float:
    """
    Normalize HHI to a 0-100 diversification score.

    Formula: score = (1 - HHI) / (1 - 1/n) * 100

    An equal-weighted portfolio scores 100 and a fully concentrated one 0,
    whatever the number of holdings.

    Args:
        weights: Portfolio weights

    Returns:
        Score clamped to [0, 100]; 0 for one holding or fewer
    """
    n = len(weights)
    if n <= 1:
        return 0.0

    hhi = herfindahl_index(weights)
    min_hhi = 1 / n

    score = ((1 - hhi) / (1 - min_hhi)) * 100

    return max(0.0, min(100.0, score))


def top_n_weight(weights: Sequence[float], n: int = 1) -> float:
    """Combined weight of the n largest positions."""
    sorted_weights = sorted(weights, reverse=True)
    return float(sum(sorted_weights[:n]))


def sector_allocation(holdings: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Aggregate holding weights by sector.

    Args:
        holdings: Holding dictionaries with 'weight' and optional 'sector'

    Returns:
        List of {'sector', 'weight'} sorted by weight descending;
        holdings without a sector are grouped under 'Unknown'
    """
    by_sector: Dict[str, float] = {}
    for holding in holdings:
        sector = holding.get('sector') or 'Unknown'
        by_sector[sector] = by_sector.get(sector, 0.0) + holding.get('weight', 0.0)

    allocations = [{'sector': s, 'weight': w} for s, w in by_sector.items()]
    allocations.sort(key=lambda x: x['weight'], reverse=True)

    return allocations


def concentration_interpretation(hhi: Optional[float]) -> str:
    """
    Provide interpretation of HHI value.

    Args:
        hhi: Herfindahl-Hirschman Index value

    Returns:
        String interpretation of concentration level
    """
    if hhi is None:
        return "No data"
    elif hhi < 0.15:
        return "Low concentration (diversified)"
    elif hhi < 0.25:
        return "Moderate concentration"
    else:
        return "High concentration"
