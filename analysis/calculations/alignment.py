"""
Price series alignment utilities.
Pure functions that intersect per-ticker price histories onto one trading calendar.
"""

import numpy as np
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Sequence, Tuple


PricePoint = Tuple[date, float]


@dataclass(frozen=True)
class AlignedDataset:
    """
    Prices for several tickers restricted to their common dates.

    Row i of ``prices`` belongs to ``tickers[i]``; ``ticker_index`` is the
    side table from symbol to row.
    """
    dates: List[date]
    tickers: List[str]
    prices: np.ndarray
    ticker_index: Dict[str, int] = field(default_factory=dict)

    @property
    def trading_days(self) -> int:
        return len(self.dates)

    @property
    def is_empty(self) -> bool:
        return len(self.dates) == 0

    def prices_for(self, ticker: str) -> np.ndarray:
        """Aligned price row for a ticker (KeyError if unknown)."""
        return self.prices[self.ticker_index[ticker]]


def empty_dataset() -> AlignedDataset:
    """Dataset with no dates and no tickers."""
    return AlignedDataset(dates=[], tickers=[], prices=np.empty((0, 0)), ticker_index={})


def align_price_series(price_history: Dict[str, Sequence[PricePoint]]) -> AlignedDataset:
    """
    Align price series for multiple tickers onto their common dates.

    Only dates present in every series survive. The first ticker's dates are
    walked in order, then the survivors are sorted ascending in case the input
    was not.

    Args:
        price_history: Dictionary mapping ticker to (date, price) observations

    Returns:
        AlignedDataset (empty if no tickers or no common dates)

    Example:
        AAPL: [(d1, 100), (d2, 101), (d3, 102)]
        MSFT: [(d2, 300), (d3, 305)]
        -> dates [d2, d3], AAPL [101, 102], MSFT [300, 305]
    """
    tickers = list(price_history.keys())
    if not tickers:
        return empty_dataset()

    # Date -> price lookup per ticker; first observation wins on duplicates
    lookups: List[Dict[date, float]] = []
    for ticker in tickers:
        lookup: Dict[date, float] = {}
        for obs_date, price in price_history[ticker]:
            if obs_date not in lookup:
                lookup[obs_date] = float(price)
        lookups.append(lookup)

    common_dates = []
    seen = set()
    for obs_date, _ in price_history[tickers[0]]:
        if obs_date in seen:
            continue
        seen.add(obs_date)
        if all(obs_date in lookup for lookup in lookups[1:]):
            common_dates.append(obs_date)

    if not common_dates:
        return AlignedDataset(
            dates=[],
            tickers=tickers,
            prices=np.empty((len(tickers), 0)),
            ticker_index={t: i for i, t in enumerate(tickers)}
        )

    common_dates.sort()

    prices = np.array(
        [[lookup[d] for d in common_dates] for lookup in lookups],
        dtype=np.float64
    )

    return AlignedDataset(
        dates=common_dates,
        tickers=tickers,
        prices=prices,
        ticker_index={t: i for i, t in enumerate(tickers)}
    )
