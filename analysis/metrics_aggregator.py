"""
Metrics aggregator - composes all portfolio calculations into the analysis JSON.
Pure pipeline: holdings + price histories in, portfolio metrics out.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from analysis.config import EngineConfig, DEFAULT_CONFIG
from analysis.guardrails import run_all_guardrails, validate_numeric_inputs
from analysis.calculations.alignment import AlignedDataset, PricePoint, align_price_series
from analysis.calculations.returns import log_returns, mean_return, annualize_return
from analysis.calculations.volatility import annualized_volatility
from analysis.calculations.covariance import build_covariance_matrix
from analysis.calculations.portfolio import (
    portfolio_return,
    portfolio_volatility,
    sharpe_ratio,
    portfolio_daily_returns
)
from analysis.calculations.drawdown import (
    simulate_values,
    drawdown_series,
    max_drawdown,
    drawdown_stats
)
from analysis.calculations.concentration import (
    herfindahl_index,
    diversification_score,
    top_n_weight,
    sector_allocation
)
from analysis.calculations.var import var_95
from analysis.calculations.health import health_components, health_score


logger = logging.getLogger(__name__)

CALCULATION_VERSION = '1.0.0'


class MetricsAggregatorError(Exception):
    """Raised when metrics aggregation fails."""
    pass


def compose_portfolio_metrics(
    holdings: List[Dict[str, Any]],
    price_history: Dict[str, Sequence[PricePoint]],
    metadata: Optional[Dict[str, Dict[str, Any]]] = None,
    portfolio_value: float = 10000.0,
    config: EngineConfig = DEFAULT_CONFIG
) -> Dict[str, Any]:
    """
    Compose all portfolio metrics into a standardized dictionary.

    Args:
        holdings: List of {'ticker', 'weight'} with weights summing to 1
        price_history: Dictionary mapping ticker to (date, price) observations
        metadata: Optional dictionary mapping ticker to name/sector/industry
        portfolio_value: Portfolio value in currency units (for VaR)
        config: Engine assumptions

    Returns:
        Dictionary with portfolio, holdings, sectors, timeseries, drawdown,
        data_period, data_quality and metadata sections

    Raises:
        MetricsAggregatorError: If holdings and price data don't match
        DataQualityError: If inputs fail guardrails (weights, trading days)
    """
    if not holdings:
        raise MetricsAggregatorError("No holdings provided")

    if portfolio_value < 0:
        raise MetricsAggregatorError(f"Portfolio value must be non-negative, got {portfolio_value}")

    metadata = metadata or {}
    tickers = [h['ticker'] for h in holdings]
    weights_by_ticker = {h['ticker']: float(h['weight']) for h in holdings}

    if len(weights_by_ticker) != len(tickers):
        raise MetricsAggregatorError("Duplicate tickers in holdings; merge them before analysis")

    missing = [t for t in tickers if t not in price_history]
    if missing:
        raise MetricsAggregatorError(f"No price history for: {', '.join(missing)}")

    # Align in holdings order so matrix rows follow the weight vector
    dataset = align_price_series({t: price_history[t] for t in tickers})

    data_quality = run_all_guardrails(
        weights_by_ticker,
        dataset,
        min_trading_days=config.min_trading_days,
        tolerance=config.weight_tolerance
    )

    logger.info(
        f"Analyzing {len(tickers)} holdings over {dataset.trading_days} common trading days"
    )

    # Per-asset statistics
    returns_by_ticker = {}
    asset_returns = []
    asset_vols = []

    for ticker in tickers:
        returns = log_returns(dataset.prices_for(ticker))
        returns_by_ticker[ticker] = returns
        asset_returns.append(annualize_return(mean_return(returns), config.trading_days_per_year))
        asset_vols.append(annualized_volatility(returns, config.trading_days_per_year))

    weights = [weights_by_ticker[t] for t in tickers]

    # Portfolio risk/return
    cov_matrix = build_covariance_matrix(returns_by_ticker, tickers, config.trading_days_per_year)
    port_vol = portfolio_volatility(weights, cov_matrix)
    port_return = portfolio_return(weights, asset_returns)
    sharpe = sharpe_ratio(port_return, port_vol, config.risk_free_rate)

    # Value path and drawdowns
    daily = portfolio_daily_returns(returns_by_ticker, weights_by_ticker, tickers)
    values = simulate_values(daily, 1.0)
    drawdowns = drawdown_series(values)
    max_dd = max_drawdown(values)

    # Concentration
    hhi = herfindahl_index(weights)
    div_score = diversification_score(weights)
    top_weight = top_n_weight(weights, 1)

    # VaR is not applicable without volatility
    var = None
    if port_vol > 0:
        var = var_95(
            port_vol,
            portfolio_value,
            horizon_days=config.var_horizon_days,
            trading_days=config.trading_days_per_year,
            z_score=config.var_z_score
        )

    components = health_components(div_score, port_vol, max_dd, sharpe)
    score = health_score(components)

    holdings_metrics = _build_holdings_metrics(
        tickers, weights_by_ticker, asset_returns, asset_vols, metadata
    )

    result = {
        'portfolio': {
            'expected_annual_return': port_return,
            'annual_volatility': port_vol,
            'sharpe_ratio': sharpe,
            'max_drawdown': max_dd,
            'diversification_hhi': hhi,
            'diversification_score': div_score,
            'top_holding_weight': top_weight,
            'health_score': score,
            'var_95': var,
            'num_holdings': len(tickers)
        },
        'health_components': components,
        'holdings': holdings_metrics,
        'sectors': sector_allocation(holdings_metrics),
        'covariance': {
            'tickers': tickers,
            'matrix': cov_matrix.tolist()
        },
        'timeseries': _build_timeseries(dataset, values, drawdowns),
        'drawdown': _build_drawdown_summary(values, dataset),
        'data_period': {
            'start_date': dataset.dates[0].isoformat(),
            'end_date': dataset.dates[-1].isoformat(),
            'trading_days': dataset.trading_days
        },
        'data_quality': data_quality,
        'metadata': {
            'calculated_at': datetime.now().isoformat(),
            'calculation_version': CALCULATION_VERSION,
            'portfolio_value': portfolio_value,
            'assumptions': {
                'trading_days_per_year': config.trading_days_per_year,
                'risk_free_rate': config.risk_free_rate,
                'var_z_score': config.var_z_score,
                'var_horizon_days': config.var_horizon_days
            }
        }
    }

    validate_numeric_inputs(result)

    logger.info(
        f"Portfolio health score {score}/100 "
        f"(vol {port_vol:.1%}, max drawdown {max_dd:.1%})"
    )

    return result


def _build_holdings_metrics(
    tickers: List[str],
    weights_by_ticker: Dict[str, float],
    asset_returns: List[float],
    asset_vols: List[float],
    metadata: Dict[str, Dict[str, Any]]
) -> List[Dict[str, Any]]:
    """Per-holding metrics with metadata passed through untouched."""
    holdings_metrics = []

    for i, ticker in enumerate(tickers):
        info = metadata.get(ticker, {})
        holdings_metrics.append({
            'ticker': ticker,
            'weight': weights_by_ticker[ticker],
            'name': info.get('name'),
            'sector': info.get('sector'),
            'industry': info.get('industry'),
            'annual_return': asset_returns[i],
            'annual_volatility': asset_vols[i]
        })

    return holdings_metrics


def _build_timeseries(dataset: AlignedDataset, values, drawdowns) -> Dict[str, List]:
    """
    Chart series aligned to return dates.

    Returns consume the first price date, so the leading initial value is
    dropped and each point lines up with dates[1:].
    """
    return_dates = dataset.dates[1:]
    n = min(len(return_dates), len(values) - 1)

    return {
        'dates': [d.isoformat() for d in return_dates[:n]],
        'portfolio_values': [float(v) for v in values[1:n + 1]],
        'drawdowns': [float(d) for d in drawdowns[1:n + 1]]
    }


def _build_drawdown_summary(values, dataset: AlignedDataset) -> Optional[Dict[str, Any]]:
    """Peak/trough/recovery details of the maximum drawdown."""
    if len(values) < 2 or len(values) != dataset.trading_days:
        return None

    stats = drawdown_stats(values, dataset.dates)

    def _iso(value: Optional[date]) -> Optional[str]:
        return value.isoformat() if value is not None else None

    return {
        'max_drawdown_pct': stats['max_drawdown_pct'],
        'peak_date': _iso(stats['peak_date']),
        'trough_date': _iso(stats['trough_date']),
        'recovery_date': _iso(stats['recovery_date']),
        'drawdown_days': stats['drawdown_days'],
        'recovery_days': stats['recovery_days']
    }
