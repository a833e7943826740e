"""
Orchestrated analysis job - holdings text to portfolio analysis JSON.
Parses holdings, fetches market data, calls pure functions, persists results.
"""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from analysis.config import EngineConfig, ConfigError
from analysis.guardrails import DataQualityError
from analysis.metrics_aggregator import compose_portfolio_metrics, MetricsAggregatorError
from ingestion.transforms.holdings_parser import parse_holdings_text, HoldingsParseError
from ingestion.transforms.validators import validate_holdings, validate_price_series, ValidationError
from ingestion.providers.yfinance_adapter import (
    fetch_all_price_histories,
    fetch_all_metadata,
    history_window,
    YFinanceError
)
from reports.diagnosis import generate_diagnosis
from reports.atomic_writer import write_json_atomic


logger = logging.getLogger(__name__)


class AnalysisJobError(Exception):
    """Raised when analysis job fails."""
    pass


def run_portfolio_analysis(
    holdings_text: str,
    output_path: Optional[Path] = None,
    portfolio_value: float = 10000.0,
    years_back: int = 1,
    use_llm: bool = True,
    config: Optional[EngineConfig] = None,
    end_date: Optional[date] = None
) -> Dict[str, Any]:
    """
    Run the complete portfolio analysis and optionally save it to JSON.

    Args:
        holdings_text: Free-text holdings, one per line
        output_path: Where to write the analysis JSON (skipped if None)
        portfolio_value: Portfolio value in currency units (for VaR)
        years_back: Years of price history to fetch
        use_llm: Let the LLM rewrite the diagnosis
        config: Engine assumptions (defaults to environment overrides)
        end_date: Last date of the history window (defaults to today)

    Returns:
        Dictionary with job status, analysis and summary counts; failures
        are reported in the dictionary rather than raised
    """
    start_time = datetime.now()

    try:
        config = config or EngineConfig.from_env()

        holdings = parse_holdings_text(holdings_text)
        validate_holdings(holdings)

        tickers = [h['ticker'] for h in holdings]
        start, end = history_window(years_back, end_date)

        price_history = fetch_all_price_histories(
            tickers, start, end, min_observations=config.min_trading_days
        )
        for ticker, series in price_history.items():
            validate_price_series(ticker, series)

        valid_holdings = reweight_holdings(holdings, list(price_history.keys()))
        dropped = [t for t in tickers if t not in price_history]
        if dropped:
            logger.warning(f"Dropped tickers without usable data: {', '.join(dropped)}")

        metadata = fetch_all_metadata([h['ticker'] for h in valid_holdings])

        analysis = compose_portfolio_metrics(
            holdings=valid_holdings,
            price_history=price_history,
            metadata=metadata,
            portfolio_value=portfolio_value,
            config=config
        )

        diagnosis = generate_diagnosis(analysis, use_llm=use_llm)
        analysis['diagnosis'] = diagnosis['text']
        analysis['diagnosis_source'] = diagnosis['source']
        analysis['dropped_tickers'] = dropped

        written_path = None
        if output_path is not None:
            write_result = write_json_atomic(analysis, output_path)
            if write_result['status'] != 'completed':
                raise AnalysisJobError(f"Write failed: {write_result.get('error', 'Unknown')}")
            written_path = write_result['output_path']

        return {
            'status': 'completed',
            'analysis': analysis,
            'output_path': written_path,
            'holdings_analyzed': len(valid_holdings),
            'dropped_tickers': dropped,
            'trading_days': analysis['data_period']['trading_days'],
            'duration_seconds': (datetime.now() - start_time).total_seconds()
        }

    except (ConfigError, HoldingsParseError, ValidationError, YFinanceError, DataQualityError,
            MetricsAggregatorError, AnalysisJobError) as e:
        logger.error(f"Portfolio analysis failed: {e}")
        return {
            'status': 'failed',
            'error_type': type(e).__name__,
            'error_message': str(e),
            'analysis': None,
            'output_path': None,
            'duration_seconds': (datetime.now() - start_time).total_seconds()
        }


def reweight_holdings(holdings: List[Dict[str, Any]], available: List[str]) -> List[Dict[str, Any]]:
    """
    Keep holdings with market data and rescale their weights to sum to 1.

    Args:
        holdings: Parsed holdings with weights summing to 1
        available: Tickers that have usable price history

    Returns:
        Filtered holdings with rescaled weights

    Raises:
        AnalysisJobError: If no holding has data or the remaining weight is zero
    """
    kept = [h for h in holdings if h['ticker'] in available]
    if not kept:
        raise AnalysisJobError("Could not fetch data for any of the provided tickers")

    total = sum(h['weight'] for h in kept)
    if total <= 0:
        raise AnalysisJobError("Holdings with market data carry no weight")

    return [{'ticker': h['ticker'], 'weight': h['weight'] / total} for h in kept]
