#!/usr/bin/env python3
"""
CLI tool for analyzing a portfolio.
Usage: python -m analysis.analyze_portfolio holdings.txt [options]
"""

import sys
import argparse
import logging
from datetime import date
from pathlib import Path
from typing import List, Optional

from analysis.analysis_job import run_portfolio_analysis
from analysis.config import EngineConfig, ConfigError
from ingestion.transforms.holdings_parser import format_holdings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Analyze risk, return and health of a portfolio',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m analysis.analyze_portfolio holdings.txt
  echo "AAPL 40%\\nMSFT 35%\\nVOO 25%" | python -m analysis.analyze_portfolio -
  python -m analysis.analyze_portfolio holdings.txt --value 50000 --years 2 --no-llm
        """
    )

    parser.add_argument('holdings',
                        help='Holdings file, one "TICKER weight" per line ("-" for stdin)')
    parser.add_argument('--value',
                        type=float,
                        default=10000.0,
                        help='Portfolio value for VaR (default: 10000)')
    parser.add_argument('--years',
                        type=int,
                        default=1,
                        help='Years of price history (default: 1)')
    parser.add_argument('--end',
                        type=date.fromisoformat,
                        help='Last date of price history (YYYY-MM-DD, default: today)')
    parser.add_argument('--output',
                        help='Output JSON path (default: ./data/processed/portfolio/analysis.json)')
    parser.add_argument('--no-llm',
                        action='store_true',
                        help='Use the rule-based diagnosis only')
    parser.add_argument('--quiet', '-q',
                        action='store_true',
                        help='Minimal output (just success/failure)')
    parser.add_argument('--verbose', '-v',
                        action='store_true',
                        help='Debug logging')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    if args.holdings == '-':
        holdings_text = sys.stdin.read()
    else:
        holdings_path = Path(args.holdings)
        if not holdings_path.exists():
            print(f"Holdings file not found: {holdings_path}", file=sys.stderr)
            return 1
        holdings_text = holdings_path.read_text(encoding='utf-8')

    output_path = Path(args.output) if args.output else Path('./data/processed/portfolio/analysis.json')

    try:
        config = EngineConfig.from_env()
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    result = run_portfolio_analysis(
        holdings_text,
        output_path=output_path,
        portfolio_value=args.value,
        years_back=args.years,
        use_llm=not args.no_llm,
        config=config,
        end_date=args.end
    )

    if result['status'] != 'completed':
        print(f"Analysis failed: {result['error_message']}", file=sys.stderr)
        return 1

    if args.quiet:
        print(f"Portfolio analysis complete: {result['output_path']}")
        return 0

    _show_quick_summary(result)
    return 0


def _show_quick_summary(result: dict) -> None:
    """Print headline metrics and the diagnosis."""
    analysis = result['analysis']
    portfolio = analysis['portfolio']

    print(f"Holdings analyzed: {result['holdings_analyzed']} "
          f"over {result['trading_days']} trading days")
    if result['dropped_tickers']:
        print(f"Dropped (no data): {', '.join(result['dropped_tickers'])}")
    print(f"Health Score: {portfolio['health_score']}/100")
    print(f"Expected Return: {portfolio['expected_annual_return'] * 100:+.1f}%")
    print(f"Volatility: {portfolio['annual_volatility'] * 100:.1f}%")

    sharpe = portfolio['sharpe_ratio']
    print(f"Sharpe Ratio: {sharpe:.2f}" if sharpe is not None else "Sharpe Ratio: n/a")
    print(f"Max Drawdown: {portfolio['max_drawdown'] * 100:.1f}%")
    print(f"Diversification: {portfolio['diversification_score']:.0f}/100")

    var = portfolio['var_95']
    print(f"VaR (95%, 1-day): ${var:,.0f}" if var is not None else "VaR (95%, 1-day): n/a")

    if analysis.get('holdings'):
        print("Weights:")
        print(format_holdings(analysis['holdings']))
    print(f"Results saved to: {result['output_path']}")
    print()
    print(analysis['diagnosis'])


if __name__ == '__main__':
    sys.exit(main())
