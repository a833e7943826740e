#!/usr/bin/env python3
"""
CLI tool for displaying a saved portfolio analysis.
Usage: python -m analysis.show_analysis [analysis.json] [options]
"""

import sys
import json
import argparse
from pathlib import Path
from typing import List, Optional

from analysis.calculations.concentration import concentration_interpretation
from analysis.calculations.health import health_rating


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='Display a saved portfolio analysis',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m analysis.show_analysis
  python -m analysis.show_analysis ./custom/analysis.json --format full
        """
    )

    parser.add_argument('analysis_file',
                        nargs='?',
                        default='./data/processed/portfolio/analysis.json',
                        help='Analysis JSON written by analyze_portfolio')
    parser.add_argument('--format',
                        choices=['summary', 'full', 'json'],
                        default='summary',
                        help='Output format (default: summary)')

    args = parser.parse_args(argv)

    analysis_file = Path(args.analysis_file)

    if not analysis_file.exists():
        print(f"❌ No analysis found at {analysis_file}", file=sys.stderr)
        print("💡 Run analysis first: python -m analysis.analyze_portfolio holdings.txt", file=sys.stderr)
        sys.exit(1)

    try:
        with open(analysis_file, 'r', encoding='utf-8') as f:
            analysis = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"❌ Failed to load analysis: {e}", file=sys.stderr)
        sys.exit(1)

    if args.format == 'json':
        print(json.dumps(analysis, indent=2))
    elif args.format == 'full':
        _display_summary(analysis)
        _display_holdings(analysis)
        if analysis.get('diagnosis'):
            print()
            print(analysis['diagnosis'])
    else:
        _display_summary(analysis)


def _display_summary(analysis: dict):
    """Display headline portfolio metrics."""
    portfolio = analysis['portfolio']
    period = analysis.get('data_period', {})

    print(f"📊 Portfolio Analysis ({period.get('start_date')} to {period.get('end_date')})")
    print("=" * 50)

    score = portfolio['health_score']
    print(f"🩺 Health Score: {score}/100 ({health_rating(score)})")

    print("\n📈 Return & Risk:")
    print(f"   Expected Return: {portfolio['expected_annual_return'] * 100:+6.2f}%")
    print(f"   Volatility:      {portfolio['annual_volatility'] * 100:6.2f}%")
    sharpe = portfolio.get('sharpe_ratio')
    print(f"   Sharpe Ratio:    {sharpe:6.2f}" if sharpe is not None else "   Sharpe Ratio:    Not applicable")

    drawdown = analysis.get('drawdown') or {}
    print(f"\n📉 Max Drawdown: {portfolio['max_drawdown'] * 100:.1f}%")
    if drawdown.get('peak_date') and drawdown.get('trough_date') and drawdown.get('max_drawdown_pct'):
        print(f"   Period: {drawdown['peak_date']} to {drawdown['trough_date']}")
        if drawdown.get('recovery_date'):
            print(f"   Recovered: {drawdown['recovery_date']}")
        else:
            print("   Recovery: Not yet recovered")

    var = portfolio.get('var_95')
    if var is not None:
        value = analysis.get('metadata', {}).get('portfolio_value')
        print(f"\n⚠️  VaR (95%, 1-day): ${var:,.0f}" + (f" on ${value:,.0f}" if value else ""))

    print("\n🧺 Diversification:")
    print(f"   Score: {portfolio['diversification_score']:.0f}/100")
    print(f"   HHI: {portfolio['diversification_hhi']:.3f} "
          f"({concentration_interpretation(portfolio['diversification_hhi'])})")
    print(f"   Top Holding: {portfolio['top_holding_weight'] * 100:.1f}%")

    dq = analysis.get('data_quality', {})
    print("\n📋 Data Quality:")
    print(f"   Trading Days: {period.get('trading_days', dq.get('trading_days'))}")
    for warning in dq.get('warnings', []):
        print(f"   ⚠️  {warning}")
    if analysis.get('dropped_tickers'):
        print(f"   Dropped: {', '.join(analysis['dropped_tickers'])}")


def _display_holdings(analysis: dict):
    """Display per-holding and per-sector breakdown."""
    print("\n💼 Holdings:")
    for h in analysis.get('holdings', []):
        print(f"   {h['ticker']:8} {h['weight'] * 100:6.2f}%  "
              f"return {h['annual_return'] * 100:+6.1f}%  "
              f"vol {h['annual_volatility'] * 100:5.1f}%  "
              f"{h.get('sector') or 'Unknown'}")

    sectors = analysis.get('sectors', [])
    if sectors:
        print("\n🏭 Sectors:")
        for s in sectors:
            print(f"   {s['sector']:24} {s['weight'] * 100:6.2f}%")


if __name__ == '__main__':
    main()
