"""
Portfolio diagnosis builder.
Renders a rule-based markdown diagnosis from the analysis JSON and optionally
lets the LLM rewrite it without changing the numbers.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from analysis.calculations.health import health_rating
from reports.ollama_client import ollama_request, OllamaError


logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are a seasoned investment advisor providing an educational portfolio analysis. You are NOT providing personalized financial advice. Use ONLY the numbers in the provided DRAFT and METRICS. Do not invent statistics. Keep the markdown section structure and end with the disclaimer that this is educational, not financial advice."""

USER_PROMPT = """Rewrite the DRAFT diagnosis for clarity and flow. Keep every number exactly as written and do not add new figures."""

DISCLAIMER = (
    "*This is an educational analysis based on historical data. Past performance "
    "does not guarantee future results. This is not personalized financial advice.*"
)


class DiagnosisError(Exception):
    """Raised when a diagnosis cannot be built."""
    pass


def generate_diagnosis(
    result: Dict[str, Any],
    use_llm: bool = True,
    model: Optional[str] = None,
    timeout: Optional[int] = None
) -> Dict[str, Any]:
    """
    Produce the portfolio diagnosis text.

    Args:
        result: Analysis dictionary from compose_portfolio_metrics
        use_llm: Ask the Ollama model to rewrite the rule-based draft
        model: Ollama model override
        timeout: Request timeout override

    Returns:
        Dictionary with 'text', 'source' ('llm' or 'rules') and 'error'
    """
    draft = build_fallback_diagnosis(result)

    if not use_llm:
        return {'text': draft, 'source': 'rules', 'error': None}

    prompt = (
        f"DRAFT:\n{draft}\n\n"
        f"METRICS JSON:\n{json.dumps(_metrics_context(result), indent=2)}\n\n"
        f"{USER_PROMPT}"
    )

    try:
        text = ollama_request(prompt=prompt, system_prompt=SYSTEM_PROMPT, model=model, timeout=timeout)
    except OllamaError as e:
        logger.warning(f"LLM diagnosis unavailable, using rule-based text: {e}")
        return {'text': draft, 'source': 'rules', 'error': str(e)}

    score_marker = f"{result['portfolio']['health_score']}/100"
    if score_marker not in text:
        logger.warning("LLM diagnosis dropped the health score, using rule-based text")
        return {'text': draft, 'source': 'rules', 'error': 'LLM output failed number check'}

    return {'text': text, 'source': 'llm', 'error': None}


def build_fallback_diagnosis(result: Dict[str, Any]) -> str:
    """
    Build a markdown diagnosis from the metrics alone.

    Args:
        result: Analysis dictionary with 'portfolio' and 'sectors'

    Returns:
        Markdown text

    Raises:
        DiagnosisError: If the portfolio section is missing
    """
    if not result or 'portfolio' not in result:
        raise DiagnosisError("Analysis result has no portfolio metrics")

    portfolio = result['portfolio']
    sectors = result.get('sectors', [])

    lines = ["## Portfolio Analysis Summary\n"]

    score = portfolio['health_score']
    lines.append(
        f"Your portfolio has a health score of **{score}/100**, which is {health_rating(score)}. "
        f"With {portfolio['num_holdings']} holding(s), here's what the numbers tell us:\n"
    )

    lines.extend(_risk_section(portfolio))
    lines.extend(_return_section(portfolio))
    lines.extend(_diversification_section(portfolio))

    if sectors:
        top_sector = max(sectors, key=lambda s: s['weight'])
        lines.append("### Sector Exposure\n")
        lines.append(
            f"Your portfolio is most exposed to **{top_sector['sector']}** "
            f"at {top_sector['weight'] * 100:.1f}%.\n"
        )

    suggestions = build_suggestions(portfolio, sectors)
    if suggestions:
        lines.append("### Suggestions\n")
        lines.extend(f"- {s}" for s in suggestions)

    lines.append("\n---\n" + DISCLAIMER)

    return "\n".join(lines)


def _risk_section(portfolio: Dict[str, Any]) -> List[str]:
    vol = portfolio['annual_volatility']
    if vol > 0.30:
        vol_level = "high"
    elif vol > 0.15:
        vol_level = "moderate"
    else:
        vol_level = "low"

    lines = [
        "### Risk Profile\n",
        f"- **Annual Volatility:** {vol * 100:.1f}% ({vol_level} risk)",
        f"- **Maximum Drawdown:** {portfolio['max_drawdown'] * 100:.1f}% "
        f"(the largest peak-to-trough decline in the period)"
    ]

    if portfolio.get('var_95') is not None:
        lines.append(
            f"- **Value at Risk (95%):** On 5% of trading days, you could lose approximately "
            f"${portfolio['var_95']:,.0f} or more"
        )

    lines.append("")
    return lines


def _return_section(portfolio: Dict[str, Any]) -> List[str]:
    lines = [
        "### Return & Risk-Adjusted Performance\n",
        f"- **Expected Annual Return:** {portfolio['expected_annual_return'] * 100:.1f}%"
    ]

    sharpe = portfolio.get('sharpe_ratio')
    if sharpe is not None:
        if sharpe > 1:
            quality = "good"
        elif sharpe > 0.5:
            quality = "acceptable"
        elif sharpe > 0:
            quality = "below average"
        else:
            quality = "negative (returns don't justify the risk)"
        lines.append(f"- **Sharpe Ratio:** {sharpe:.2f} ({quality})")
    else:
        lines.append("- **Sharpe Ratio:** not applicable (no measurable volatility)")

    lines.append("")
    return lines


def _diversification_section(portfolio: Dict[str, Any]) -> List[str]:
    div_score = portfolio['diversification_score']
    if div_score > 70:
        level = "well diversified"
    elif div_score > 40:
        level = "moderately diversified"
    else:
        level = "concentrated"

    return [
        "### Diversification\n",
        f"- **Diversification Score:** {div_score:.0f}/100 ({level})",
        f"- **Top Holding Weight:** {portfolio['top_holding_weight'] * 100:.1f}%",
        f"- **HHI Index:** {portfolio['diversification_hhi']:.3f} (lower is more diversified)",
        ""
    ]


def build_suggestions(portfolio: Dict[str, Any], sectors: List[Dict[str, Any]]) -> List[str]:
    """Rule-based, actionable hints derived from the metrics."""
    suggestions = []

    top_weight = portfolio['top_holding_weight']
    if top_weight > 0.4:
        suggestions.append(
            f"Consider reducing your largest position ({top_weight * 100:.0f}%) "
            f"to lower concentration risk"
        )

    if portfolio['diversification_score'] < 50 and portfolio['num_holdings'] < 10:
        suggestions.append(
            "Adding more positions could improve diversification and reduce idiosyncratic risk"
        )

    if portfolio['annual_volatility'] > 0.25:
        suggestions.append(
            "Consider adding some lower-volatility assets (bonds, dividend stocks) "
            "to reduce overall portfolio risk"
        )

    if len(sectors) == 1 or any(s['weight'] > 0.5 for s in sectors):
        suggestions.append(
            "Your sector concentration is high; consider adding exposure to other sectors"
        )

    sharpe = portfolio.get('sharpe_ratio')
    if sharpe is not None and sharpe < 0.5:
        suggestions.append(
            "The risk-adjusted return could be improved by either increasing expected "
            "returns or reducing volatility"
        )

    return suggestions


def _metrics_context(result: Dict[str, Any]) -> Dict[str, Any]:
    """Condensed metrics for the LLM prompt."""
    portfolio = result['portfolio']
    sharpe = portfolio.get('sharpe_ratio')
    var = portfolio.get('var_95')

    return {
        'holdings': [
            {
                'ticker': h['ticker'],
                'weight': f"{h['weight'] * 100:.1f}%",
                'sector': h.get('sector'),
                'annual_return': f"{h['annual_return'] * 100:.1f}%",
                'annual_volatility': f"{h['annual_volatility'] * 100:.1f}%"
            }
            for h in result.get('holdings', [])
        ],
        'portfolio': {
            'expected_annual_return': f"{portfolio['expected_annual_return'] * 100:.1f}%",
            'annual_volatility': f"{portfolio['annual_volatility'] * 100:.1f}%",
            'sharpe_ratio': f"{sharpe:.2f}" if sharpe is not None else "N/A",
            'max_drawdown': f"{portfolio['max_drawdown'] * 100:.1f}%",
            'diversification_hhi': f"{portfolio['diversification_hhi']:.3f}",
            'diversification_score': f"{portfolio['diversification_score']:.0f}/100",
            'top_holding_weight': f"{portfolio['top_holding_weight'] * 100:.1f}%",
            'health_score': f"{portfolio['health_score']}/100",
            'num_holdings': portfolio['num_holdings'],
            'var_95': f"${var:,.0f} (95% 1-day VaR)" if var is not None else None
        },
        'sectors': [
            {'sector': s['sector'], 'weight': f"{s['weight'] * 100:.1f}%"}
            for s in result.get('sectors', [])
        ]
    }
