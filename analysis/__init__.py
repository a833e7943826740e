"""
Analysis Engine Module

Calculates portfolio metrics from aligned price histories:
- Log returns, annualized return and volatility
- Covariance matrix and portfolio volatility, Sharpe ratio
- Value path, drawdown series and maximum drawdown
- HHI concentration, diversification score, parametric VaR
- Composite health score
"""

__version__ = "0.1.0"
