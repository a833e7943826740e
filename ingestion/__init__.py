"""
Data Ingestion Module

Handles parsing holdings and fetching market data:
- Free-text holdings to normalized weights
- yfinance for adjusted close prices and issuer metadata
"""

__version__ = "0.1.0"
