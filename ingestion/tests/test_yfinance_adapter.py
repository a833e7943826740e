"""
Tests for yfinance adapter - mocked network calls, no live API hits in CI.
"""

import pytest
from unittest.mock import Mock, patch
from datetime import date, timedelta
import pandas as pd

from ingestion.providers.yfinance_adapter import (
    fetch_adjusted_closes,
    fetch_ticker_metadata,
    fetch_all_price_histories,
    fetch_all_metadata,
    history_window,
    YFinanceError,
    _validate_date_range,
    _validate_ticker
)


def _price_frame(dates, adj_close, close=None):
    close = close if close is not None else adj_close
    return pd.DataFrame({
        'Open': close,
        'High': close,
        'Low': close,
        'Close': close,
        'Adj Close': adj_close,
        'Volume': [1000000] * len(close)
    }, index=pd.DatetimeIndex(dates, name='Date'))


class TestFetchAdjustedCloses:
    """Tests for fetch_adjusted_closes function."""

    @patch('ingestion.providers.yfinance_adapter.yf.download')
    def test_fetch_success(self, mock_download):
        """Adjusted closes come back as sorted (date, price) tuples."""
        mock_download.return_value = _price_frame(
            ['2024-01-15', '2024-01-16'], [185.75, 186.94], close=[185.92, 187.11]
        )

        result = fetch_adjusted_closes('AAPL', date(2024, 1, 15), date(2024, 1, 16))

        mock_download.assert_called_once_with(
            'AAPL',
            start='2024-01-15',
            end='2024-01-17',  # yfinance end is exclusive
            progress=False,
            auto_adjust=False
        )
        assert result == [(date(2024, 1, 15), 185.75), (date(2024, 1, 16), 186.94)]

    @patch('ingestion.providers.yfinance_adapter.yf.download')
    def test_fetch_multiindex_columns(self, mock_download):
        """Recent yfinance returns (field, ticker) columns."""
        frame = _price_frame(['2024-01-15', '2024-01-16'], [100.0, 101.0])
        frame.columns = pd.MultiIndex.from_product([frame.columns, ['VOO']])
        mock_download.return_value = frame

        result = fetch_adjusted_closes('VOO', date(2024, 1, 15), date(2024, 1, 16))

        assert [p for _, p in result] == [100.0, 101.0]

    @patch('ingestion.providers.yfinance_adapter.yf.download')
    def test_fetch_falls_back_to_close(self, mock_download):
        frame = _price_frame(['2024-01-15'], [50.0]).drop(columns=['Adj Close'])
        mock_download.return_value = frame

        result = fetch_adjusted_closes('BND', date(2024, 1, 15), date(2024, 1, 15))

        assert result == [(date(2024, 1, 15), 50.0)]

    @patch('ingestion.providers.yfinance_adapter.yf.download')
    def test_fetch_drops_missing_and_non_positive(self, mock_download):
        mock_download.return_value = _price_frame(
            ['2024-01-15', '2024-01-16', '2024-01-17', '2024-01-18'],
            [10.0, float('nan'), 0.0, 11.0]
        )

        result = fetch_adjusted_closes('XYZ', date(2024, 1, 15), date(2024, 1, 18))

        assert result == [(date(2024, 1, 15), 10.0), (date(2024, 1, 18), 11.0)]

    @patch('ingestion.providers.yfinance_adapter.yf.download')
    def test_fetch_empty_response(self, mock_download):
        mock_download.return_value = pd.DataFrame()

        assert fetch_adjusted_closes('INVALID', date(2024, 1, 15), date(2024, 1, 16)) == []

    @patch('ingestion.providers.yfinance_adapter.yf.download')
    def test_fetch_no_close_column(self, mock_download):
        mock_download.return_value = pd.DataFrame(
            {'Volume': [1]}, index=pd.DatetimeIndex(['2024-01-15'])
        )

        with pytest.raises(YFinanceError, match="No close prices"):
            fetch_adjusted_closes('AAPL', date(2024, 1, 15), date(2024, 1, 15))

    @patch('ingestion.providers.yfinance_adapter.yf.download')
    def test_fetch_network_error(self, mock_download):
        mock_download.side_effect = Exception("Network timeout")

        with pytest.raises(YFinanceError, match="Failed to fetch prices for AAPL"):
            fetch_adjusted_closes('AAPL', date(2024, 1, 15), date(2024, 1, 16))

    def test_fetch_invalid_ticker(self):
        with pytest.raises(YFinanceError, match="invalid characters"):
            fetch_adjusted_closes('AA PL', date(2024, 1, 15), date(2024, 1, 16))


class TestFetchTickerMetadata:
    """Tests for fetch_ticker_metadata function."""

    @patch('ingestion.providers.yfinance_adapter.yf.Ticker')
    def test_metadata_success(self, mock_ticker):
        mock_ticker.return_value = Mock(info={
            'longName': 'Apple Inc.',
            'sector': 'Technology',
            'industry': 'Consumer Electronics'
        })

        result = fetch_ticker_metadata('AAPL')

        assert result == {
            'ticker': 'AAPL',
            'name': 'Apple Inc.',
            'sector': 'Technology',
            'industry': 'Consumer Electronics'
        }

    @patch('ingestion.providers.yfinance_adapter.yf.Ticker')
    def test_metadata_fund_without_sector(self, mock_ticker):
        mock_ticker.return_value = Mock(info={'shortName': 'Vanguard S&P 500 ETF'})

        result = fetch_ticker_metadata('VOO')

        assert result['name'] == 'Vanguard S&P 500 ETF'
        assert result['sector'] == 'Unknown'
        assert result['industry'] == 'Unknown'

    @patch('ingestion.providers.yfinance_adapter.yf.Ticker')
    def test_metadata_failure_falls_back(self, mock_ticker):
        mock_ticker.side_effect = Exception("404")

        result = fetch_ticker_metadata('ZZZZ')

        assert result == {'ticker': 'ZZZZ', 'name': 'ZZZZ', 'sector': 'Unknown', 'industry': 'Unknown'}

    @patch('ingestion.providers.yfinance_adapter.fetch_ticker_metadata')
    def test_fetch_all_metadata(self, mock_meta):
        mock_meta.side_effect = lambda t: {'ticker': t}

        assert fetch_all_metadata(['AAPL', 'VOO']) == {'AAPL': {'ticker': 'AAPL'}, 'VOO': {'ticker': 'VOO'}}


class TestFetchAllPriceHistories:
    """Tests for fetch_all_price_histories function."""

    @staticmethod
    def _series(n):
        start = date(2024, 1, 1)
        return [(start + timedelta(days=i), 100.0 + i) for i in range(n)]

    @patch('ingestion.providers.yfinance_adapter.fetch_adjusted_closes')
    def test_skips_short_and_failed(self, mock_fetch):
        def fake_fetch(ticker, start, end):
            if ticker == 'FAIL':
                raise YFinanceError("boom")
            if ticker == 'NEW':
                return self._series(5)
            return self._series(30)

        mock_fetch.side_effect = fake_fetch

        result = fetch_all_price_histories(
            ['AAPL', 'FAIL', 'NEW', 'VOO'], date(2024, 1, 1), date(2024, 2, 1)
        )

        assert list(result.keys()) == ['AAPL', 'VOO']
        assert len(result['AAPL']) == 30

    @patch('ingestion.providers.yfinance_adapter.fetch_adjusted_closes')
    def test_custom_min_observations(self, mock_fetch):
        mock_fetch.return_value = self._series(5)

        result = fetch_all_price_histories(['AAPL'], date(2024, 1, 1), date(2024, 2, 1), min_observations=5)

        assert len(result['AAPL']) == 5

    @patch('ingestion.providers.yfinance_adapter.fetch_adjusted_closes')
    def test_nothing_usable_raises(self, mock_fetch):
        mock_fetch.return_value = []

        with pytest.raises(YFinanceError, match="Could not fetch data for any tickers"):
            fetch_all_price_histories(['AAPL', 'MSFT'], date(2024, 1, 1), date(2024, 2, 1))


class TestHistoryWindow:
    """Tests for history_window function."""

    def test_one_year(self):
        assert history_window(1, date(2025, 6, 30)) == (date(2024, 6, 30), date(2025, 6, 30))

    def test_leap_day(self):
        assert history_window(1, date(2024, 2, 29)) == (date(2023, 2, 28), date(2024, 2, 29))

    def test_defaults_to_today(self):
        start, end = history_window()

        assert end == date.today()

    def test_non_positive_years(self):
        with pytest.raises(YFinanceError, match="years_back"):
            history_window(0)


class TestValidation:
    """Tests for date range and ticker validation."""

    def test_validate_date_range_valid(self):
        _validate_date_range(date(2024, 1, 1), date(2024, 12, 31))

    def test_validate_date_range_reversed(self):
        with pytest.raises(YFinanceError, match="must be <="):
            _validate_date_range(date(2024, 2, 1), date(2024, 1, 1))

    def test_validate_date_range_future(self):
        future = date.today() + timedelta(days=30)

        with pytest.raises(YFinanceError, match="Future dates"):
            _validate_date_range(date.today(), future)

    def test_validate_date_range_too_long(self):
        with pytest.raises(YFinanceError, match="too long"):
            _validate_date_range(date(2000, 1, 1), date(2024, 1, 1))

    def test_validate_ticker(self):
        _validate_ticker('BRK.B')
        _validate_ticker('^GSPC')

        with pytest.raises(YFinanceError, match="too long"):
            _validate_ticker('ABCDEFGHIJK')
        with pytest.raises(YFinanceError, match="non-empty"):
            _validate_ticker('')
