"""
Tests for guardrails - validation and safety checks.
Tests weight checks, data sufficiency, numeric validation and warnings.
"""

import pytest
from datetime import date, timedelta

from analysis.calculations.alignment import align_price_series
from analysis.guardrails import (
    DataQualityError,
    DataQualityWarning,
    validate_weights,
    validate_sufficient_trading_days,
    validate_numeric_inputs,
    check_data_freshness,
    validate_price_data_integrity,
    run_all_guardrails
)


def _dataset(days, tickers=('AAPL', 'MSFT'), start=date(2025, 1, 1)):
    history = {}
    for offset, ticker in enumerate(tickers):
        history[ticker] = [
            (start + timedelta(days=i), 100.0 + offset + i * 0.5) for i in range(days)
        ]
    return align_price_series(history)


class TestValidateWeights:
    """Tests for validate_weights function."""

    def test_valid_weights(self):
        validate_weights({'AAPL': 0.6, 'MSFT': 0.4})

    def test_within_tolerance(self):
        validate_weights({'AAPL': 0.6, 'MSFT': 0.3995})

    def test_empty_weights(self):
        with pytest.raises(DataQualityError, match="No holdings"):
            validate_weights({})

    def test_negative_weight(self):
        with pytest.raises(DataQualityError, match="Negative weight for MSFT"):
            validate_weights({'AAPL': 1.2, 'MSFT': -0.2})

    def test_non_finite_weight(self):
        with pytest.raises(DataQualityError, match="finite number"):
            validate_weights({'AAPL': float('nan')})

    def test_sum_not_one(self):
        with pytest.raises(DataQualityError, match="sum to 1.0"):
            validate_weights({'AAPL': 0.5, 'MSFT': 0.3})


class TestSufficientTradingDays:
    """Tests for validate_sufficient_trading_days function."""

    def test_enough_days(self):
        validate_sufficient_trading_days(_dataset(20), min_trading_days=20)

    def test_too_few_days(self):
        with pytest.raises(DataQualityError) as exc_info:
            validate_sufficient_trading_days(_dataset(10), min_trading_days=20)

        message = str(exc_info.value)
        assert message.startswith("Insufficient historical data: only 10 common trading days found")
        assert "Need at least 20" in message

    def test_no_common_dates(self):
        history = {
            'A': [(date(2025, 1, 1), 1.0)],
            'B': [(date(2025, 1, 2), 1.0)]
        }

        with pytest.raises(DataQualityError, match="only 0 common trading days"):
            validate_sufficient_trading_days(align_price_series(history))

    def test_no_tickers(self):
        with pytest.raises(DataQualityError, match="No tickers"):
            validate_sufficient_trading_days(align_price_series({}))


class TestValidateNumericInputs:
    """Tests for validate_numeric_inputs function."""

    def _result(self, **portfolio_overrides):
        portfolio = {
            'expected_annual_return': 0.1,
            'annual_volatility': 0.2,
            'sharpe_ratio': 0.3,
            'var_95': None,
            'health_score': 60
        }
        portfolio.update(portfolio_overrides)
        return {
            'portfolio': portfolio,
            'holdings': [{'ticker': 'AAPL', 'annual_return': 0.1, 'annual_volatility': 0.2}],
            'timeseries': {'portfolio_values': [1.0, 1.01], 'drawdowns': [0.0, 0.0]}
        }

    def test_valid_result(self):
        validate_numeric_inputs(self._result())

    def test_none_allowed(self):
        validate_numeric_inputs(self._result(sharpe_ratio=None))

    def test_nan_detected(self):
        with pytest.raises(DataQualityError, match="NaN value found in portfolio.annual_volatility"):
            validate_numeric_inputs(self._result(annual_volatility=float('nan')))

    def test_infinity_detected(self):
        with pytest.raises(DataQualityError, match="Infinite value"):
            validate_numeric_inputs(self._result(sharpe_ratio=float('inf')))

    def test_holding_nan_detected(self):
        result = self._result()
        result['holdings'][0]['annual_return'] = float('nan')

        with pytest.raises(DataQualityError, match="holdings.AAPL.annual_return"):
            validate_numeric_inputs(result)

    def test_timeseries_non_finite(self):
        result = self._result()
        result['timeseries']['portfolio_values'] = [1.0, float('inf')]

        with pytest.raises(DataQualityError, match="timeseries.portfolio_values"):
            validate_numeric_inputs(result)

    def test_health_out_of_bounds(self):
        with pytest.raises(DataQualityError, match="Health score out of bounds"):
            validate_numeric_inputs(self._result(health_score=101))


class TestDataFreshness:
    """Tests for check_data_freshness function."""

    def test_fresh_data(self):
        today = date(2025, 6, 10)

        assert check_data_freshness([date(2025, 6, 6)], today=today) == []

    def test_stale_data(self):
        today = date(2025, 6, 30)

        result = check_data_freshness([date(2025, 6, 1), date(2025, 6, 6)], today=today)

        assert len(result) == 1
        assert "24 days old" in result[0]

    def test_no_dates(self):
        assert check_data_freshness([]) == []


class TestPriceDataIntegrity:
    """Tests for validate_price_data_integrity function."""

    def test_smooth_prices(self):
        assert validate_price_data_integrity(_dataset(30)) == []

    def test_large_move_flagged(self):
        start = date(2025, 1, 1)
        history = {'GME': [(start + timedelta(days=i), p) for i, p in enumerate([20.0, 21.0, 40.0])]}

        result = validate_price_data_integrity(align_price_series(history))

        assert len(result) == 1
        assert "GME: large price movement" in result[0]


class TestRunAllGuardrails:
    """Tests for run_all_guardrails function."""

    def test_passes_and_reports(self):
        result = run_all_guardrails({'AAPL': 0.5, 'MSFT': 0.5}, _dataset(25, start=date.today() - timedelta(days=24)))

        assert result['trading_days'] == 25
        assert result['warnings'] == []

    def test_warnings_emitted(self):
        with pytest.warns(DataQualityWarning, match="days old"):
            result = run_all_guardrails({'AAPL': 0.5, 'MSFT': 0.5}, _dataset(25))

        assert len(result['freshness_check']) == 1

    def test_critical_failure_raises(self):
        with pytest.raises(DataQualityError, match="Insufficient historical data"):
            run_all_guardrails({'AAPL': 0.5, 'MSFT': 0.5}, _dataset(5))
