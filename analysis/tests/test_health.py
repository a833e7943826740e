"""
Tests for composite health score utilities.
"""

from analysis.calculations.health import (
    HEALTH_WEIGHTS,
    volatility_subscore,
    drawdown_subscore,
    sharpe_subscore,
    health_components,
    health_score,
    health_rating
)


class TestSubscores:
    """Tests for individual sub-score mappings."""

    def test_volatility_subscore_bands(self):
        assert volatility_subscore(0.05) == 100.0
        assert volatility_subscore(0.10) == 100.0
        assert abs(volatility_subscore(0.30) - 50.0) < 1e-9
        assert volatility_subscore(0.50) == 0.0
        assert volatility_subscore(0.80) == 0.0

    def test_drawdown_subscore_bands(self):
        assert drawdown_subscore(0.0) == 100.0
        assert abs(drawdown_subscore(-0.25) - 50.0) < 1e-9
        assert drawdown_subscore(-0.50) == 0.0
        assert drawdown_subscore(-0.75) == 0.0

    def test_drawdown_subscore_sign_agnostic(self):
        assert drawdown_subscore(-0.1) == drawdown_subscore(0.1)

    def test_sharpe_subscore_bands(self):
        assert sharpe_subscore(None) == 50.0
        assert sharpe_subscore(0.0) == 40.0
        assert abs(sharpe_subscore(1.0) - 70.0) < 1e-9
        assert sharpe_subscore(2.0) == 100.0
        assert sharpe_subscore(3.5) == 100.0

    def test_sharpe_subscore_negative(self):
        assert abs(sharpe_subscore(-0.5) - 10.0) < 1e-9
        assert sharpe_subscore(-2.0) == 0.0


class TestHealthComponents:
    """Tests for the component dictionary."""

    def test_components_keys(self):
        components = health_components(80.0, 0.2, -0.1, 1.0)

        assert set(components.keys()) == set(HEALTH_WEIGHTS.keys())

    def test_components_clamped(self):
        components = health_components(150.0, 0.2, -0.1, 1.0)

        assert components['diversification'] == 100.0

    def test_weights_sum_to_one(self):
        assert abs(sum(HEALTH_WEIGHTS.values()) - 1.0) < 1e-12


class TestHealthScore:
    """Tests for the blended integer score."""

    def test_single_constant_holding_scores_55(self):
        """No diversification, no risk, unknown Sharpe -> 55."""
        components = health_components(0.0, 0.0, 0.0, None)

        assert health_score(components) == 55

    def test_perfect_portfolio(self):
        components = health_components(100.0, 0.05, 0.0, 2.5)

        assert health_score(components) == 100

    def test_worst_portfolio(self):
        components = health_components(0.0, 0.9, -0.9, -3.0)

        assert health_score(components) == 0

    def test_half_up_rounding(self):
        """x.5 rounds up rather than to even."""
        components = {'diversification': 5.0, 'volatility': 0.0, 'drawdown': 0.0, 'sharpe': 0.0}

        # 0.3 * 5 = 1.5 -> 2
        assert health_score(components) == 2

    def test_score_is_int(self):
        components = health_components(63.2, 0.18, -0.12, 0.7)

        assert isinstance(health_score(components), int)
        assert 0 <= health_score(components) <= 100


class TestHealthRating:
    """Tests for plain-language ratings."""

    def test_rating_bands(self):
        assert health_rating(85) == "good"
        assert health_rating(70) == "good"
        assert health_rating(55) == "moderate"
        assert health_rating(49) == "needs attention"
