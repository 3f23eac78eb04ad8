"""
Tests for EWMAVolatilityEstimator.
"""

import math

import pytest

from liquidity_engine.analytics.ewma import EWMAVolatilityEstimator


class TestEWMAInitialization:
    """Test seeding behaviour."""

    def test_uninitialized(self):
        estimator = EWMAVolatilityEstimator()

        assert not estimator.initialized
        assert estimator.volatility == 0.0

    def test_first_price_seeds_state(self):
        estimator = EWMAVolatilityEstimator(decay=0.92, initial_variance=1e-4)
        estimator.update(100.0)

        state = estimator.state
        assert state.initialized
        assert state.last_price == 100.0
        assert state.variance == 1e-4
        assert estimator.volatility == pytest.approx(0.01)

    @pytest.mark.parametrize("decay", [0.0, 1.0, -0.5, 1.5])
    def test_invalid_decay(self, decay):
        with pytest.raises(ValueError):
            EWMAVolatilityEstimator(decay=decay)


class TestEWMAUpdate:
    """Test the variance recursion."""

    def test_recursion(self):
        estimator = EWMAVolatilityEstimator(decay=0.92, initial_variance=1e-4)
        estimator.update(100.0)
        estimator.update(101.0)

        r = math.log(101.0 / 100.0)
        expected = 0.92 * 1e-4 + 0.08 * r * r
        assert estimator.variance == pytest.approx(expected)
        assert estimator.volatility == pytest.approx(0.009996, abs=1e-6)
        assert estimator.state.last_price == 101.0

    def test_constant_price_decays_variance(self):
        estimator = EWMAVolatilityEstimator(decay=0.9, initial_variance=1e-4)
        estimator.update(100.0)
        for _ in range(3):
            estimator.update(100.0)

        assert estimator.variance == pytest.approx(1e-4 * 0.9 ** 3)

    def test_non_positive_price_skipped(self):
        estimator = EWMAVolatilityEstimator()
        estimator.update(100.0)
        before = estimator.state

        estimator.update(0.0)
        estimator.update(-5.0)

        assert estimator.state == before

    def test_variance_stays_finite_and_non_negative(self):
        estimator = EWMAVolatilityEstimator()
        prices = [100.0, 1e-150, 1e150, 50.0, 50.0, 51.0, 1e-9]
        for price in prices:
            estimator.update(price)
            assert estimator.variance >= 0.0
            assert math.isfinite(estimator.variance)

    def test_state_is_a_copy(self):
        estimator = EWMAVolatilityEstimator()
        estimator.update(100.0)

        state = estimator.state
        state.variance = 42.0

        assert estimator.variance == 1e-4

    @pytest.mark.parametrize("first,second", [(1e300, 1e-300), (1e-300, 1e300)])
    def test_degenerate_price_ratio_skipped(self, first, second):
        estimator = EWMAVolatilityEstimator()
        estimator.update(first)
        before = estimator.state

        estimator.update(second)

        assert estimator.state == before

        estimator.update(first * 1.01)
        assert estimator.state.last_price == first * 1.01
        assert math.isfinite(estimator.variance)
