"""
Tests for the rolling window store and numeric helpers.
"""

import pytest

from liquidity_engine.analytics.stats import (
    abs_deltas,
    linear_regression_slope,
    log_return,
    log_returns,
    mean,
    percentile,
    sample_variance,
    strict_log_return,
)
from liquidity_engine.analytics.window import RollingWindow, TradeWindow
from liquidity_engine.core.exceptions import NumericDegenerateError


class TestRollingWindow:
    """Test bounded FIFO behaviour."""

    def test_fifo_eviction(self):
        window = RollingWindow[int](capacity=3)
        for i in range(5):
            window.append(i)

        assert list(window) == [2, 3, 4]
        assert len(window) == 3
        assert window.is_full()

    def test_never_exceeds_capacity(self):
        window = RollingWindow[int](capacity=10)
        for i in range(1000):
            window.append(i)
            assert len(window) <= 10

    def test_tail(self):
        window = RollingWindow[int](capacity=5)
        for i in range(5):
            window.append(i)

        assert window.tail(2) == [3, 4]
        assert window.tail(10) == [0, 1, 2, 3, 4]
        assert window.tail(0) == []

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            RollingWindow[int](capacity=0)


class TestTradeWindow:
    """Test trade history views."""

    def test_views_stay_aligned(self, make_trade):
        window = TradeWindow(capacity=5, analysis_size=3)
        for i in range(8):
            window.append(make_trade(price=100.0 + i, amount=1.0 + i))

        assert window.prices() == [103.0, 104.0, 105.0, 106.0, 107.0]
        assert [t.price for t in window.trades()] == window.prices()
        assert window.recent_prices() == [105.0, 106.0, 107.0]
        assert window.recent_amounts() == [6.0, 7.0, 8.0]
        assert window.last().price == 107.0

    def test_empty_window(self):
        window = TradeWindow(capacity=5, analysis_size=3)

        assert window.last() is None
        assert window.recent_trades() == []
        assert not window

    def test_analysis_size_bounds(self):
        with pytest.raises(ValueError):
            TradeWindow(capacity=5, analysis_size=6)
        with pytest.raises(ValueError):
            TradeWindow(capacity=5, analysis_size=0)


class TestStats:
    """Test numeric helpers."""

    def test_percentile_index_rule(self):
        assert percentile([5, 1, 3, 2, 4], 0.9) == 5
        assert percentile([1, 2, 3, 4], 0.5) == 3
        assert percentile([1, 2, 3, 4], 1.0) == 4

    def test_percentile_empty(self):
        assert percentile([], 0.5) is None

    def test_mean_and_variance(self):
        assert mean([]) == 0.0
        assert mean([1.0, 2.0, 3.0]) == 2.0
        assert sample_variance([1.0, 2.0, 3.0]) == 1.0
        assert sample_variance([5.0]) == 0.0

    def test_regression_slope(self):
        assert linear_regression_slope([1, 2, 3], [2, 4, 6]) == pytest.approx(2.0)

    def test_regression_degenerate(self):
        assert linear_regression_slope([1, 1, 1], [1, 2, 3]) == 0.0
        assert linear_regression_slope([1], [1]) == 0.0
        assert linear_regression_slope([1, 2], [1]) == 0.0

    def test_log_return(self):
        assert log_return(100.0, 100.0) == 0.0
        assert log_return(0.0, 100.0) is None
        assert log_returns([100.0, 0.0, 100.0]) == []

    @pytest.mark.parametrize("previous,current", [(1e300, 1e-300), (1e-300, 1e300)])
    def test_log_return_degenerate_ratio(self, previous, current):
        assert log_return(previous, current) is None
        assert log_returns([previous, current, current]) == [0.0]

        with pytest.raises(NumericDegenerateError) as exc_info:
            strict_log_return(previous, current)
        assert exc_info.value.details == {"previous": previous, "current": current}

    def test_abs_deltas(self):
        assert abs_deltas([100.0, 101.0, 99.0]) == [1.0, 2.0]
