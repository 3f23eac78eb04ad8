"""
Risk Metrics Engine.

Realized and rolling historical volatility, Value at Risk and Expected
Shortfall from the stored price history.

All volatilities are annualized with a fixed periods-per-year factor
(365 * 24 by default); elapsed time between trades is not used.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from .stats import log_returns, mean, sample_variance


@dataclass(frozen=True)
class RiskMetrics:
    """Risk metrics in percent. historical_volatility is None when not computable."""

    realized_volatility: float = 0.0
    var_95: float = 0.0
    expected_shortfall_95: float = 0.0
    historical_volatility: Optional[float] = None
    return_count: int = 0


class RiskMetricsEngine:
    """
    Computes RiskMetrics from a price series.

    Example:
        >>> engine = RiskMetricsEngine()
        >>> metrics = engine.calculate([100.0, 101.0, 100.5, 102.0])
        >>> metrics.return_count
        3
    """

    def __init__(
        self,
        annualization_factor: float = 365.0 * 24.0,
        historical_window: int = 30,
        confidence: float = 0.95,
    ):
        self._annualization_factor = annualization_factor
        self._historical_window = historical_window
        self._tail = 1.0 - confidence

    def annualize(self, variance: float) -> Optional[float]:
        """100 * sqrt(variance * periods per year), None if not finite."""
        if variance < 0.0 or not math.isfinite(variance):
            return None
        return math.sqrt(variance * self._annualization_factor) * 100.0

    def calculate(self, prices: Sequence[float]) -> RiskMetrics:
        returns = log_returns(prices)
        if not returns:
            return RiskMetrics()

        realized = self.annualize(sample_variance(returns))

        sorted_returns = sorted(returns)
        var_index = min(
            int(math.ceil(len(sorted_returns) * self._tail)),
            len(sorted_returns) - 1,
        )
        var_95 = sorted_returns[var_index] * 100.0
        # Tail at or below the VaR index
        expected_shortfall = mean(sorted_returns[:var_index + 1]) * 100.0

        historical = None
        window = returns[-self._historical_window:]
        if len(window) > 1:
            historical = self.annualize(sample_variance(window))

        return RiskMetrics(
            realized_volatility=realized if realized is not None else 0.0,
            var_95=var_95,
            expected_shortfall_95=expected_shortfall,
            historical_volatility=historical,
            return_count=len(returns),
        )
