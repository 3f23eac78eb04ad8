"""
EWMA Volatility Estimator.

Online per-trade volatility: sigma^2(t) = lambda * sigma^2(t-1) + (1 - lambda) * r(t)^2
with r the log return between consecutive trade prices. The estimate is not
annualized, unlike the realized volatility of the risk engine.
"""

import math
from dataclasses import dataclass

from ..core import NumericDegenerateError, get_logger
from .stats import strict_log_return

logger = get_logger(__name__)


@dataclass
class EWMAState:
    """Mutable estimator state."""

    decay: float
    variance: float = 0.0
    last_price: float = 0.0
    initialized: bool = False


class EWMAVolatilityEstimator:
    """
    Exponentially weighted moving variance of log returns.

    Example:
        >>> estimator = EWMAVolatilityEstimator(decay=0.92)
        >>> estimator.update(100.0)
        >>> estimator.update(101.0)
        >>> round(estimator.volatility, 6)
        0.009996
    """

    def __init__(self, decay: float = 0.92, initial_variance: float = 1e-4):
        if not 0.0 < decay < 1.0:
            raise ValueError("decay must be in (0, 1)")
        if initial_variance < 0.0:
            raise ValueError("initial_variance cannot be negative")
        self._initial_variance = initial_variance
        self._state = EWMAState(decay=decay)

    @property
    def state(self) -> EWMAState:
        """Copy of the current state."""
        s = self._state
        return EWMAState(
            decay=s.decay,
            variance=s.variance,
            last_price=s.last_price,
            initialized=s.initialized,
        )

    @property
    def initialized(self) -> bool:
        return self._state.initialized

    @property
    def variance(self) -> float:
        return self._state.variance

    @property
    def volatility(self) -> float:
        """Per-trade volatility (sqrt of variance), 0.0 before the first price."""
        if not self._state.initialized:
            return 0.0
        return math.sqrt(self._state.variance)

    def update(self, price: float) -> None:
        """
        Feed one observed price.

        The first price only seeds the state. A non-finite log return leaves
        the state untouched.
        """
        s = self._state
        if not s.initialized:
            s.last_price = price
            s.variance = self._initial_variance
            s.initialized = True
            return

        try:
            r = strict_log_return(s.last_price, price)
        except NumericDegenerateError as e:
            logger.debug(f"Skipping EWMA update for price {price}: {e}")
            return

        variance = s.decay * s.variance + (1.0 - s.decay) * r * r
        if not math.isfinite(variance):
            logger.debug(f"Skipping EWMA update, non-finite variance for price {price}")
            return

        s.variance = variance
        s.last_price = price
