"""
Anomaly Detector.

Classifies a single trade against the analysis window, the adaptive
thresholds and the EWMA volatility. Classification reads state only.
"""

import math
from dataclasses import dataclass
from typing import Sequence

from ..core.models import Trade
from .ewma import EWMAState
from .stats import abs_deltas, mean
from .thresholds import ThresholdState


@dataclass(frozen=True)
class AnomalyFlags:
    """Independent anomaly flags for one trade."""

    price_anomaly: bool = False
    size_anomaly: bool = False
    volatility_anomaly: bool = False

    @property
    def any(self) -> bool:
        return self.price_anomaly or self.size_anomaly or self.volatility_anomaly

    def to_dict(self) -> dict[str, bool]:
        return {
            "price_anomaly": self.price_anomaly,
            "size_anomaly": self.size_anomaly,
            "volatility_anomaly": self.volatility_anomaly,
        }


class AnomalyDetector:
    """
    Price, size and volatility anomaly rules.

    - Price: |change| above the price-movement threshold, or above
      `price_deviation_multiplier` times the mean absolute change.
    - Size: above the large-trade threshold, or (with a full enough window)
      above `trade_size_multiplier` times the mean size.
    - Volatility: EWMA volatility above `volatility_threshold`.

    Example:
        detector = AnomalyDetector(volatility_threshold=0.02)
        flags = detector.classify(trade, window, thresholds, ewma_state)
        if flags.any:
            ...
    """

    def __init__(
        self,
        min_trades: int = 10,
        price_deviation_multiplier: float = 2.5,
        trade_size_multiplier: float = 3.0,
        volatility_threshold: float = 0.02,
    ):
        self._min_trades = min_trades
        self._price_deviation_multiplier = price_deviation_multiplier
        self._trade_size_multiplier = trade_size_multiplier
        self._volatility_threshold = volatility_threshold

    @property
    def volatility_threshold(self) -> float:
        return self._volatility_threshold

    def classify(
        self,
        trade: Trade,
        window: Sequence[Trade],
        thresholds: ThresholdState,
        ewma: EWMAState,
    ) -> AnomalyFlags:
        """
        Classify a trade that has already been added to `window`.

        Args:
            trade: The trade to classify (normally the last element of window)
            window: Analysis window, oldest first
            thresholds: Current adaptive thresholds
            ewma: Current EWMA state

        Returns:
            AnomalyFlags
        """
        return AnomalyFlags(
            price_anomaly=self.is_price_anomaly(trade, window, thresholds),
            size_anomaly=self.is_size_anomaly(trade, window, thresholds),
            volatility_anomaly=self.is_volatility_anomaly(ewma),
        )

    def is_price_anomaly(
        self,
        trade: Trade,
        window: Sequence[Trade],
        thresholds: ThresholdState,
    ) -> bool:
        if len(window) < 2:
            return False

        prices = [t.price for t in window]
        avg_deviation = mean(abs_deltas(prices))
        if avg_deviation <= 0.0:
            return False

        price_change = abs(trade.price - window[-2].price)
        absolute_anomaly = price_change > thresholds.price_movement
        relative_anomaly = price_change > avg_deviation * self._price_deviation_multiplier
        return absolute_anomaly or relative_anomaly

    def is_size_anomaly(
        self,
        trade: Trade,
        window: Sequence[Trade],
        thresholds: ThresholdState,
    ) -> bool:
        absolute_anomaly = trade.amount > thresholds.large_trade
        if len(window) < self._min_trades:
            # Early trades: absolute threshold only
            return absolute_anomaly

        avg_size = mean([t.amount for t in window])
        if avg_size <= 0.0:
            return absolute_anomaly

        relative_anomaly = trade.amount > avg_size * self._trade_size_multiplier
        return absolute_anomaly or relative_anomaly

    def is_volatility_anomaly(self, ewma: EWMAState) -> bool:
        if not ewma.initialized:
            return False
        return math.sqrt(ewma.variance) > self._volatility_threshold
