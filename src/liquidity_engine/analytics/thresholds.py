"""
Adaptive Threshold Engine.

Recomputes the large-trade and price-movement thresholds from the analysis
window after every accepted trade, once the window holds enough trades.
"""

from dataclasses import dataclass
from typing import Sequence

from .stats import abs_deltas, percentile


@dataclass
class ThresholdState:
    """Current adaptive thresholds."""

    large_trade: float = 1.0
    price_movement: float = 100.0


class AdaptiveThresholdEngine:
    """
    Percentile-based adaptive thresholds.

    large_trade = max(floor, P90 of trade sizes)
    price_movement = max(floor, P95 of |consecutive price changes|)

    Below `min_trades` the previous (or default) values are kept.
    """

    def __init__(
        self,
        min_trades: int = 10,
        large_trade_percentile: float = 0.90,
        price_movement_percentile: float = 0.95,
        large_trade_floor: float = 1.0,
        price_movement_floor: float = 10.0,
        default_large_trade: float = 1.0,
        default_price_movement: float = 100.0,
    ):
        self._min_trades = min_trades
        self._large_trade_percentile = large_trade_percentile
        self._price_movement_percentile = price_movement_percentile
        self._large_trade_floor = large_trade_floor
        self._price_movement_floor = price_movement_floor
        self._state = ThresholdState(
            large_trade=default_large_trade,
            price_movement=default_price_movement,
        )

    @property
    def min_trades(self) -> int:
        return self._min_trades

    @property
    def state(self) -> ThresholdState:
        """Copy of the current thresholds."""
        return ThresholdState(
            large_trade=self._state.large_trade,
            price_movement=self._state.price_movement,
        )

    @property
    def large_trade(self) -> float:
        return self._state.large_trade

    @property
    def price_movement(self) -> float:
        return self._state.price_movement

    def update(self, amounts: Sequence[float], prices: Sequence[float]) -> bool:
        """
        Recompute thresholds from the analysis window.

        Args:
            amounts: Trade sizes in the window, oldest first
            prices: Trade prices in the window, oldest first

        Returns:
            True if the thresholds were recomputed
        """
        if len(amounts) < self._min_trades:
            return False

        size_pct = percentile(amounts, self._large_trade_percentile)
        if size_pct is not None:
            self._state.large_trade = max(self._large_trade_floor, size_pct)

        move_pct = percentile(abs_deltas(prices), self._price_movement_percentile)
        if move_pct is not None:
            self._state.price_movement = max(self._price_movement_floor, move_pct)

        return True
