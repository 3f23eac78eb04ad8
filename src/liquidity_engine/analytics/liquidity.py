"""
Liquidity Metrics Engine.

Spread, depth, imbalance, VWAP, slippage and book slope computed from the
current order book view.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from ..core.models import OrderBookLevel
from .orderbook import OrderBookView
from .stats import linear_regression_slope


@dataclass(frozen=True)
class LiquidityMetrics:
    """
    Order book liquidity metrics.

    Optional fields are None when not computable (empty book, nothing
    consumed, zero total depth); they are never reported as 0.
    """

    spread: float = 0.0
    relative_spread: float = 0.0
    bid_depth: float = 0.0
    ask_depth: float = 0.0
    order_book_imbalance: Optional[float] = None
    bid_vwap: Optional[float] = None
    ask_vwap: Optional[float] = None
    bid_slippage: Optional[float] = None
    ask_slippage: Optional[float] = None
    bid_slope: float = 0.0
    ask_slope: float = 0.0
    mid_price: Optional[float] = None


def calculate_depth(levels: Sequence[OrderBookLevel], n_levels: int) -> float:
    """Sum of sizes over the top `n_levels` levels (capped by available depth)."""
    return sum(level.size for level in levels[:max(0, n_levels)])


def calculate_vwap(levels: Sequence[OrderBookLevel], target_volume: float) -> Optional[float]:
    """
    Volume weighted average price for filling `target_volume`.

    Walks from the best level outward and stops at the target or when the
    book is exhausted.

    Returns:
        VWAP, or None if nothing could be consumed
    """
    if not levels or target_volume <= 0.0:
        return None

    consumed = 0.0
    weighted_sum = 0.0

    for level in levels:
        if consumed >= target_volume:
            break
        volume = min(level.size, target_volume - consumed)
        if volume > 0.0:
            weighted_sum += level.price * volume
            consumed += volume

    if consumed <= 0.0:
        return None
    return weighted_sum / consumed


def calculate_slope(levels: Sequence[OrderBookLevel], depth: int) -> float:
    """
    OLS slope of price against cumulative size across the top `depth` levels.

    Returns 0.0 with fewer than two levels or zero variance in cumulative size.
    """
    top = levels[:max(0, depth)]
    if len(top) < 2:
        return 0.0

    prices = []
    cumulative_sizes = []
    cumulative = 0.0
    for level in top:
        cumulative += level.size
        prices.append(level.price)
        cumulative_sizes.append(cumulative)

    return linear_regression_slope(cumulative_sizes, prices)


class LiquidityMetricsEngine:
    """
    Computes LiquidityMetrics from an OrderBookView.

    Example:
        >>> book = OrderBookView.from_levels([(100, 2), (99, 5)], [(101, 3), (102, 4)])
        >>> LiquidityMetricsEngine(depth=2).calculate(book).spread
        1.0
    """

    def __init__(self, depth: int = 10, sample_volume: float = 1.0):
        if depth < 1:
            raise ValueError("depth must be at least 1")
        self._depth = depth
        self._sample_volume = sample_volume

    @property
    def depth(self) -> int:
        return self._depth

    def calculate(self, book: OrderBookView) -> LiquidityMetrics:
        if not book.is_two_sided:
            return LiquidityMetrics()

        best_bid = book.bids[0].price
        best_ask = book.asks[0].price

        spread = best_ask - best_bid
        mid_price = (best_ask + best_bid) / 2.0
        relative_spread = spread / mid_price if mid_price > 0.0 else 0.0

        bid_depth = calculate_depth(book.bids, self._depth)
        ask_depth = calculate_depth(book.asks, self._depth)

        total_depth = bid_depth + ask_depth
        imbalance = (bid_depth - ask_depth) / total_depth if total_depth > 0.0 else None

        bid_vwap = calculate_vwap(book.bids, self._sample_volume)
        ask_vwap = calculate_vwap(book.asks, self._sample_volume)

        bid_slippage = (best_bid - bid_vwap) / best_bid if bid_vwap is not None else None
        ask_slippage = (ask_vwap - best_ask) / best_ask if ask_vwap is not None else None

        return LiquidityMetrics(
            spread=spread,
            relative_spread=relative_spread,
            bid_depth=bid_depth,
            ask_depth=ask_depth,
            order_book_imbalance=imbalance,
            bid_vwap=bid_vwap,
            ask_vwap=ask_vwap,
            bid_slippage=bid_slippage,
            ask_slippage=ask_slippage,
            bid_slope=calculate_slope(book.bids, self._depth),
            ask_slope=calculate_slope(book.asks, self._depth),
            mid_price=mid_price,
        )
