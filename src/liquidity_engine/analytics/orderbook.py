"""
Order Book View.

Latest bid/ask ladder snapshot. Every update replaces both sides wholesale;
there is no incremental diffing.
"""

from typing import Iterable, Optional, Tuple

from ..core import get_logger
from ..core.models import LevelLike, OrderBookLevel, coerce_level

logger = get_logger(__name__)


def normalize_levels(raw_levels: Iterable[LevelLike], descending: bool) -> Tuple[OrderBookLevel, ...]:
    """
    Drop malformed and non-positive levels and sort by price.

    Levels quoted twice at the same price are merged by summing their sizes,
    so each side is strictly ordered.

    Args:
        raw_levels: Levels as OrderBookLevel, (price, size) pairs or mappings
        descending: True for bids (best = highest), False for asks

    Returns:
        Tuple of valid levels, best price first
    """
    sizes: dict[float, float] = {}
    dropped = 0
    for raw in raw_levels or ():
        level = coerce_level(raw)
        if level is None or not level.is_tradable:
            dropped += 1
            continue
        sizes[level.price] = sizes.get(level.price, 0.0) + level.size

    if dropped:
        logger.debug(f"Dropped {dropped} invalid order book level(s)")

    return tuple(
        OrderBookLevel(price=price, size=sizes[price])
        for price in sorted(sizes, reverse=descending)
    )


class OrderBookView:
    """
    Immutable snapshot of one side-pair of the order book.

    Bids are sorted descending and asks ascending by price; the best price
    is the first element of each side.
    """

    __slots__ = ("_bids", "_asks")

    def __init__(
        self,
        bids: Tuple[OrderBookLevel, ...] = (),
        asks: Tuple[OrderBookLevel, ...] = (),
    ):
        self._bids = bids
        self._asks = asks

    @classmethod
    def from_levels(
        cls,
        bids: Iterable[LevelLike],
        asks: Iterable[LevelLike],
    ) -> "OrderBookView":
        """Build a normalized view from raw levels."""
        return cls(
            bids=normalize_levels(bids, descending=True),
            asks=normalize_levels(asks, descending=False),
        )

    @property
    def bids(self) -> Tuple[OrderBookLevel, ...]:
        return self._bids

    @property
    def asks(self) -> Tuple[OrderBookLevel, ...]:
        return self._asks

    @property
    def best_bid(self) -> Optional[OrderBookLevel]:
        return self._bids[0] if self._bids else None

    @property
    def best_ask(self) -> Optional[OrderBookLevel]:
        return self._asks[0] if self._asks else None

    @property
    def is_two_sided(self) -> bool:
        return bool(self._bids) and bool(self._asks)

    def __repr__(self) -> str:
        return f"OrderBookView(bids={len(self._bids)}, asks={len(self._asks)})"
