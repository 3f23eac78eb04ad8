"""
Rolling Window Store.

Bounded FIFO history of trades. Uses collections.deque for O(1) append with
automatic eviction of the oldest element.

A single structure backs both the trade view and the price-only view so the
two can never diverge in length or content.
"""

from collections import deque
from itertools import islice
from typing import Deque, Generic, Iterator, List, TypeVar

from ..core.models import Trade

T = TypeVar("T")


class RollingWindow(Generic[T]):
    """
    Bounded FIFO window.

    Invariant: len(window) <= capacity; on overflow the oldest element is
    evicted first.

    Example:
        >>> window = RollingWindow[int](capacity=3)
        >>> for i in range(5):
        ...     window.append(i)
        >>> list(window)
        [2, 3, 4]
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._items: Deque[T] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, item: T) -> None:
        self._items.append(item)

    def is_full(self) -> bool:
        return len(self._items) >= self._capacity

    def tail(self, n: int) -> List[T]:
        """The most recent n items, oldest first."""
        if n <= 0:
            return []
        size = len(self._items)
        if n >= size:
            return list(self._items)
        return list(islice(self._items, size - n, size))

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def __bool__(self) -> bool:
        return bool(self._items)


class TradeWindow(RollingWindow[Trade]):
    """
    Trade history with trade and price-only views.

    The full history feeds the risk and market impact engines, while the
    `analysis_size` most recent trades feed thresholds and anomaly detection.
    """

    def __init__(self, capacity: int, analysis_size: int):
        super().__init__(capacity)
        if analysis_size < 1 or analysis_size > capacity:
            raise ValueError("analysis_size must be between 1 and capacity")
        self._analysis_size = analysis_size

    @property
    def analysis_size(self) -> int:
        return self._analysis_size

    def trades(self) -> List[Trade]:
        """Full trade history, oldest first."""
        return list(self._items)

    def prices(self) -> List[float]:
        """Price-only view of the full history."""
        return [trade.price for trade in self._items]

    def recent_trades(self) -> List[Trade]:
        """Analysis window: the most recent trades."""
        return self.tail(self._analysis_size)

    def recent_prices(self) -> List[float]:
        return [trade.price for trade in self.recent_trades()]

    def recent_amounts(self) -> List[float]:
        return [trade.amount for trade in self.recent_trades()]

    def last(self) -> Trade | None:
        return self._items[-1] if self._items else None
