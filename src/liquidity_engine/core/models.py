"""
Base data models for the liquidity engine.

Immutable market events: trade prints and order book levels.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Union

from .exceptions import InvalidInputError


# =============================================================================
# Enums
# =============================================================================


class TradeSide(str, Enum):
    """Aggressor side of a trade print."""

    BUY = "buy"
    SELL = "sell"
    UNKNOWN = "unknown"

    @property
    def sign(self) -> float:
        """Order flow sign: +1 for buys, -1 for sells, 0 when unknown."""
        if self is TradeSide.BUY:
            return 1.0
        if self is TradeSide.SELL:
            return -1.0
        return 0.0

    @classmethod
    def from_value(cls, value: Union["TradeSide", str, None]) -> "TradeSide":
        """
        Normalize a side value.

        Anything that is not recognisably a buy or a sell maps to UNKNOWN.

        Example:
            >>> TradeSide.from_value("BUY")
            <TradeSide.BUY: 'buy'>
        """
        if isinstance(value, TradeSide):
            return value
        if value is None:
            return cls.UNKNOWN
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN

    @classmethod
    def from_buyer_maker(cls, is_buyer_maker: bool) -> "TradeSide":
        """Buyer is maker means the seller was the aggressor."""
        return cls.SELL if is_buyer_maker else cls.BUY


# =============================================================================
# Trade Model
# =============================================================================


@dataclass(frozen=True)
class Trade:
    """
    Single trade print.

    Attributes:
        price: Execution price, strictly positive
        amount: Executed size in base units, strictly positive
        timestamp: Exchange timestamp in milliseconds
        side: Aggressor side
        trade_id: Optional exchange trade id

    Raises:
        InvalidInputError: If price or amount is non-positive or not finite
    """

    price: float
    amount: float
    timestamp: int
    side: TradeSide = TradeSide.UNKNOWN
    trade_id: str = ""

    def __post_init__(self) -> None:
        price = _to_float(self.price, "price")
        amount = _to_float(self.amount, "amount")
        if price <= 0.0 or amount <= 0.0 or not math.isfinite(price) or not math.isfinite(amount):
            raise InvalidInputError(
                "Invalid trade data: price and amount must be positive",
                code="INVALID_TRADE",
                details={"price": self.price, "amount": self.amount},
            )
        object.__setattr__(self, "price", price)
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "timestamp", int(self.timestamp))
        object.__setattr__(self, "side", TradeSide.from_value(self.side))

    @property
    def cost(self) -> float:
        """Notional value (price * amount)."""
        return self.price * self.amount


# =============================================================================
# Order Book Level Model
# =============================================================================


@dataclass(frozen=True)
class OrderBookLevel:
    """
    One price tier of resting orders.

    Raises:
        InvalidInputError: If price or size is negative or not finite
    """

    price: float
    size: float

    def __post_init__(self) -> None:
        price = _to_float(self.price, "price")
        size = _to_float(self.size, "size")
        if price < 0.0 or size < 0.0 or not math.isfinite(price) or not math.isfinite(size):
            raise InvalidInputError(
                "Invalid order book level: price and size must be non-negative",
                code="INVALID_LEVEL",
                details={"price": self.price, "size": self.size},
            )
        object.__setattr__(self, "price", price)
        object.__setattr__(self, "size", size)

    @property
    def is_tradable(self) -> bool:
        """Levels with zero price or size carry no liquidity."""
        return self.price > 0.0 and self.size > 0.0

    @property
    def notional(self) -> float:
        return self.price * self.size


LevelLike = Union[OrderBookLevel, Sequence[Any], Mapping[str, Any]]


def coerce_level(raw: LevelLike) -> Optional[OrderBookLevel]:
    """
    Build an OrderBookLevel from a level, a (price, size) pair or a mapping.

    Returns None for anything malformed instead of raising.
    """
    if isinstance(raw, OrderBookLevel):
        return raw
    try:
        if isinstance(raw, Mapping):
            return OrderBookLevel(price=raw["price"], size=raw["size"])
        price, size = raw[0], raw[1]
        return OrderBookLevel(price=price, size=size)
    except (InvalidInputError, KeyError, IndexError, TypeError):
        return None


def _to_float(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(
            f"Cannot convert {name} '{value}' to float",
            code="INVALID_NUMBER",
        ) from e
