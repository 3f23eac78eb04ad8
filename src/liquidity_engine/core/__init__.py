"""
Core module for the liquidity engine.

Provides logging utilities, the exception hierarchy and market event models.
"""

from .exceptions import (
    DataError,
    InvalidInputError,
    MicrostructureError,
    NumericDegenerateError,
)
from .logger import get_logger, setup_logger
from .models import LevelLike, OrderBookLevel, Trade, TradeSide, coerce_level
from .utils import (
    MS_PER_DAY,
    MS_PER_HOUR,
    day_bucket,
    now_timestamp,
    timestamp_to_datetime,
)

__all__ = [
    # Logging
    "setup_logger",
    "get_logger",
    # Exceptions
    "MicrostructureError",
    "DataError",
    "InvalidInputError",
    "NumericDegenerateError",
    # Models
    "Trade",
    "TradeSide",
    "OrderBookLevel",
    "LevelLike",
    "coerce_level",
    # Time helpers
    "MS_PER_HOUR",
    "MS_PER_DAY",
    "timestamp_to_datetime",
    "now_timestamp",
    "day_bucket",
]
