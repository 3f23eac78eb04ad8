"""
Custom exceptions for the liquidity engine.

Exception hierarchy:
    MicrostructureError (base)
    ├── DataError
    │   └── InvalidInputError
    └── NumericDegenerateError

Only InvalidInputError ever reaches callers of the analyzer. Numeric helpers
raise NumericDegenerateError and the engine that called them catches it and
reports the metric as not computable. A window too small for a metric is not
an error at all.
"""

from typing import Any


class MicrostructureError(Exception):
    """Base exception for all liquidity engine errors."""

    default_message = "Liquidity engine error occurred"

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message or self.default_message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        text = f"{self.message} [{self.code}]" if self.code else self.message
        return f"{text} Details: {self.details}" if self.details else text

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r}, details={self.details!r})"


# Data-related errors
class DataError(MicrostructureError):
    """Base exception for data-related errors."""

    default_message = "Data error occurred"


class InvalidInputError(DataError, ValueError):
    """Malformed market data (e.g. non-positive trade price or amount)."""

    default_message = "Invalid input"


# Numeric errors
class NumericDegenerateError(MicrostructureError):
    """Non-finite or zero-denominator intermediate value."""

    default_message = "Numeric computation degenerated"
