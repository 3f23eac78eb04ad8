"""
Analyzer Configuration Model.

Provides the tuning parameters of one symbol's analytics engine: window
sizes, EWMA decay, adaptive threshold percentiles and anomaly multipliers.
"""

from pydantic import Field, field_validator, model_validator

from .base import BaseConfig


class AnalyzerConfig(BaseConfig):
    """
    Per-symbol analytics configuration.

    Example:
        >>> config = AnalyzerConfig(
        ...     symbol="BTCUSDT",
        ...     analysis_window=50,
        ...     ewma_lambda=0.92,
        ... )
    """

    symbol: str = Field(default="BTCUSDT", min_length=1, description="Trading symbol")

    # Windows
    history_capacity: int = Field(
        default=10_000,
        ge=2,
        description="Maximum number of trades kept for risk and impact metrics",
    )
    analysis_window: int = Field(
        default=50,
        ge=2,
        description="Most recent trades used by thresholds and anomaly detection",
    )
    min_trades_for_thresholds: int = Field(
        default=10,
        ge=1,
        description="Trades required before adaptive thresholds are recomputed",
    )

    # EWMA volatility
    ewma_lambda: float = Field(
        default=0.92,
        gt=0.0,
        lt=1.0,
        description="EWMA decay factor",
    )
    ewma_initial_variance: float = Field(
        default=1e-4,
        ge=0.0,
        description="Variance seeded on the first observed price",
    )
    volatility_threshold: float = Field(
        default=0.02,
        gt=0.0,
        description="Per-trade EWMA volatility above which a trade is flagged",
    )

    # Adaptive thresholds
    default_large_trade_threshold: float = Field(default=1.0, gt=0.0)
    default_price_movement_threshold: float = Field(default=100.0, gt=0.0)
    large_trade_floor: float = Field(default=1.0, ge=0.0)
    price_movement_floor: float = Field(default=10.0, ge=0.0)
    large_trade_percentile: float = Field(default=0.90, gt=0.0, le=1.0)
    price_movement_percentile: float = Field(default=0.95, gt=0.0, le=1.0)

    # Relative anomaly multipliers
    trade_size_multiplier: float = Field(default=3.0, gt=0.0)
    price_deviation_multiplier: float = Field(default=2.5, gt=0.0)

    # Liquidity
    orderbook_depth: int = Field(
        default=10,
        ge=1,
        description="Number of levels used for depth and slope",
    )
    vwap_sample_volume: float = Field(
        default=1.0,
        gt=0.0,
        description="Target fill size used for VWAP and slippage",
    )

    # Risk
    historical_volatility_window: int = Field(default=30, ge=2)
    annualization_factor: float = Field(
        default=365.0 * 24.0,
        gt=0.0,
        description="Periods per year assumed when annualizing return variance",
    )
    var_confidence: float = Field(default=0.95, gt=0.5, lt=1.0)

    # Market impact
    max_abs_log_return: float = Field(
        default=1.0,
        gt=0.0,
        description="Kyle's lambda ignores returns at or above this magnitude",
    )

    @field_validator("symbol", mode="after")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        """Symbols are upper case."""
        return v.upper()

    @model_validator(mode="after")
    def check_windows(self) -> "AnalyzerConfig":
        """The analysis window is a tail of the history."""
        if self.analysis_window > self.history_capacity:
            raise ValueError(
                f"analysis_window ({self.analysis_window}) cannot exceed "
                f"history_capacity ({self.history_capacity})"
            )
        return self
