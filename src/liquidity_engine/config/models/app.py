"""
Engine Configuration Model.

Top-level configuration combining the analyzer and monitor sections.
"""

from pydantic import Field, field_validator

from .analyzer import AnalyzerConfig
from .base import BaseConfig

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class MonitorConfig(BaseConfig):
    """Feed-side monitor configuration."""

    snapshot_every_n_trades: int = Field(
        default=100,
        ge=0,
        description="Take a metrics snapshot every N accepted trades (0 disables)",
    )
    log_anomalies: bool = Field(
        default=True,
        description="Log a warning for every flagged trade",
    )


class EngineConfig(BaseConfig):
    """
    Main engine configuration.

    Example:
        >>> config = EngineConfig(
        ...     analyzer={"symbol": "ETHUSDT"},
        ...     log_level="DEBUG",
        ... )
    """

    analyzer: AnalyzerConfig = Field(default_factory=AnalyzerConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    log_level: str = Field(default="INFO")
    log_file: str | None = Field(default=None)

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v):
        """Accept any case, store upper case."""
        level = str(v).upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level '{v}', expected one of {sorted(VALID_LOG_LEVELS)}")
        return level

    @field_validator("log_file", mode="before")
    @classmethod
    def empty_log_file_is_none(cls, v):
        """An unset ${LOG_FILE} substitutes to an empty string."""
        if v == "":
            return None
        return v
