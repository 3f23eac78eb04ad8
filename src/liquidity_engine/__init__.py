"""
Liquidity Engine.

Streaming market microstructure analytics: per-symbol trade and order book
ingestion, adaptive anomaly detection, and liquidity, risk and market impact
metrics.
"""

from .analytics import (
    AmihudMeasures,
    AnomalyFlags,
    KylesLambda,
    LiquidityMetrics,
    MetricsSnapshot,
    RiskMetrics,
    TradeStatistics,
)
from .analyzer import SymbolAnalyzer
from .config import AnalyzerConfig, EngineConfig, MonitorConfig, load_config
from .core import (
    InvalidInputError,
    MicrostructureError,
    OrderBookLevel,
    Trade,
    TradeSide,
    get_logger,
    setup_logger,
)
from .monitor import MarketMonitor, parse_order_book_fields, parse_trade_fields

__version__ = "0.1.0"

__all__ = [
    # Analyzer
    "SymbolAnalyzer",
    "MarketMonitor",
    "parse_trade_fields",
    "parse_order_book_fields",
    # Config
    "AnalyzerConfig",
    "MonitorConfig",
    "EngineConfig",
    "load_config",
    # Models
    "Trade",
    "TradeSide",
    "OrderBookLevel",
    "AnomalyFlags",
    "LiquidityMetrics",
    "RiskMetrics",
    "KylesLambda",
    "AmihudMeasures",
    "MetricsSnapshot",
    "TradeStatistics",
    # Errors
    "MicrostructureError",
    "InvalidInputError",
    # Logging
    "setup_logger",
    "get_logger",
]
