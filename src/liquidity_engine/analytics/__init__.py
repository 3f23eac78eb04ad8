"""
Analytics engines: windows, order book view, EWMA, thresholds, anomaly
detection and liquidity / risk / market impact metrics.
"""

from .anomaly import AnomalyDetector, AnomalyFlags
from .ewma import EWMAState, EWMAVolatilityEstimator
from .impact import AmihudMeasures, KylesLambda, MarketImpactEngine
from .liquidity import (
    LiquidityMetrics,
    LiquidityMetricsEngine,
    calculate_depth,
    calculate_slope,
    calculate_vwap,
)
from .orderbook import OrderBookView, normalize_levels
from .risk import RiskMetrics, RiskMetricsEngine
from .snapshot import MetricsSnapshot, TradeStatistics
from .thresholds import AdaptiveThresholdEngine, ThresholdState
from .window import RollingWindow, TradeWindow

__all__ = [
    # Windows
    "RollingWindow",
    "TradeWindow",
    # Order book
    "OrderBookView",
    "normalize_levels",
    # EWMA
    "EWMAState",
    "EWMAVolatilityEstimator",
    # Thresholds
    "ThresholdState",
    "AdaptiveThresholdEngine",
    # Anomaly
    "AnomalyFlags",
    "AnomalyDetector",
    # Liquidity
    "LiquidityMetrics",
    "LiquidityMetricsEngine",
    "calculate_depth",
    "calculate_vwap",
    "calculate_slope",
    # Risk
    "RiskMetrics",
    "RiskMetricsEngine",
    # Market impact
    "KylesLambda",
    "AmihudMeasures",
    "MarketImpactEngine",
    # Snapshots
    "MetricsSnapshot",
    "TradeStatistics",
]
