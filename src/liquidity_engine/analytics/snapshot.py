"""
Aggregated, immutable views of analyzer state.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict

from .impact import AmihudMeasures, KylesLambda
from .liquidity import LiquidityMetrics
from .risk import RiskMetrics


@dataclass(frozen=True)
class MetricsSnapshot:
    """
    One consistent read of all liquidity, risk and market impact metrics.

    Absent values are None. `to_dict()` is provided for consumers that
    serialize; the snapshot itself does no formatting.

    `timestamp` records when the snapshot was taken and is left out of
    equality, so two snapshots of unchanged state compare equal.
    """

    symbol: str
    timestamp: int = field(compare=False)
    trade_count: int
    liquidity: LiquidityMetrics = field(default_factory=LiquidityMetrics)
    risk: RiskMetrics = field(default_factory=RiskMetrics)
    kyles_lambda: KylesLambda = field(default_factory=KylesLambda)
    amihud_measures: AmihudMeasures = field(default_factory=AmihudMeasures)

    def to_dict(self) -> Dict[str, Any]:
        """Flat-ish plain-Python representation (None for absent values)."""
        data: Dict[str, Any] = {
            "symbol": self.symbol,
            "timestamp": self.timestamp,
            "trade_count": self.trade_count,
        }
        data.update(asdict(self.liquidity))
        data.update(asdict(self.risk))
        data["kyles_lambda"] = asdict(self.kyles_lambda)
        data["amihud_measures"] = {
            "1_day": self.amihud_measures.one_day,
            "30_days": self.amihud_measures.thirty_days,
            "90_days": self.amihud_measures.ninety_days,
        }
        return data


@dataclass(frozen=True)
class TradeStatistics:
    """Running statistics of the analysis window."""

    symbol: str
    trade_count: int
    window_size: int
    average_price: float
    average_trade_size: float
    ewma_volatility: float
    ewma_variance: float
    large_trade_threshold: float
    price_movement_threshold: float
    volatility_threshold: float
