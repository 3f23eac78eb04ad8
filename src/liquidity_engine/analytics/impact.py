"""
Market Impact Engine.

Kyle's lambda (price impact per unit of signed volume) and the Amihud
illiquidity ratio, recomputed in full from the trade history on every call.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from ..core.models import Trade
from ..core.utils import MS_PER_DAY, MS_PER_HOUR, day_bucket
from .stats import linear_regression_slope, log_return, mean


@dataclass(frozen=True)
class KylesLambda:
    """Kyle's lambda over the last day and the last hour."""

    daily: float = 0.0
    hourly: float = 0.0


@dataclass(frozen=True)
class AmihudMeasures:
    """Amihud illiquidity over 1, 30 and 90 days."""

    one_day: float = 0.0
    thirty_days: float = 0.0
    ninety_days: float = 0.0


class MarketImpactEngine:
    """
    Trade-history based market impact measures.

    `now_ms` is passed in by the caller so that the time filters are
    evaluated against one clock reading per snapshot.
    """

    def __init__(self, max_abs_log_return: float = 1.0):
        self._max_abs_log_return = max_abs_log_return

    def kyles_lambda(
        self,
        trades: Sequence[Trade],
        now_ms: int,
        window_ms: int = MS_PER_DAY,
    ) -> float:
        """
        OLS slope of log returns on signed volume.

        Only consecutive pairs whose later trade is within `window_ms` of
        `now_ms` are used. Returns 0.0 with fewer than two valid pairs.
        """
        if len(trades) < 2:
            return 0.0

        log_returns: List[float] = []
        signed_volumes: List[float] = []

        for prev, curr in zip(trades, trades[1:]):
            if now_ms - curr.timestamp > window_ms:
                continue

            r = log_return(prev.price, curr.price)
            # Returns this large are treated as bad prints
            if r is None or abs(r) >= self._max_abs_log_return:
                continue

            log_returns.append(r)
            signed_volumes.append(curr.amount * curr.side.sign)

        if len(log_returns) < 2:
            return 0.0

        return linear_regression_slope(signed_volumes, log_returns)

    def amihud(
        self,
        trades: Sequence[Trade],
        now_ms: int,
        period_days: int = 30,
    ) -> float:
        """
        Mean daily ratio of summed |return| to summed dollar volume.

        Only pairs of consecutive trades on the same UTC day, with the later
        trade inside the period, contribute. Returns 0.0 if no day qualifies.
        """
        if len(trades) < 2:
            return 0.0

        period_ms = period_days * MS_PER_DAY
        daily: Dict[int, Tuple[float, float]] = {}

        for prev, curr in zip(trades, trades[1:]):
            if now_ms - curr.timestamp > period_ms:
                continue

            day = day_bucket(curr.timestamp)
            if day != day_bucket(prev.timestamp):
                continue

            abs_return = abs(curr.price - prev.price) / prev.price
            dollar_volume = curr.cost
            if not math.isfinite(abs_return) or not math.isfinite(dollar_volume) or dollar_volume <= 0.0:
                continue

            total_return, total_volume = daily.get(day, (0.0, 0.0))
            daily[day] = (total_return + abs_return, total_volume + dollar_volume)

        ratios = []
        for total_return, total_volume in daily.values():
            if total_volume <= 0.0:
                continue
            ratio = total_return / total_volume
            if math.isfinite(ratio):
                ratios.append(ratio)

        return mean(ratios) if ratios else 0.0

    def kyles_lambda_measures(self, trades: Sequence[Trade], now_ms: int) -> KylesLambda:
        return KylesLambda(
            daily=self.kyles_lambda(trades, now_ms, MS_PER_DAY),
            hourly=self.kyles_lambda(trades, now_ms, MS_PER_HOUR),
        )

    def amihud_measures(self, trades: Sequence[Trade], now_ms: int) -> AmihudMeasures:
        return AmihudMeasures(
            one_day=self.amihud(trades, now_ms, 1),
            thirty_days=self.amihud(trades, now_ms, 30),
            ninety_days=self.amihud(trades, now_ms, 90),
        )
