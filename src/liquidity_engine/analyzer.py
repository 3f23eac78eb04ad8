"""
Symbol Analyzer.

Owns all mutable analytics state of one symbol (trade window, order book
view, EWMA estimator, adaptive thresholds) behind a single exclusive lock:

- ingest_trade / ingest_order_book mutate state
- classify / snapshot / statistics read state
- ingest_and_classify does both inside one critical section, so the flags
  of a trade reflect exactly the state produced by ingesting that trade

No I/O happens while the lock is held.
"""

import logging
import threading
from typing import Callable, Iterable, Optional, Tuple

from .analytics.anomaly import AnomalyDetector, AnomalyFlags
from .analytics.ewma import EWMAState, EWMAVolatilityEstimator
from .analytics.impact import MarketImpactEngine
from .analytics.liquidity import LiquidityMetricsEngine
from .analytics.orderbook import OrderBookView
from .analytics.risk import RiskMetricsEngine
from .analytics.snapshot import MetricsSnapshot, TradeStatistics
from .analytics.stats import mean
from .analytics.thresholds import AdaptiveThresholdEngine, ThresholdState
from .analytics.window import TradeWindow
from .config.models import AnalyzerConfig
from .core import InvalidInputError, get_logger
from .core.models import LevelLike, Trade, TradeSide
from .core.utils import now_timestamp


class SymbolAnalyzer:
    """
    Streaming microstructure analytics for one symbol.

    Example:
        >>> analyzer = SymbolAnalyzer(AnalyzerConfig(symbol="BTCUSDT"))
        >>> trade, flags = analyzer.ingest_and_classify(50000.0, 0.5, 1704067200000, "buy")
        >>> analyzer.ingest_order_book([(49999, 1.0)], [(50001, 2.0)])
        >>> analyzer.snapshot().liquidity.spread
        2.0
    """

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        logger: Optional[logging.Logger] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        """
        Initialize SymbolAnalyzer.

        Args:
            config: Analyzer configuration (defaults apply when omitted)
            logger: Logger to use instead of the module logger
            clock: Callable returning "now" in epoch milliseconds, used by
                the time-windowed market impact measures
        """
        self._config = config or AnalyzerConfig()
        self._logger = logger or get_logger(__name__)
        self._clock = clock or now_timestamp

        cfg = self._config
        self._lock = threading.RLock()

        self._window = TradeWindow(
            capacity=cfg.history_capacity,
            analysis_size=cfg.analysis_window,
        )
        self._book = OrderBookView()
        self._ewma = EWMAVolatilityEstimator(
            decay=cfg.ewma_lambda,
            initial_variance=cfg.ewma_initial_variance,
        )
        self._thresholds = AdaptiveThresholdEngine(
            min_trades=cfg.min_trades_for_thresholds,
            large_trade_percentile=cfg.large_trade_percentile,
            price_movement_percentile=cfg.price_movement_percentile,
            large_trade_floor=cfg.large_trade_floor,
            price_movement_floor=cfg.price_movement_floor,
            default_large_trade=cfg.default_large_trade_threshold,
            default_price_movement=cfg.default_price_movement_threshold,
        )
        self._detector = AnomalyDetector(
            min_trades=cfg.min_trades_for_thresholds,
            price_deviation_multiplier=cfg.price_deviation_multiplier,
            trade_size_multiplier=cfg.trade_size_multiplier,
            volatility_threshold=cfg.volatility_threshold,
        )
        self._liquidity = LiquidityMetricsEngine(
            depth=cfg.orderbook_depth,
            sample_volume=cfg.vwap_sample_volume,
        )
        self._risk = RiskMetricsEngine(
            annualization_factor=cfg.annualization_factor,
            historical_window=cfg.historical_volatility_window,
            confidence=cfg.var_confidence,
        )
        self._impact = MarketImpactEngine(max_abs_log_return=cfg.max_abs_log_return)

        self._trade_count = 0

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def config(self) -> AnalyzerConfig:
        return self._config

    @property
    def symbol(self) -> str:
        return self._config.symbol

    @property
    def trade_count(self) -> int:
        """Total trades accepted since start (not bounded by the window)."""
        with self._lock:
            return self._trade_count

    @property
    def history_size(self) -> int:
        with self._lock:
            return len(self._window)

    @property
    def order_book(self) -> OrderBookView:
        with self._lock:
            return self._book

    @property
    def ewma_state(self) -> EWMAState:
        with self._lock:
            return self._ewma.state

    @property
    def thresholds(self) -> ThresholdState:
        with self._lock:
            return self._thresholds.state

    # =========================================================================
    # Ingestion
    # =========================================================================

    def ingest_trade(
        self,
        price: float,
        amount: float,
        timestamp: int,
        side: TradeSide | str = TradeSide.UNKNOWN,
        trade_id: str = "",
    ) -> Trade:
        """
        Validate and ingest one trade print.

        Raises:
            InvalidInputError: If price or amount is non-positive. State is
                left untouched in that case.
        """
        trade = self._build_trade(price, amount, timestamp, side, trade_id)
        with self._lock:
            self._apply_trade(trade)
        return trade

    def ingest_order_book(
        self,
        bids: Iterable[LevelLike],
        asks: Iterable[LevelLike],
    ) -> None:
        """Replace the order book view. Invalid levels are dropped silently."""
        book = OrderBookView.from_levels(bids, asks)
        with self._lock:
            self._book = book

    def ingest_and_classify(
        self,
        price: float,
        amount: float,
        timestamp: int,
        side: TradeSide | str = TradeSide.UNKNOWN,
        trade_id: str = "",
    ) -> Tuple[Trade, AnomalyFlags]:
        """
        Ingest a trade and classify it in one critical section.

        Raises:
            InvalidInputError: If price or amount is non-positive
        """
        trade = self._build_trade(price, amount, timestamp, side, trade_id)
        with self._lock:
            self._apply_trade(trade)
            flags = self._classify_locked(trade)
        return trade, flags

    def _build_trade(
        self,
        price: float,
        amount: float,
        timestamp: int,
        side: TradeSide | str,
        trade_id: str,
    ) -> Trade:
        try:
            return Trade(price=price, amount=amount, timestamp=timestamp, side=side, trade_id=trade_id)
        except InvalidInputError:
            self._logger.debug(f"{self.symbol}: rejected trade price={price} amount={amount}")
            raise

    def _apply_trade(self, trade: Trade) -> None:
        self._window.append(trade)
        self._trade_count += 1
        self._ewma.update(trade.price)
        self._thresholds.update(
            self._window.recent_amounts(),
            self._window.recent_prices(),
        )

    # =========================================================================
    # Reads
    # =========================================================================

    def classify(self, trade: Trade) -> AnomalyFlags:
        """Classify `trade` against the current state without mutating it."""
        with self._lock:
            return self._classify_locked(trade)

    def _classify_locked(self, trade: Trade) -> AnomalyFlags:
        return self._detector.classify(
            trade,
            self._window.recent_trades(),
            self._thresholds.state,
            self._ewma.state,
        )

    def snapshot(self) -> MetricsSnapshot:
        """Compute every metric against one consistent read of the state."""
        with self._lock:
            now_ms = self._clock()
            trades = self._window.trades()
            return MetricsSnapshot(
                symbol=self.symbol,
                timestamp=now_ms,
                trade_count=self._trade_count,
                liquidity=self._liquidity.calculate(self._book),
                risk=self._risk.calculate([t.price for t in trades]),
                kyles_lambda=self._impact.kyles_lambda_measures(trades, now_ms),
                amihud_measures=self._impact.amihud_measures(trades, now_ms),
            )

    def statistics(self) -> TradeStatistics:
        """Summary of the analysis window, EWMA and thresholds."""
        with self._lock:
            recent = self._window.recent_trades()
            thresholds = self._thresholds.state
            return TradeStatistics(
                symbol=self.symbol,
                trade_count=self._trade_count,
                window_size=len(recent),
                average_price=mean([t.price for t in recent]),
                average_trade_size=mean([t.amount for t in recent]),
                ewma_volatility=self._ewma.volatility,
                ewma_variance=self._ewma.variance,
                large_trade_threshold=thresholds.large_trade,
                price_movement_threshold=thresholds.price_movement,
                volatility_threshold=self._detector.volatility_threshold,
            )

    def kyles_lambda(self, window_ms: int) -> float:
        """Kyle's lambda over an arbitrary trailing window."""
        with self._lock:
            return self._impact.kyles_lambda(self._window.trades(), self._clock(), window_ms)

    def amihud(self, period_days: int) -> float:
        """Amihud illiquidity over an arbitrary trailing period."""
        with self._lock:
            return self._impact.amihud(self._window.trades(), self._clock(), period_days)

    def __repr__(self) -> str:
        return f"SymbolAnalyzer(symbol={self.symbol!r}, trades={self.history_size})"
