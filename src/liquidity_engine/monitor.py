"""
Market Monitor.

Feed-facing handler around a SymbolAnalyzer:
- turns raw exchange name/value fields into trade and order book arguments
- ingests and classifies each trade atomically
- reports flagged trades through a callback and the log
- takes a metrics snapshot every N accepted trades

Malformed trades are logged and counted here instead of propagating into
the feed's event loop.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

from .analytics.anomaly import AnomalyFlags
from .analytics.snapshot import MetricsSnapshot
from .analyzer import SymbolAnalyzer
from .config.models import EngineConfig, MonitorConfig
from .core import InvalidInputError, get_logger, setup_logger
from .core.models import LevelLike, Trade, TradeSide

logger = get_logger(__name__)


# Raw feed field names
FIELD_LAST_PRICE = "LAST_PRICE"
FIELD_LAST_SIZE = "LAST_SIZE"
FIELD_IS_BUYER_MAKER = "IS_BUYER_MAKER"
BID_PRICE_PREFIX = "BID_PRICE_"
BID_SIZE_PREFIX = "BID_SIZE_"
ASK_PRICE_PREFIX = "ASK_PRICE_"
ASK_SIZE_PREFIX = "ASK_SIZE_"


@dataclass(frozen=True)
class ParsedTrade:
    """Trade arguments extracted from raw feed fields."""

    price: float
    amount: float
    side: TradeSide


def parse_trade_fields(fields: Mapping[str, Any]) -> Optional[ParsedTrade]:
    """
    Extract price, size and aggressor side from raw trade fields.

    Unparseable numeric fields are treated as missing. Returns None when
    price or size is missing.

    Example:
        >>> parse_trade_fields({"LAST_PRICE": "100.5", "LAST_SIZE": "2", "IS_BUYER_MAKER": "1"})
        ParsedTrade(price=100.5, amount=2.0, side=<TradeSide.SELL: 'sell'>)
    """
    price = _parse_float(fields.get(FIELD_LAST_PRICE))
    amount = _parse_float(fields.get(FIELD_LAST_SIZE))
    if price is None or amount is None:
        return None

    side = TradeSide.UNKNOWN
    maker_flag = fields.get(FIELD_IS_BUYER_MAKER)
    if maker_flag is not None:
        side = TradeSide.from_buyer_maker(str(maker_flag).strip().lower() in ("1", "true"))

    return ParsedTrade(price=price, amount=amount, side=side)


def parse_order_book_fields(
    fields: Mapping[str, Any],
) -> Tuple[List[Tuple[float, float]], List[Tuple[float, float]]]:
    """
    Extract indexed bid/ask levels (BID_PRICE_0, BID_SIZE_0, ...).

    Levels whose price or size is missing come back as 0 and are dropped
    later by the order book normalization.
    """
    bids: dict[int, list[float]] = {}
    asks: dict[int, list[float]] = {}

    prefixes = (
        (BID_PRICE_PREFIX, bids, 0),
        (BID_SIZE_PREFIX, bids, 1),
        (ASK_PRICE_PREFIX, asks, 0),
        (ASK_SIZE_PREFIX, asks, 1),
    )

    for name, raw_value in fields.items():
        for prefix, side, slot in prefixes:
            if not name.startswith(prefix):
                continue
            index_str = name[len(prefix):]
            value = _parse_float(raw_value)
            if not index_str.isdigit() or value is None:
                logger.debug(f"Skipping order book field {name}={raw_value!r}")
                break
            side.setdefault(int(index_str), [0.0, 0.0])[slot] = value
            break

    return (
        [(pair[0], pair[1]) for _, pair in sorted(bids.items())],
        [(pair[0], pair[1]) for _, pair in sorted(asks.items())],
    )


def _parse_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class MarketMonitor:
    """
    Drives a SymbolAnalyzer from a market data feed.

    Example:
        >>> monitor = MarketMonitor(
        ...     SymbolAnalyzer(),
        ...     on_anomaly=lambda trade, flags: print(flags),
        ...     on_snapshot=lambda snapshot: print(snapshot.to_dict()),
        ... )
        >>> flags = monitor.on_trade(50000.0, 0.1, 1704067200000, "buy")
    """

    def __init__(
        self,
        analyzer: SymbolAnalyzer,
        config: Optional[MonitorConfig] = None,
        on_anomaly: Optional[Callable[[Trade, AnomalyFlags], None]] = None,
        on_snapshot: Optional[Callable[[MetricsSnapshot], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize MarketMonitor.

        Args:
            analyzer: Analyzer that owns the symbol state
            config: Monitor configuration
            on_anomaly: Callback for trades with at least one flag set
            on_snapshot: Callback for periodic metrics snapshots
            logger: Logger to use instead of the module logger
        """
        self._analyzer = analyzer
        self._config = config or MonitorConfig()
        self._on_anomaly = on_anomaly
        self._on_snapshot = on_snapshot
        self._logger = logger or get_logger(__name__)

        self._counter_lock = threading.Lock()
        self._accepted = 0
        self._rejected = 0
        self._anomalies = 0
        self._last_snapshot: Optional[MetricsSnapshot] = None

    @classmethod
    def from_config(
        cls,
        config: EngineConfig,
        on_anomaly: Optional[Callable[[Trade, AnomalyFlags], None]] = None,
        on_snapshot: Optional[Callable[[MetricsSnapshot], None]] = None,
    ) -> "MarketMonitor":
        """
        Build a monitor and its analyzer from a loaded EngineConfig.

        The monitor logger is named after the symbol and set up with the
        configured level and log file.
        """
        symbol_logger = setup_logger(
            f"liquidity_engine.{config.analyzer.symbol}",
            level=config.log_level,
            log_file=config.log_file,
        )
        analyzer = SymbolAnalyzer(config.analyzer, logger=symbol_logger)
        return cls(
            analyzer,
            config.monitor,
            on_anomaly=on_anomaly,
            on_snapshot=on_snapshot,
            logger=symbol_logger,
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def analyzer(self) -> SymbolAnalyzer:
        return self._analyzer

    @property
    def accepted_trades(self) -> int:
        return self._accepted

    @property
    def rejected_trades(self) -> int:
        return self._rejected

    @property
    def anomaly_count(self) -> int:
        return self._anomalies

    @property
    def last_snapshot(self) -> Optional[MetricsSnapshot]:
        return self._last_snapshot

    # =========================================================================
    # Feed callbacks
    # =========================================================================

    def on_trade(
        self,
        price: float,
        amount: float,
        timestamp: int,
        side: TradeSide | str = TradeSide.UNKNOWN,
        trade_id: str = "",
    ) -> Optional[AnomalyFlags]:
        """
        Process one trade print.

        Returns:
            The anomaly flags, or None if the trade was rejected
        """
        try:
            trade, flags = self._analyzer.ingest_and_classify(
                price, amount, timestamp, side, trade_id
            )
        except InvalidInputError as e:
            with self._counter_lock:
                self._rejected += 1
            self._logger.warning(f"{self._analyzer.symbol}: rejected trade: {e}")
            return None

        with self._counter_lock:
            self._accepted += 1
            count = self._accepted
            if flags.any:
                self._anomalies += 1

        if flags.any:
            self._report_anomaly(trade, flags)

        every = self._config.snapshot_every_n_trades
        if every and count % every == 0:
            self.take_snapshot()

        return flags

    def on_trade_fields(self, fields: Mapping[str, Any], timestamp: int) -> Optional[AnomalyFlags]:
        """Process a trade given as raw feed fields."""
        parsed = parse_trade_fields(fields)
        if parsed is None:
            self._logger.warning(
                f"{self._analyzer.symbol}: trade missing required fields, got {sorted(fields)}"
            )
            with self._counter_lock:
                self._rejected += 1
            return None
        return self.on_trade(parsed.price, parsed.amount, timestamp, parsed.side)

    def on_order_book(
        self,
        bids: Iterable[LevelLike],
        asks: Iterable[LevelLike],
    ) -> None:
        """Replace the analyzer's order book view."""
        self._analyzer.ingest_order_book(bids, asks)

    def on_order_book_fields(self, fields: Mapping[str, Any]) -> None:
        """Replace the order book view from raw indexed feed fields."""
        bids, asks = parse_order_book_fields(fields)
        self._analyzer.ingest_order_book(bids, asks)

    def take_snapshot(self) -> MetricsSnapshot:
        """Compute a snapshot now and hand it to the snapshot callback."""
        snapshot = self._analyzer.snapshot()
        self._last_snapshot = snapshot
        self._logger.info(
            f"{snapshot.symbol}: snapshot after {snapshot.trade_count} trades, "
            f"spread={snapshot.liquidity.spread:.8f} "
            f"realized_vol={snapshot.risk.realized_volatility:.4f}%"
        )
        if self._on_snapshot is not None:
            try:
                self._on_snapshot(snapshot)
            except Exception as e:
                self._logger.error(f"Error in on_snapshot callback: {e}")
        return snapshot

    def _report_anomaly(self, trade: Trade, flags: AnomalyFlags) -> None:
        if self._config.log_anomalies:
            kinds = [name for name, value in flags.to_dict().items() if value]
            self._logger.warning(
                f"{self._analyzer.symbol}: anomaly {', '.join(kinds)} "
                f"price={trade.price} size={trade.amount} side={trade.side.value}"
            )
        if self._on_anomaly is not None:
            try:
                self._on_anomaly(trade, flags)
            except Exception as e:
                self._logger.error(f"Error in on_anomaly callback: {e}")
