"""
Tests for SymbolAnalyzer.

Tests the per-symbol state holder including:
- Trade ingestion and validation
- Bounded history
- Atomic ingest-and-classify
- Snapshot consistency
- Concurrent ingestion
"""

import math
import threading

import pytest

from liquidity_engine.analyzer import SymbolAnalyzer
from liquidity_engine.analytics.anomaly import AnomalyDetector
from liquidity_engine.analytics.snapshot import MetricsSnapshot, TradeStatistics
from liquidity_engine.config.models import AnalyzerConfig
from liquidity_engine.core.exceptions import InvalidInputError
from liquidity_engine.core.models import TradeSide


BASE_TS = 1704067200000


class TestIngestion:
    """Test trade and order book ingestion."""

    def test_ingest_trade(self, analyzer):
        trade = analyzer.ingest_trade(100.0, 1.5, BASE_TS, "sell", "t-1")

        assert trade.side is TradeSide.SELL
        assert trade.trade_id == "t-1"
        assert analyzer.trade_count == 1
        assert analyzer.history_size == 1
        assert analyzer.ewma_state.initialized

    def test_symbol_upper_cased(self, analyzer):
        assert analyzer.symbol == "BTCUSDT"
        assert repr(analyzer) == "SymbolAnalyzer(symbol='BTCUSDT', trades=0)"

    def test_history_bounded_fifo(self, clock):
        analyzer = SymbolAnalyzer(
            AnalyzerConfig(history_capacity=5, analysis_window=3),
            clock=clock,
        )

        for i in range(8):
            analyzer.ingest_trade(100.0 + i, 1.0, BASE_TS + i)

        assert analyzer.history_size == 5
        assert analyzer.trade_count == 8
        assert analyzer.statistics().window_size == 3

    @pytest.mark.parametrize("price,amount", [(0.0, 1.0), (100.0, 0.0), (-1.0, 1.0)])
    def test_rejected_trade_leaves_state_untouched(self, analyzer, price, amount):
        for i in range(12):
            analyzer.ingest_trade(100.0 + (i % 3), 1.0 + i, BASE_TS + i)
        ewma_before = analyzer.ewma_state
        thresholds_before = analyzer.thresholds
        snapshot_before = analyzer.snapshot()

        with pytest.raises(InvalidInputError):
            analyzer.ingest_trade(price, amount, BASE_TS + 100)
        with pytest.raises(InvalidInputError):
            analyzer.ingest_and_classify(price, amount, BASE_TS + 100)

        assert analyzer.trade_count == 12
        assert analyzer.history_size == 12
        assert analyzer.ewma_state == ewma_before
        assert analyzer.thresholds == thresholds_before
        assert analyzer.snapshot() == snapshot_before

    def test_degenerate_price_ratio_keeps_state_consistent(self, analyzer, sample_bids, sample_asks):
        analyzer.ingest_order_book(sample_bids, sample_asks)
        analyzer.ingest_trade(1e300, 1.0, BASE_TS)
        analyzer.ingest_trade(1e-300, 1.0, BASE_TS + 1)

        assert analyzer.trade_count == 2
        assert analyzer.history_size == 2
        assert analyzer.ewma_state.last_price == 1e300

        snapshot = analyzer.snapshot()

        assert snapshot.trade_count == 2
        assert snapshot.risk.return_count == 0
        assert analyzer.kyles_lambda(24 * 3_600_000) == 0.0
        assert math.isfinite(analyzer.amihud(30))

        _, flags = analyzer.ingest_and_classify(1.01e-300, 1.0, BASE_TS + 2)
        assert flags is not None
        assert analyzer.snapshot().risk.return_count == 1

    def test_order_book_replaced_wholesale(self, analyzer, sample_bids, sample_asks):
        analyzer.ingest_order_book(sample_bids, sample_asks)
        analyzer.ingest_order_book([(90, 1)], [(95, 1)])

        book = analyzer.order_book
        assert [level.price for level in book.bids] == [90.0]
        assert [level.price for level in book.asks] == [95.0]

    def test_order_book_never_fails(self, analyzer):
        analyzer.ingest_order_book([("bad",), None, (100, -1)], [{"price": 0, "size": 1}])

        assert not analyzer.order_book.is_two_sided

    def test_thresholds_adapt_after_min_trades(self, analyzer):
        for i in range(10):
            analyzer.ingest_trade(100.0, float(i + 1), BASE_TS + i)

        # P90 of sizes 1..10
        assert analyzer.thresholds.large_trade == 10.0


class TestClassification:
    """Test anomaly classification through the analyzer."""

    def test_equal_sizes_not_flagged(self, analyzer):
        """Sizes [1, 1, 1] against a large-trade threshold of 1.0."""
        results = [
            analyzer.ingest_and_classify(100.0, 1.0, BASE_TS + i)[1]
            for i in range(3)
        ]

        assert all(not flags.size_anomaly for flags in results)

    def test_large_first_trade_flagged(self, analyzer):
        _, flags = analyzer.ingest_and_classify(100.0, 5.0, BASE_TS)

        assert flags.size_anomaly
        assert not flags.price_anomaly

    def test_price_jump_flagged(self, analyzer):
        for i in range(10):
            analyzer.ingest_trade(100.0 + 0.5 * (i % 2), 0.5, BASE_TS + i)

        _, flags = analyzer.ingest_and_classify(110.0, 0.5, BASE_TS + 10)

        assert flags.price_anomaly

    def test_classify_does_not_mutate(self, analyzer):
        trade = analyzer.ingest_trade(100.0, 1.0, BASE_TS)
        count = analyzer.trade_count

        analyzer.classify(trade)
        analyzer.classify(trade)

        assert analyzer.trade_count == count


class TestSnapshot:
    """Test snapshot reads."""

    def test_empty_snapshot(self, analyzer, clock):
        snapshot = analyzer.snapshot()

        assert isinstance(snapshot, MetricsSnapshot)
        assert snapshot.timestamp == clock.now_ms
        assert snapshot.trade_count == 0
        assert snapshot.liquidity.order_book_imbalance is None
        assert snapshot.risk.historical_volatility is None
        assert snapshot.kyles_lambda.daily == 0.0
        assert snapshot.amihud_measures.one_day == 0.0

    def test_snapshot_idempotent(self, analyzer, sample_bids, sample_asks):
        analyzer.ingest_order_book(sample_bids, sample_asks)
        for i in range(30):
            side = TradeSide.BUY if i % 2 else TradeSide.SELL
            analyzer.ingest_trade(100.0 + (i % 5) * 0.25, 0.5 + (i % 3), BASE_TS + i * 1000, side)

        first = analyzer.snapshot()
        second = analyzer.snapshot()

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_snapshot_equality_ignores_wall_clock(self, sample_bids, sample_asks):
        analyzer = SymbolAnalyzer(AnalyzerConfig(history_capacity=100, analysis_window=20))
        analyzer.ingest_order_book(sample_bids, sample_asks)
        analyzer.ingest_trade(100.0, 1.0, BASE_TS)
        analyzer.ingest_trade(101.0, 2.0, BASE_TS + 1)

        first = analyzer.snapshot()
        second = analyzer.snapshot()

        assert first == second
        assert first.timestamp > BASE_TS

    def test_snapshot_liquidity(self, analyzer, sample_bids, sample_asks):
        analyzer.ingest_order_book(sample_bids, sample_asks)

        liquidity = analyzer.snapshot().liquidity

        assert liquidity.spread == pytest.approx(1.0)
        assert liquidity.bid_depth == pytest.approx(7.0)
        assert liquidity.order_book_imbalance == pytest.approx(0.0)

    def test_to_dict_keys(self, analyzer):
        data = analyzer.snapshot().to_dict()

        assert data["symbol"] == "BTCUSDT"
        assert data["spread"] == 0.0
        assert data["bid_vwap"] is None
        assert set(data["kyles_lambda"]) == {"daily", "hourly"}
        assert set(data["amihud_measures"]) == {"1_day", "30_days", "90_days"}

    def test_time_windows_follow_clock(self, analyzer, clock):
        ts = clock.now_ms - 1000
        analyzer.ingest_trade(100.0, 1.0, ts - 2000, TradeSide.BUY)
        analyzer.ingest_trade(101.0, 2.0, ts - 1000, TradeSide.BUY)
        analyzer.ingest_trade(100.0, 1.0, ts, TradeSide.SELL)

        assert analyzer.kyles_lambda(60_000) != 0.0

        clock.advance(2 * 86_400_000)

        assert analyzer.kyles_lambda(60_000) == 0.0
        assert analyzer.snapshot().kyles_lambda.daily == 0.0


class TestStatistics:
    """Test TradeStatistics."""

    def test_statistics(self, analyzer):
        for price, amount in [(100.0, 1.0), (102.0, 3.0)]:
            analyzer.ingest_trade(price, amount, BASE_TS)

        stats = analyzer.statistics()

        assert isinstance(stats, TradeStatistics)
        assert stats.trade_count == 2
        assert stats.window_size == 2
        assert stats.average_price == pytest.approx(101.0)
        assert stats.average_trade_size == pytest.approx(2.0)
        assert stats.volatility_threshold == 0.02
        assert stats.ewma_volatility > 0.0


class TestConcurrency:
    """Test ingestion from several threads."""

    def test_concurrent_ingestion(self, clock):
        analyzer = SymbolAnalyzer(
            AnalyzerConfig(history_capacity=500, analysis_window=50),
            clock=clock,
        )
        errors = []

        def worker(offset: int) -> None:
            try:
                for i in range(250):
                    analyzer.ingest_and_classify(100.0 + (i % 7) * 0.1, 1.0, BASE_TS + offset * 1000 + i, "buy")
                    if i % 50 == 0:
                        analyzer.snapshot()
            except Exception as e:  # pragma: no cover
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert analyzer.trade_count == 1000
        assert analyzer.history_size == 500

    def test_classification_sees_state_of_its_own_ingest(self, clock):
        analyzer = SymbolAnalyzer(
            AnalyzerConfig(history_capacity=500, analysis_window=50),
            clock=clock,
        )
        mismatches = []
        calls = []

        class RecordingDetector(AnomalyDetector):
            def classify(self, trade, window, thresholds, ewma):
                calls.append(trade)
                if window[-1] is not trade or ewma.last_price != trade.price:
                    mismatches.append(trade)
                return super().classify(trade, window, thresholds, ewma)

        config = analyzer.config
        analyzer._detector = RecordingDetector(
            min_trades=config.min_trades_for_thresholds,
            price_deviation_multiplier=config.price_deviation_multiplier,
            trade_size_multiplier=config.trade_size_multiplier,
            volatility_threshold=config.volatility_threshold,
        )

        def worker(offset: int) -> None:
            for i in range(200):
                # Distinct price band per thread so a foreign trade is visible
                price = 100.0 + offset * 10.0 + (i % 5) * 0.01
                analyzer.ingest_and_classify(price, 1.0 + offset, BASE_TS + offset * 1000 + i, "sell")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(calls) == 1200
        assert mismatches == []
