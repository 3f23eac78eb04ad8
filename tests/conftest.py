"""
Pytest configuration and fixtures for liquidity engine tests.
"""

from typing import Callable

import pytest

from liquidity_engine.analyzer import SymbolAnalyzer
from liquidity_engine.config.models import AnalyzerConfig
from liquidity_engine.core.models import Trade, TradeSide
from liquidity_engine.core.utils import MS_PER_HOUR


# 2024-01-01 00:00:00 UTC
BASE_TS = 1704067200000


# =============================================================================
# Clock Fixtures
# =============================================================================


class FixedClock:
    """Manually advanced millisecond clock."""

    def __init__(self, now_ms: int = BASE_TS + 12 * MS_PER_HOUR):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen at 2024-01-01 12:00 UTC."""
    return FixedClock()


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def make_trade() -> Callable[..., Trade]:
    """Factory for trades with sensible defaults."""

    def _make(
        price: float = 100.0,
        amount: float = 1.0,
        timestamp: int = BASE_TS,
        side: TradeSide | str = TradeSide.BUY,
    ) -> Trade:
        return Trade(price=price, amount=amount, timestamp=timestamp, side=side)

    return _make


@pytest.fixture
def sample_bids() -> list[tuple[float, float]]:
    return [(100.0, 2.0), (99.0, 5.0)]


@pytest.fixture
def sample_asks() -> list[tuple[float, float]]:
    return [(101.0, 3.0), (102.0, 4.0)]


# =============================================================================
# Analyzer Fixtures
# =============================================================================


@pytest.fixture
def analyzer_config() -> AnalyzerConfig:
    """Small windows so eviction is easy to exercise."""
    return AnalyzerConfig(
        symbol="btcusdt",
        history_capacity=100,
        analysis_window=20,
        orderbook_depth=2,
    )


@pytest.fixture
def analyzer(analyzer_config: AnalyzerConfig, clock: FixedClock) -> SymbolAnalyzer:
    return SymbolAnalyzer(analyzer_config, clock=clock)
