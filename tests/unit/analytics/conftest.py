"""Shared fixtures and builders for analytics tests."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from trade_analytics.analytics.reconstructor import TradeCycleReconstructor
from trade_analytics.analytics.summary import AnalyticsEngine
from trade_analytics.analytics.trade import PsychologyData, ReconstructedTrade
from trade_analytics.core.config import AnalyticsSettings
from trade_analytics.core.models import Execution
from trade_analytics.core.taxonomy import TaxonomyRegistry

# 2024-01-01 was a Monday
T0 = datetime(2024, 1, 1, 10, 0, 0)


@pytest.fixture
def base_time():
    return T0


@pytest.fixture
def registry():
    return TaxonomyRegistry()


@pytest.fixture
def reconstructor():
    return TradeCycleReconstructor()


@pytest.fixture
def engine(registry):
    return AnalyticsEngine(AnalyticsSettings(), registry)


def make_execution(
    side: str = "buy",
    quantity: int = 10,
    price: float | str = 100,
    timestamp: datetime | None = None,
    fees: float | str = 0,
    symbol: str = "AAPL",
    portfolio_id: str = "pf-1",
    asset_class: str | None = None,
    strategy: str | None = None,
    execution_id: str | None = None,
) -> Execution:
    """Helper to create an Execution."""
    kwargs = {}
    if execution_id is not None:
        kwargs["execution_id"] = execution_id
    return Execution(
        portfolio_id=portfolio_id,
        symbol=symbol,
        side=side,
        quantity=quantity,
        price=Decimal(str(price)),
        timestamp=timestamp or T0,
        fees=Decimal(str(fees)),
        asset_class=asset_class,
        strategy=strategy,
        **kwargs,
    )


def make_closed_trade(
    entry_price: float | str = 100,
    exit_price: float | str = 110,
    quantity: int = 10,
    direction: str = "long",
    start: datetime | None = None,
    hold: timedelta = timedelta(hours=2),
    fees: float | str = 0,
    symbol: str = "AAPL",
    asset_class: str | None = None,
    strategy: str | None = None,
) -> ReconstructedTrade:
    """Build a closed trade through the reconstructor."""
    start = start or T0
    open_side, close_side = ("buy", "sell") if direction == "long" else ("sell", "buy")
    return TradeCycleReconstructor().reconstruct_cycle([
        make_execution(
            side=open_side, quantity=quantity, price=entry_price, timestamp=start,
            fees=fees, symbol=symbol, asset_class=asset_class, strategy=strategy,
        ),
        make_execution(
            side=close_side, quantity=quantity, price=exit_price,
            timestamp=start + hold, fees=fees, symbol=symbol,
        ),
    ])


def make_open_trade(
    price: float | str = 100,
    quantity: int = 10,
    start: datetime | None = None,
) -> ReconstructedTrade:
    return TradeCycleReconstructor().reconstruct_cycle([
        make_execution(side="buy", quantity=quantity, price=price, timestamp=start or T0),
    ])


def tag(
    trade: ReconstructedTrade,
    registry: TaxonomyRegistry,
    patterns=(),
    entry=(),
    exits=(),
) -> ReconstructedTrade:
    """Attach psychology codes to a trade."""
    return trade.with_psychology(PsychologyData.from_codes(
        registry,
        behavior_patterns=patterns,
        entry_factors=entry,
        exit_factors=exits,
    ))


def pattern_scenario(registry: TaxonomyRegistry) -> list[ReconstructedTrade]:
    """Four tagged trades on consecutive days, alternating win / loss.

    t1 +100  DISCIPLINED_EXECUTION  FOLLOWING_THE_PLAN  TAKING_PROFITS  qty 10
    t2  -40  CHASING_MOMENTUM       FEAR_OF_MISSING_OUT PANIC           qty 20
    t3  +50  DISCIPLINED_EXECUTION  FOLLOWING_THE_PLAN  DISCIPLINE      qty 10
    t4  -20  CHASING_MOMENTUM       OVERCONFIDENCE      FEAR            qty 10
    """
    day = timedelta(days=1)
    return [
        tag(make_closed_trade(100, 110, 10, start=T0), registry,
            ["DISCIPLINED_EXECUTION"], ["FOLLOWING_THE_PLAN"], ["TAKING_PROFITS"]),
        tag(make_closed_trade(100, 98, 20, start=T0 + day), registry,
            ["CHASING_MOMENTUM"], ["FEAR_OF_MISSING_OUT"], ["PANIC"]),
        tag(make_closed_trade(100, 105, 10, start=T0 + 2 * day), registry,
            ["DISCIPLINED_EXECUTION"], ["FOLLOWING_THE_PLAN"], ["DISCIPLINE"]),
        tag(make_closed_trade(100, 98, 10, start=T0 + 3 * day), registry,
            ["CHASING_MOMENTUM"], ["OVERCONFIDENCE"], ["FEAR"]),
    ]
