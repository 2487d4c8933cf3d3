"""Distribution of closed trades across categorical dimensions.

Each dimension partitions the closed trades into buckets and reports,
per bucket, the trade count, summed P/L and win rate.  A trade that
lacks the data a dimension needs (no exit for duration, no asset class)
is left out of that dimension only.

Usage::

    calc = DistributionCalculator(registry=TaxonomyRegistry())
    dist = calc.calculate(trades)
    print(dist.by_day_of_week["MONDAY"].win_rate)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Sequence

from trade_analytics.core.config import DistributionConfig
from trade_analytics.core.decimals import ZERO, percentage, quantize
from trade_analytics.core.enums import DurationClass, PositionSizeClass, TradeStatus
from trade_analytics.core.taxonomy import Taxonomy, TaxonomyRegistry

from .trade import ReconstructedTrade

logger = logging.getLogger(__name__)

DAY_NAMES = ["MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY"]
MONTH_NAMES = [
    "JANUARY", "FEBRUARY", "MARCH", "APRIL", "MAY", "JUNE",
    "JULY", "AUGUST", "SEPTEMBER", "OCTOBER", "NOVEMBER", "DECEMBER",
]

UNKNOWN_STRATEGY = "UNKNOWN"


@dataclass
class BucketStats:
    """Accumulator for one bucket."""

    count: int = 0
    wins: int = 0
    total_profit_loss: Decimal = ZERO

    def record(self, trade: ReconstructedTrade) -> None:
        self.count += 1
        self.total_profit_loss += trade.profit_loss
        if trade.status == TradeStatus.WIN:
            self.wins += 1

    @property
    def win_rate(self) -> Decimal:
        return percentage(self.wins, self.count, scale=2)

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "total_profit_loss": str(quantize(self.total_profit_loss)),
            "win_rate": str(self.win_rate),
        }


@dataclass(frozen=True)
class DistributionMetrics:
    by_day_of_week: dict[str, BucketStats] = field(default_factory=dict)
    by_month: dict[str, BucketStats] = field(default_factory=dict)
    by_quarter: dict[str, BucketStats] = field(default_factory=dict)
    by_hour_of_day: dict[int, BucketStats] = field(default_factory=dict)
    by_asset_class: dict[str, BucketStats] = field(default_factory=dict)
    by_strategy: dict[str, BucketStats] = field(default_factory=dict)
    by_duration: dict[DurationClass, BucketStats] = field(default_factory=dict)
    by_position_size: dict[PositionSizeClass, BucketStats] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            name: {
                (k.value if isinstance(k, (DurationClass, PositionSizeClass)) else str(k)):
                    v.to_dict()
                for k, v in buckets.items()
            }
            for name, buckets in self.__dict__.items()
        }


class DistributionCalculator:
    """Buckets closed trades by calendar, context, duration and size.

    Parameters
    ----------
    config : DistributionConfig | None
        Duration (hours) and size (entry notional) class boundaries.
    registry : TaxonomyRegistry | None
        Canonicalises asset-class codes.  A private registry is created
        when omitted.
    """

    def __init__(
        self,
        config: DistributionConfig | None = None,
        registry: TaxonomyRegistry | None = None,
    ) -> None:
        self._config = config or DistributionConfig()
        self._registry = registry or TaxonomyRegistry()

    def calculate(self, trades: Sequence[ReconstructedTrade]) -> DistributionMetrics:
        closed = sorted(
            (t for t in trades if t.is_closed and t.entry is not None),
            key=lambda t: t.entry.timestamp,
        )
        return DistributionMetrics(
            by_day_of_week=_bucket(closed, lambda t: DAY_NAMES[t.entry.timestamp.weekday()]),
            by_month=_bucket(closed, lambda t: MONTH_NAMES[t.entry.timestamp.month - 1]),
            by_quarter=_bucket(closed, lambda t: f"Q{(t.entry.timestamp.month - 1) // 3 + 1}"),
            by_hour_of_day=_bucket(closed, lambda t: t.entry.timestamp.hour),
            by_asset_class=_bucket(closed, self._asset_class_key),
            by_strategy=_bucket(closed, lambda t: t.strategy or UNKNOWN_STRATEGY),
            by_duration=_bucket(closed, self.duration_class),
            by_position_size=_bucket(closed, self.position_size_class),
        )

    # ------------------------------------------------------------------ #
    # Classifiers                                                          #
    # ------------------------------------------------------------------ #

    def duration_class(self, trade: ReconstructedTrade) -> DurationClass | None:
        hours = trade.holding_hours
        if hours is None:
            return None
        for bound, cls in zip(self._config.duration_thresholds_hours, DurationClass):
            if hours < bound:
                return cls
        return DurationClass.LONG_TERM

    def position_size_class(self, trade: ReconstructedTrade) -> PositionSizeClass | None:
        if trade.entry is None:
            return None
        notional = trade.entry_notional
        for bound, cls in zip(self._config.size_thresholds, PositionSizeClass):
            if notional < bound:
                return cls
        return PositionSizeClass.EXTRA_LARGE

    def _asset_class_key(self, trade: ReconstructedTrade) -> str | None:
        if not trade.asset_class:
            return None
        return self._registry.resolve(Taxonomy.ASSET_CLASS, trade.asset_class).code


def _bucket(
    trades: Sequence[ReconstructedTrade],
    key_fn: Callable[[ReconstructedTrade], Any],
) -> dict[Any, BucketStats]:
    buckets: dict[Any, BucketStats] = {}
    skipped = 0
    for trade in trades:
        key = key_fn(trade)
        if key is None:
            skipped += 1
            continue
        buckets.setdefault(key, BucketStats()).record(trade)
    if skipped:
        logger.debug("Skipped %d trade(s) missing data for a dimension", skipped)
    return buckets
