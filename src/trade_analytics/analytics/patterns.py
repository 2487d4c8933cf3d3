"""Pattern and psychology metrics.

Per-group statistics for every declared behavior pattern and entry /
exit psychology factor, ranked top / bottom lists by profitability, the
behavioral percentages (greed entries, fear exits, impulsiveness,
discipline) and the heuristic composite scores from :mod:`.scores`.

Usage::

    calc = PatternCalculator()
    closed = [t for t in normalize_trades(trades) if t.is_closed]
    metrics = calc.calculate(closed, group_trades(closed))
    for ranked in metrics.top_patterns:
        print(ranked.code, ranked.stats.total_profit_loss)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Sequence

from trade_analytics.core.config import ScoringConfig
from trade_analytics.core.decimals import HUNDRED, ZERO, quantize, safe_div
from trade_analytics.core.taxonomy import Category

from .grouping import TradeGrouping
from .scores import (
    SCORE_SCALE,
    AdaptabilityAnalyzer,
    CompositeScore,
    OverconfidenceAnalyzer,
    PatternConsistencyAnalyzer,
)
from .stats import GroupStats, compute_group_stats
from .trade import ReconstructedTrade

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedGroup:
    code: str
    stats: GroupStats

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, **self.stats.to_dict()}


@dataclass(frozen=True)
class PatternMetrics:
    overall: GroupStats = field(default_factory=GroupStats)

    by_pattern: dict[str, GroupStats] = field(default_factory=dict)
    by_entry_factor: dict[str, GroupStats] = field(default_factory=dict)
    by_exit_factor: dict[str, GroupStats] = field(default_factory=dict)

    top_patterns: tuple[RankedGroup, ...] = ()
    bottom_patterns: tuple[RankedGroup, ...] = ()
    top_entry_factors: tuple[RankedGroup, ...] = ()
    bottom_entry_factors: tuple[RankedGroup, ...] = ()
    top_exit_factors: tuple[RankedGroup, ...] = ()
    bottom_exit_factors: tuple[RankedGroup, ...] = ()

    greed_based_entry_percentage: Decimal = ZERO
    fear_based_exit_percentage: Decimal = ZERO
    impulsive_trade_percentage: Decimal = ZERO
    discipline_score: Decimal = ZERO

    adaptability: CompositeScore = field(default_factory=CompositeScore)
    overconfidence: CompositeScore = field(default_factory=CompositeScore)

    pattern_consistency_score: Decimal = ZERO
    pattern_execution_quality: dict[str, Decimal] = field(default_factory=dict)
    pattern_deviation_rate: Decimal = ZERO

    @property
    def adaptability_score(self) -> Decimal:
        return self.adaptability.total

    @property
    def overconfidence_index(self) -> Decimal:
        return self.overconfidence.total

    def to_dict(self) -> dict[str, Any]:
        def groups(d: dict[str, GroupStats]) -> dict[str, Any]:
            return {k: v.to_dict() for k, v in d.items()}

        def ranked(items: tuple[RankedGroup, ...]) -> list[dict[str, Any]]:
            return [r.to_dict() for r in items]

        return {
            "overall": self.overall.to_dict(),
            "by_pattern": groups(self.by_pattern),
            "by_entry_factor": groups(self.by_entry_factor),
            "by_exit_factor": groups(self.by_exit_factor),
            "top_patterns": ranked(self.top_patterns),
            "bottom_patterns": ranked(self.bottom_patterns),
            "top_entry_factors": ranked(self.top_entry_factors),
            "bottom_entry_factors": ranked(self.bottom_entry_factors),
            "top_exit_factors": ranked(self.top_exit_factors),
            "bottom_exit_factors": ranked(self.bottom_exit_factors),
            "greed_based_entry_percentage": str(self.greed_based_entry_percentage),
            "fear_based_exit_percentage": str(self.fear_based_exit_percentage),
            "impulsive_trade_percentage": str(self.impulsive_trade_percentage),
            "discipline_score": str(self.discipline_score),
            "adaptability": self.adaptability.to_dict(),
            "overconfidence": self.overconfidence.to_dict(),
            "pattern_consistency_score": str(self.pattern_consistency_score),
            "pattern_execution_quality": {
                k: str(v) for k, v in self.pattern_execution_quality.items()
            },
            "pattern_deviation_rate": str(self.pattern_deviation_rate),
        }


def rank_groups(
    stats: dict[str, GroupStats], top_n: int
) -> tuple[tuple[RankedGroup, ...], tuple[RankedGroup, ...]]:
    """Top and bottom *top_n* groups by summed P/L.

    Ties keep the groups' first-appearance order.
    """
    items = [RankedGroup(code, s) for code, s in stats.items()]
    best = sorted(items, key=lambda r: r.stats.total_profit_loss, reverse=True)
    worst = sorted(items, key=lambda r: r.stats.total_profit_loss)
    return tuple(best[:top_n]), tuple(worst[:top_n])


def _stats_by_code(
    groups: dict[Category, list[ReconstructedTrade]],
) -> dict[str, GroupStats]:
    return {cat.code: compute_group_stats(trades) for cat, trades in groups.items()}


class PatternCalculator:
    """Behavior pattern and psychology analytics.

    Parameters
    ----------
    config : ScoringConfig | None
        Ranking depth, composite-score group minimum and placeholder
        sub-score constants.
    """

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self._config = config or ScoringConfig()
        self._adaptability = AdaptabilityAnalyzer(self._config)
        self._overconfidence = OverconfidenceAnalyzer(self._config)
        self._consistency = PatternConsistencyAnalyzer()

    def calculate(
        self,
        trades: Sequence[ReconstructedTrade],
        grouping: TradeGrouping,
    ) -> PatternMetrics:
        """*trades* must be the chronological list *grouping* was built from."""
        if not trades:
            return PatternMetrics()

        by_pattern = _stats_by_code(grouping.by_pattern)
        by_entry = _stats_by_code(grouping.by_entry_factor)
        by_exit = _stats_by_code(grouping.by_exit_factor)
        top_n = self._config.top_n
        top_p, bottom_p = rank_groups(by_pattern, top_n)
        top_en, bottom_en = rank_groups(by_entry, top_n)
        top_ex, bottom_ex = rank_groups(by_exit, top_n)

        n = grouping.total_trades
        quality = self._consistency.execution_quality(grouping.by_pattern)

        logger.debug(
            "Pattern metrics over %d trade(s): %d pattern(s), %d entry / %d exit factor(s)",
            n, len(by_pattern), len(by_entry), len(by_exit),
        )

        return PatternMetrics(
            overall=compute_group_stats(trades),
            by_pattern=by_pattern,
            by_entry_factor=by_entry,
            by_exit_factor=by_exit,
            top_patterns=top_p,
            bottom_patterns=bottom_p,
            top_entry_factors=top_en,
            bottom_entry_factors=bottom_en,
            top_exit_factors=top_ex,
            bottom_exit_factors=bottom_ex,
            greed_based_entry_percentage=_pct(
                grouping.greed_based_entries, grouping.trades_with_entry_factors
            ),
            fear_based_exit_percentage=_pct(
                grouping.fear_based_exits, grouping.trades_with_exit_factors
            ),
            impulsive_trade_percentage=_pct(grouping.impulsive_trades, n),
            discipline_score=_pct(
                grouping.disciplined_entries + grouping.disciplined_exits, 2 * n
            ),
            adaptability=self._adaptability.analyze(trades, grouping),
            overconfidence=self._overconfidence.analyze(trades, grouping),
            pattern_consistency_score=self._consistency.consistency_score(grouping.by_pattern),
            pattern_execution_quality={cat.code: q for cat, q in quality.items()},
            pattern_deviation_rate=self._consistency.deviation_rate(trades),
        )


def _pct(count: int, total: int) -> Decimal:
    return quantize(safe_div(Decimal(count) * HUNDRED, total, SCORE_SCALE), SCORE_SCALE)
