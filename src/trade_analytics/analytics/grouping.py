"""Grouping of trades by declared behavior pattern and psychology factor.

Built once per analytics run and shared read-only by the pattern,
psychology and scoring calculators.  A trade may sit in several groups.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from trade_analytics.core.taxonomy import Category, EntryPsychology, ExitPsychology

from .trade import ReconstructedTrade

GREED_ENTRY_FACTORS = (EntryPsychology.OVERCONFIDENCE, EntryPsychology.FEAR_OF_MISSING_OUT)
FEAR_EXIT_FACTORS = (ExitPsychology.FEAR, ExitPsychology.PANIC)
DISCIPLINED_ENTRY_FACTORS = (EntryPsychology.FOLLOWING_THE_PLAN, EntryPsychology.DISCIPLINED)
DISCIPLINED_EXIT_FACTORS = (
    ExitPsychology.DISCIPLINE,
    ExitPsychology.TAKING_PROFITS,
    ExitPsychology.CUTTING_LOSSES,
)


def _has_any(categories: Sequence[Category], members: Sequence) -> bool:
    return any(c.matches(m) for c in categories for m in members)


@dataclass(frozen=True)
class TradeGrouping:
    """Category -> trades maps plus the per-trade flag counts.

    Groups keep first-appearance order; trades within a group keep the
    chronological order of the input.
    """

    trades: tuple[ReconstructedTrade, ...] = ()
    by_pattern: dict[Category, list[ReconstructedTrade]] = field(default_factory=dict)
    by_entry_factor: dict[Category, list[ReconstructedTrade]] = field(default_factory=dict)
    by_exit_factor: dict[Category, list[ReconstructedTrade]] = field(default_factory=dict)
    greed_based_entries: int = 0
    fear_based_exits: int = 0
    disciplined_entries: int = 0
    disciplined_exits: int = 0
    impulsive_trades: int = 0

    @property
    def total_trades(self) -> int:
        return len(self.trades)

    @property
    def trades_with_entry_factors(self) -> int:
        return sum(1 for t in self.trades if t.psychology.entry_factors)

    @property
    def trades_with_exit_factors(self) -> int:
        return sum(1 for t in self.trades if t.psychology.exit_factors)


def group_trades(trades: Sequence[ReconstructedTrade]) -> TradeGrouping:
    """Group *trades* (expected in chronological order)."""
    by_pattern: dict[Category, list[ReconstructedTrade]] = {}
    by_entry: dict[Category, list[ReconstructedTrade]] = {}
    by_exit: dict[Category, list[ReconstructedTrade]] = {}
    greed = fear = disc_entry = disc_exit = impulsive = 0

    for trade in trades:
        psych = trade.psychology
        # dict.fromkeys drops duplicate tags on one trade
        for cat in dict.fromkeys(psych.behavior_patterns):
            by_pattern.setdefault(cat, []).append(trade)
        for cat in dict.fromkeys(psych.entry_factors):
            by_entry.setdefault(cat, []).append(trade)
        for cat in dict.fromkeys(psych.exit_factors):
            by_exit.setdefault(cat, []).append(trade)

        if _has_any(psych.entry_factors, GREED_ENTRY_FACTORS):
            greed += 1
        if _has_any(psych.exit_factors, FEAR_EXIT_FACTORS):
            fear += 1
        if _has_any(psych.entry_factors, DISCIPLINED_ENTRY_FACTORS):
            disc_entry += 1
        if _has_any(psych.exit_factors, DISCIPLINED_EXIT_FACTORS):
            disc_exit += 1
        if not _has_any(psych.entry_factors, (EntryPsychology.FOLLOWING_THE_PLAN,)):
            impulsive += 1

    return TradeGrouping(
        trades=tuple(trades),
        by_pattern=by_pattern,
        by_entry_factor=by_entry,
        by_exit_factor=by_exit,
        greed_based_entries=greed,
        fear_based_exits=fear,
        disciplined_entries=disc_entry,
        disciplined_exits=disc_exit,
        impulsive_trades=impulsive,
    )
