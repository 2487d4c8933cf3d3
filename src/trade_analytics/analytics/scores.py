"""Heuristic behavioral scores.

Two composite 0-100 scores are built from four sub-scores, each capped
at 25 before summing:

    Adaptability            Overconfidence
    ─────────────────────   ─────────────────────────────
    pattern diversity       greed / FOMO entries
    pattern switching       size increase after a win
    recovery after loss     impulsive (off-plan) entries
    market condition *      stop-loss adherence *

Sub-scores marked ``*`` are fixed constants taken from
:class:`ScoringConfig`; they are not derived from trade data.  Neither
composite is statistically validated.

:class:`PatternConsistencyAnalyzer` scores how uniformly each behavior
pattern is executed (spread of entry price, exit price and risk
percentage within the pattern's trades).

All inputs are closed trades in chronological order of entry together
with the :class:`TradeGrouping` built from those same trades.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Sequence

import numpy as np

from trade_analytics.core.config import ScoringConfig
from trade_analytics.core.decimals import HUNDRED, ZERO, clamp, quantize, safe_div, to_decimal
from trade_analytics.core.taxonomy import Category

from .grouping import TradeGrouping
from .trade import ReconstructedTrade

SCORE_SCALE = 2
SUB_SCORE_CAP = Decimal("25")
SCORE_CAP = HUNDRED

_ENTRY_WEIGHT = Decimal("0.4")
_EXIT_WEIGHT = Decimal("0.4")
_RISK_WEIGHT = Decimal("0.2")
_PRICE_MAX_STD = Decimal("0.1")   # 10% spread of normalized price scores zero
_RISK_MAX_STD = Decimal("1")      # 1 percentage point spread scores zero
_THIN_PATTERN_QUALITY = Decimal("50")


def _sub_score(value: Decimal | float) -> Decimal:
    return quantize(clamp(to_decimal(value), ZERO, SUB_SCORE_CAP), SCORE_SCALE)


# ================================================================== #
# Composite score container                                           #
# ================================================================== #

@dataclass(frozen=True)
class CompositeScore:
    """Named sub-scores plus their capped total."""

    components: dict[str, Decimal] = field(default_factory=dict)
    total: Decimal = ZERO

    @classmethod
    def from_components(cls, **components: Decimal) -> CompositeScore:
        raw = sum(components.values(), ZERO)
        total = quantize(clamp(raw, ZERO, SCORE_CAP), SCORE_SCALE)
        return cls(components=dict(components), total=total)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": str(self.total),
            "components": {k: str(v) for k, v in self.components.items()},
        }


# ================================================================== #
# Adaptability                                                        #
# ================================================================== #

class AdaptabilityAnalyzer:
    """Pattern diversity, switching, recovery and a market placeholder."""

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self._config = config or ScoringConfig()

    def analyze(
        self, trades: Sequence[ReconstructedTrade], grouping: TradeGrouping
    ) -> CompositeScore:
        if not trades:
            return CompositeScore()
        return CompositeScore.from_components(
            pattern_diversity=self.pattern_diversity(grouping),
            pattern_switching=self.pattern_switching(trades),
            recovery=self.recovery(trades),
            market_condition=_sub_score(self._config.market_condition_score),
        )

    def pattern_diversity(self, grouping: TradeGrouping) -> Decimal:
        """5 points per distinct profitable pattern.

        Patterns with fewer than ``min_group_size`` trades are not counted.
        """
        profitable = sum(
            1 for group in grouping.by_pattern.values()
            if len(group) >= self._config.min_group_size
            and sum((t.profit_loss for t in group), ZERO) > 0
        )
        return _sub_score(5 * profitable)

    @staticmethod
    def pattern_switching(trades: Sequence[ReconstructedTrade]) -> Decimal:
        """``50 * switches / (n - 1)`` over trades that declare patterns.

        A switch happens when a trade does not carry the pattern currently
        being followed; the trade's first pattern then becomes current.
        """
        tagged = [t for t in trades if t.psychology.behavior_patterns]
        if len(tagged) < 2:
            return _sub_score(ZERO)
        current = tagged[0].psychology.behavior_patterns[0]
        switches = 0
        for trade in tagged[1:]:
            patterns = trade.psychology.behavior_patterns
            if current not in patterns:
                switches += 1
                current = patterns[0]
        rate = Decimal(switches) / (len(tagged) - 1)
        return _sub_score(rate * 50)

    @staticmethod
    def recovery(trades: Sequence[ReconstructedTrade]) -> Decimal:
        """Share of loss-preceded trades that were profitable, scaled to 25."""
        if len(trades) < 2:
            return _sub_score(ZERO)
        possible = sum(1 for t in trades[:-1] if t.profit_loss < 0)
        if possible == 0:
            return _sub_score(SUB_SCORE_CAP)
        recoveries = sum(
            1 for prev, cur in zip(trades, trades[1:])
            if prev.profit_loss < 0 and cur.profit_loss > 0
        )
        return _sub_score(SUB_SCORE_CAP * recoveries / possible)


# ================================================================== #
# Overconfidence                                                      #
# ================================================================== #

class OverconfidenceAnalyzer:
    """Greed entries, sizing after wins, impulsiveness and a stop-loss placeholder."""

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self._config = config or ScoringConfig()

    def analyze(
        self, trades: Sequence[ReconstructedTrade], grouping: TradeGrouping
    ) -> CompositeScore:
        if not trades:
            return CompositeScore()
        return CompositeScore.from_components(
            greed_entries=self.greed_entries(grouping),
            size_increase_after_win=self.size_increase_after_win(trades),
            impulsive_entries=self.impulsive_entries(grouping),
            stop_loss_adherence=_sub_score(self._config.stop_loss_adherence_score),
        )

    @staticmethod
    def greed_entries(grouping: TradeGrouping) -> Decimal:
        pct = safe_div(grouping.greed_based_entries * HUNDRED, grouping.trades_with_entry_factors)
        return _sub_score(pct / 4)

    @staticmethod
    def size_increase_after_win(trades: Sequence[ReconstructedTrade]) -> Decimal:
        """Entry quantity grown right after a winning trade, as % of n - 1."""
        if len(trades) < 2:
            return _sub_score(ZERO)
        increases = sum(
            1 for prev, cur in zip(trades, trades[1:])
            if prev.profit_loss > 0
            and prev.entry is not None and cur.entry is not None
            and cur.entry.quantity > prev.entry.quantity
        )
        pct = Decimal(increases) * HUNDRED / (len(trades) - 1)
        return _sub_score(pct / 4)

    @staticmethod
    def impulsive_entries(grouping: TradeGrouping) -> Decimal:
        pct = safe_div(grouping.impulsive_trades * HUNDRED, grouping.total_trades)
        return _sub_score(pct / 4)


# ================================================================== #
# Pattern consistency                                                 #
# ================================================================== #

def _consistency(values: Sequence[Decimal], max_std: Decimal) -> Decimal:
    """``100 - std / max_std * 100`` floored at 0 (population std)."""
    if len(values) < 2:
        return _THIN_PATTERN_QUALITY
    std = quantize(to_decimal(float(np.std([float(v) for v in values]))), SCORE_SCALE)
    return max(ZERO, HUNDRED - safe_div(std, max_std, SCORE_SCALE) * HUNDRED)


def _normalized(values: Sequence[Decimal]) -> list[Decimal]:
    if not values:
        return []
    avg = safe_div(sum(values, ZERO), len(values), SCORE_SCALE)
    return [safe_div(v, avg, SCORE_SCALE) for v in values]


class PatternConsistencyAnalyzer:
    """Execution uniformity per behavior pattern."""

    def execution_quality(
        self, by_pattern: dict[Category, list[ReconstructedTrade]]
    ) -> dict[Category, Decimal]:
        """0.4 entry + 0.4 exit + 0.2 risk consistency; 50 for thin patterns."""
        quality: dict[Category, Decimal] = {}
        for pattern, group in by_pattern.items():
            if len(group) < 2:
                quality[pattern] = quantize(_THIN_PATTERN_QUALITY, SCORE_SCALE)
                continue
            entry_prices = [t.entry.average_price for t in group if t.entry is not None]
            exit_prices = [t.exit.average_price for t in group if t.exit is not None]
            risk_pcts = [
                safe_div(t.metrics.risk_amount, t.entry_notional, SCORE_SCALE) * HUNDRED
                for t in group if t.entry_notional > 0
            ]
            score = (
                _ENTRY_WEIGHT * _consistency(_normalized(entry_prices), _PRICE_MAX_STD)
                + _EXIT_WEIGHT * _consistency(_normalized(exit_prices), _PRICE_MAX_STD)
                + _RISK_WEIGHT * _consistency(risk_pcts, _RISK_MAX_STD)
            )
            quality[pattern] = quantize(score, SCORE_SCALE)
        return quality

    def consistency_score(
        self, by_pattern: dict[Category, list[ReconstructedTrade]]
    ) -> Decimal:
        """Execution quality averaged over patterns, weighted by trade count."""
        quality = self.execution_quality(by_pattern)
        weight = sum(len(by_pattern[p]) for p in quality)
        weighted = sum((q * len(by_pattern[p]) for p, q in quality.items()), ZERO)
        return safe_div(weighted, weight, SCORE_SCALE)

    @staticmethod
    def deviation_rate(trades: Sequence[ReconstructedTrade]) -> Decimal:
        """% of consecutive tagged trades whose primary pattern changed."""
        tagged = [t for t in trades if t.psychology.behavior_patterns]
        if len(tagged) < 3:
            return quantize(ZERO, SCORE_SCALE)
        changes = sum(
            1 for prev, cur in zip(tagged, tagged[1:])
            if cur.psychology.behavior_patterns[0] != prev.psychology.behavior_patterns[0]
        )
        return safe_div(Decimal(changes) * HUNDRED, len(tagged) - 1, SCORE_SCALE)
