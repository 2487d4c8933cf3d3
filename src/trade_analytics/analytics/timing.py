"""Entry / exit timing quality from excursion data.

MAE and MFE are attached to trades by an upstream collaborator
(:meth:`ReconstructedTrade.with_excursions`); this module never derives
them.  Scores are on a 0-100 scale:

* entry quality: winners score ``100 * (1 - MAE / (P/L + MAE))``, 100
  when MAE is zero; every non-winner gets a flat low baseline.
* exit quality: ``100 * P/L / MFE`` bounded to [0, 100] when MFE > 0,
  a neutral baseline when MFE is zero.

The trend of each per-trade series is the ordinary least squares slope
against sequence index 1..n.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Sequence

import numpy as np

from trade_analytics.core.config import TimingConfig
from trade_analytics.core.decimals import HUNDRED, ONE, ZERO, clamp, mean, quantize, to_decimal
from trade_analytics.core.enums import TradeStatus

from .trade import ReconstructedTrade

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimingMetrics:
    average_entry_quality: Decimal = ZERO
    average_exit_quality: Decimal = ZERO
    entry_quality_trend: Decimal = ZERO
    exit_quality_trend: Decimal = ZERO
    timing_score: Decimal = ZERO
    entry_scores: tuple[Decimal, ...] = ()
    exit_scores: tuple[Decimal, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "average_entry_quality": str(self.average_entry_quality),
            "average_exit_quality": str(self.average_exit_quality),
            "entry_quality_trend": str(self.entry_quality_trend),
            "exit_quality_trend": str(self.exit_quality_trend),
            "timing_score": str(self.timing_score),
            "entry_scores": [str(s) for s in self.entry_scores],
            "exit_scores": [str(s) for s in self.exit_scores],
        }


def ols_slope(values: Sequence[Decimal]) -> Decimal:
    """Least-squares slope of *values* against x = 1..n; zero below two points."""
    if len(values) < 2:
        return quantize(ZERO)
    y = np.array([float(v) for v in values])
    x = np.arange(1, len(y) + 1, dtype=float)
    slope = np.polyfit(x, y, 1)[0]
    return quantize(to_decimal(float(slope)))


class TimingCalculator:
    """Entry / exit quality scores and their trends.

    Parameters
    ----------
    config : TimingConfig | None
        Baselines for non-winning entries and zero-MFE exits.
    """

    def __init__(self, config: TimingConfig | None = None) -> None:
        self._config = config or TimingConfig()

    def entry_quality(self, trade: ReconstructedTrade) -> Decimal | None:
        """None when the trade carries no MAE."""
        mae = trade.max_adverse_excursion
        if mae is None:
            return None
        if trade.status != TradeStatus.WIN:
            return quantize(self._config.losing_entry_baseline)
        if mae == 0:
            return quantize(HUNDRED)
        score = HUNDRED * (ONE - mae / (trade.profit_loss + mae))
        return quantize(clamp(score, ZERO, HUNDRED))

    def exit_quality(self, trade: ReconstructedTrade) -> Decimal | None:
        """None when the trade carries no MFE."""
        mfe = trade.max_favorable_excursion
        if mfe is None:
            return None
        if mfe <= 0:
            return quantize(self._config.neutral_exit_baseline)
        score = HUNDRED * trade.profit_loss / mfe
        return quantize(clamp(score, ZERO, HUNDRED))

    def calculate(self, trades: Sequence[ReconstructedTrade]) -> TimingMetrics:
        closed = sorted(
            (t for t in trades if t.is_closed and t.entry is not None),
            key=lambda t: t.entry.timestamp,
        )
        entry_scores = [s for s in (self.entry_quality(t) for t in closed) if s is not None]
        exit_scores = [s for s in (self.exit_quality(t) for t in closed) if s is not None]
        if not entry_scores and not exit_scores:
            return TimingMetrics()

        avg_entry = mean(entry_scores)
        avg_exit = mean(exit_scores)
        present = [s for s, series in ((avg_entry, entry_scores), (avg_exit, exit_scores)) if series]

        logger.debug(
            "Timing over %d entry / %d exit score(s)", len(entry_scores), len(exit_scores)
        )

        return TimingMetrics(
            average_entry_quality=avg_entry,
            average_exit_quality=avg_exit,
            entry_quality_trend=ols_slope(entry_scores),
            exit_quality_trend=ols_slope(exit_scores),
            timing_score=mean(present),
            entry_scores=tuple(entry_scores),
            exit_scores=tuple(exit_scores),
        )
