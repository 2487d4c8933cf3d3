"""Performance metrics: profitability, edge, streaks and holding time.

Computed over closed trades (WIN / LOSS / BREAK_EVEN) unless noted;
OPEN trades only contribute to the ``open_trades`` count.  Every ratio
with a zero denominator is reported as zero, and an empty input yields
an all-zero :class:`PerformanceMetrics`.

Usage::

    calc = PerformanceCalculator()
    metrics = calc.calculate(trades)
    print(metrics.win_rate, metrics.profit_factor)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Sequence

from trade_analytics.core.config import PerformanceConfig
from trade_analytics.core.decimals import ZERO, mean, percentage, quantize, safe_div
from trade_analytics.core.enums import TradeStatus

from .stats import expectancy
from .trade import ReconstructedTrade

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DayResult:
    day: date
    profit_loss: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"day": self.day.isoformat(), "profit_loss": str(self.profit_loss)}


@dataclass(frozen=True)
class PerformanceMetrics:
    """Aggregate profitability figures.

    Loss-side amounts (``average_loss``, ``largest_loss``, ``gross_loss``)
    are positive magnitudes.  ``current_streak`` is positive for a run of
    wins and negative for a run of losses.
    """

    total_trades: int = 0
    closed_trades: int = 0
    open_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    break_even_trades: int = 0

    win_rate: Decimal = ZERO
    total_profit_loss: Decimal = ZERO
    gross_profit: Decimal = ZERO
    gross_loss: Decimal = ZERO
    average_win: Decimal = ZERO
    average_loss: Decimal = ZERO
    largest_win: Decimal = ZERO
    largest_loss: Decimal = ZERO
    win_loss_ratio: Decimal = ZERO
    profit_factor: Decimal = ZERO
    expectancy: Decimal = ZERO
    return_on_capital: Decimal = ZERO

    max_win_streak: int = 0
    max_loss_streak: int = 0
    current_streak: int = 0

    average_holding_hours: Decimal = ZERO
    average_winning_holding_hours: Decimal = ZERO
    average_losing_holding_hours: Decimal = ZERO

    best_day: DayResult | None = None
    worst_day: DayResult | None = None
    trades_per_day: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for name, value in self.__dict__.items():
            if isinstance(value, DayResult):
                out[name] = value.to_dict()
            elif isinstance(value, Decimal):
                out[name] = str(value)
            else:
                out[name] = value
        return out


def longest_streaks(statuses: Sequence[TradeStatus]) -> tuple[int, int]:
    """Longest consecutive WIN and LOSS runs.  BREAK_EVEN ends both."""
    best_win = best_loss = win_run = loss_run = 0
    for status in statuses:
        if status == TradeStatus.WIN:
            win_run += 1
            loss_run = 0
        elif status == TradeStatus.LOSS:
            loss_run += 1
            win_run = 0
        else:
            win_run = loss_run = 0
        best_win = max(best_win, win_run)
        best_loss = max(best_loss, loss_run)
    return best_win, best_loss


def current_streak(statuses: Sequence[TradeStatus]) -> int:
    """Signed length of the trailing WIN (+) or LOSS (-) run."""
    if not statuses or statuses[-1] not in (TradeStatus.WIN, TradeStatus.LOSS):
        return 0
    last = statuses[-1]
    run = 0
    for status in reversed(statuses):
        if status != last:
            break
        run += 1
    return run if last == TradeStatus.WIN else -run


class PerformanceCalculator:
    """Profitability and edge metrics over a trade list.

    Parameters
    ----------
    config : PerformanceConfig | None
        Holds the profit-factor sentinel reported when there are wins
        but no losses.
    """

    def __init__(self, config: PerformanceConfig | None = None) -> None:
        self._config = config or PerformanceConfig()

    def calculate(self, trades: Sequence[ReconstructedTrade]) -> PerformanceMetrics:
        closed = sorted(
            (t for t in trades if t.is_closed and t.entry is not None),
            key=lambda t: t.entry.timestamp,
        )
        open_count = sum(1 for t in trades if not t.is_closed)
        if not closed:
            return PerformanceMetrics(total_trades=len(trades), open_trades=open_count)

        wins = [t for t in closed if t.status == TradeStatus.WIN]
        losses = [t for t in closed if t.status == TradeStatus.LOSS]
        n = len(closed)
        logger.debug("Performance over %d closed trade(s), %d open", n, open_count)

        gross_profit = quantize(sum((t.profit_loss for t in wins), ZERO))
        gross_loss = quantize(sum((abs(t.profit_loss) for t in losses), ZERO))
        total_pnl = quantize(sum((t.profit_loss for t in closed), ZERO))
        avg_win = mean(t.profit_loss for t in wins)
        avg_loss = mean(abs(t.profit_loss) for t in losses)

        if gross_loss > 0:
            profit_factor = safe_div(gross_profit, gross_loss)
        elif gross_profit > 0:
            profit_factor = quantize(self._config.profit_factor_sentinel)
        else:
            profit_factor = quantize(ZERO)

        invested = sum((t.entry_notional for t in closed), ZERO)
        max_win_streak, max_loss_streak = longest_streaks([t.status for t in closed])
        by_exit = sorted(closed, key=lambda t: t.exit_timestamp or t.entry.timestamp)

        best_day, worst_day = self._best_and_worst_day(closed)

        return PerformanceMetrics(
            total_trades=len(trades),
            closed_trades=n,
            open_trades=open_count,
            winning_trades=len(wins),
            losing_trades=len(losses),
            break_even_trades=n - len(wins) - len(losses),
            win_rate=percentage(len(wins), n, scale=2),
            total_profit_loss=total_pnl,
            gross_profit=gross_profit,
            gross_loss=gross_loss,
            average_win=avg_win,
            average_loss=avg_loss,
            largest_win=quantize(max((t.profit_loss for t in wins), default=ZERO)),
            largest_loss=quantize(max((abs(t.profit_loss) for t in losses), default=ZERO)),
            win_loss_ratio=safe_div(avg_win, avg_loss),
            profit_factor=profit_factor,
            expectancy=expectancy(len(wins), len(losses), n, avg_win, avg_loss),
            return_on_capital=percentage(total_pnl, invested),
            max_win_streak=max_win_streak,
            max_loss_streak=max_loss_streak,
            current_streak=current_streak([t.status for t in by_exit]),
            average_holding_hours=_mean_hours(closed),
            average_winning_holding_hours=_mean_hours(wins),
            average_losing_holding_hours=_mean_hours(losses),
            best_day=best_day,
            worst_day=worst_day,
            trades_per_day=self._trades_per_day(closed),
        )

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _best_and_worst_day(
        closed: Sequence[ReconstructedTrade],
    ) -> tuple[DayResult | None, DayResult | None]:
        daily: dict[date, Decimal] = defaultdict(lambda: ZERO)
        for t in closed:
            if t.exit_timestamp is None:
                continue
            daily[t.exit_timestamp.date()] += t.profit_loss
        if not daily:
            return None, None
        days = sorted(daily)
        best = max(days, key=lambda d: daily[d])
        worst = min(days, key=lambda d: daily[d])
        return (
            DayResult(best, quantize(daily[best])),
            DayResult(worst, quantize(daily[worst])),
        )

    @staticmethod
    def _trades_per_day(closed: Sequence[ReconstructedTrade]) -> Decimal:
        """Closed trades per calendar day spanned, first entry to last exit."""
        start = min(t.entry.timestamp for t in closed).date()
        end = max((t.exit_timestamp or t.entry.timestamp) for t in closed).date()
        span_days = (end - start).days + 1
        return safe_div(len(closed), span_days)


def _mean_hours(trades: Sequence[ReconstructedTrade]) -> Decimal:
    hours = [t.holding_hours for t in trades if t.holding_hours is not None]
    return mean(hours)
