"""Per-group statistics for the pattern and psychology breakdowns.

The performance calculator reuses :func:`expectancy` from here.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable

from trade_analytics.core.decimals import ZERO, mean, percentage, quantize, safe_div
from trade_analytics.core.enums import TradeStatus

from .trade import ReconstructedTrade


@dataclass(frozen=True)
class GroupStats:
    """Frequency, profitability and edge figures for one group of trades.

    ``average_loss`` is reported as a positive magnitude.
    """

    frequency: int = 0
    wins: int = 0
    losses: int = 0
    total_profit_loss: Decimal = ZERO
    win_rate: Decimal = ZERO
    average_win: Decimal = ZERO
    average_loss: Decimal = ZERO
    expectancy: Decimal = ZERO
    risk_reward_ratio: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        return {
            "frequency": self.frequency,
            "wins": self.wins,
            "losses": self.losses,
            "total_profit_loss": str(self.total_profit_loss),
            "win_rate": str(self.win_rate),
            "average_win": str(self.average_win),
            "average_loss": str(self.average_loss),
            "expectancy": str(self.expectancy),
            "risk_reward_ratio": str(self.risk_reward_ratio),
        }


def expectancy(win_count: int, loss_count: int, total: int,
               average_win: Decimal, average_loss: Decimal) -> Decimal:
    """``P(win) * avgWin - P(loss) * avgLoss``; zero for an empty group."""
    if total == 0:
        return quantize(ZERO)
    p_win = Decimal(win_count) / total
    p_loss = Decimal(loss_count) / total
    return quantize(p_win * average_win - p_loss * average_loss)


def compute_group_stats(trades: Iterable[ReconstructedTrade]) -> GroupStats:
    """Stats over *trades*; OPEN trades count towards frequency only."""
    items = list(trades)
    if not items:
        return GroupStats()

    win_pnls = [t.profit_loss for t in items if t.status == TradeStatus.WIN]
    loss_pnls = [abs(t.profit_loss) for t in items if t.status == TradeStatus.LOSS]
    avg_win = mean(win_pnls)
    avg_loss = mean(loss_pnls)
    n = len(items)

    return GroupStats(
        frequency=n,
        wins=len(win_pnls),
        losses=len(loss_pnls),
        total_profit_loss=quantize(sum((t.profit_loss for t in items), ZERO)),
        win_rate=percentage(len(win_pnls), n, scale=2),
        average_win=avg_win,
        average_loss=avg_loss,
        expectancy=expectancy(len(win_pnls), len(loss_pnls), n, avg_win, avg_loss),
        risk_reward_ratio=safe_div(avg_win, avg_loss),
    )
