"""Risk metrics: drawdown, risk-adjusted ratios, sizing and ruin.

Closed trades are processed in chronological order of entry.  The
cumulative P/L curve starts at zero and its running peak never drops
below zero, so a losing first trade already counts as drawdown.

Daily P/L is bucketed by the calendar day of entry.  Sharpe and Sortino
annualise the mean daily P/L with ``sqrt(trading_days_per_year)``.

The risk-of-ruin figure is a simplified heuristic,
``(loss_rate / win_rate) ** ruin_horizon_trades`` when the win rate
exceeds the loss rate and 1 otherwise.  It ignores position sizing and
payoff asymmetry and is not a rigorous ruin probability.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Sequence

from trade_analytics.core.config import RiskConfig
from trade_analytics.core.decimals import (
    ONE,
    ZERO,
    mean,
    quantize,
    safe_div,
    sample_std,
)
from trade_analytics.core.enums import TradeStatus

from .performance import longest_streaks
from .trade import ReconstructedTrade

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RiskMetrics:
    max_drawdown: Decimal = ZERO
    current_drawdown: Decimal = ZERO
    volatility: Decimal = ZERO
    downside_deviation: Decimal = ZERO
    sharpe_ratio: Decimal = ZERO
    sortino_ratio: Decimal = ZERO
    calmar_ratio: Decimal = ZERO
    annualized_return: Decimal = ZERO
    position_size_consistency: Decimal = ZERO
    average_position_size: Decimal = ZERO
    max_position_size: Decimal = ZERO
    largest_loss: Decimal = ZERO
    max_consecutive_losses: int = 0
    win_rate: Decimal = ZERO
    loss_rate: Decimal = ZERO
    risk_of_ruin: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        return {
            k: (str(v) if isinstance(v, Decimal) else v)
            for k, v in self.__dict__.items()
        }


def drawdown_series(profit_losses: Sequence[Decimal]) -> list[Decimal]:
    """Per-step drawdown of the cumulative P/L curve (peak starts at 0)."""
    cumulative = ZERO
    peak = ZERO
    out: list[Decimal] = []
    for pnl in profit_losses:
        cumulative += pnl
        if cumulative > peak:
            peak = cumulative
        out.append(max(ZERO, peak - cumulative))
    return out


def risk_of_ruin(win_rate: Decimal, loss_rate: Decimal, horizon: int) -> Decimal:
    """Simplified ruin heuristic; 1 unless wins outnumber losses."""
    if win_rate <= loss_rate or win_rate == 0:
        return quantize(ONE)
    return quantize((loss_rate / win_rate) ** horizon)


def annualised_ratio(average: Decimal, deviation: Decimal, periods: int) -> Decimal:
    """``average / deviation * sqrt(periods)``, rounded once; zero without spread."""
    if deviation <= 0:
        return quantize(ZERO)
    return quantize(average / deviation * Decimal(periods).sqrt())


class RiskCalculator:
    """Drawdown, volatility and ratio metrics over closed trades.

    Parameters
    ----------
    config : RiskConfig | None
        Annualisation period and ruin horizon.
    """

    def __init__(self, config: RiskConfig | None = None) -> None:
        self._config = config or RiskConfig()

    def calculate(self, trades: Sequence[ReconstructedTrade]) -> RiskMetrics:
        closed = sorted(
            (t for t in trades if t.is_closed and t.entry is not None),
            key=lambda t: t.entry.timestamp,
        )
        if not closed:
            return RiskMetrics()

        pnls = [t.profit_loss for t in closed]
        drawdowns = drawdown_series(pnls)
        max_dd = quantize(max(drawdowns))

        daily = self.daily_profit_loss(closed)
        daily_values = [daily[d] for d in sorted(daily)]
        avg_daily = mean(daily_values)
        volatility = sample_std(daily_values)
        downside = sample_std([v for v in daily_values if v < 0])

        periods = self._config.trading_days_per_year
        annualized_return = quantize(avg_daily * periods)

        sharpe = annualised_ratio(avg_daily, volatility, periods)
        sortino = annualised_ratio(avg_daily, downside, periods)
        calmar = safe_div(annualized_return, max_dd)

        sizes = [t.entry_notional for t in closed]
        n = len(closed)
        wins = sum(1 for t in closed if t.status == TradeStatus.WIN)
        losses = sum(1 for t in closed if t.status == TradeStatus.LOSS)
        win_rate = safe_div(wins, n)
        loss_rate = safe_div(losses, n)
        _, max_loss_streak = longest_streaks([t.status for t in closed])

        logger.debug(
            "Risk over %d closed trade(s) across %d day(s): max_dd=%s",
            n, len(daily_values), max_dd,
        )

        return RiskMetrics(
            max_drawdown=max_dd,
            current_drawdown=quantize(drawdowns[-1]),
            volatility=volatility,
            downside_deviation=downside,
            sharpe_ratio=sharpe,
            sortino_ratio=sortino,
            calmar_ratio=calmar,
            annualized_return=annualized_return,
            position_size_consistency=sample_std(sizes),
            average_position_size=mean(sizes),
            max_position_size=quantize(max(sizes)),
            largest_loss=quantize(max((abs(p) for p in pnls if p < 0), default=ZERO)),
            max_consecutive_losses=max_loss_streak,
            win_rate=win_rate,
            loss_rate=loss_rate,
            risk_of_ruin=risk_of_ruin(win_rate, loss_rate, self._config.ruin_horizon_trades),
        )

    @staticmethod
    def daily_profit_loss(trades: Sequence[ReconstructedTrade]) -> dict[date, Decimal]:
        """Summed P/L per calendar day of entry."""
        daily: dict[date, Decimal] = defaultdict(lambda: ZERO)
        for t in trades:
            if t.entry is None:
                continue
            daily[t.entry.timestamp.date()] += t.profit_loss
        return dict(daily)
