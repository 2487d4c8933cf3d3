"""Trade cycle reconstruction.

Converts raw executions into round-trip :class:`ReconstructedTrade`
objects.  Executions are grouped per ``(portfolio_id, symbol)``, sorted
by timestamp (stable), and scanned left to right with a running signed
position counter.  Each time the counter returns to exactly zero the
current cycle is sealed; the next fill starts a fresh cycle whose
direction is determined by that fill alone, so a symbol can flip between
LONG and SHORT across consecutive cycles.  Fills left over when input is
exhausted form a final OPEN trade.

Usage::

    reconstructor = TradeCycleReconstructor()
    trades = reconstructor.reconstruct(executions)
"""

from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Iterable, Sequence

from trade_analytics.core.config import TradeMetricsConfig
from trade_analytics.core.decimals import HUNDRED, ONE, quantize, safe_div
from trade_analytics.core.enums import PositionDirection, Side, TradeStatus
from trade_analytics.core.errors import ReconstructionError
from trade_analytics.core.ids import content_hash
from trade_analytics.core.models import Execution

from .normalize import validate_executions
from .trade import Leg, ReconstructedTrade, TradeMetrics

logger = logging.getLogger(__name__)

_ENTRY_SIDE = {PositionDirection.LONG: Side.BUY, PositionDirection.SHORT: Side.SELL}


def trade_id_for(portfolio_id: str, symbol: str, opening_execution_id: str) -> str:
    """Stable trade id: the same opening fill always yields the same id."""
    return content_hash("trade", portfolio_id, symbol, opening_execution_id)


def direction_for(side: Side) -> PositionDirection:
    """BUY opens a LONG cycle, SELL opens a SHORT cycle."""
    return PositionDirection.LONG if side == Side.BUY else PositionDirection.SHORT


def identify_cycles(executions: Iterable[Execution]) -> list[list[Execution]]:
    """Partition one instrument's executions into position cycles.

    Concatenating the returned cycles reproduces the timestamp-sorted
    input exactly.
    """
    ordered = sorted(executions, key=lambda e: e.timestamp)
    cycles: list[list[Execution]] = []
    current: list[Execution] = []
    position = 0
    opening_side: Side | None = None

    for ex in ordered:
        if not current:
            opening_side = ex.side
        current.append(ex)
        position += ex.quantity if ex.side == opening_side else -ex.quantity
        if position == 0:
            cycles.append(current)
            current = []

    if current:
        cycles.append(current)
    return cycles


def classify(profit_loss: Decimal) -> TradeStatus:
    if profit_loss > 0:
        return TradeStatus.WIN
    if profit_loss < 0:
        return TradeStatus.LOSS
    return TradeStatus.BREAK_EVEN


def compute_trade_metrics(
    direction: PositionDirection,
    entry: Leg,
    exit: Leg,
    assumed_risk_pct: Decimal = Decimal("0.02"),
) -> TradeMetrics:
    """Per-trade P/L, percentages, risk/reward and holding time."""
    if direction == PositionDirection.LONG:
        gross = (exit.average_price - entry.average_price) * entry.quantity
    else:
        gross = (entry.average_price - exit.average_price) * entry.quantity
    profit_loss = quantize(gross - entry.fees - exit.fees)

    pnl_pct = quantize(safe_div(profit_loss, entry.total_value) * HUNDRED)

    risk = quantize(entry.total_value * assumed_risk_pct)
    reward = profit_loss if profit_loss > 0 else quantize(risk * 2)
    if risk > 0 and reward > 0:
        ratio = safe_div(reward, risk)
    else:
        ratio = quantize(ONE)

    held = exit.timestamp - entry.timestamp
    if held < timedelta(0):
        held = timedelta(0)
    seconds = int(held.total_seconds())

    return TradeMetrics(
        profit_loss=profit_loss,
        profit_loss_percentage=pnl_pct,
        return_on_equity=pnl_pct,
        risk_amount=risk,
        reward_amount=reward,
        risk_reward_ratio=ratio,
        holding_days=seconds // 86400,
        holding_hours=(seconds // 3600) % 24,
        holding_minutes=(seconds // 60) % 60,
    )


class TradeCycleReconstructor:
    """Builds round-trip trades from executions.

    Parameters
    ----------
    config : TradeMetricsConfig | None
        Per-trade metric assumptions (risk fraction of entry notional).
    """

    def __init__(self, config: TradeMetricsConfig | None = None) -> None:
        self._config = config or TradeMetricsConfig()

    def reconstruct(self, executions: Iterable[Execution]) -> list[ReconstructedTrade]:
        """Reconstruct every ``(portfolio_id, symbol)`` group independently.

        Groups are emitted in order of first appearance in the input.

        Raises
        ------
        InvalidExecutionError
            If any execution violates the input preconditions.
        """
        checked = validate_executions(executions)
        if not checked:
            return []

        groups: dict[tuple[str, str], list[Execution]] = {}
        for ex in checked:
            groups.setdefault((ex.portfolio_id, ex.symbol), []).append(ex)

        trades: list[ReconstructedTrade] = []
        for (portfolio_id, symbol), group in groups.items():
            cycles = identify_cycles(group)
            for cycle in cycles:
                trades.append(self.reconstruct_cycle(cycle))
            logger.debug(
                "Reconstructed %d cycle(s) for %s in portfolio %s",
                len(cycles), symbol, portfolio_id,
            )

        logger.info(
            "Reconstructed %d trade(s) from %d execution(s) across %d instrument(s)",
            len(trades), len(checked), len(groups),
        )
        return trades

    def reconstruct_cycle(self, cycle: Sequence[Execution]) -> ReconstructedTrade:
        """Build one trade from the fills of a single cycle.

        Raises
        ------
        ReconstructionError
            If the cycle is empty or mixes instruments or portfolios.
        """
        if not cycle:
            raise ReconstructionError("Cannot reconstruct a trade from an empty cycle")
        ordered = sorted(cycle, key=lambda e: e.timestamp)
        first = ordered[0]
        if any(
            e.symbol != first.symbol or e.portfolio_id != first.portfolio_id
            for e in ordered
        ):
            raise ReconstructionError(
                f"Cycle mixes instruments or portfolios (first fill {first.execution_id})"
            )

        direction = direction_for(first.side)
        entry_side = _ENTRY_SIDE[direction]
        entry_fills = [e for e in ordered if e.side == entry_side]
        exit_fills = [e for e in ordered if e.side != entry_side]

        entry = Leg.from_executions(entry_fills)
        exit_leg = Leg.from_executions(exit_fills, closing=True) if exit_fills else None

        if exit_leg is None or exit_leg.quantity != entry.quantity:
            # Partial close is not a completed trade
            status = TradeStatus.OPEN
            metrics = TradeMetrics.zero()
            open_quantity = abs(entry.quantity - (exit_leg.quantity if exit_leg else 0))
            exit_leg = None
        else:
            metrics = compute_trade_metrics(
                direction, entry, exit_leg, self._config.assumed_risk_pct
            )
            status = classify(metrics.profit_loss)
            open_quantity = 0

        return ReconstructedTrade(
            symbol=first.symbol,
            portfolio_id=first.portfolio_id,
            direction=direction,
            status=status,
            entry=entry,
            exit=exit_leg,
            metrics=metrics,
            executions=tuple(ordered),
            trade_id=trade_id_for(first.portfolio_id, first.symbol, first.execution_id),
            open_quantity=open_quantity,
            asset_class=next((e.asset_class for e in ordered if e.asset_class), None),
            strategy=next((e.strategy for e in ordered if e.strategy), None),
        )


def reconstruct(
    executions: Iterable[Execution],
    config: TradeMetricsConfig | None = None,
) -> list[ReconstructedTrade]:
    """Functional wrapper over :class:`TradeCycleReconstructor`."""
    return TradeCycleReconstructor(config).reconstruct(executions)
