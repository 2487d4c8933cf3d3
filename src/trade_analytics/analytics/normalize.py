"""Validation and normalization passes run before any computation.

``validate_executions`` enforces the reconstructor's preconditions.
``normalize_trades`` puts a trade list into the canonical order every
calculator relies on and drops trades that cannot be placed on a
timeline, so calculators need no per-call-site null checks on the entry
leg.  Between them they are the only places that raise on bad input.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Sequence

from trade_analytics.core.enums import Side
from trade_analytics.core.errors import DataError, InvalidExecutionError
from trade_analytics.core.models import Execution

from .trade import ReconstructedTrade

logger = logging.getLogger(__name__)


def validate_executions(executions: Iterable[Execution]) -> list[Execution]:
    """Return *executions* as a list, raising on the first invalid fill.

    Raises
    ------
    InvalidExecutionError
        Non-positive quantity, negative price or fees, missing timestamp,
        an unknown side, or timezone-aware and naive timestamps in one batch.
    """
    checked: list[Execution] = []
    aware: bool | None = None
    for ex in executions:
        if ex.side not in (Side.BUY, Side.SELL):
            raise InvalidExecutionError(ex.execution_id, f"unknown side {ex.side!r}")
        if ex.quantity <= 0:
            raise InvalidExecutionError(
                ex.execution_id, f"quantity must be positive, got {ex.quantity}"
            )
        if ex.price < 0:
            raise InvalidExecutionError(
                ex.execution_id, f"price must be non-negative, got {ex.price}"
            )
        if ex.fees < 0:
            raise InvalidExecutionError(
                ex.execution_id, f"fees must be non-negative, got {ex.fees}"
            )
        if ex.timestamp is None:
            raise InvalidExecutionError(ex.execution_id, "missing timestamp")
        if aware is None:
            aware = _is_aware(ex.timestamp)
        elif _is_aware(ex.timestamp) != aware:
            raise InvalidExecutionError(
                ex.execution_id, "timezone-aware and naive timestamps mixed"
            )
        checked.append(ex)
    return checked


def normalize_trades(trades: Sequence[ReconstructedTrade]) -> list[ReconstructedTrade]:
    """Chronological (by entry, stable) list of trades that have an entry leg.

    Raises
    ------
    DataError
        If entry timestamps mix timezone-aware and naive values.
    """
    kept = [t for t in trades if t.entry is not None]
    dropped = len(trades) - len(kept)
    if dropped:
        logger.warning("Dropped %d trade(s) without an entry leg", dropped)
    if len({_is_aware(t.entry.timestamp) for t in kept}) > 1:
        raise DataError("Trades mix timezone-aware and naive entry timestamps")
    return sorted(kept, key=lambda t: t.entry.timestamp)


def _is_aware(ts: datetime) -> bool:
    return ts.tzinfo is not None and ts.utcoffset() is not None
