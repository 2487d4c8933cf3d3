"""Reconstructed round-trip trade: the unit every calculator consumes.

A :class:`ReconstructedTrade` groups the fills of one position cycle
into an entry :class:`Leg` and (once closed) an exit :class:`Leg`, and
carries the derived per-trade :class:`TradeMetrics`.  Instances are
immutable; upstream collaborators attach excursion data, psychology tags
and strategy context through the copy-on-write ``with_*`` helpers.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable

from trade_analytics.core.decimals import ZERO, quantize, safe_div, to_decimal
from trade_analytics.core.enums import PositionDirection, TradeStatus
from trade_analytics.core.ids import new_id
from trade_analytics.core.models import Execution
from trade_analytics.core.taxonomy import Category, Taxonomy, TaxonomyRegistry, codec_for


@dataclass(frozen=True)
class Leg:
    """Entry or exit side of a cycle, summarized as one weighted fill."""

    timestamp: datetime
    average_price: Decimal
    quantity: int
    total_value: Decimal
    fees: Decimal

    @classmethod
    def from_executions(cls, fills: list[Execution], *, closing: bool = False) -> Leg:
        """Aggregate *fills* (already in chronological order).

        The leg timestamp is the first fill for an entry leg and the last
        fill for a closing (exit) leg.
        """
        quantity = sum(f.quantity for f in fills)
        total_value = sum((f.price * f.quantity for f in fills), ZERO)
        fees = sum((f.fees for f in fills), ZERO)
        return cls(
            timestamp=fills[-1].timestamp if closing else fills[0].timestamp,
            average_price=safe_div(total_value, quantity),
            quantity=quantity,
            total_value=total_value,
            fees=fees,
        )


@dataclass(frozen=True)
class TradeMetrics:
    """Derived per-trade figures.  OPEN trades carry all zeros."""

    profit_loss: Decimal = ZERO
    profit_loss_percentage: Decimal = ZERO
    return_on_equity: Decimal = ZERO
    risk_amount: Decimal = ZERO
    reward_amount: Decimal = ZERO
    risk_reward_ratio: Decimal = ZERO
    holding_days: int = 0
    holding_hours: int = 0
    holding_minutes: int = 0

    @classmethod
    def zero(cls) -> TradeMetrics:
        return cls()


@dataclass(frozen=True)
class PsychologyData:
    """Behavioral tags declared for a trade by the journaling collaborator."""

    behavior_patterns: tuple[Category, ...] = ()
    entry_factors: tuple[Category, ...] = ()
    exit_factors: tuple[Category, ...] = ()
    notes: str = ""

    @classmethod
    def from_codes(
        cls,
        registry: TaxonomyRegistry,
        *,
        behavior_patterns: Iterable[Any] = (),
        entry_factors: Iterable[Any] = (),
        exit_factors: Iterable[Any] = (),
        notes: str = "",
    ) -> PsychologyData:
        """Decode raw codes (strings or ``{"code", "description"}`` dicts).

        Unrecognised codes become custom values or land in the UNKNOWN
        bucket, depending on the registry.
        """
        return cls(
            behavior_patterns=codec_for(Taxonomy.BEHAVIOR_PATTERN, registry).decode_many(behavior_patterns),
            entry_factors=codec_for(Taxonomy.ENTRY_PSYCHOLOGY, registry).decode_many(entry_factors),
            exit_factors=codec_for(Taxonomy.EXIT_PSYCHOLOGY, registry).decode_many(exit_factors),
            notes=notes,
        )


@dataclass(frozen=True)
class ReconstructedTrade:
    """One round-trip position.

    Parameters
    ----------
    direction : PositionDirection
        Determined by the first fill of the cycle.
    entry : Leg | None
        Always present for trades built by the reconstructor.  Trades
        assembled by hand without one are dropped by normalization.
    exit : Leg | None
        Absent iff ``status`` is OPEN.
    open_quantity : int
        Net unclosed quantity; zero for closed trades.
    max_adverse_excursion / max_favorable_excursion : Decimal | None
        Non-negative magnitudes supplied by an upstream collaborator.
    """

    symbol: str
    portfolio_id: str
    direction: PositionDirection
    status: TradeStatus
    entry: Leg | None
    exit: Leg | None = None
    metrics: TradeMetrics = field(default_factory=TradeMetrics)
    executions: tuple[Execution, ...] = ()
    trade_id: str = field(default_factory=new_id)
    open_quantity: int = 0
    asset_class: str | None = None
    strategy: str | None = None
    psychology: PsychologyData = field(default_factory=PsychologyData)
    max_adverse_excursion: Decimal | None = None
    max_favorable_excursion: Decimal | None = None

    # ------------------------------------------------------------------ #
    # Convenience accessors                                                #
    # ------------------------------------------------------------------ #

    @property
    def is_closed(self) -> bool:
        return self.status.is_closed

    @property
    def profit_loss(self) -> Decimal:
        return self.metrics.profit_loss

    @property
    def entry_timestamp(self) -> datetime | None:
        return self.entry.timestamp if self.entry else None

    @property
    def exit_timestamp(self) -> datetime | None:
        return self.exit.timestamp if self.exit else None

    @property
    def entry_notional(self) -> Decimal:
        return self.entry.total_value if self.entry else ZERO

    @property
    def holding_period(self) -> timedelta | None:
        """Entry to exit; None while the position is open."""
        if self.entry is None or self.exit is None:
            return None
        return self.exit.timestamp - self.entry.timestamp

    @property
    def holding_hours(self) -> Decimal | None:
        period = self.holding_period
        if period is None:
            return None
        return quantize(to_decimal(period.total_seconds()) / Decimal(3600))

    # ------------------------------------------------------------------ #
    # Copy-on-write helpers                                                #
    # ------------------------------------------------------------------ #

    def with_excursions(
        self,
        mae: Decimal | int | float | None,
        mfe: Decimal | int | float | None,
    ) -> ReconstructedTrade:
        """Attach MAE / MFE.  Signs are dropped; both are stored as magnitudes."""
        return replace(
            self,
            max_adverse_excursion=None if mae is None else abs(to_decimal(mae)),
            max_favorable_excursion=None if mfe is None else abs(to_decimal(mfe)),
        )

    def with_psychology(self, psychology: PsychologyData) -> ReconstructedTrade:
        return replace(self, psychology=psychology)

    def with_context(
        self,
        *,
        strategy: str | None = None,
        asset_class: str | None = None,
    ) -> ReconstructedTrade:
        """Override strategy and/or asset class; None leaves a field as is."""
        return replace(
            self,
            strategy=strategy if strategy is not None else self.strategy,
            asset_class=asset_class if asset_class is not None else self.asset_class,
        )

    # ------------------------------------------------------------------ #
    # Serialisation                                                        #
    # ------------------------------------------------------------------ #

    def to_dict(self) -> dict:
        """Export to a flat dictionary for logging / storage."""
        m = self.metrics
        return {
            "trade_id": self.trade_id,
            "portfolio_id": self.portfolio_id,
            "symbol": self.symbol,
            "direction": self.direction.value,
            "status": self.status.value,
            "asset_class": self.asset_class,
            "strategy": self.strategy,
            "entry_timestamp": _iso(self.entry_timestamp),
            "entry_price": _str(self.entry.average_price if self.entry else None),
            "entry_quantity": self.entry.quantity if self.entry else 0,
            "entry_value": _str(self.entry.total_value if self.entry else None),
            "entry_fees": _str(self.entry.fees if self.entry else None),
            "exit_timestamp": _iso(self.exit_timestamp),
            "exit_price": _str(self.exit.average_price if self.exit else None),
            "exit_quantity": self.exit.quantity if self.exit else 0,
            "exit_value": _str(self.exit.total_value if self.exit else None),
            "exit_fees": _str(self.exit.fees if self.exit else None),
            "open_quantity": self.open_quantity,
            "profit_loss": str(m.profit_loss),
            "profit_loss_percentage": str(m.profit_loss_percentage),
            "return_on_equity": str(m.return_on_equity),
            "risk_amount": str(m.risk_amount),
            "reward_amount": str(m.reward_amount),
            "risk_reward_ratio": str(m.risk_reward_ratio),
            "holding_days": m.holding_days,
            "holding_hours": m.holding_hours,
            "holding_minutes": m.holding_minutes,
            "max_adverse_excursion": _str(self.max_adverse_excursion),
            "max_favorable_excursion": _str(self.max_favorable_excursion),
            "behavior_patterns": _codes(self.psychology.behavior_patterns),
            "entry_factors": _codes(self.psychology.entry_factors),
            "exit_factors": _codes(self.psychology.exit_factors),
            "execution_ids": [e.execution_id for e in self.executions],
        }


def _str(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def _iso(value: datetime | None) -> str | None:
    return None if value is None else value.isoformat()


def _codes(categories: Iterable[Category]) -> list[str]:
    return [c.code for c in categories]
