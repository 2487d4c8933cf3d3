"""Core input models.

``Execution`` is the canonical fill model handed to the reconstructor by
the ingestion collaborator.  Range checks (positive quantity, non-negative
price and fees) are not enforced here; they are precondition
checks raised by :func:`trade_analytics.analytics.normalize.validate_executions`
so that callers receive a typed :class:`InvalidExecutionError`.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from .enums import Side
from .ids import new_id


class Execution(BaseModel):
    """A single fill of an order.  Immutable once recorded."""

    execution_id: str = Field(default_factory=new_id)
    portfolio_id: str
    symbol: str
    side: Side
    quantity: int
    price: Decimal
    timestamp: datetime
    fees: Decimal = Decimal("0")

    # Optional context carried onto the reconstructed trade
    asset_class: str | None = None
    strategy: str | None = None

    model_config = {"frozen": True}

    @property
    def notional(self) -> Decimal:
        """``price * quantity``."""
        return self.price * self.quantity
