"""Enumerations used across the trade analytics core."""

from enum import Enum


class Side(str, Enum):
    BUY = "buy"
    SELL = "sell"


class PositionDirection(str, Enum):
    LONG = "long"
    SHORT = "short"


class TradeStatus(str, Enum):
    """Lifecycle / outcome classification of a reconstructed trade."""

    OPEN = "open"
    WIN = "win"
    LOSS = "loss"
    BREAK_EVEN = "break_even"

    @property
    def is_closed(self) -> bool:
        return self is not TradeStatus.OPEN


class DurationClass(str, Enum):
    """Holding-duration buckets, shortest first."""

    INTRADAY_SHORT = "INTRADAY_SHORT"    # < 1h
    INTRADAY_LONG = "INTRADAY_LONG"      # 1h - 8h
    SINGLE_DAY = "SINGLE_DAY"            # 8h - 24h
    LESS_THAN_WEEK = "LESS_THAN_WEEK"    # 1d - 7d
    LESS_THAN_MONTH = "LESS_THAN_MONTH"  # 7d - 30d
    LONG_TERM = "LONG_TERM"              # > 30d


class PositionSizeClass(str, Enum):
    """Entry-notional buckets, smallest first."""

    MICRO = "MICRO"
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"
    EXTRA_LARGE = "EXTRA_LARGE"
