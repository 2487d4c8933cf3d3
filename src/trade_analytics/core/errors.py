"""Custom exception hierarchy for the trade analytics core."""


class TradeAnalyticsError(Exception):
    """Base exception for all trade analytics errors."""


# --- Configuration ---
class ConfigError(TradeAnalyticsError):
    """Invalid or missing configuration."""


# --- Data ---
class DataError(TradeAnalyticsError):
    """Input data error."""


class InvalidExecutionError(DataError):
    """An execution violates a reconstruction precondition."""

    def __init__(self, execution_id: str, reason: str):
        self.execution_id = execution_id
        self.reason = reason
        super().__init__(f"Invalid execution [{execution_id}]: {reason}")


# --- Taxonomy ---
class TaxonomyError(TradeAnalyticsError):
    """A category code that can never be valid."""


# --- Reconstruction ---
class ReconstructionError(TradeAnalyticsError):
    """Internal reconstruction invariant broken."""
