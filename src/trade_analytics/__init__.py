"""Trade reconstruction and analytics core.

Two library operations are exposed:

reconstruct          executions -> round-trip trades
compute_analytics    trades -> AnalyticsSummary
"""

from .analytics.summary import (
    AnalyticsEngine,
    AnalyticsSummary,
    compute_analytics,
    reconstruct,
)
from .analytics.trade import Leg, PsychologyData, ReconstructedTrade, TradeMetrics
from .core.models import Execution

__all__ = [
    "AnalyticsEngine",
    "AnalyticsSummary",
    "Execution",
    "Leg",
    "PsychologyData",
    "ReconstructedTrade",
    "TradeMetrics",
    "compute_analytics",
    "reconstruct",
]

__version__ = "0.1.0"
