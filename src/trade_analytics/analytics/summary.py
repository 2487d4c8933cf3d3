"""Analytics engine and summary container.

The engine is the library entry point: it reconstructs trades from
executions and fans a normalized trade list out to the five metric
calculators.  Every call is pure and synchronous; the only per-call
state is the run id bound for log correlation.

Usage::

    engine = AnalyticsEngine()
    trades = engine.reconstruct(executions)
    summary = engine.compute_analytics(trades)
    print(summary.performance.win_rate, summary.risk.max_drawdown)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Sequence

from trade_analytics.core.config import AnalyticsSettings, load_settings
from trade_analytics.core.models import Execution
from trade_analytics.core.taxonomy import TaxonomyRegistry
from trade_analytics.observability.logger import get_logger, run_context, setup_logging

from .distribution import DistributionCalculator, DistributionMetrics
from .grouping import group_trades
from .normalize import normalize_trades
from .patterns import PatternCalculator, PatternMetrics
from .performance import PerformanceCalculator, PerformanceMetrics
from .reconstructor import TradeCycleReconstructor
from .risk import RiskCalculator, RiskMetrics
from .timing import TimingCalculator, TimingMetrics
from .trade import ReconstructedTrade

logger = get_logger(__name__)


@dataclass(frozen=True)
class AnalyticsSummary:
    """The five metric groups plus the trades they were computed from.

    ``run_id`` identifies the producing run in logs.  It is excluded from
    equality and from :meth:`to_dict`, so two runs over the same trades
    compare and serialise identically.
    """

    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    risk: RiskMetrics = field(default_factory=RiskMetrics)
    distribution: DistributionMetrics = field(default_factory=DistributionMetrics)
    timing: TimingMetrics = field(default_factory=TimingMetrics)
    patterns: PatternMetrics = field(default_factory=PatternMetrics)
    trades: tuple[ReconstructedTrade, ...] = ()
    run_id: str = field(default="", compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "performance": self.performance.to_dict(),
            "risk": self.risk.to_dict(),
            "distribution": self.distribution.to_dict(),
            "timing": self.timing.to_dict(),
            "patterns": self.patterns.to_dict(),
            "trades": [t.to_dict() for t in self.trades],
        }


class AnalyticsEngine:
    """Reconstruction plus the five metric calculators.

    Parameters
    ----------
    settings : AnalyticsSettings | None
        Defaults to ``AnalyticsSettings()`` (environment overrides apply).
    registry : TaxonomyRegistry | None
        Registry used to canonicalise taxonomy codes.  A new one honouring
        ``settings.taxonomy.allow_custom_categories`` is created when omitted.
    """

    def __init__(
        self,
        settings: AnalyticsSettings | None = None,
        registry: TaxonomyRegistry | None = None,
    ) -> None:
        self._settings = settings or AnalyticsSettings()
        self._registry = registry or TaxonomyRegistry(
            allow_custom=self._settings.taxonomy.allow_custom_categories
        )
        s = self._settings
        self._reconstructor = TradeCycleReconstructor(s.trade_metrics)
        self._performance = PerformanceCalculator(s.performance)
        self._risk = RiskCalculator(s.risk)
        self._distribution = DistributionCalculator(s.distribution, self._registry)
        self._timing = TimingCalculator(s.timing)
        self._patterns = PatternCalculator(s.scoring)

    @classmethod
    def from_config(
        cls,
        config_path: str | Path | None = None,
        *,
        configure_logging: bool = False,
    ) -> AnalyticsEngine:
        """Build an engine from a TOML file (plus env overrides).

        With ``configure_logging`` the process-wide structlog setup is
        applied from the ``observability`` section.
        """
        settings = load_settings(config_path)
        if configure_logging:
            setup_logging(
                level=settings.observability.log_level,
                format=settings.observability.log_format,
            )
        return cls(settings)

    @property
    def settings(self) -> AnalyticsSettings:
        return self._settings

    @property
    def registry(self) -> TaxonomyRegistry:
        return self._registry

    # ------------------------------------------------------------------ #
    # Operations                                                           #
    # ------------------------------------------------------------------ #

    def reconstruct(self, executions: Iterable[Execution]) -> list[ReconstructedTrade]:
        return self._reconstructor.reconstruct(executions)

    def compute_analytics(self, trades: Sequence[ReconstructedTrade]) -> AnalyticsSummary:
        with run_context() as run_id:
            ordered = normalize_trades(trades)
            closed = [t for t in ordered if t.is_closed]
            grouping = group_trades(closed)

            logger.info(
                "analytics_run_started",
                trades=len(ordered),
                closed=len(closed),
            )

            summary = AnalyticsSummary(
                performance=self._performance.calculate(ordered),
                risk=self._risk.calculate(closed),
                distribution=self._distribution.calculate(closed),
                timing=self._timing.calculate(closed),
                patterns=self._patterns.calculate(closed, grouping),
                trades=tuple(ordered),
                run_id=run_id,
            )

            logger.info(
                "analytics_run_completed",
                total_pnl=str(summary.performance.total_profit_loss),
                max_drawdown=str(summary.risk.max_drawdown),
            )
        return summary


def reconstruct(executions: Iterable[Execution]) -> list[ReconstructedTrade]:
    """Reconstruct round-trip trades with default settings."""
    return AnalyticsEngine().reconstruct(executions)


def compute_analytics(trades: Sequence[ReconstructedTrade]) -> AnalyticsSummary:
    """Compute the full analytics summary with default settings."""
    return AnalyticsEngine().compute_analytics(trades)
