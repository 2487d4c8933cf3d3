"""Trade reconstruction and metric calculators.

Key components
--------------
TradeCycleReconstructor   Executions -> round-trip ReconstructedTrade objects
PerformanceCalculator     Win rate, profit factor, expectancy, streaks
RiskCalculator            Drawdown, Sharpe / Sortino / Calmar, risk of ruin
DistributionCalculator    Per-bucket P/L and win rate by calendar and context
TimingCalculator          Entry / exit quality from MAE / MFE and their trends
PatternCalculator         Behavior pattern and psychology group stats, scores
AnalyticsEngine           Runs all of the above and returns AnalyticsSummary
"""

from .distribution import DistributionCalculator, DistributionMetrics
from .grouping import TradeGrouping, group_trades
from .normalize import normalize_trades, validate_executions
from .patterns import PatternCalculator, PatternMetrics
from .performance import PerformanceCalculator, PerformanceMetrics
from .reconstructor import TradeCycleReconstructor
from .risk import RiskCalculator, RiskMetrics
from .summary import AnalyticsEngine, AnalyticsSummary
from .timing import TimingCalculator, TimingMetrics
from .trade import Leg, PsychologyData, ReconstructedTrade, TradeMetrics
