"""Trading performance analytics.

This package turns journaled trades into performance statistics:

1. **Models** (`models.py`): Pydantic data structures
   - TradeInput / TradeRecord: Raw and normalized trades
   - ProfitFactor: Finite or Unbounded profit factor
   - PerformanceMetrics: Aggregate statistics of a trade set
   - EquityPoint, RollingPoint, SegmentBucket: Chart and table feeds

2. **Normalizer** (`normalizer.py`): Direction, outcome, R-multiple,
   duration and cost of discretion, with per-trade data-quality flags

3. **Metrics** (`metrics.py`): Pure aggregation functions
   - aggregate: Full PerformanceMetrics
   - win_rate, profit_factor, expectancy, max_drawdown, adherence, exit efficiency

4. **Calculators** (`calculators.py`): PerformanceAccumulator for
   incremental updates

5. **Series** (`equity.py`, `rolling.py`): Equity curves and rolling-window trends

6. **Segmentation** (`segmentation.py`): Per-category performance buckets

7. **Insights** (`insights.py`): Durations, excursions, psychology,
   calendar P&L, goals, discipline and prop-firm challenge status

Usage:
    >>> from tradelytics.analytics import aggregate, normalize_trades, segment
    >>>
    >>> records = normalize_trades(raw_trades)
    >>> metrics = aggregate(records)
    >>> by_session = segment(records, "session", sort_by="profit_factor")

Architecture:
    - Models: Immutable data structures (Pydantic)
    - Normalizer, metrics, series, segmentation: Stateless pure functions
    - Calculators: Stateful reducer for append-only journals
"""

from tradelytics.analytics.calculators import PerformanceAccumulator
from tradelytics.analytics.equity import EquityCurve, build_equity_curve
from tradelytics.analytics.insights import (
    TIME_RANGES,
    build_psychological_profile,
    calculate_duration_stats,
    calculate_excursion_averages,
    calculate_period_pnl,
    challenge_trades,
    filter_trades,
    format_duration,
    has_discipline_streak,
    monthly_goal_progress,
    prop_firm_status,
    time_range_start,
    total_cost_of_discretion,
)
from tradelytics.analytics.metrics import (
    aggregate,
    calculate_avg_exit_efficiency,
    calculate_avg_rule_adherence,
    calculate_expectancy,
    calculate_max_drawdown,
    calculate_profit_factor,
    calculate_win_rate,
)
from tradelytics.analytics.models import (
    Account,
    DataQuality,
    EmotionalState,
    EquityMode,
    EquityPoint,
    MarketEnvironment,
    PerformanceMetrics,
    ProfitFactor,
    ReasonForExit,
    RollingPoint,
    SegmentBucket,
    StreakSummary,
    TradeDirection,
    TradeInput,
    TradeOutcome,
    TradeRecord,
    TradingSession,
)
from tradelytics.analytics.normalizer import normalize_trade, normalize_trades, sort_chronologically
from tradelytics.analytics.rolling import METRIC_SELECTORS, rolling_metric, rolling_metric_by_segment
from tradelytics.analytics.segmentation import BUCKET_SORT_KEYS, FIELD_SELECTORS, segment
from tradelytics.analytics.streaks import calculate_streaks

__all__ = [
    # Models
    "Account",
    "DataQuality",
    "EmotionalState",
    "EquityMode",
    "EquityPoint",
    "MarketEnvironment",
    "PerformanceMetrics",
    "ProfitFactor",
    "ReasonForExit",
    "RollingPoint",
    "SegmentBucket",
    "StreakSummary",
    "TradeDirection",
    "TradeInput",
    "TradeOutcome",
    "TradeRecord",
    "TradingSession",
    # Normalizer
    "normalize_trade",
    "normalize_trades",
    "sort_chronologically",
    # Metrics (pure functions)
    "aggregate",
    "calculate_win_rate",
    "calculate_profit_factor",
    "calculate_expectancy",
    "calculate_max_drawdown",
    "calculate_avg_rule_adherence",
    "calculate_avg_exit_efficiency",
    "calculate_streaks",
    # Calculators (stateful)
    "PerformanceAccumulator",
    # Series and segmentation
    "EquityCurve",
    "build_equity_curve",
    "METRIC_SELECTORS",
    "rolling_metric",
    "rolling_metric_by_segment",
    "BUCKET_SORT_KEYS",
    "FIELD_SELECTORS",
    "segment",
    # Insights
    "build_psychological_profile",
    "calculate_duration_stats",
    "calculate_excursion_averages",
    "calculate_period_pnl",
    "challenge_trades",
    "filter_trades",
    "format_duration",
    "has_discipline_streak",
    "monthly_goal_progress",
    "prop_firm_status",
    "time_range_start",
    "total_cost_of_discretion",
    "TIME_RANGES",
]
