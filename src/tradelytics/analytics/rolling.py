"""Rolling-window performance series.

Re-aggregates fixed-size chronological windows of evaluated trades and
projects each window's metrics to one number, producing a trend series
for charts.

The chart cap applied here is a display affordance: an Unbounded profit
factor or any other non-finite value is replaced by a fixed finite number
so a chart axis stays usable. A capped point is not a measurement.
"""

import math
from collections.abc import Callable, Iterable

from tradelytics.analytics.metrics import aggregate
from tradelytics.analytics.models import PerformanceMetrics, ProfitFactor, RollingPoint, TradeInput, TradeRecord
from tradelytics.analytics.normalizer import as_records, round_half_up, sort_chronologically
from tradelytics.analytics.segmentation import FieldSelector, resolve_field_selector, segment_label
from tradelytics.system.config import AnalyticsConfig
from tradelytics.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()

MetricSelector = Callable[[PerformanceMetrics], float | ProfitFactor]

METRIC_SELECTORS: dict[str, MetricSelector] = {
    "profit_factor": lambda m: m.profit_factor,
    "expectancy": lambda m: m.expectancy,
    "win_rate": lambda m: m.win_rate,
    "avg_r": lambda m: m.avg_r,
    "total_r": lambda m: m.total_r,
}


def resolve_metric_selector(selector: str | MetricSelector) -> MetricSelector:
    """Look up a selector by name, or pass a callable through."""
    if callable(selector):
        return selector
    try:
        return METRIC_SELECTORS[selector]
    except KeyError:
        raise ValueError(
            f"Unknown metric '{selector}'. Available: {', '.join(sorted(METRIC_SELECTORS))}"
        ) from None


def to_chart_value(value: float | ProfitFactor, cap: float) -> float:
    """
    Clamp a metric value to something a chart can plot.

    Unbounded and +inf become cap, -inf becomes -cap and NaN becomes 0.
    Finite values are rounded to 2 decimals.
    """
    if isinstance(value, ProfitFactor):
        value = value.as_float(cap)

    if math.isnan(value):
        return 0.0
    if math.isinf(value):
        return cap if value > 0 else -cap
    return round_half_up(value)


def rolling_metric(
    trades: Iterable[TradeInput],
    window_size: int,
    metric_selector: str | MetricSelector,
    *,
    cap: float | None = None,
    config: AnalyticsConfig | None = None,
) -> list[RollingPoint]:
    """
    Compute a metric over a sliding window of evaluated trades.

    Args:
        trades: Normalized records (raw TradeInputs are normalized first)
        window_size: Trades per window (>= 1)
        metric_selector: Name in METRIC_SELECTORS or a callable on PerformanceMetrics
        cap: Stand-in for unbounded values (defaults to config.chart_cap)
        config: Numeric conventions

    Returns:
        One point per window position (offset + window_size). Fewer trades
        than the window give a single whole-set point; no trades give none.

    Raises:
        ValueError: If window_size < 1 or the selector name is unknown

    Example:
        >>> points = rolling_metric(records, 3, "total_r")  # r = [1, -1, 2, 2]
        >>> [(p.position, p.value) for p in points]
        [(3, 2.0), (4, 3.0)]
    """
    if window_size < 1:
        raise ValueError(f"window_size must be >= 1, got {window_size}")

    config = config or AnalyticsConfig()
    selector = resolve_metric_selector(metric_selector)
    cap = config.chart_cap if cap is None else cap

    evaluated = [t for t in sort_chronologically(as_records(trades, config)) if t.is_evaluated]
    total = len(evaluated)

    if total == 0:
        return []

    if total < window_size:
        return [RollingPoint(position=total, value=to_chart_value(selector(aggregate(evaluated)), cap))]

    points = [
        RollingPoint(
            position=offset + window_size,
            value=to_chart_value(selector(aggregate(evaluated[offset : offset + window_size])), cap),
        )
        for offset in range(total - window_size + 1)
    ]

    logger.debug("rolling.series.completed", total_trades=total, window_size=window_size, points=len(points))
    return points


def rolling_metric_by_segment(
    trades: Iterable[TradeInput],
    key: str | FieldSelector,
    window_size: int,
    metric_selector: str | MetricSelector,
    *,
    cap: float | None = None,
    config: AnalyticsConfig | None = None,
) -> dict[str, list[RollingPoint]]:
    """
    Rolling series computed separately for each category of a trade set.

    Used for per-playbook trend views, where each playbook's windows only
    contain that playbook's trades.

    Args:
        trades: Normalized records (raw TradeInputs are normalized first)
        key: Name in segmentation.FIELD_SELECTORS or a callable returning the trade's label
        window_size: Trades per window (>= 1)
        metric_selector: Name in METRIC_SELECTORS or a callable on PerformanceMetrics
        cap: Stand-in for unbounded values (defaults to config.chart_cap)
        config: Numeric conventions

    Returns:
        Label to series, labels in first-seen chronological order. Trades
        without a label are left out; labels with no evaluated trades map
        to an empty series.
    """
    if window_size < 1:
        raise ValueError(f"window_size must be >= 1, got {window_size}")

    selector = resolve_field_selector(key)
    partitions: dict[str, list[TradeRecord]] = {}
    for trade in sort_chronologically(as_records(trades, config)):
        label = segment_label(selector(trade))
        if label is not None:
            partitions.setdefault(label, []).append(trade)

    return {
        label: rolling_metric(members, window_size, metric_selector, cap=cap, config=config)
        for label, members in partitions.items()
    }
