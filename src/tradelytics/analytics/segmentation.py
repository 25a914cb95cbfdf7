"""Categorical performance segmentation.

Partitions a trade set by a categorical key (market environment, session,
weekday, emotion, asset, playbook, ...) and aggregates each partition on
its own. Partitions are independent of each other.

Usage:
    >>> from tradelytics.analytics.segmentation import segment
    >>>
    >>> buckets = segment(records, "session", sort_by="total_r")
    >>> [(b.label, b.trade_count) for b in buckets]
    [('NY Open', 12), ('London Open', 8)]
"""

from collections.abc import Callable, Hashable, Iterable
from enum import Enum

from tradelytics.analytics.metrics import aggregate
from tradelytics.analytics.models import SegmentBucket, TradeInput, TradeRecord
from tradelytics.analytics.normalizer import as_records, sort_chronologically
from tradelytics.system.config import AnalyticsConfig
from tradelytics.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()

FieldSelector = Callable[[TradeRecord], Hashable | None]
BucketSortKey = Callable[[SegmentBucket], object]

# Sunday-first, as journals label weeks
WEEKDAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def weekday_label(trade: TradeRecord) -> str:
    """Weekday of the entry, Sun..Sat."""
    return WEEKDAY_LABELS[(trade.entry_timestamp.weekday() + 1) % 7]


def segment_label(value: Hashable | None) -> str | None:
    """Display label of a selector value; None and "" mean no category."""
    if value is None or value == "":
        return None
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


FIELD_SELECTORS: dict[str, FieldSelector] = {
    "market_environment": lambda t: t.market_environment,
    "session": lambda t: t.session,
    "weekday": weekday_label,
    "emotion": lambda t: t.emotion_pre_trade,
    "asset": lambda t: t.asset,
    "playbook": lambda t: t.playbook_id,
    "exit_reason": lambda t: t.reason_for_exit,
    "direction": lambda t: t.direction,
    "account": lambda t: t.account_id,
}

BUCKET_SORT_KEYS: dict[str, BucketSortKey] = {
    "profit_factor": lambda b: b.metrics.profit_factor.sort_key,
    "total_r": lambda b: b.metrics.total_r,
    "expectancy": lambda b: b.metrics.expectancy,
    "win_rate": lambda b: b.metrics.win_rate,
    "avg_r": lambda b: b.metrics.avg_r,
    "trade_count": lambda b: b.trade_count,
    "label": lambda b: b.label,
}


def resolve_field_selector(key: str | FieldSelector) -> FieldSelector:
    """Look up a field selector by name, or pass a callable through."""
    if callable(key):
        return key
    try:
        return FIELD_SELECTORS[key]
    except KeyError:
        raise ValueError(f"Unknown segment key '{key}'. Available: {', '.join(sorted(FIELD_SELECTORS))}") from None


def _resolve_sort_key(sort_by: str | BucketSortKey) -> BucketSortKey:
    if callable(sort_by):
        return sort_by
    try:
        return BUCKET_SORT_KEYS[sort_by]
    except KeyError:
        raise ValueError(f"Unknown sort key '{sort_by}'. Available: {', '.join(sorted(BUCKET_SORT_KEYS))}") from None


def segment(
    trades: Iterable[TradeInput],
    key: str | FieldSelector,
    allowed_values: Iterable[Hashable] | None = None,
    *,
    sort_by: str | BucketSortKey | None = None,
    descending: bool = True,
    keep_empty: bool = False,
    count_skipped: bool = False,
    config: AnalyticsConfig | None = None,
) -> list[SegmentBucket]:
    """
    Aggregate each categorical partition of a trade set.

    Args:
        trades: Normalized records (raw TradeInputs are normalized first)
        key: Name in FIELD_SELECTORS or a callable returning the trade's label
            (None puts the trade in no partition)
        allowed_values: Domain to iterate, in order; labels outside it are ignored.
            Without it the domain is the observed labels in first-seen
            chronological order.
        sort_by: None keeps domain order; otherwise a name in BUCKET_SORT_KEYS
            or a callable on SegmentBucket
        descending: Sort direction when sort_by is given
        keep_empty: Keep partitions without evaluated trades (with empty metrics)
        count_skipped: Passed through to aggregate()
        config: Numeric conventions

    Returns:
        List of SegmentBucket

    Raises:
        ValueError: If key or sort_by names an unknown selector
    """
    selector = resolve_field_selector(key)
    records = sort_chronologically(as_records(trades, config))

    partitions: dict[str, list[TradeRecord]] = {}
    for trade in records:
        label = segment_label(selector(trade))
        if label is not None:
            partitions.setdefault(label, []).append(trade)

    if allowed_values is not None:
        domain = list(dict.fromkeys(lbl for lbl in (segment_label(v) for v in allowed_values) if lbl is not None))
    else:
        domain = list(partitions)

    buckets: list[SegmentBucket] = []
    for label in domain:
        metrics = aggregate(partitions.get(label, []), count_skipped=count_skipped, config=config)
        if metrics.total_trades == 0 and not keep_empty:
            continue
        buckets.append(SegmentBucket(label=label, metrics=metrics, trade_count=metrics.total_trades))

    if sort_by is not None:
        buckets.sort(key=_resolve_sort_key(sort_by), reverse=descending)

    logger.debug(
        "segmentation.completed",
        key=key if isinstance(key, str) else getattr(key, "__name__", "custom"),
        buckets=len(buckets),
        total_trades=len(records),
    )
    return buckets
