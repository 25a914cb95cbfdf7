"""Trade normalization.

Derives direction, outcome, R-multiple, holding time and cost of discretion
from the raw prices and timestamps of a journaled trade.

The normalizer never raises for bad domain data. Problems are recorded on
the returned record as a DataQuality tag and the R-dependent fields are left
as None, so downstream aggregates can skip the trade for the metrics it
would corrupt.

Usage:
    >>> from datetime import datetime
    >>> from tradelytics.analytics.models import TradeInput
    >>> from tradelytics.analytics.normalizer import normalize_trade
    >>>
    >>> record = normalize_trade(
    ...     TradeInput(
    ...         entry_price=100.0,
    ...         stop_loss_price=95.0,
    ...         exit_price=110.0,
    ...         entry_timestamp=datetime(2025, 1, 6, 9, 30),
    ...         exit_timestamp=datetime(2025, 1, 6, 11, 0),
    ...     )
    ... )
    >>> record.direction, record.r_multiple, record.outcome
    (<TradeDirection.LONG: 'Long'>, 2.0, <TradeOutcome.WIN: 'Win'>)
"""

import math
from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from tradelytics.analytics.models import DataQuality, TradeDirection, TradeInput, TradeOutcome, TradeRecord
from tradelytics.system.config import AnalyticsConfig
from tradelytics.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()

_MILLISECOND = timedelta(milliseconds=1)


def round_half_up(value: float, precision: int = 2) -> float:
    """
    Round to `precision` decimals with ties away from zero.

    The tie is judged on the exact binary value, so 0.125 rounds to 0.13
    while 1.005 (stored just below) rounds to 1.0. Never returns -0.0.

    Example:
        >>> round_half_up(0.125), round_half_up(-0.625)
        (0.13, -0.63)
    """
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-precision)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)) + 0.0


def infer_direction(entry_price: float | None, stop_loss_price: float | None, exit_price: float | None) -> TradeDirection | None:
    """
    Infer the side of a trade from its prices.

    The stop is the primary signal (a stop below entry means Long). When the
    stop is unknown, a closed trade's exit decides. Without an entry price
    the direction is undefined.
    """
    if entry_price is None or entry_price <= 0:
        return None

    if stop_loss_price is not None and stop_loss_price > 0:
        return TradeDirection.LONG if stop_loss_price < entry_price else TradeDirection.SHORT

    if exit_price is not None:
        return TradeDirection.LONG if exit_price > entry_price else TradeDirection.SHORT

    return None


def classify_outcome(r_multiple: float, breakeven_band: float = 0.05) -> TradeOutcome:
    """
    Classify an R-multiple using a neutral band around zero.

    Args:
        r_multiple: Realized R
        breakeven_band: Half-width of the Breakeven band

    Returns:
        Win above +band, Loss below -band, Breakeven otherwise

    Example:
        >>> classify_outcome(0.04)
        <TradeOutcome.BREAKEVEN: 'Breakeven'>
        >>> classify_outcome(-0.06)
        <TradeOutcome.LOSS: 'Loss'>
    """
    if r_multiple > breakeven_band:
        return TradeOutcome.WIN
    if r_multiple < -breakeven_band:
        return TradeOutcome.LOSS
    return TradeOutcome.BREAKEVEN


def calculate_r_multiple(
    entry_price: float,
    stop_loss_price: float,
    exit_price: float,
    direction: TradeDirection,
    precision: int = 2,
) -> float:
    """
    Calculate the realized R-multiple of a closed trade.

    A zero-risk trade (stop at entry) has no defined R and resolves to 0.

    Example:
        >>> calculate_r_multiple(100.0, 105.0, 90.0, TradeDirection.SHORT)
        2.0
    """
    risk_per_unit = abs(entry_price - stop_loss_price)
    if risk_per_unit == 0:
        return 0.0

    pnl_per_unit = exit_price - entry_price
    r_multiple = pnl_per_unit / risk_per_unit
    if direction == TradeDirection.SHORT:
        r_multiple = -r_multiple

    return round_half_up(r_multiple, precision)


def calculate_duration_ms(entry_timestamp: datetime, exit_timestamp: datetime | None) -> int | None:
    """Holding time in whole milliseconds, or None when unknown or out of order."""
    if exit_timestamp is None or exit_timestamp < entry_timestamp:
        return None
    return (exit_timestamp - entry_timestamp) // _MILLISECOND


def _has_valid_prices(raw: TradeInput) -> bool:
    return (
        raw.entry_price is not None
        and raw.entry_price > 0
        and raw.stop_loss_price is not None
        and raw.stop_loss_price > 0
    )


def _coerce_input(raw: TradeInput | Mapping[str, Any]) -> TradeInput:
    if isinstance(raw, TradeRecord):
        return raw.to_input()
    if isinstance(raw, TradeInput):
        return raw
    return TradeInput.model_validate(raw)


def normalize_trade(raw: TradeInput | Mapping[str, Any], config: AnalyticsConfig | None = None) -> TradeRecord:
    """
    Build a TradeRecord with every derived field computed from the inputs.

    Args:
        raw: Caller-supplied trade (a TradeRecord is re-normalized from its inputs)
        config: Numeric conventions (defaults when omitted)

    Returns:
        Normalized record. quality is InvalidPriceData for missing or
        non-positive entry/stop prices and MissingExitData when only one of
        exit_price/exit_timestamp is present; R-dependent fields are None then.
    """
    config = config or AnalyticsConfig()
    trade = _coerce_input(raw)

    direction = infer_direction(trade.entry_price, trade.stop_loss_price, trade.exit_price)
    has_exit_price = trade.exit_price is not None
    has_exit_timestamp = trade.exit_timestamp is not None

    quality = DataQuality.VALID
    if not _has_valid_prices(trade):
        quality = DataQuality.INVALID_PRICE_DATA
    elif has_exit_price != has_exit_timestamp:
        quality = DataQuality.MISSING_EXIT_DATA

    duration_ms = None
    if has_exit_price and has_exit_timestamp:
        duration_ms = calculate_duration_ms(trade.entry_timestamp, trade.exit_timestamp)
        if duration_ms is None:
            logger.debug(
                "normalizer.exit_before_entry",
                trade_id=trade.trade_id,
                entry_timestamp=trade.entry_timestamp.isoformat(),
                exit_timestamp=str(trade.exit_timestamp),
            )

    r_multiple = None
    outcome = None
    entry, stop, exit_price = trade.entry_price, trade.stop_loss_price, trade.exit_price
    if (
        quality == DataQuality.VALID
        and entry is not None
        and stop is not None
        and exit_price is not None
        and has_exit_timestamp
        and direction is not None
    ):
        r_multiple = calculate_r_multiple(
            entry,
            stop,
            exit_price,
            direction,
            precision=config.r_precision,
        )
        outcome = classify_outcome(r_multiple, config.breakeven_band)

    cost_of_discretion = None
    if r_multiple is not None and trade.system_pnl_r is not None:
        cost_of_discretion = round_half_up(trade.system_pnl_r - r_multiple, config.r_precision)

    if quality != DataQuality.VALID:
        logger.debug("normalizer.trade_flagged", trade_id=trade.trade_id, quality=quality.value)

    record = TradeRecord(
        **trade.model_dump(),
        direction=direction,
        outcome=outcome,
        r_multiple=r_multiple,
        trade_duration_ms=duration_ms,
        cost_of_discretion_r=cost_of_discretion,
        quality=quality,
    )
    record._normalized = True
    return record


def normalize_trades(
    raws: Iterable[TradeInput | Mapping[str, Any]], config: AnalyticsConfig | None = None
) -> list[TradeRecord]:
    """Normalize a collection of trades, preserving input order."""
    config = config or AnalyticsConfig()
    return [normalize_trade(raw, config) for raw in raws]


def ensure_record(trade: TradeInput, config: AnalyticsConfig | None = None) -> TradeRecord:
    """
    Return the trade as a normalizer-built record.

    Records from normalize_trade() pass through unchanged. Raw inputs and
    records constructed by hand are normalized, so derived fields supplied
    by a caller are never used.
    """
    if isinstance(trade, TradeRecord) and trade.is_normalized:
        return trade
    return normalize_trade(trade, config)


def as_records(trades: Iterable[TradeInput], config: AnalyticsConfig | None = None) -> list[TradeRecord]:
    """Apply ensure_record() to every trade."""
    return [ensure_record(trade, config) for trade in trades]


def chronological_key(trade: TradeRecord) -> tuple:
    """
    Total order used wherever chronology matters.

    Entry time first; exit time, trade id and R break ties so the order
    never depends on the order the caller supplied.
    """
    return (
        trade.entry_timestamp,
        trade.exit_timestamp is None,
        trade.exit_timestamp or trade.entry_timestamp,
        trade.trade_id or "",
        trade.r_multiple if trade.r_multiple is not None else 0.0,
    )


def sort_chronologically(trades: Iterable[TradeRecord]) -> list[TradeRecord]:
    """Return trades ordered by chronological_key (input is not modified)."""
    return sorted(trades, key=chronological_key)
