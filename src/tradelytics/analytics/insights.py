"""Journal insights.

Smaller derived figures shown next to the core metrics in a trading
journal: holding times, excursions, psychology, cost of discretion,
calendar P&L, monthly goal tracking, discipline streaks and prop-firm
challenge standing.
"""

import math
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta, timezone
from typing import Literal

from tradelytics.analytics.metrics import aggregate
from tradelytics.analytics.models import (
    Account,
    DurationStats,
    ExcursionSummary,
    GoalProgress,
    LabelCount,
    PerformanceMetrics,
    PeriodPnl,
    PropFirmStatus,
    PsychologicalProfile,
    TradeInput,
    TradeRecord,
    to_naive_utc,
)
from tradelytics.analytics.normalizer import as_records, round_half_up, sort_chronologically
from tradelytics.system.config import AnalyticsConfig

PeriodType = Literal["daily", "weekly", "monthly"]

TIME_RANGES = ("Today", "This Week", "This Month", "This Quarter", "This Year", "All Time")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_duration(ms: float | None) -> str:
    """
    Human-readable holding time using the two largest units.

    Example:
        >>> format_duration(183_600_000)
        '2d 3h'
        >>> format_duration(250_000)
        '4m 10s'
        >>> format_duration(None)
        'N/A'
    """
    if ms is None or math.isnan(ms) or ms < 0:
        return "N/A"

    seconds = int(ms // 1000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)

    if days > 0:
        return f"{days}d {hours}h"
    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def calculate_duration_stats(trades: Iterable[TradeRecord]) -> DurationStats:
    """Average, shortest and longest holding time over trades with a known duration."""
    durations = [t.trade_duration_ms for t in trades if t.trade_duration_ms is not None and t.trade_duration_ms >= 0]
    if not durations:
        return DurationStats()

    avg_ms = sum(durations) / len(durations)
    min_ms = min(durations)
    max_ms = max(durations)
    return DurationStats(
        count=len(durations),
        avg_ms=avg_ms,
        min_ms=min_ms,
        max_ms=max_ms,
        avg_formatted=format_duration(avg_ms),
        min_formatted=format_duration(min_ms),
        max_formatted=format_duration(max_ms),
    )


def calculate_excursion_averages(trades: Iterable[TradeRecord]) -> ExcursionSummary:
    """Mean MFE and MAE, each over the trades that recorded it."""
    trades = list(trades)
    mfes = [t.mfe for t in trades if t.mfe is not None]
    maes = [t.mae for t in trades if t.mae is not None]
    return ExcursionSummary(
        avg_mfe=sum(mfes) / len(mfes) if mfes else 0.0,
        avg_mae=sum(maes) / len(maes) if maes else 0.0,
        mfe_count=len(mfes),
        mae_count=len(maes),
    )


def build_psychological_profile(trades: Iterable[TradeRecord], top_n: int = 3) -> PsychologicalProfile:
    """
    Most frequent pre-trade emotions and broken rules.

    Counts are descending; ties keep first-seen chronological order.
    """
    ordered = sort_chronologically(trades)
    moods = Counter(t.emotion_pre_trade.value for t in ordered if t.emotion_pre_trade is not None)
    mistakes = Counter(
        t.mistake_rule_broken.strip() for t in ordered if t.mistake_rule_broken and t.mistake_rule_broken.strip()
    )

    return PsychologicalProfile(
        common_moods=[LabelCount(label=label, count=count) for label, count in moods.most_common(top_n)],
        common_mistakes=[LabelCount(label=label, count=count) for label, count in mistakes.most_common(top_n)],
    )


def total_cost_of_discretion(trades: Iterable[TradeRecord]) -> float:
    """Summed cost of discretion in R; negative means the trader beat the mechanical exits."""
    return round_half_up(sum(t.cost_of_discretion_r for t in trades if t.cost_of_discretion_r is not None))


def _period_key(timestamp: datetime, period: PeriodType) -> str:
    if period == "daily":
        return timestamp.strftime("%Y-%m-%d")
    if period == "weekly":
        year, week, _ = timestamp.isocalendar()
        return f"{year}-W{week:02d}"
    return timestamp.strftime("%Y-%m")


def calculate_period_pnl(
    trades: Iterable[TradeRecord],
    period: PeriodType,
    account: Account | None = None,
) -> list[PeriodPnl]:
    """
    R result per calendar period of the entry time, chronologically ordered.

    Args:
        trades: Normalized records; only evaluated trades are counted
        period: "daily", "weekly" (ISO weeks) or "monthly"
        account: When given, currency P&L is added per period

    Raises:
        ValueError: If period is not one of the supported types
    """
    if period not in ("daily", "weekly", "monthly"):
        raise ValueError(f"Unknown period '{period}'. Use daily, weekly or monthly")

    totals: dict[str, list[float]] = {}
    for trade in sort_chronologically(trades):
        if trade.r_multiple is None:
            continue
        bucket = totals.setdefault(_period_key(trade.entry_timestamp, period), [0.0, 0, 0.0])
        bucket[0] += trade.r_multiple
        bucket[1] += 1
        if account is not None:
            bucket[2] += trade.r_multiple * account.initial_balance * trade.risk_percentage / 100.0

    return [
        PeriodPnl(
            period=key,
            period_type=period,
            total_r=round_half_up(total_r),
            trade_count=int(count),
            total_pnl_currency=round_half_up(pnl) if account is not None else None,
        )
        for key, (total_r, count, pnl) in totals.items()
    ]


def monthly_goal_progress(
    trades: Iterable[TradeRecord],
    target_r: float | None = None,
    as_of: datetime | None = None,
    config: AnalyticsConfig | None = None,
) -> GoalProgress:
    """
    R achieved in the calendar month of as_of against a monthly target.

    Args:
        trades: Normalized records
        target_r: Monthly R target (defaults to config.monthly_r_goal)
        as_of: Reference time (defaults to now)
        config: Numeric conventions
    """
    config = config or AnalyticsConfig()
    target = config.monthly_r_goal if target_r is None else target_r
    as_of = to_naive_utc(as_of) or _utc_now()

    month_start = as_of.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    next_month = (month_start + timedelta(days=32)).replace(day=1)

    achieved = round_half_up(
        sum(t.r_multiple for t in trades if t.r_multiple is not None and month_start <= t.entry_timestamp < next_month)
    )
    progress = achieved / target * 100.0 if target > 0 else 0.0

    return GoalProgress(
        month=month_start.strftime("%Y-%m"),
        target_r=target,
        achieved_r=achieved,
        progress_pct=round_half_up(progress),
        reached=target > 0 and achieved >= target,
    )


def has_discipline_streak(
    trades: Iterable[TradeRecord],
    threshold: int | None = None,
    lookback: int | None = None,
    config: AnalyticsConfig | None = None,
) -> bool:
    """
    True when each of the last `lookback` trades scored at least `threshold` on rule adherence.

    Fewer than `lookback` trades never make a streak; an unscored trade breaks it.
    """
    config = config or AnalyticsConfig()
    threshold = config.discipline_threshold if threshold is None else threshold
    lookback = config.discipline_lookback if lookback is None else lookback
    if lookback < 1:
        raise ValueError(f"lookback must be >= 1, got {lookback}")

    recent = sort_chronologically(trades)[-lookback:]
    if len(recent) < lookback:
        return False
    return all((t.rule_adherence_score or 0) >= threshold for t in recent)


def prop_firm_status(
    account: Account,
    metrics: PerformanceMetrics | None = None,
    as_of: datetime | None = None,
    *,
    trades: Iterable[TradeInput] | None = None,
    config: AnalyticsConfig | None = None,
) -> PropFirmStatus | None:
    """
    Standing of a prop-firm challenge account.

    Total drawdown is the R-based max_drawdown_r of the challenge metrics.

    Args:
        account: Account metadata
        metrics: Precomputed metrics of the challenge trades
        as_of: Reference time for days remaining (defaults to now)
        trades: Journal trades; used when metrics is omitted, restricted to
            the account's trades inside the challenge window
        config: Numeric conventions for normalizing trades

    Returns:
        PropFirmStatus, or None for accounts that are not challenge accounts

    Raises:
        ValueError: If neither metrics nor trades is given for a challenge account
    """
    if not account.is_prop_firm_challenge:
        return None

    if metrics is None:
        if trades is None:
            raise ValueError("prop_firm_status() needs either metrics or trades")
        metrics = aggregate(challenge_trades(account, as_records(trades, config)), config=config)

    current_balance = account.current_balance if account.current_balance is not None else account.initial_balance
    profit_pct = 0.0
    if account.initial_balance > 0:
        profit_pct = (current_balance - account.initial_balance) / account.initial_balance * 100.0
    profit_pct = round_half_up(profit_pct)

    drawdown_pct = round_half_up(metrics.max_drawdown_r)
    target = account.prop_firm_profit_target_percent
    max_drawdown = account.prop_firm_max_total_drawdown_percent
    max_daily = account.prop_firm_max_daily_loss_percent
    highest_daily = account.prop_firm_highest_daily_loss_encountered_percent

    days_remaining = None
    if account.prop_firm_challenge_end_date is not None:
        as_of = to_naive_utc(as_of) or _utc_now()
        days_remaining = max(0, (account.prop_firm_challenge_end_date.date() - as_of.date()).days)

    return PropFirmStatus(
        current_profit_percent=profit_pct,
        profit_target_percent=target,
        target_reached=target is not None and profit_pct >= target,
        current_total_drawdown_percent=drawdown_pct,
        max_total_drawdown_percent=max_drawdown,
        drawdown_breached=max_drawdown is not None and drawdown_pct >= max_drawdown,
        daily_loss_breached=max_daily is not None and highest_daily is not None and highest_daily >= max_daily,
        days_remaining=days_remaining,
    )


def time_range_start(label: str, now: datetime | None = None) -> datetime | None:
    """
    Start of a named dashboard time range.

    Weeks start on Sunday. "All Time" has no start (None). `now` defaults
    to the current UTC time.

    Raises:
        ValueError: If label is not one of TIME_RANGES
    """
    if label not in TIME_RANGES:
        raise ValueError(f"Unknown time range '{label}'. Available: {', '.join(TIME_RANGES)}")
    if label == "All Time":
        return None

    now = to_naive_utc(now) or _utc_now()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if label == "Today":
        return midnight
    if label == "This Week":
        return midnight - timedelta(days=(now.weekday() + 1) % 7)
    if label == "This Month":
        return midnight.replace(day=1)
    if label == "This Quarter":
        return midnight.replace(month=(now.month - 1) // 3 * 3 + 1, day=1)
    return midnight.replace(month=1, day=1)


def filter_trades(
    trades: Iterable[TradeRecord],
    account_id: str | None = None,
    playbook_id: str | None = None,
    since: datetime | None = None,
    until: datetime | None = None,
) -> list[TradeRecord]:
    """Select trades by account, playbook and entry-time window (inclusive bounds)."""
    since = to_naive_utc(since)
    until = to_naive_utc(until)
    return [
        t
        for t in trades
        if (account_id is None or t.account_id == account_id)
        and (playbook_id is None or t.playbook_id == playbook_id)
        and (since is None or t.entry_timestamp >= since)
        and (until is None or t.entry_timestamp <= until)
    ]


def challenge_trades(account: Account, trades: Sequence[TradeRecord]) -> list[TradeRecord]:
    """Trades of a challenge account that fall inside its challenge window."""
    return filter_trades(
        trades,
        account_id=account.account_id,
        since=account.prop_firm_challenge_start_date,
        until=account.prop_firm_challenge_end_date,
    )
