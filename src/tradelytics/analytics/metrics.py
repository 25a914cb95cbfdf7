"""Performance aggregation.

Pure functions that reduce a set of normalized trades to PerformanceMetrics.
All functions are stateless: the same multiset of trades always produces the
same result, whatever order the caller supplies it in.

Only evaluated trades (those with a realized R-multiple) take part in the
R-dependent statistics. Every ratio is guarded: an empty input or a zero
denominator resolves to 0 (or to the Unbounded profit factor) instead of
raising.

Usage:
    >>> from tradelytics.analytics.metrics import aggregate
    >>>
    >>> metrics = aggregate(records)
    >>> metrics.total_r, metrics.win_rate, str(metrics.profit_factor)
    (2.0, 66.66666666666667, '3.00')
"""

from collections.abc import Iterable, Sequence

from tradelytics.analytics.models import (
    PerformanceMetrics,
    ProfitFactor,
    StreakSummary,
    TradeInput,
    TradeOutcome,
    TradeRecord,
)
from tradelytics.analytics.normalizer import as_records, sort_chronologically
from tradelytics.analytics.streaks import calculate_streaks
from tradelytics.system.config import AnalyticsConfig
from tradelytics.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()

__all__ = [
    "aggregate",
    "calculate_avg_exit_efficiency",
    "calculate_avg_rule_adherence",
    "calculate_expectancy",
    "calculate_max_drawdown",
    "calculate_profit_factor",
    "calculate_win_rate",
    "compose_metrics",
    "profit_factor_from_gross",
    "sort_chronologically",
]


def _evaluated(trades: Iterable[TradeRecord]) -> list[TradeRecord]:
    return [t for t in sort_chronologically(trades) if t.is_evaluated]


def _r(trade: TradeRecord) -> float:
    return trade.r_multiple if trade.r_multiple is not None else 0.0


def calculate_win_rate(trades: Sequence[TradeRecord]) -> float:
    """
    Percentage of evaluated trades classified as Win.

    Example:
        >>> calculate_win_rate(trades)  # r = [2, 1, -1]
        66.66666666666667
    """
    evaluated = _evaluated(trades)
    if not evaluated:
        return 0.0

    wins = sum(1 for t in evaluated if t.outcome == TradeOutcome.WIN)
    return 100.0 * wins / len(evaluated)


def profit_factor_from_gross(gross_profit_r: float, gross_loss_r: float) -> ProfitFactor:
    """
    Profit factor from gross figures.

    Returns:
        Finite(profit/loss) when there are losses, Unbounded when there are
        only profits, Finite(0) when both are zero
    """
    if gross_loss_r > 0:
        return ProfitFactor.finite(gross_profit_r / gross_loss_r)
    if gross_profit_r > 0:
        return ProfitFactor.unbounded()
    return ProfitFactor.finite(0.0)


def calculate_profit_factor(trades: Sequence[TradeRecord]) -> ProfitFactor:
    """
    Gross profit R over gross loss R.

    Example:
        >>> calculate_profit_factor(trades)  # r = [2, 1, -1]
        ProfitFactor(kind='finite', value=3.0)
        >>> calculate_profit_factor(winners_only)
        ProfitFactor(kind='unbounded', value=None)
    """
    gross_profit = 0.0
    loss_sum = 0.0
    for trade in _evaluated(trades):
        if trade.outcome == TradeOutcome.WIN:
            gross_profit += _r(trade)
        elif trade.outcome == TradeOutcome.LOSS:
            loss_sum += _r(trade)

    return profit_factor_from_gross(gross_profit, abs(loss_sum))


def calculate_expectancy(trades: Sequence[TradeRecord]) -> float:
    """
    Probability-weighted average R per trade.

    Expectancy = (Win% x AvgWin) - (Loss% x AvgLoss)
    """
    evaluated = _evaluated(trades)
    if not evaluated:
        return 0.0

    winners = [_r(t) for t in evaluated if t.outcome == TradeOutcome.WIN]
    losers = [_r(t) for t in evaluated if t.outcome == TradeOutcome.LOSS]

    win_rate = len(winners) / len(evaluated)
    loss_rate = len(losers) / len(evaluated)
    avg_win = _running_sum(winners) / len(winners) if winners else 0.0
    avg_loss = abs(_running_sum(losers)) / len(losers) if losers else 0.0

    return win_rate * avg_win - loss_rate * avg_loss


def calculate_max_drawdown(trades: Sequence[TradeRecord]) -> float:
    """
    Largest decline of cumulative R, as a percentage of the running peak.

    The peak starts at 0, so losses before the curve ever goes positive do
    not register as drawdown.

    Example:
        >>> calculate_max_drawdown(trades)  # cumulative R: 1, 2, 1, 3, 0
        100.0
    """
    cumulative = 0.0
    peak = 0.0
    max_drawdown = 0.0

    for trade in _evaluated(trades):
        cumulative += _r(trade)
        peak = max(peak, cumulative)
        if peak > 0:
            max_drawdown = max(max_drawdown, (peak - cumulative) / peak * 100.0)

    return max_drawdown


def calculate_avg_rule_adherence(trades: Sequence[TradeRecord]) -> float:
    """Mean adherence score of evaluated trades; trades without a score are left out."""
    scores = [t.rule_adherence_score for t in _evaluated(trades) if t.rule_adherence_score is not None]
    if not scores:
        return 0.0
    return sum(scores) / len(scores)


def calculate_avg_exit_efficiency(trades: Sequence[TradeRecord]) -> float:
    """
    Mean share of the favorable excursion captured, in percent.

    Only winning trades with a positive MFE contribute.
    """
    efficiencies = [
        _r(t) / t.mfe * 100.0
        for t in _evaluated(trades)
        if t.outcome == TradeOutcome.WIN and t.mfe is not None and t.mfe > 0
    ]
    if not efficiencies:
        return 0.0
    return _running_sum(efficiencies) / len(efficiencies)


def _running_sum(values: Iterable[float]) -> float:
    # Left-to-right addition so batch and incremental results agree exactly
    total = 0.0
    for value in values:
        total += value
    return total


def compose_metrics(
    *,
    wins: int,
    losses: int,
    breakevens: int,
    total_r: float,
    gross_profit_r: float,
    loss_sum_r: float,
    max_drawdown_r: float,
    streaks: StreakSummary,
    adherence_sum: float,
    adherence_count: int,
    efficiency_sum: float,
    efficiency_count: int,
    skipped_trades: int,
) -> PerformanceMetrics:
    """
    Build PerformanceMetrics from running totals.

    Shared by aggregate() and the incremental accumulator so both derive
    rates and ratios the same way.
    """
    total = wins + losses + breakevens
    if total == 0:
        return PerformanceMetrics.empty(skipped_trades=skipped_trades)

    gross_loss_r = abs(loss_sum_r)
    win_rate = 100.0 * wins / total
    loss_rate = 100.0 * losses / total
    avg_win_r = gross_profit_r / wins if wins else 0.0
    avg_loss_r = gross_loss_r / losses if losses else 0.0

    return PerformanceMetrics(
        total_trades=total,
        win_rate=win_rate,
        loss_rate=loss_rate,
        breakeven_rate=100.0 * breakevens / total,
        total_r=total_r,
        avg_r=total_r / total,
        gross_profit_r=gross_profit_r,
        gross_loss_r=gross_loss_r,
        profit_factor=profit_factor_from_gross(gross_profit_r, gross_loss_r),
        avg_win_r=avg_win_r,
        avg_loss_r=avg_loss_r,
        expectancy=(win_rate / 100.0) * avg_win_r - (loss_rate / 100.0) * avg_loss_r,
        max_drawdown_r=max_drawdown_r,
        longest_win_streak=streaks.longest_win,
        longest_loss_streak=streaks.longest_loss,
        avg_rule_adherence=adherence_sum / adherence_count if adherence_count else 0.0,
        avg_exit_efficiency=efficiency_sum / efficiency_count if efficiency_count else 0.0,
        skipped_trades=skipped_trades,
    )


def _as_scored_breakeven(trade: TradeRecord) -> TradeRecord:
    """Stand-in for an unevaluated trade when the caller counts it as 0R."""
    return trade.model_copy(update={"r_multiple": 0.0, "outcome": TradeOutcome.BREAKEVEN})


def aggregate(
    trades: Iterable[TradeInput],
    *,
    count_skipped: bool = False,
    config: AnalyticsConfig | None = None,
) -> PerformanceMetrics:
    """
    Reduce a trade set to PerformanceMetrics.

    Args:
        trades: Normalized records (raw TradeInputs are normalized first)
        count_skipped: Count unevaluated trades (flagged or still open) in
            total_trades as Breakeven 0R instead of only reporting them in
            skipped_trades
        config: Numeric conventions used when normalizing raw inputs

    Returns:
        PerformanceMetrics; the all-zero object for an empty set
    """
    records = sort_chronologically(as_records(trades, config))
    skipped = [t for t in records if not t.is_evaluated]

    if count_skipped:
        included = [t if t.is_evaluated else _as_scored_breakeven(t) for t in records]
    else:
        included = [t for t in records if t.is_evaluated]

    if not included:
        logger.debug("analytics.aggregate.empty", skipped_trades=len(skipped))
        return PerformanceMetrics.empty(skipped_trades=len(skipped))

    winners = [_r(t) for t in included if t.outcome == TradeOutcome.WIN]
    losers = [_r(t) for t in included if t.outcome == TradeOutcome.LOSS]
    scores = [t.rule_adherence_score for t in included if t.rule_adherence_score is not None]
    efficiencies = [
        _r(t) / t.mfe * 100.0
        for t in included
        if t.outcome == TradeOutcome.WIN and t.mfe is not None and t.mfe > 0
    ]

    metrics = compose_metrics(
        wins=len(winners),
        losses=len(losers),
        breakevens=len(included) - len(winners) - len(losers),
        total_r=_running_sum(_r(t) for t in included),
        gross_profit_r=_running_sum(winners),
        loss_sum_r=_running_sum(losers),
        max_drawdown_r=calculate_max_drawdown(included),
        streaks=calculate_streaks(included),
        adherence_sum=_running_sum(float(s) for s in scores),
        adherence_count=len(scores),
        efficiency_sum=_running_sum(efficiencies),
        efficiency_count=len(efficiencies),
        skipped_trades=len(skipped),
    )

    logger.debug(
        "analytics.aggregate.completed",
        total_trades=metrics.total_trades,
        skipped_trades=metrics.skipped_trades,
        total_r=round(metrics.total_r, 2),
    )
    return metrics
