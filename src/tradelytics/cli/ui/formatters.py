"""Rich table formatters for report output."""

from collections.abc import Sequence

from rich.markup import escape
from rich.table import Table

from tradelytics.analytics.models import (
    DurationStats,
    EquityPoint,
    PerformanceMetrics,
    PropFirmStatus,
    RollingPoint,
    SegmentBucket,
)


def _signed(value: float, suffix: str = "R") -> str:
    """Colour a signed figure green/red."""
    color = "green" if value > 0 else "red" if value < 0 else "white"
    return f"[{color}]{value:+.2f}{suffix}[/{color}]"


def create_metrics_table(metrics: PerformanceMetrics, title: str = "Performance") -> Table:
    """
    Create a Rich table with the headline metrics.

    Args:
        metrics: Aggregated metrics
        title: Table title

    Returns:
        Configured Rich Table
    """
    table = Table(title=title)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", style="white", justify="right")

    table.add_row("Total Trades", str(metrics.total_trades))
    if metrics.skipped_trades:
        table.add_row("Skipped (open/flagged)", str(metrics.skipped_trades), style="dim")
    table.add_row("Win Rate", f"{metrics.win_rate:.1f}%")
    table.add_row("Loss Rate", f"{metrics.loss_rate:.1f}%")
    table.add_row("Breakeven Rate", f"{metrics.breakeven_rate:.1f}%")
    table.add_row("Total R", _signed(metrics.total_r))
    table.add_row("Avg R", _signed(metrics.avg_r))
    table.add_row("Avg Win", f"{metrics.avg_win_r:.2f}R")
    table.add_row("Avg Loss", f"{metrics.avg_loss_r:.2f}R")
    table.add_row("Profit Factor", str(metrics.profit_factor))
    table.add_row("Expectancy", _signed(metrics.expectancy))
    table.add_row("Max Drawdown", f"{metrics.max_drawdown_r:.2f}%")
    table.add_row("Longest Win Streak", str(metrics.longest_win_streak))
    table.add_row("Longest Loss Streak", str(metrics.longest_loss_streak))
    table.add_row("Avg Rule Adherence", f"{metrics.avg_rule_adherence:.1f}/10")
    table.add_row("Avg Exit Efficiency", f"{metrics.avg_exit_efficiency:.1f}%")
    return table


def add_journal_rows(
    table: Table,
    durations: DurationStats,
    cost_of_discretion: float,
    discipline_streak: bool,
) -> None:
    """
    Append journal insight rows to the metrics table.

    Args:
        table: Table from create_metrics_table()
        durations: Holding-time statistics
        cost_of_discretion: Summed cost of discretion in R
        discipline_streak: Whether the latest trades form a discipline streak
    """
    table.add_section()
    table.add_row("Avg Hold Time", durations.avg_formatted)
    table.add_row("Shortest / Longest", f"{durations.min_formatted} / {durations.max_formatted}")
    table.add_row("Cost of Discretion", _signed(cost_of_discretion))
    if discipline_streak:
        table.add_row("Discipline Streak", "[green]✓ On track[/green]")


def create_segment_table(buckets: Sequence[SegmentBucket], segment_name: str) -> Table:
    """
    Create a Rich table with one row per segment bucket.

    Args:
        buckets: Buckets from segment()
        segment_name: Name of the segmentation key (column header)

    Returns:
        Populated Rich Table
    """
    table = Table(title=f"Performance by {segment_name.replace('_', ' ').title()}")
    table.add_column(segment_name.replace("_", " ").title(), style="cyan", no_wrap=True)
    table.add_column("Trades", style="yellow", justify="right")
    table.add_column("Win Rate", justify="right")
    table.add_column("Total R", justify="right")
    table.add_column("Expectancy", justify="right")
    table.add_column("Profit Factor", style="magenta", justify="right")

    for bucket in buckets:
        m = bucket.metrics
        table.add_row(
            escape(bucket.label),
            str(bucket.trade_count),
            f"{m.win_rate:.1f}%",
            _signed(m.total_r),
            _signed(m.expectancy),
            str(m.profit_factor),
        )
    return table


def create_rolling_table(
    points: Sequence[RollingPoint], metric_name: str, window_size: int, subject: str | None = None
) -> Table:
    """Create a Rich table for a rolling-window series, optionally titled with the segment it covers."""
    title = f"Rolling {metric_name.replace('_', ' ').title()} ({window_size} trades)"
    table = Table(title=f"{escape(subject)}: {title}" if subject else title)
    table.add_column("Trade #", style="cyan", justify="right")
    table.add_column("Value", style="white", justify="right")

    for point in points:
        table.add_row(str(point.position), f"{point.value:.2f}")
    return table


def create_equity_table(points: Sequence[EquityPoint], currency: str | None = None) -> Table:
    """
    Create a Rich table for equity curve points.

    Args:
        points: Equity points (typically the tail of the curve)
        currency: Currency code for currency curves, None for R curves
    """
    unit = currency or "R"
    table = Table(title=f"Equity Curve ({unit})")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Date", style="dim")
    table.add_column("Equity", style="white", justify="right")
    table.add_column("Drawdown", justify="right")

    for point in points:
        date = point.timestamp.strftime("%Y-%m-%d") if point.timestamp else "-"
        drawdown = f"[red]{point.drawdown:,.2f}[/red]" if point.drawdown < 0 else "-"
        table.add_row(str(point.index), date, f"{point.value:,.2f}", drawdown)
    return table


def create_prop_firm_table(status: PropFirmStatus, firm_name: str | None = None) -> Table:
    """
    Create a Rich table with a prop-firm challenge's standing.

    Args:
        status: Result of prop_firm_status()
        firm_name: Prop firm shown in the title
    """
    title = f"Prop Firm Challenge ({escape(firm_name)})" if firm_name else "Prop Firm Challenge"
    table = Table(title=title)
    table.add_column("Check", style="cyan", no_wrap=True)
    table.add_column("Value", style="white", justify="right")
    table.add_column("Status", justify="center")

    target = "-" if status.profit_target_percent is None else f"{status.profit_target_percent:.2f}%"
    table.add_row(
        "Profit",
        f"{status.current_profit_percent:+.2f}% / {target}",
        "[green]✓ Reached[/green]" if status.target_reached else "-",
    )

    limit = "-" if status.max_total_drawdown_percent is None else f"{status.max_total_drawdown_percent:.2f}%"
    table.add_row(
        "Total Drawdown",
        f"{status.current_total_drawdown_percent:.2f}% / {limit}",
        "[red]✗ Breached[/red]" if status.drawdown_breached else "[green]OK[/green]",
    )
    table.add_row("Daily Loss", "", "[red]✗ Breached[/red]" if status.daily_loss_breached else "[green]OK[/green]")
    if status.days_remaining is not None:
        table.add_row("Days Remaining", str(status.days_remaining), "")
    return table
