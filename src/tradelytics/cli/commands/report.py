"""Performance report command."""

import sys
from pathlib import Path
from typing import Literal, Optional, cast

import click
from rich.console import Console
from rich.markup import escape

from tradelytics.analytics.equity import build_equity_curve
from tradelytics.analytics.insights import (
    TIME_RANGES,
    calculate_duration_stats,
    filter_trades,
    has_discipline_streak,
    prop_firm_status,
    time_range_start,
    total_cost_of_discretion,
)
from tradelytics.analytics.metrics import aggregate
from tradelytics.analytics.models import Account, EquityMode
from tradelytics.analytics.normalizer import normalize_trades
from tradelytics.analytics.rolling import METRIC_SELECTORS, rolling_metric, rolling_metric_by_segment
from tradelytics.analytics.segmentation import FIELD_SELECTORS, segment
from tradelytics.cli.loaders import load_account, load_trades
from tradelytics.cli.ui.formatters import (
    add_journal_rows,
    create_equity_table,
    create_metrics_table,
    create_prop_firm_table,
    create_rolling_table,
    create_segment_table,
)
from tradelytics.system import LoggerFactory
from tradelytics.system.config import reload_system_config

console = Console()


@click.command("report")
@click.option(
    "--file",
    "-f",
    "trade_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Trade journal file (CSV, JSON or YAML)",
)
@click.option(
    "--account-file",
    "-a",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Account metadata (JSON or YAML), required for currency equity curves",
)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="System config file (defaults to ./tradelytics.yaml when present)",
)
@click.option(
    "--range",
    "-t",
    "time_range",
    type=click.Choice(TIME_RANGES),
    help="Only include trades entered in this period (UTC)",
)
@click.option(
    "--segment-by",
    "-s",
    type=click.Choice(sorted(FIELD_SELECTORS)),
    help="Break performance down by a trade attribute",
)
@click.option(
    "--rolling",
    "-r",
    "rolling_name",
    type=click.Choice(sorted(METRIC_SELECTORS)),
    help="Show a rolling-window series of a metric",
)
@click.option(
    "--window",
    "-w",
    type=click.IntRange(min=1),
    help="Rolling window size (default: analytics.rolling_window, or playbook_rolling_window with -s playbook)",
)
@click.option(
    "--equity",
    "-e",
    "equity_mode",
    type=click.Choice([mode.value for mode in EquityMode]),
    help="Show the tail of the equity curve in R or account currency",
)
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Set logging level (DEBUG shows per-trade normalizer flags)",
)
def report_command(
    trade_file: Path,
    account_file: Optional[Path],
    config_file: Optional[Path],
    time_range: Optional[str],
    segment_by: Optional[str],
    rolling_name: Optional[str],
    window: Optional[int],
    equity_mode: Optional[str],
    log_level: Optional[str],
):
    """
    Print a performance report for a trade journal.

    Trades are normalized (direction, R-multiple, outcome), aggregated and
    rendered as tables. Flagged or still-open trades are reported as skipped.

    \b
    Examples:
        # Headline metrics
        tradelytics report --file trades.csv

        # Performance by session, sorted by profit factor
        tradelytics report -f trades.csv --segment-by session

        # Rolling expectancy over 10 trades
        tradelytics report -f trades.csv --rolling expectancy --window 10

        # Rolling total R per playbook, this quarter only
        tradelytics report -f trades.csv -s playbook -r total_r --range "This Quarter"

        # Currency equity curve
        tradelytics report -f trades.yaml -a account.yaml --equity currency
    """
    try:
        system_config = reload_system_config(config_file)
        if log_level:
            # Type cast since click already validated the choice
            level = cast(Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], log_level.upper())
            system_config.logging.level = level
        LoggerFactory.configure(system_config.logging.to_logger_config())
        logger = LoggerFactory.get_logger()
        analytics_config = system_config.analytics

        console.rule("[bold blue]Tradelytics Report[/bold blue]")
        console.print()

        raw_trades = load_trades(trade_file)
        account: Account | None = load_account(account_file) if account_file else None
        if equity_mode == EquityMode.CURRENCY.value and account is None:
            raise click.UsageError("--equity currency requires --account-file")

        records = normalize_trades(raw_trades, analytics_config)
        logger.info("report.trades_loaded", file=trade_file.name, total_trades=len(records))
        journal = records
        if time_range:
            records = filter_trades(records, since=time_range_start(time_range))
            logger.info("report.range_applied", time_range=time_range, total_trades=len(records))

        console.print(f"  Journal: [yellow]{escape(trade_file.name)}[/yellow]")
        if time_range:
            console.print(f"  Range:   [yellow]{time_range}[/yellow]")
        if account is not None:
            account_label = escape(account.name or account.account_id)
            console.print(f"  Account: [magenta]{account_label}[/magenta] ({escape(account.currency)})")
        console.print()

        metrics = aggregate(records, config=analytics_config)
        metrics_table = create_metrics_table(metrics)
        add_journal_rows(
            metrics_table,
            calculate_duration_stats(records),
            total_cost_of_discretion(records),
            has_discipline_streak(records, config=analytics_config),
        )
        console.print(metrics_table)

        if segment_by:
            buckets = segment(records, segment_by, sort_by="profit_factor", config=analytics_config)
            console.print()
            console.print(create_segment_table(buckets, segment_by))

        if rolling_name and segment_by == "playbook":
            window_size = window or analytics_config.playbook_rolling_window
            series = rolling_metric_by_segment(records, "playbook", window_size, rolling_name, config=analytics_config)
            for playbook, points in series.items():
                console.print()
                console.print(create_rolling_table(points, rolling_name, window_size, subject=playbook))
        elif rolling_name:
            window_size = window or analytics_config.rolling_window
            points = rolling_metric(records, window_size, rolling_name, config=analytics_config)
            console.print()
            console.print(create_rolling_table(points, rolling_name, window_size))

        if equity_mode:
            curve = build_equity_curve(records, EquityMode(equity_mode), account, config=analytics_config)
            tail = curve.to_list()[-10:]
            currency = account.currency if equity_mode == EquityMode.CURRENCY.value and account else None
            console.print()
            console.print(create_equity_table(tail, currency))

        if account is not None and account.is_prop_firm_challenge:
            # The challenge window selects its own trades, independent of --range
            status = prop_firm_status(account, trades=journal, config=analytics_config)
            if status is not None:
                console.print()
                console.print(create_prop_firm_table(status, account.prop_firm_name))

        logger.info("report.completed", total_trades=metrics.total_trades, skipped_trades=metrics.skipped_trades)
        console.print()
        console.rule()

    except (click.ClickException, ValueError, OSError) as e:
        message = e.format_message() if isinstance(e, click.ClickException) else str(e)
        console.print()
        console.print(f"[bold red]✗ Report failed:[/bold red] {escape(message)}")
        sys.exit(1)
