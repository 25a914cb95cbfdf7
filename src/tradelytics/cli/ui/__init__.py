"""CLI UI components - rich table formatters."""

from tradelytics.cli.ui.formatters import (
    add_journal_rows,
    create_equity_table,
    create_metrics_table,
    create_rolling_table,
    create_segment_table,
)

__all__ = [
    "add_journal_rows",
    "create_equity_table",
    "create_metrics_table",
    "create_rolling_table",
    "create_segment_table",
]
