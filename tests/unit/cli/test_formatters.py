"""Unit tests for CLI UI formatters."""

from datetime import datetime

from rich.console import Console
from rich.table import Table

from tradelytics.analytics.metrics import aggregate
from tradelytics.analytics.models import DurationStats, EquityPoint, PerformanceMetrics, PropFirmStatus, RollingPoint
from tradelytics.analytics.segmentation import segment
from tradelytics.cli.ui.formatters import (
    add_journal_rows,
    create_equity_table,
    create_metrics_table,
    create_prop_firm_table,
    create_rolling_table,
    create_segment_table,
)


def _render(table: Table) -> str:
    console = Console(width=160, record=True, color_system=None)
    console.print(table)
    return console.export_text()


class TestCreateMetricsTable:
    """Test create_metrics_table()."""

    def test_returns_table_with_headline_rows(self, make_trades):
        # Arrange
        metrics = aggregate(make_trades([2.0, 1.0, -1.0]))

        # Act
        table = create_metrics_table(metrics)
        text = _render(table)

        # Assert
        assert isinstance(table, Table)
        assert table.title == "Performance"
        assert len(table.columns) == 2
        assert "Win Rate" in text
        assert "66.7%" in text
        assert "+2.00R" in text
        assert "3.00" in text

    def test_unbounded_profit_factor_shows_infinity(self, make_trades):
        # Arrange & Act
        text = _render(create_metrics_table(aggregate(make_trades([1.0, 2.0]))))

        # Assert
        assert "∞" in text

    def test_skipped_row_only_when_trades_were_skipped(self, make_trade):
        # Arrange
        with_skipped = aggregate([make_trade(1.0), make_trade(None)])

        # Act
        clean_text = _render(create_metrics_table(PerformanceMetrics.empty()))
        skipped_text = _render(create_metrics_table(with_skipped))

        # Assert
        assert "Skipped" not in clean_text
        assert "Skipped" in skipped_text

    def test_add_journal_rows(self):
        # Arrange
        table = create_metrics_table(PerformanceMetrics.empty())
        rows_before = table.row_count
        durations = DurationStats(count=1, avg_ms=3_600_000, avg_formatted="1h 0m")

        # Act
        add_journal_rows(table, durations, cost_of_discretion=-0.5, discipline_streak=True)
        text = _render(table)

        # Assert
        assert table.row_count == rows_before + 4
        assert "1h 0m" in text
        assert "-0.50R" in text
        assert "On track" in text

    def test_add_journal_rows_without_streak(self):
        # Arrange
        table = create_metrics_table(PerformanceMetrics.empty())
        rows_before = table.row_count

        # Act
        add_journal_rows(table, DurationStats(), cost_of_discretion=0.0, discipline_streak=False)

        # Assert
        assert table.row_count == rows_before + 3


class TestCreateSegmentTable:
    """Test create_segment_table()."""

    def test_one_row_per_bucket(self, make_trade):
        # Arrange
        trades = [
            make_trade(1.0, session="NY Open"),
            make_trade(-1.0, session="London Open"),
            make_trade(2.0, session="NY Open"),
        ]
        buckets = segment(trades, "session")

        # Act
        table = create_segment_table(buckets, "session")
        text = _render(table)

        # Assert
        assert table.row_count == 2
        assert table.title == "Performance by Session"
        assert "NY Open" in text
        assert "London Open" in text

    def test_empty_buckets(self):
        # Arrange & Act
        table = create_segment_table([], "market_environment")

        # Assert
        assert table.row_count == 0
        assert table.title == "Performance by Market Environment"


class TestCreateRollingTable:
    """Test create_rolling_table()."""

    def test_rows(self):
        # Arrange
        points = [RollingPoint(position=3, value=1.5), RollingPoint(position=4, value=50.0)]

        # Act
        table = create_rolling_table(points, "profit_factor", 3)
        text = _render(table)

        # Assert
        assert table.row_count == 2
        assert table.title == "Rolling Profit Factor (3 trades)"
        assert "50.00" in text

    def test_subject_prefixes_title(self):
        # Arrange & Act
        table = create_rolling_table([RollingPoint(position=2, value=3.0)], "total_r", 10, subject="orb")

        # Assert
        assert table.title == "orb: Rolling Total R (10 trades)"


class TestCreateEquityTable:
    """Test create_equity_table()."""

    def test_r_curve(self):
        # Arrange
        points = [
            EquityPoint(index=1, value=1.0, drawdown=0.0, is_currency=False, timestamp=datetime(2025, 1, 6)),
            EquityPoint(index=2, value=0.5, drawdown=-0.5, is_currency=False, timestamp=datetime(2025, 1, 7)),
        ]

        # Act
        table = create_equity_table(points)
        text = _render(table)

        # Assert
        assert table.title == "Equity Curve (R)"
        assert table.row_count == 2
        assert "2025-01-07" in text
        assert "-0.50" in text

    def test_currency_curve(self):
        # Arrange
        points = [EquityPoint(index=1, value=10_200.0, drawdown=0.0, is_currency=True)]

        # Act
        table = create_equity_table(points, currency="USD")
        text = _render(table)

        # Assert
        assert table.title == "Equity Curve (USD)"
        assert "10,200.00" in text


class TestCreatePropFirmTable:
    """Test create_prop_firm_table()."""

    def test_status_rows(self):
        # Arrange
        status = PropFirmStatus(
            current_profit_percent=8.5,
            profit_target_percent=8.0,
            target_reached=True,
            current_total_drawdown_percent=12.0,
            max_total_drawdown_percent=10.0,
            drawdown_breached=True,
            daily_loss_breached=False,
            days_remaining=10,
        )

        # Act
        table = create_prop_firm_table(status, "FTMO")
        text = _render(table)

        # Assert
        assert table.title == "Prop Firm Challenge (FTMO)"
        assert table.row_count == 4
        assert "+8.50% / 8.00%" in text
        assert "Reached" in text
        assert "Breached" in text
        assert "Days Remaining" in text

    def test_without_targets_or_end_date(self):
        # Arrange
        status = PropFirmStatus(
            current_profit_percent=0.0,
            profit_target_percent=None,
            target_reached=False,
            current_total_drawdown_percent=0.0,
            max_total_drawdown_percent=None,
            drawdown_breached=False,
            daily_loss_breached=False,
            days_remaining=None,
        )

        # Act
        table = create_prop_firm_table(status)

        # Assert
        assert table.title == "Prop Firm Challenge"
        assert table.row_count == 3
