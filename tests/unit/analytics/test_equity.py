"""Unit tests for analytics/equity.py."""

import pytest

from tradelytics.analytics.equity import EquityCurve, build_equity_curve
from tradelytics.analytics.models import Account, EquityMode


@pytest.fixture
def account() -> Account:
    """10k account."""
    return Account(account_id="acc-1", name="Main", initial_balance=10_000.0)


class TestBuildEquityCurveR:
    """Test R-mode equity curves."""

    def test_values_and_drawdowns(self, make_trades):
        """Test r = [1, 1, -1, 2, -3]."""
        # Arrange
        trades = make_trades([1.0, 1.0, -1.0, 2.0, -3.0])

        # Act
        points = build_equity_curve(trades).to_list()

        # Assert
        assert [p.value for p in points] == [1.0, 2.0, 1.0, 3.0, 0.0]
        assert [p.drawdown for p in points] == [0.0, 0.0, -1.0, 0.0, -3.0]
        assert [p.index for p in points] == [1, 2, 3, 4, 5]
        assert not any(p.is_currency for p in points)

    def test_drawdown_never_positive(self, make_trades):
        # Arrange
        trades = make_trades([-1.0, 0.5, -2.0, 3.0, 0.25, -0.75])

        # Act
        curve = build_equity_curve(trades)

        # Assert
        assert all(p.drawdown <= 0 for p in curve)

    def test_first_loss_is_drawdown_from_zero(self, make_trades):
        """Test that the running peak starts at the starting value."""
        # Arrange & Act
        points = build_equity_curve(make_trades([-1.0, 2.0])).to_list()

        # Assert
        assert points[0].value == -1.0
        assert points[0].drawdown == -1.0
        assert points[1].drawdown == 0.0

    def test_timestamps_follow_entry_time(self, make_trades, base_time):
        # Arrange & Act
        points = build_equity_curve(make_trades([1.0, 1.0])).to_list()

        # Assert
        assert points[0].timestamp == base_time
        assert points[1].timestamp > points[0].timestamp

    def test_unevaluated_trades_are_excluded(self, make_trade):
        # Arrange
        trades = [make_trade(1.0), make_trade(None), make_trade(5.0, stop_loss_price=None), make_trade(1.0)]

        # Act
        curve = build_equity_curve(trades)

        # Assert
        assert len(curve) == 2
        assert [p.value for p in curve] == [1.0, 2.0]

    def test_chronological_regardless_of_input_order(self, make_trades):
        # Arrange
        trades = make_trades([1.0, -2.0, 3.0])

        # Act
        points = build_equity_curve(list(reversed(trades))).to_list()

        # Assert
        assert [p.value for p in points] == [1.0, -1.0, 2.0]

    def test_empty_curve(self):
        # Arrange & Act
        curve = build_equity_curve([])

        # Assert
        assert curve.to_list() == []
        assert len(curve) == 0
        assert curve.max_drawdown() == 0.0


class TestEquityCurveIteration:
    """Test that EquityCurve is a restartable sequence."""

    def test_iterating_twice_yields_identical_points(self, make_trades):
        # Arrange
        curve = build_equity_curve(make_trades([1.0, -0.5, 2.0]))

        # Act
        first = list(curve)
        second = list(curve)

        # Assert
        assert first == second
        assert len(first) == 3

    def test_partial_iteration_does_not_affect_next_pass(self, make_trades):
        # Arrange
        curve = build_equity_curve(make_trades([1.0, 2.0, 3.0]))

        # Act
        iterator = iter(curve)
        next(iterator)
        full = curve.to_list()

        # Assert
        assert [p.value for p in full] == [1.0, 3.0, 6.0]

    def test_max_drawdown(self, make_trades):
        # Arrange & Act
        curve = build_equity_curve(make_trades([1.0, 1.0, -1.0, 2.0, -3.0]))

        # Assert
        assert curve.max_drawdown() == -3.0

    def test_direct_construction(self, make_trades):
        # Arrange & Act
        curve = EquityCurve(make_trades([1.0]), EquityMode.R)

        # Assert
        assert curve.mode == EquityMode.R
        assert curve.starting_value == 0.0


class TestBuildEquityCurveCurrency:
    """Test currency-mode equity curves."""

    def test_balance_from_initial_balance(self, make_trades, account):
        """Test that 1% risk on 10k turns +2R into +200."""
        # Arrange
        trades = make_trades([2.0, -1.0])

        # Act
        points = build_equity_curve(trades, EquityMode.CURRENCY, account).to_list()

        # Assert
        assert [p.value for p in points] == [10_200.0, 10_100.0]
        assert [p.drawdown for p in points] == [0.0, -100.0]
        assert all(p.is_currency for p in points)

    def test_risk_percentage_scales_pnl(self, make_trade, account):
        # Arrange
        trades = [make_trade(1.0, risk_percentage=0.5), make_trade(1.0, risk_percentage=2.0)]

        # Act
        points = build_equity_curve(trades, "currency", account).to_list()

        # Assert
        assert [p.value for p in points] == [10_050.0, 10_250.0]

    def test_drawdown_below_initial_balance(self, make_trades, account):
        """Test that losing from the start draws down from the initial balance."""
        # Arrange & Act
        points = build_equity_curve(make_trades([-1.0]), EquityMode.CURRENCY, account).to_list()

        # Assert
        assert points[0].value == 9_900.0
        assert points[0].drawdown == -100.0

    def test_requires_account(self, make_trades):
        # Arrange
        trades = make_trades([1.0])

        # Act & Assert
        with pytest.raises(ValueError, match="requires an account"):
            build_equity_curve(trades, EquityMode.CURRENCY)

    def test_unknown_mode_raises(self, make_trades):
        with pytest.raises(ValueError):
            build_equity_curve(make_trades([1.0]), "percent")
