"""Unit tests for CLI trade and account file loading."""

import json

import pytest

from tradelytics.analytics.models import EmotionalState
from tradelytics.cli.loaders import TradeFileError, load_account, load_trade_rows, load_trades

CSV_HEADER = "trade_id,entry_price,stop_loss_price,entry_timestamp,exit_price,exit_timestamp,emotion_pre_trade,tags\n"


class TestLoadTrades:
    """Test load_trades() across file formats."""

    def test_csv(self, tmp_path):
        # Arrange
        path = tmp_path / "trades.csv"
        path.write_text(
            CSV_HEADER
            + "t1,100,95,2025-01-06T09:30:00,110,2025-01-06T11:00:00,Calm,breakout;news\n"
            + "t2,100,105,2025-01-07T09:30:00,,,,\n"
        )

        # Act
        trades = load_trades(path)

        # Assert
        assert len(trades) == 2
        assert trades[0].entry_price == 100.0
        assert trades[0].emotion_pre_trade == EmotionalState.CALM
        assert trades[0].tags == ["breakout", "news"]
        assert trades[1].exit_price is None
        assert trades[1].exit_timestamp is None

    def test_csv_keeps_identifiers_as_strings(self, tmp_path):
        # Arrange
        path = tmp_path / "trades.csv"
        path.write_text("trade_id,account_id,entry_timestamp\n007,42,2025-01-06T09:30:00\n")

        # Act
        trades = load_trades(path)

        # Assert
        assert trades[0].trade_id == "007"
        assert trades[0].account_id == "42"

    def test_empty_csv(self, tmp_path):
        # Arrange
        path = tmp_path / "trades.csv"
        path.write_text("")

        # Act & Assert
        assert load_trades(path) == []

    def test_json_list(self, tmp_path):
        # Arrange
        path = tmp_path / "trades.json"
        path.write_text(json.dumps([{"trade_id": "t1", "entry_price": 100, "entry_timestamp": "2025-01-06T09:30:00"}]))

        # Act
        trades = load_trades(path)

        # Assert
        assert [t.trade_id for t in trades] == ["t1"]

    def test_yaml_mapping_with_trades_key(self, tmp_path):
        # Arrange
        path = tmp_path / "trades.yaml"
        path.write_text(
            "trades:\n"
            "  - trade_id: t1\n"
            "    entry_price: 100\n"
            "    stop_loss_price: 95\n"
            "    entry_timestamp: 2025-01-06T09:30:00\n"
        )

        # Act
        trades = load_trades(path)

        # Assert
        assert trades[0].stop_loss_price == 95.0

    def test_invalid_row_reports_row_number(self, tmp_path):
        # Arrange
        path = tmp_path / "trades.csv"
        path.write_text(
            "trade_id,entry_timestamp,rule_adherence_score\n"
            "t1,2025-01-06T09:30:00,8\n"
            "t2,2025-01-07T09:30:00,15\n"
        )

        # Act & Assert
        with pytest.raises(TradeFileError, match="row 2"):
            load_trades(path)

    def test_unsupported_suffix(self, tmp_path):
        # Arrange
        path = tmp_path / "trades.xlsx"
        path.write_text("")

        # Act & Assert
        with pytest.raises(TradeFileError, match="Unsupported trade file type"):
            load_trade_rows(path)

    def test_malformed_json(self, tmp_path):
        # Arrange
        path = tmp_path / "trades.json"
        path.write_text("[{")

        # Act & Assert
        with pytest.raises(TradeFileError, match="Could not parse"):
            load_trades(path)

    def test_wrong_shape(self, tmp_path):
        # Arrange
        path = tmp_path / "trades.json"
        path.write_text(json.dumps({"trades": "nope"}))

        # Act & Assert
        with pytest.raises(TradeFileError, match="must contain a list"):
            load_trades(path)


class TestLoadAccount:
    """Test load_account()."""

    def test_yaml_account(self, tmp_path):
        # Arrange
        path = tmp_path / "account.yaml"
        path.write_text("account_id: acc-1\nname: Main\ninitial_balance: 25000\ncurrency: EUR\n")

        # Act
        account = load_account(path)

        # Assert
        assert account.account_id == "acc-1"
        assert account.initial_balance == 25_000.0
        assert account.currency == "EUR"

    def test_invalid_account(self, tmp_path):
        # Arrange
        path = tmp_path / "account.json"
        path.write_text(json.dumps({"account_id": "acc-1", "initial_balance": -5}))

        # Act & Assert
        with pytest.raises(TradeFileError, match="Invalid account"):
            load_account(path)

    def test_not_a_mapping(self, tmp_path):
        # Arrange
        path = tmp_path / "account.yaml"
        path.write_text("- acc-1\n")

        # Act & Assert
        with pytest.raises(TradeFileError, match="account mapping"):
            load_account(path)
