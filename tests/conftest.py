"""Root conftest - shared trade factories for analytics and CLI tests."""

from datetime import datetime, timedelta

import pytest

from tradelytics.analytics.models import TradeRecord
from tradelytics.analytics.normalizer import normalize_trade

BASE_TIME = datetime(2025, 1, 6, 9, 30)  # Monday


@pytest.fixture
def base_time() -> datetime:
    """Monday 2025-01-06 09:30, the entry time of the first factory trade."""
    return BASE_TIME


@pytest.fixture
def make_trade():
    """
    Factory for normalized trades with a chosen R-multiple.

    Long trades with entry 100 and stop 99 (1 point of risk), so the exit
    price is 100 + r. Each call without an explicit day lands one day
    after the previous one, keeping chronology equal to call order.

    Usage:
        trade = make_trade(2.0)
        open_trade = make_trade(None)
        flagged = make_trade(1.0, stop_loss_price=None)
    """
    counter = {"n": 0}

    def _make(r_multiple: float | None = 1.0, day: int | None = None, **fields) -> TradeRecord:
        index = counter["n"]
        counter["n"] += 1
        entry_time = BASE_TIME + timedelta(days=index if day is None else day)

        data = {
            "trade_id": f"t{index + 1:03d}",
            "account_id": "acc-1",
            "asset": "ES",
            "entry_price": 100.0,
            "stop_loss_price": 99.0,
            "entry_timestamp": entry_time,
        }
        if r_multiple is not None:
            data["exit_price"] = 100.0 + r_multiple
            data["exit_timestamp"] = entry_time + timedelta(hours=1)
        data.update(fields)
        return normalize_trade(data)

    return _make


@pytest.fixture
def make_trades(make_trade):
    """Build one trade per R-multiple, in chronological order."""

    def _make_many(r_multiples, **fields) -> list[TradeRecord]:
        return [make_trade(r, **fields) for r in r_multiples]

    return _make_many
