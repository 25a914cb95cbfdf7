"""Equity curve construction.

An equity curve is the chronological running total of evaluated trades,
in R-multiples or in account currency, with the signed distance from the
running peak at every point.
"""

from collections.abc import Iterable, Iterator

from tradelytics.analytics.models import Account, EquityMode, EquityPoint, TradeInput, TradeRecord
from tradelytics.analytics.normalizer import as_records, round_half_up, sort_chronologically
from tradelytics.system.config import AnalyticsConfig
from tradelytics.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()


class EquityCurve:
    """
    Lazy, restartable sequence of EquityPoints.

    Holds only the trade snapshot it was built from. Every iteration walks
    the snapshot again from the starting value, so two iterations always
    yield identical points and nothing is cached between them.
    """

    def __init__(self, trades: Iterable[TradeRecord], mode: EquityMode, account: Account | None = None):
        self._trades = tuple(trades)
        self._mode = mode
        self._account = account

    @property
    def mode(self) -> EquityMode:
        return self._mode

    @property
    def starting_value(self) -> float:
        """0 in R mode, the account's initial balance in currency mode."""
        if self._mode == EquityMode.CURRENCY and self._account is not None:
            return self._account.initial_balance
        return 0.0

    def _trade_delta(self, trade: TradeRecord) -> float:
        r_multiple = trade.r_multiple or 0.0
        if self._mode == EquityMode.R or self._account is None:
            return r_multiple
        # Realized P&L is R scaled by the currency amount put at risk
        return r_multiple * self._account.initial_balance * trade.risk_percentage / 100.0

    def __iter__(self) -> Iterator[EquityPoint]:
        is_currency = self._mode == EquityMode.CURRENCY
        cumulative = self.starting_value
        peak = cumulative

        index = 0
        for trade in sort_chronologically(self._trades):
            if not trade.is_evaluated:
                continue

            index += 1
            cumulative += self._trade_delta(trade)
            peak = max(peak, cumulative)

            yield EquityPoint(
                index=index,
                value=round_half_up(cumulative),
                drawdown=round_half_up(cumulative - peak),
                is_currency=is_currency,
                timestamp=trade.entry_timestamp,
            )

    def __len__(self) -> int:
        """Number of points (evaluated trades) in the curve."""
        return sum(1 for trade in self._trades if trade.is_evaluated)

    def to_list(self) -> list[EquityPoint]:
        """Materialize one full pass of the curve."""
        return list(self)

    def max_drawdown(self) -> float:
        """Deepest drawdown value (<= 0) over the curve, 0 for an empty curve."""
        return min((point.drawdown for point in self), default=0.0)


def build_equity_curve(
    trades: Iterable[TradeInput],
    mode: EquityMode | str = EquityMode.R,
    account: Account | None = None,
    config: AnalyticsConfig | None = None,
) -> EquityCurve:
    """
    Build an equity curve over the evaluated trades.

    Args:
        trades: Normalized records (raw TradeInputs are normalized first)
        mode: EquityMode.R (cumulative R from 0) or EquityMode.CURRENCY
            (balance from the account's initial_balance)
        account: Owning account; required in currency mode
        config: Numeric conventions used when normalizing raw inputs

    Returns:
        EquityCurve, one point per evaluated trade in chronological order

    Raises:
        ValueError: If currency mode is requested without an account

    Example:
        >>> curve = build_equity_curve(records)  # r = [1, 1, -1, 2, -3]
        >>> [(p.value, p.drawdown) for p in curve]
        [(1.0, 0.0), (2.0, 0.0), (1.0, -1.0), (3.0, 0.0), (0.0, -3.0)]
    """
    mode = EquityMode(mode)
    if mode == EquityMode.CURRENCY and account is None:
        raise ValueError("Currency equity curve requires an account with an initial balance")

    records = as_records(trades, config)
    logger.debug("equity.curve.built", mode=mode.value, total_trades=len(records))
    return EquityCurve(records, mode, account)
