"""Stateful performance calculator for incremental updates.

PerformanceAccumulator folds trades into running totals one at a time, so a
journal that only ever appends new trades does not have to re-aggregate its
whole history. Drawdown and streaks depend on chronology, so the
accumulator carries the running peak and streak counters forward and
rejects trades that arrive out of order.

Usage:
    >>> from tradelytics.analytics.calculators import PerformanceAccumulator
    >>>
    >>> acc = PerformanceAccumulator()
    >>> acc.add_trades(history)
    >>> acc.add_trade(todays_trade)
    >>> acc.metrics.total_r
    4.5
    >>> acc.current_drawdown_pct
    12.5
"""

from collections.abc import Iterable

from tradelytics.analytics.metrics import compose_metrics
from tradelytics.analytics.models import PerformanceMetrics, StreakSummary, TradeInput, TradeOutcome
from tradelytics.analytics.normalizer import chronological_key, ensure_record
from tradelytics.system.config import AnalyticsConfig


class PerformanceAccumulator:
    """
    Running aggregate equal to aggregate() over the trades added so far.

    Trades must be added in chronological order (the same total order
    aggregate() uses internally); an earlier trade raises ValueError.
    """

    def __init__(self, config: AnalyticsConfig | None = None, count_skipped: bool = False) -> None:
        """
        Initialize accumulator.

        Args:
            config: Numeric conventions used when normalizing raw inputs
            count_skipped: Count unevaluated trades as Breakeven 0R (see aggregate())
        """
        self._config = config or AnalyticsConfig()
        self._count_skipped = count_skipped
        self._last_key: tuple | None = None
        self._trade_count = 0

        self._wins = 0
        self._losses = 0
        self._breakevens = 0
        self._skipped = 0
        self._total_r = 0.0
        self._gross_profit_r = 0.0
        self._loss_sum_r = 0.0

        self._cumulative_r = 0.0
        self._peak_r = 0.0
        self._max_drawdown_pct = 0.0
        self._current_drawdown_pct = 0.0

        self._consecutive_wins = 0
        self._consecutive_losses = 0
        self._max_consecutive_wins = 0
        self._max_consecutive_losses = 0

        self._adherence_sum = 0.0
        self._adherence_count = 0
        self._efficiency_sum = 0.0
        self._efficiency_count = 0

    def add_trade(self, trade: TradeInput) -> None:
        """
        Fold one trade into the running totals.

        Args:
            trade: Normalized record (raw inputs and hand-built records are normalized first)

        Raises:
            ValueError: If the trade sorts before the previously added one
        """
        record = ensure_record(trade, self._config)

        key = chronological_key(record)
        if self._last_key is not None and key < self._last_key:
            raise ValueError(
                f"Trade {record.trade_id or record.entry_timestamp.isoformat()} is earlier than the last added trade; "
                "add trades in chronological order"
            )
        self._last_key = key
        self._trade_count += 1

        r_multiple = record.r_multiple
        outcome = record.outcome
        if r_multiple is None:
            self._skipped += 1
            if not self._count_skipped:
                return
            r_multiple = 0.0
            outcome = TradeOutcome.BREAKEVEN

        self._total_r += r_multiple
        self._update_drawdown(r_multiple)

        if outcome == TradeOutcome.WIN:
            self._wins += 1
            self._gross_profit_r += r_multiple
            self._consecutive_wins += 1
            self._consecutive_losses = 0
            self._max_consecutive_wins = max(self._max_consecutive_wins, self._consecutive_wins)
            if record.mfe is not None and record.mfe > 0:
                self._efficiency_sum += r_multiple / record.mfe * 100.0
                self._efficiency_count += 1
        elif outcome == TradeOutcome.LOSS:
            self._losses += 1
            self._loss_sum_r += r_multiple
            self._consecutive_losses += 1
            self._consecutive_wins = 0
            self._max_consecutive_losses = max(self._max_consecutive_losses, self._consecutive_losses)
        else:
            self._breakevens += 1
            self._consecutive_wins = 0
            self._consecutive_losses = 0

        if record.rule_adherence_score is not None:
            self._adherence_sum += float(record.rule_adherence_score)
            self._adherence_count += 1

    def add_trades(self, trades: Iterable[TradeInput]) -> None:
        """Add several trades, in the order given."""
        for trade in trades:
            self.add_trade(trade)

    def _update_drawdown(self, r_multiple: float) -> None:
        self._cumulative_r += r_multiple
        self._peak_r = max(self._peak_r, self._cumulative_r)

        if self._peak_r > 0:
            self._current_drawdown_pct = (self._peak_r - self._cumulative_r) / self._peak_r * 100.0
        else:
            self._current_drawdown_pct = 0.0

        self._max_drawdown_pct = max(self._max_drawdown_pct, self._current_drawdown_pct)

    @property
    def metrics(self) -> PerformanceMetrics:
        """Current aggregate of every trade added so far."""
        return compose_metrics(
            wins=self._wins,
            losses=self._losses,
            breakevens=self._breakevens,
            total_r=self._total_r,
            gross_profit_r=self._gross_profit_r,
            loss_sum_r=self._loss_sum_r,
            max_drawdown_r=self._max_drawdown_pct,
            streaks=self.streaks,
            adherence_sum=self._adherence_sum,
            adherence_count=self._adherence_count,
            efficiency_sum=self._efficiency_sum,
            efficiency_count=self._efficiency_count,
            skipped_trades=self._skipped,
        )

    @property
    def streaks(self) -> StreakSummary:
        """Longest win and loss runs so far."""
        return StreakSummary(longest_win=self._max_consecutive_wins, longest_loss=self._max_consecutive_losses)

    @property
    def current_drawdown_pct(self) -> float:
        """Current decline from the peak of cumulative R, in percent."""
        return self._current_drawdown_pct

    @property
    def peak_r(self) -> float:
        """Highest cumulative R reached (never below 0)."""
        return self._peak_r

    @property
    def cumulative_r(self) -> float:
        """Cumulative R of the included trades."""
        return self._cumulative_r

    def __len__(self) -> int:
        """Number of trades added, including skipped ones."""
        return self._trade_count
