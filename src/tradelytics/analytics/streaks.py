"""Win/loss streak tracking."""

from collections.abc import Iterable

from tradelytics.analytics.models import StreakSummary, TradeOutcome, TradeRecord
from tradelytics.analytics.normalizer import sort_chronologically


def calculate_streaks(trades: Iterable[TradeRecord]) -> StreakSummary:
    """
    Longest consecutive win and loss runs in chronological order.

    A win extends the win run and ends the loss run (and vice versa); a
    Breakeven trade ends both. Trades without an outcome are ignored.

    Example:
        >>> calculate_streaks(trades)  # W W L W W W BE L L
        StreakSummary(longest_win=3, longest_loss=2)
    """
    consecutive_wins = 0
    consecutive_losses = 0
    longest_win = 0
    longest_loss = 0

    for trade in sort_chronologically(trades):
        if trade.outcome is None:
            continue

        if trade.outcome == TradeOutcome.WIN:
            consecutive_wins += 1
            consecutive_losses = 0
            longest_win = max(longest_win, consecutive_wins)
        elif trade.outcome == TradeOutcome.LOSS:
            consecutive_losses += 1
            consecutive_wins = 0
            longest_loss = max(longest_loss, consecutive_losses)
        else:
            consecutive_wins = 0
            consecutive_losses = 0

    return StreakSummary(longest_win=longest_win, longest_loss=longest_loss)
