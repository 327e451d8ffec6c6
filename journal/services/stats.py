"""Aggregate performance stats over a user's trades."""

from collections.abc import Iterable
from typing import Any

from journal.schemas.trade import TradeStats


def compute_trade_stats(rows: Iterable[Any]) -> TradeStats:
    """Fold trades into win rate, P&L totals and average R-multiple.

    ``rows`` may be Trade models or result rows exposing ``realised_win``,
    ``realised_loss`` and ``r_multiple``. The win rate is taken over all
    trades, so a trade with no recorded outcome counts as a non-winner.
    """
    total_trades = 0
    winners = 0
    losers = 0
    total_profit = 0.0
    total_loss = 0.0
    r_sum = 0.0
    r_count = 0

    for row in rows:
        total_trades += 1
        win = row.realised_win
        loss = row.realised_loss
        if win is not None and win > 0:
            winners += 1
        if loss is not None and loss > 0:
            losers += 1
        total_profit += win or 0
        total_loss += loss or 0
        if row.r_multiple is not None:
            r_sum += row.r_multiple
            r_count += 1

    win_rate = winners / total_trades * 100 if total_trades else 0.0
    return TradeStats(
        total_trades=total_trades,
        winners=winners,
        losers=losers,
        win_rate=win_rate,
        total_profit=total_profit,
        total_loss=total_loss,
        net_pnl=total_profit - total_loss,
        avg_r_multiple=r_sum / r_count if r_count else 0.0,
    )
