"""Average-cost position tracking and realized P&L.

Trades are replayed in chronological order. Each ``(ticker, direction)``
pair keeps a running weighted-average entry cost:

* long positions: buy opens, sell closes
* short positions: sell opens, buy closes

A closing trade realizes ``(price - average_cost) * quantity`` for longs and
``(average_cost - price) * quantity`` for shorts, then reduces the cost basis
by ``average_cost * quantity``. Closing more than is open is allowed and
realizes P&L against whatever average cost is on record (zero if nothing was
ever opened).
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from tradejournal.models import Position, PositionKey, Trade

# Quantities below this are treated as flat in reports
FLAT_EPSILON = 1e-4


@dataclass
class PositionTracker:
    """Running state of one position while trades are replayed."""

    ticker: str
    direction: str
    net_quantity: float = 0.0
    total_entry_cost: float = 0.0
    total_entry_quantity: float = 0.0

    @property
    def average_cost(self) -> float:
        if self.total_entry_quantity > 0:
            return self.total_entry_cost / self.total_entry_quantity
        return 0.0

    def open(self, price: float, quantity: float) -> None:
        self.net_quantity += quantity
        self.total_entry_cost += price * quantity
        self.total_entry_quantity += quantity

    def close(self, price: float, quantity: float) -> float:
        """Close ``quantity`` at ``price`` and return the realized P&L."""
        average_cost = self.average_cost
        if self.direction == "long":
            realized = (price - average_cost) * quantity
        else:
            realized = (average_cost - price) * quantity

        self.total_entry_cost = max(0.0, self.total_entry_cost - average_cost * quantity)
        self.total_entry_quantity = max(0.0, self.total_entry_quantity - quantity)
        if self.total_entry_quantity == 0:
            self.total_entry_cost = 0.0

        self.net_quantity -= quantity
        return realized


def is_opening_trade(side: str, direction: str) -> bool:
    """Whether a trade increases its position."""
    return (direction == "long" and side == "buy") or (
        direction == "short" and side == "sell"
    )


def is_flat(quantity: float) -> bool:
    return abs(quantity) < FLAT_EPSILON


def _replay(
    trades: Iterable[Trade],
    trackers: dict[PositionKey, PositionTracker],
) -> Iterator[tuple[Trade, Optional[float]]]:
    # sorted() is stable, so same-date trades keep their input order
    ordered = sorted(trades, key=lambda trade: trade.date)

    for trade in ordered:
        key = PositionKey(trade.ticker, trade.direction)
        tracker = trackers.get(key)
        if tracker is None:
            tracker = PositionTracker(ticker=trade.ticker, direction=trade.direction)
            trackers[key] = tracker

        if is_opening_trade(trade.side, trade.direction):
            tracker.open(trade.price, trade.quantity)
            realized = None
        else:
            realized = tracker.close(trade.price, trade.quantity)

        yield trade, realized


def build_position_trackers(trades: Iterable[Trade]) -> dict[PositionKey, PositionTracker]:
    """Replay all trades and return the final tracker of every position."""
    trackers: dict[PositionKey, PositionTracker] = {}
    for _ in _replay(trades, trackers):
        pass
    return trackers


def calculate_trades_pl(trades: Iterable[Trade]) -> dict[int, Optional[float]]:
    """Calculate realized P&L for each trade.

    Args:
        trades: Trades in any order. Each must have a database id.

    Returns:
        Mapping of trade id to realized P&L; None for opening trades.
    """
    return {trade.id: realized for trade, realized in _replay(trades, {})}


def calculate_positions(trades: Iterable[Trade]) -> list[Position]:
    """Calculate currently open positions.

    Only positions with a strictly positive net quantity are reported; the
    average cost is that of the currently open portion.

    Returns:
        Positions sorted by ticker, then direction.
    """
    trackers = build_position_trackers(trades)
    return [
        Position(
            ticker=tracker.ticker,
            direction=tracker.direction,
            quantity=tracker.net_quantity,
            average_cost=tracker.average_cost,
        )
        for key, tracker in sorted(trackers.items())
        if tracker.net_quantity > 0
    ]


def total_realized_pl(pl_by_trade: dict[int, Optional[float]]) -> float:
    return sum(pl for pl in pl_by_trade.values() if pl is not None)
