"""Position, P&L and analytics calculations."""

from tradejournal.accounting.analytics import DashboardStats, get_dashboard_stats
from tradejournal.accounting.pnl import (
    FLAT_EPSILON,
    PositionTracker,
    calculate_positions,
    calculate_trades_pl,
    is_flat,
)

__all__ = [
    "FLAT_EPSILON",
    "DashboardStats",
    "PositionTracker",
    "calculate_positions",
    "calculate_trades_pl",
    "get_dashboard_stats",
    "is_flat",
]
