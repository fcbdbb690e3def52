"""Owner-scoped services over the data store."""

from tradejournal.services.accounts import AccountService
from tradejournal.services.planning import PlanningService
from tradejournal.services.snapshots import SnapshotService
from tradejournal.services.trades import TradeService

__all__ = ["AccountService", "PlanningService", "SnapshotService", "TradeService"]
