"""Manually recorded portfolio value snapshots."""

import logging
import math
from typing import Optional

from tradejournal.db.store import DataStore
from tradejournal.errors import InvalidInputError
from tradejournal.models import PortfolioSnapshot

logger = logging.getLogger(__name__)


class SnapshotService:
    """Owner-scoped portfolio snapshots."""

    def __init__(self, data_store: DataStore):
        self._store = data_store

    def create_snapshot(
        self,
        owner_id: str,
        date: int,
        total_value: float,
        cash_balance: Optional[float] = None,
    ) -> PortfolioSnapshot:
        """Record a user-entered snapshot.

        Raises:
            InvalidInputError: If a value is not a finite number.
        """
        if not math.isfinite(total_value):
            raise InvalidInputError("Total value must be a finite number")
        if cash_balance is not None and not math.isfinite(cash_balance):
            raise InvalidInputError("Cash balance must be a finite number")

        snapshot = self._store.insert_snapshot(
            PortfolioSnapshot(
                owner_id=owner_id,
                date=date,
                total_value=total_value,
                cash_balance=cash_balance,
                source="manual",
            )
        )
        logger.info("Recorded portfolio snapshot %s: %s", snapshot.id, total_value)
        return snapshot

    def list_snapshots(self, owner_id: str) -> list[PortfolioSnapshot]:
        """Get the owner's snapshots, newest date first."""
        return sorted(
            self._store.list_snapshots(owner_id),
            key=lambda s: (s.date, s.id or 0),
            reverse=True,
        )

    def get_latest_snapshot(self, owner_id: str) -> Optional[PortfolioSnapshot]:
        snapshots = self.list_snapshots(owner_id)
        return snapshots[0] if snapshots else None
