"""Canonical trade operations: manual entry, edits and reporting."""

import logging
from typing import Optional

from tradejournal.accounting.pnl import calculate_positions, calculate_trades_pl
from tradejournal.db.store import DataStore
from tradejournal.errors import InvalidTransitionError, assert_owner
from tradejournal.imports.linkage import resolve_campaign_linkage, trade_belongs_to_campaign
from tradejournal.imports.validation import normalize_ticker
from tradejournal.models import Position, Trade

logger = logging.getLogger(__name__)

TRADE_NOT_FOUND = "Trade not found"

# Fields an owner may change on an existing trade
UPDATABLE_FIELDS = {
    "ticker",
    "asset_type",
    "side",
    "direction",
    "price",
    "quantity",
    "date",
    "fees",
    "taxes",
    "notes",
    "trade_plan_id",
    "campaign_id",
}


class TradeService:
    """Owner-scoped operations on canonical trades."""

    def __init__(self, data_store: DataStore):
        self._store = data_store

    def _resolve_campaign(
        self, owner_id: str, trade_plan_id: Optional[int], campaign_id: Optional[int]
    ) -> Optional[int]:
        """Campaign the trade is linked to, directly or through its plan.

        The plan must be the owner's and the resulting campaign must be the
        owner's and not closed.
        """
        plan_campaign_id = None
        if trade_plan_id is not None:
            plan = assert_owner(
                self._store.get_trade_plan(trade_plan_id), owner_id, "Trade plan not found"
            )
            plan_campaign_id = plan.campaign_id

        resolved = resolve_campaign_linkage(trade_plan_id, plan_campaign_id, campaign_id)
        if resolved is not None:
            campaign = assert_owner(self._store.get_campaign(resolved), owner_id, "Campaign not found")
            if campaign.status == "closed":
                raise InvalidTransitionError("Cannot add trades to a closed campaign")
        return resolved

    def create_trade(self, trade: Trade) -> Trade:
        """Record a manually entered trade.

        Raises:
            NotFoundError: If the linked trade plan or campaign is not the owner's.
            InvalidInputError: If the direct campaign differs from the plan's.
            InvalidTransitionError: If the campaign is closed.
        """
        campaign_id = self._resolve_campaign(trade.owner_id, trade.trade_plan_id, trade.campaign_id)
        saved = self._store.insert_trade(
            trade.model_copy(
                update={
                    "ticker": normalize_ticker(trade.ticker) or trade.ticker,
                    "campaign_id": campaign_id,
                }
            )
        )
        logger.info("Created trade %s: %s %s %s", saved.id, saved.side, saved.quantity, saved.ticker)
        return saved

    def get_trade(self, owner_id: str, trade_id: int) -> Trade:
        return assert_owner(self._store.get_trade(trade_id), owner_id, TRADE_NOT_FOUND)

    def update_trade(self, owner_id: str, trade_id: int, **updates) -> Trade:
        """Update fields of an existing trade.

        Changing ``trade_plan_id`` without passing ``campaign_id`` takes the
        campaign from the new plan.

        Raises:
            NotFoundError: If the trade, plan or campaign is not the owner's.
            InvalidTransitionError: If the campaign is closed.
            ValueError: If an unknown or invalid field is passed.
        """
        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update trade fields: {', '.join(sorted(unknown))}")

        existing = self.get_trade(owner_id, trade_id)
        if "trade_plan_id" in updates or "campaign_id" in updates:
            updates["campaign_id"] = self._resolve_campaign(
                owner_id,
                updates.get("trade_plan_id", existing.trade_plan_id),
                updates.get(
                    "campaign_id",
                    None if "trade_plan_id" in updates else existing.campaign_id,
                ),
            )
        if updates.get("ticker"):
            updates["ticker"] = normalize_ticker(updates["ticker"])

        # Re-validate the merged record
        updated = Trade(**{**existing.model_dump(), **updates})
        self._store.update_trade(updated)
        logger.info("Updated trade %s", trade_id)
        return updated

    def delete_trade(self, owner_id: str, trade_id: int) -> None:
        self.get_trade(owner_id, trade_id)
        self._store.delete_trade(trade_id)
        logger.info("Deleted trade %s", trade_id)

    def list_trades(self, owner_id: str) -> list[Trade]:
        """Get the owner's trades, newest first."""
        return sorted(self._store.list_trades(owner_id), key=lambda t: t.date, reverse=True)

    def list_trades_with_pl(self, owner_id: str) -> list[tuple[Trade, Optional[float]]]:
        """Get the owner's trades, newest first, with each trade's realized P&L."""
        trades = self._store.list_trades(owner_id)
        pl_by_trade = calculate_trades_pl(trades)
        return [
            (trade, pl_by_trade[trade.id])
            for trade in sorted(trades, key=lambda t: t.date, reverse=True)
        ]

    def get_positions(self, owner_id: str) -> list[Position]:
        return calculate_positions(self._store.list_trades(owner_id))

    def list_campaign_trades(self, owner_id: str, campaign_id: int) -> list[Trade]:
        """Get trades linked to a campaign directly or through a plan, newest first.

        Raises:
            NotFoundError: If the campaign is not the owner's.
        """
        assert_owner(self._store.get_campaign(campaign_id), owner_id, "Campaign not found")
        campaign_by_plan = {
            plan.id: plan.campaign_id for plan in self._store.list_trade_plans(owner_id)
        }
        trades = [
            trade
            for trade in self._store.list_trades(owner_id)
            if trade_belongs_to_campaign(
                campaign_id, trade.campaign_id, campaign_by_plan.get(trade.trade_plan_id)
            )
        ]
        return sorted(trades, key=lambda t: t.date, reverse=True)
