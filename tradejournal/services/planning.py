"""Campaigns and trade plans, with explicit status transition tables."""

import logging
import time
from typing import Optional

from tradejournal.db.store import DataStore
from tradejournal.errors import InvalidInputError, InvalidTransitionError, assert_owner
from tradejournal.imports.validation import normalize_ticker
from tradejournal.models import Campaign, CampaignNote, TradePlan

logger = logging.getLogger(__name__)

TRADE_PLAN_TRANSITIONS: dict[str, frozenset[str]] = {
    "idea": frozenset({"watching", "active", "closed"}),
    "watching": frozenset({"idea", "active", "closed"}),
    "active": frozenset({"watching", "closed"}),
    "closed": frozenset({"idea", "watching", "active"}),
}

CAMPAIGN_TRANSITIONS: dict[str, frozenset[str]] = {
    "planning": frozenset({"active", "closed"}),
    "active": frozenset({"planning", "closed"}),
    "closed": frozenset({"planning", "active"}),
}

OPEN_TRADE_PLAN_STATUSES = ("active", "idea", "watching")


def now_millis() -> int:
    return int(time.time() * 1000)


def is_valid_transition(transitions: dict[str, frozenset[str]], current: str, target: str) -> bool:
    """Whether ``current -> target`` is allowed; staying put always is."""
    if current == target:
        return True
    return target in transitions.get(current, frozenset())


def _plan_sort_key(plan: TradePlan) -> tuple:
    # Explicit sort order first, then newest
    sort_order = plan.sort_order if plan.sort_order is not None else float("inf")
    return (sort_order, -plan.created_at, -(plan.id or 0))


class PlanningService:
    """Owner-scoped operations on campaigns and trade plans."""

    def __init__(self, data_store: DataStore):
        self._store = data_store

    # ==================== Campaigns ====================

    def create_campaign(self, owner_id: str, name: str, thesis: str = "") -> Campaign:
        """Create a campaign in ``planning`` status."""
        campaign = self._store.insert_campaign(
            Campaign(owner_id=owner_id, name=name, thesis=thesis, created_at=now_millis())
        )
        logger.info("Created campaign %s (%s)", campaign.id, name)
        return campaign

    def get_campaign(self, owner_id: str, campaign_id: int) -> Campaign:
        return assert_owner(self._store.get_campaign(campaign_id), owner_id, "Campaign not found")

    def update_campaign(
        self,
        owner_id: str,
        campaign_id: int,
        name: Optional[str] = None,
        thesis: Optional[str] = None,
        retrospective: Optional[str] = None,
    ) -> Campaign:
        campaign = self.get_campaign(owner_id, campaign_id)
        patch = {
            key: value
            for key, value in (("name", name), ("thesis", thesis), ("retrospective", retrospective))
            if value is not None
        }
        updated = campaign.model_copy(update=patch)
        self._store.update_campaign(updated)
        return updated

    def update_campaign_status(
        self,
        owner_id: str,
        campaign_id: int,
        status: str,
        outcome: Optional[str] = None,
    ) -> Campaign:
        """Move a campaign to a new status.

        Closing requires an outcome and stamps ``closed_at``.

        Raises:
            NotFoundError: If the campaign is not the owner's.
            InvalidInputError: If closing without an outcome.
            InvalidTransitionError: If the transition is not allowed.
        """
        campaign = self.get_campaign(owner_id, campaign_id)

        if status == "closed" and not outcome:
            raise InvalidInputError("Outcome is required when closing a campaign")
        if not is_valid_transition(CAMPAIGN_TRANSITIONS, campaign.status, status):
            raise InvalidTransitionError(
                f"Invalid campaign status transition: {campaign.status} -> {status}"
            )

        patch: dict = {"status": status}
        if status == "closed":
            patch["outcome"] = outcome
            patch["closed_at"] = now_millis()

        updated = Campaign(**{**campaign.model_dump(), **patch})
        self._store.update_campaign(updated)
        logger.info("Campaign %s: %s -> %s", campaign_id, campaign.status, status)
        return updated

    def list_campaigns(self, owner_id: str, status: Optional[str] = None) -> list[Campaign]:
        campaigns = self._store.list_campaigns(owner_id)
        if status is not None:
            campaigns = [c for c in campaigns if c.status == status]
        return sorted(campaigns, key=lambda c: (-c.created_at, -(c.id or 0)))

    def add_campaign_note(self, owner_id: str, campaign_id: int, content: str) -> CampaignNote:
        """Add a note to a campaign.

        Raises:
            NotFoundError: If the campaign is not the owner's.
            InvalidInputError: If the note is blank.
        """
        self.get_campaign(owner_id, campaign_id)
        if not content.strip():
            raise InvalidInputError("Note content is required")

        note = self._store.insert_campaign_note(
            CampaignNote(
                owner_id=owner_id,
                campaign_id=campaign_id,
                content=content.strip(),
                created_at=now_millis(),
            )
        )
        logger.debug("Added note %s to campaign %s", note.id, campaign_id)
        return note

    def list_campaign_notes(self, owner_id: str, campaign_id: int) -> list[CampaignNote]:
        """Get a campaign's notes, oldest first."""
        self.get_campaign(owner_id, campaign_id)
        notes = self._store.list_campaign_notes(owner_id, campaign_id)
        return sorted(notes, key=lambda n: (n.created_at, n.id or 0))

    # ==================== Trade plans ====================

    def create_trade_plan(
        self,
        owner_id: str,
        name: str,
        instrument_symbol: str,
        campaign_id: Optional[int] = None,
        status: str = "idea",
        direction: str = "long",
        entry_conditions: str = "",
        exit_conditions: str = "",
        target_conditions: str = "",
        rationale: Optional[str] = None,
        sort_order: Optional[int] = None,
    ) -> TradePlan:
        """Create a trade plan.

        Raises:
            NotFoundError: If the campaign is not the owner's.
            InvalidInputError: If the instrument symbol is blank.
        """
        if campaign_id is not None:
            self.get_campaign(owner_id, campaign_id)

        symbol = normalize_ticker(instrument_symbol)
        if not symbol:
            raise InvalidInputError("Instrument symbol is required")

        plan = self._store.insert_trade_plan(
            TradePlan(
                owner_id=owner_id,
                name=name,
                instrument_symbol=symbol,
                direction=direction,
                status=status,
                campaign_id=campaign_id,
                entry_conditions=entry_conditions,
                exit_conditions=exit_conditions,
                target_conditions=target_conditions,
                rationale=rationale,
                sort_order=sort_order,
                created_at=now_millis(),
            )
        )
        logger.info("Created trade plan %s (%s)", plan.id, symbol)
        return plan

    def get_trade_plan(self, owner_id: str, trade_plan_id: int) -> TradePlan:
        return assert_owner(self._store.get_trade_plan(trade_plan_id), owner_id, "Trade plan not found")

    def update_trade_plan(self, owner_id: str, trade_plan_id: int, **updates) -> TradePlan:
        """Update descriptive fields of a plan.

        Passing ``campaign_id=None`` unlinks the campaign.

        Raises:
            NotFoundError: If the plan or new campaign is not the owner's.
        """
        plan = self.get_trade_plan(owner_id, trade_plan_id)
        if "status" in updates or "closed_at" in updates:
            raise ValueError("Use update_trade_plan_status to change status")
        if updates.get("campaign_id") is not None:
            self.get_campaign(owner_id, updates["campaign_id"])
        if "instrument_symbol" in updates:
            updates["instrument_symbol"] = normalize_ticker(updates["instrument_symbol"])

        updated = TradePlan(**{**plan.model_dump(), **updates})
        self._store.update_trade_plan(updated)
        return updated

    def update_trade_plan_status(self, owner_id: str, trade_plan_id: int, status: str) -> TradePlan:
        """Move a plan to a new status.

        The transition table and the closed-campaign guard are checked
        independently: a plan linked to a closed campaign can only be closed.

        Raises:
            NotFoundError: If the plan or its campaign is not the owner's.
            InvalidTransitionError: If the transition is not allowed.
        """
        plan = self.get_trade_plan(owner_id, trade_plan_id)

        if not is_valid_transition(TRADE_PLAN_TRANSITIONS, plan.status, status):
            raise InvalidTransitionError(
                f"Invalid trade plan status transition: {plan.status} -> {status}"
            )

        if plan.campaign_id is not None and status != "closed":
            campaign = assert_owner(
                self._store.get_campaign(plan.campaign_id), owner_id, "Linked campaign not found"
            )
            if campaign.status == "closed":
                raise InvalidTransitionError(
                    "Cannot reopen or activate a trade plan linked to a closed campaign"
                )

        closed_at = now_millis() if status == "closed" else None
        updated = TradePlan(**{**plan.model_dump(), "status": status, "closed_at": closed_at})
        self._store.update_trade_plan(updated)
        logger.info("Trade plan %s: %s -> %s", trade_plan_id, plan.status, status)
        return updated

    def list_trade_plans(
        self,
        owner_id: str,
        status: Optional[str] = None,
        campaign_id: Optional[int] = None,
    ) -> list[TradePlan]:
        """List plans, sorted by explicit sort order then newest."""
        plans = self._store.list_trade_plans(owner_id)
        if status is not None:
            plans = [p for p in plans if p.status == status]
        if campaign_id is not None:
            plans = [p for p in plans if p.campaign_id == campaign_id]
        return sorted(plans, key=_plan_sort_key)

    def list_open_trade_plans(self, owner_id: str) -> list[TradePlan]:
        """List plans that are not closed, newest first."""
        plans = [
            p for p in self._store.list_trade_plans(owner_id)
            if p.status in OPEN_TRADE_PLAN_STATUSES
        ]
        return sorted(plans, key=lambda p: (-p.created_at, -(p.id or 0)))
