"""Import inbox state machine backed by the data store.

An inbox row only ever exists in ``pending_review``. Accepting a row
materializes a canonical trade and removes the row; deleting a row removes it
without touching canonical trades.
"""

import logging
from typing import Iterable, Optional

from tradejournal.db.store import DataStore
from tradejournal.errors import InvalidTransitionError, TradeJournalError, assert_owner
from tradejournal.imports.ingestion import (
    NOT_PENDING_REVIEW,
    TRADE_PLAN_NOT_FOUND,
    accept_inbox_trade,
    import_candidates,
)
from tradejournal.imports.suggestion import TradePlanSuggestion, pick_trade_plan_suggestion
from tradejournal.imports.validation import validate_inbox_trade_candidate
from tradejournal.models import (
    AcceptAllResult,
    AcceptResult,
    ImportSummary,
    InboxTrade,
    InboxTradeCandidate,
    InboxTradePatch,
)

logger = logging.getLogger(__name__)

INBOX_TRADE_NOT_FOUND = "Inbox trade not found"

# Plans that can still take new executions
SUGGESTABLE_PLAN_STATUSES = ("idea", "watching", "active")


class InboxService:
    """Owner-scoped operations on the import inbox."""

    def __init__(self, data_store: DataStore):
        """Initialize the inbox service.

        Args:
            data_store: DataStore instance for persistence.
        """
        self._store = data_store

    def _get_pending(self, owner_id: str, inbox_trade_id: int) -> InboxTrade:
        inbox_trade = assert_owner(
            self._store.get_inbox_trade(inbox_trade_id),
            owner_id,
            INBOX_TRADE_NOT_FOUND,
        )
        if not inbox_trade.is_pending:
            raise InvalidTransitionError(NOT_PENDING_REVIEW)
        return inbox_trade

    def _assert_trade_plan(self, owner_id: str, trade_plan_id: Optional[int]) -> None:
        if trade_plan_id is not None:
            assert_owner(
                self._store.get_trade_plan(trade_plan_id),
                owner_id,
                TRADE_PLAN_NOT_FOUND,
            )

    def list_inbox(self, owner_id: str) -> list[InboxTrade]:
        """Get pending inbox rows, newest first."""
        rows = self._store.list_inbox_trades(owner_id)
        return sorted(rows, key=lambda row: row.date or 0, reverse=True)

    def import_candidates(
        self, owner_id: str, candidates: Iterable[InboxTradeCandidate]
    ) -> ImportSummary:
        """Import normalized candidates into the owner's inbox.

        Trade-plan references are checked for the whole batch before any row
        is written.

        Raises:
            NotFoundError: If a candidate references a trade plan the owner
                does not have.
        """
        candidates = list(candidates)
        for candidate in candidates:
            self._assert_trade_plan(owner_id, candidate.trade_plan_id)

        summary = import_candidates(
            owner_id,
            candidates,
            existing_trades=self._store.list_trades(owner_id),
            existing_pending_inbox=self._store.list_inbox_trades(owner_id),
        )
        saved = [self._store.insert_inbox_trade(row) for row in summary.new_inbox_rows]

        logger.info(
            "Imported %d inbox trades for %s (%d duplicates skipped, %d with errors)",
            summary.imported,
            owner_id,
            summary.skipped_duplicates,
            summary.with_validation_errors,
        )
        return summary.model_copy(update={"new_inbox_rows": saved})

    def update_inbox_trade(
        self, owner_id: str, inbox_trade_id: int, patch: InboxTradePatch
    ) -> InboxTrade:
        """Apply an edit to a pending row and re-validate it from scratch.

        Raises:
            NotFoundError: If the row or the referenced trade plan is not the
                owner's.
            InvalidTransitionError: If the row is not pending review.
        """
        inbox_trade = self._get_pending(owner_id, inbox_trade_id)
        merged = inbox_trade.apply_patch(patch)
        self._assert_trade_plan(owner_id, merged.trade_plan_id)

        validation = validate_inbox_trade_candidate(merged, include_existing=False)
        updated = merged.model_copy(
            update={
                "ticker": validation.normalized_ticker,
                "validation_errors": validation.validation_errors,
                "validation_warnings": validation.validation_warnings,
            }
        )
        self._store.update_inbox_trade(updated)
        logger.debug("Updated inbox trade %s", inbox_trade_id)
        return updated

    def accept_inbox_trade(
        self,
        owner_id: str,
        inbox_trade_id: int,
        notes: Optional[str] = None,
        trade_plan_id: Optional[int] = None,
        campaign_id: Optional[int] = None,
    ) -> AcceptResult:
        """Accept a pending row into the canonical trade ledger.

        The row is re-read and re-validated immediately before it is
        accepted. Rows that are not pending or not valid are returned as
        failed results.

        Raises:
            NotFoundError: If the row, the trade plan or the campaign is
                missing or not the owner's.
            InvalidInputError: If the campaign differs from the plan's.
        """
        inbox_trade = assert_owner(
            self._store.get_inbox_trade(inbox_trade_id),
            owner_id,
            INBOX_TRADE_NOT_FOUND,
        )
        if campaign_id is not None:
            assert_owner(self._store.get_campaign(campaign_id), owner_id, "Campaign not found")
        result = accept_inbox_trade(
            owner_id,
            inbox_trade,
            notes=notes,
            trade_plan_id=trade_plan_id,
            get_trade_plan=self._store.get_trade_plan,
            campaign_id=campaign_id,
        )

        if not result.accepted:
            if result.inbox_trade is not None:
                self._store.update_inbox_trade(result.inbox_trade)
            logger.info("Could not accept inbox trade %s: %s", inbox_trade_id, result.error)
            return result

        trade = self._store.insert_trade(result.trade)
        self._store.delete_inbox_trade(inbox_trade_id)
        logger.info("Accepted inbox trade %s as trade %s", inbox_trade_id, trade.id)
        return result.model_copy(update={"trade": trade})

    def accept_all(self, owner_id: str) -> AcceptAllResult:
        """Accept every pending row, continuing past individual failures."""
        accepted = 0
        skipped_invalid = 0
        errors = []

        for inbox_trade in self._store.list_inbox_trades(owner_id):
            try:
                result = self.accept_inbox_trade(owner_id, inbox_trade.id)
            except TradeJournalError as e:
                result = AcceptResult(accepted=False, error=str(e))
            if result.accepted:
                accepted += 1
            else:
                skipped_invalid += 1
                errors.append(f"{inbox_trade.id}: {result.error}")

        logger.info("Accepted %d inbox trades, skipped %d", accepted, skipped_invalid)
        return AcceptAllResult(accepted=accepted, skipped_invalid=skipped_invalid, errors=errors)

    def delete_inbox_trade(self, owner_id: str, inbox_trade_id: int) -> None:
        """Delete a pending row.

        Raises:
            NotFoundError: If the row is missing or not the owner's.
            InvalidTransitionError: If the row is not pending review.
        """
        self._get_pending(owner_id, inbox_trade_id)
        self._store.delete_inbox_trade(inbox_trade_id)
        logger.info("Deleted inbox trade %s", inbox_trade_id)

    def delete_all(self, owner_id: str) -> int:
        """Delete every pending row of the owner.

        Returns:
            Number of rows deleted.
        """
        rows = self._store.list_inbox_trades(owner_id)
        for row in rows:
            self._store.delete_inbox_trade(row.id)
        logger.info("Deleted %d inbox trades for %s", len(rows), owner_id)
        return len(rows)

    def suggest_trade_plans(self, owner_id: str) -> dict[int, TradePlanSuggestion]:
        """Suggest a trade plan for each pending row that has none linked.

        Only plans that are not closed are considered, newest first.

        Returns:
            Mapping of inbox row id to its suggestion, for rows with a match.
        """
        plans = sorted(
            (
                plan for plan in self._store.list_trade_plans(owner_id)
                if plan.status in SUGGESTABLE_PLAN_STATUSES
            ),
            key=lambda plan: (-plan.created_at, -(plan.id or 0)),
        )
        suggestions = {}
        for row in self._store.list_inbox_trades(owner_id):
            if row.trade_plan_id is not None or not row.side or not row.ticker:
                continue
            suggestion = pick_trade_plan_suggestion(row.side, row.ticker, plans)
            if suggestion.suggested_trade_plan_id is not None:
                suggestions[row.id] = suggestion
        return suggestions
