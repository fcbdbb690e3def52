"""Import ingestion: dedup, validation and acceptance of inbox trades.

These functions are pure. They work on snapshots of an owner's canonical
trades and pending inbox rows; persistence is handled by
:class:`tradejournal.imports.inbox.InboxService`.
"""

import logging
from typing import Callable, Iterable, NamedTuple, Optional

from tradejournal.errors import assert_owner
from tradejournal.imports.identity import tag_execution_identity
from tradejournal.imports.ibkr import parse_ibkr_csv
from tradejournal.imports.kraken import parse_kraken_csv
from tradejournal.imports.linkage import resolve_campaign_linkage
from tradejournal.imports.reader import ParseResult
from tradejournal.imports.validation import validate_inbox_trade_candidate
from tradejournal.models import (
    PENDING_REVIEW,
    AcceptResult,
    ImportSummary,
    InboxTrade,
    InboxTradeCandidate,
    Trade,
    TradePlan,
)

logger = logging.getLogger(__name__)

NOT_PENDING_REVIEW = "Trade is not pending review"
TRADE_PLAN_NOT_FOUND = "Trade plan not found"

# Fields recomputed or assigned when a candidate becomes an inbox row
_INBOX_ROW_MANAGED_FIELDS = {
    "ticker",
    "validation_errors",
    "validation_warnings",
    "id",
    "owner_id",
    "status",
}

PARSERS: dict[str, Callable[[str], ParseResult]] = {
    "ibkr": parse_ibkr_csv,
    "kraken": parse_kraken_csv,
}


class DedupKey(NamedTuple):
    """Identity of an execution across canonical trades and the inbox."""

    source: str
    external_id: str


def dedup_key(record) -> Optional[DedupKey]:
    """Dedup key of a trade or candidate, or None without an external id."""
    if not record.external_id or not record.source:
        return None
    return DedupKey(record.source, record.external_id)


def parse_export(source: str, csv_content: str) -> ParseResult:
    """Parse a brokerage export and tag every candidate with its identity.

    Raises:
        ValueError: If ``source`` is not a supported brokerage.
    """
    try:
        parser = PARSERS[source]
    except KeyError:
        raise ValueError(f"Unsupported brokerage source: {source}") from None

    result = parser(csv_content)
    return result.model_copy(
        update={"trades": [tag_execution_identity(trade) for trade in result.trades]}
    )


def import_candidates(
    owner_id: str,
    candidates: Iterable[InboxTradeCandidate],
    existing_trades: Iterable[Trade],
    existing_pending_inbox: Iterable[InboxTrade],
) -> ImportSummary:
    """Turn candidates into new pending inbox rows, skipping duplicates.

    A candidate is a duplicate when its ``(source, external_id)`` already
    exists among the owner's canonical trades, pending inbox rows, or earlier
    candidates of the same batch. Candidates without an external id are
    always imported. Rows with validation errors are still imported so they
    can be corrected by hand.

    Args:
        owner_id: Owner the rows are imported for.
        candidates: Normalized candidates from a parser.
        existing_trades: The owner's canonical trades.
        existing_pending_inbox: The owner's pending inbox rows.

    Returns:
        Counts plus the new rows (without database ids).
    """
    seen: set[DedupKey] = set()
    for record in list(existing_trades) + list(existing_pending_inbox):
        key = dedup_key(record)
        if key is not None:
            seen.add(key)

    new_rows = []
    skipped_duplicates = 0
    with_errors = 0
    with_warnings = 0

    for candidate in candidates:
        key = dedup_key(candidate)
        if key is not None:
            if key in seen:
                skipped_duplicates += 1
                logger.debug("Skipping duplicate execution %s|%s", key.source, key.external_id)
                continue
            seen.add(key)

        validation = validate_inbox_trade_candidate(candidate, include_existing=False)
        row = InboxTrade(
            **candidate.model_dump(exclude=_INBOX_ROW_MANAGED_FIELDS),
            ticker=validation.normalized_ticker,
            validation_errors=validation.validation_errors,
            validation_warnings=validation.validation_warnings,
            owner_id=owner_id,
            status=PENDING_REVIEW,
        )
        if row.validation_errors:
            with_errors += 1
        if row.validation_warnings:
            with_warnings += 1
        new_rows.append(row)

    return ImportSummary(
        imported=len(new_rows),
        skipped_duplicates=skipped_duplicates,
        with_validation_errors=with_errors,
        with_warnings=with_warnings,
        new_inbox_rows=new_rows,
    )


def accept_inbox_trade(
    owner_id: str,
    inbox_trade: InboxTrade,
    notes: Optional[str] = None,
    trade_plan_id: Optional[int] = None,
    get_trade_plan: Optional[Callable[[int], Optional[TradePlan]]] = None,
    campaign_id: Optional[int] = None,
) -> AcceptResult:
    """Build the canonical trade for a pending inbox row.

    Rows that are not pending or fail validation are returned as failed
    results so a batch accept can keep going. A referenced trade plan that
    is missing or owned by someone else is an ownership failure and raises.

    Args:
        owner_id: Owner accepting the row.
        inbox_trade: Latest stored state of the row.
        notes: Optional notes overriding the row's notes.
        trade_plan_id: Optional trade plan overriding the row's link.
        get_trade_plan: Lookup used to check the linked plan's owner.
        campaign_id: Optional campaign to link directly.

    Returns:
        AcceptResult with the new (unsaved) trade on success. On validation
        failure ``inbox_trade`` holds the row with refreshed diagnostics.

    Raises:
        NotFoundError: If the linked trade plan is not the owner's.
        InvalidInputError: If ``campaign_id`` differs from the plan's campaign.
    """
    if not inbox_trade.is_pending:
        return AcceptResult(accepted=False, error=NOT_PENDING_REVIEW)

    validation = validate_inbox_trade_candidate(inbox_trade, include_existing=False)
    if validation.validation_errors:
        refreshed = inbox_trade.model_copy(
            update={
                "validation_errors": validation.validation_errors,
                "validation_warnings": validation.validation_warnings,
            }
        )
        return AcceptResult(
            accepted=False,
            error="; ".join(validation.validation_errors),
            inbox_trade=refreshed,
        )

    plan_id = trade_plan_id if trade_plan_id is not None else inbox_trade.trade_plan_id
    plan_campaign_id = None
    if plan_id is not None and get_trade_plan is not None:
        plan = assert_owner(get_trade_plan(plan_id), owner_id, TRADE_PLAN_NOT_FOUND)
        plan_campaign_id = plan.campaign_id

    trade = Trade(
        owner_id=owner_id,
        ticker=validation.normalized_ticker,
        asset_type=inbox_trade.asset_type,
        side=inbox_trade.side,
        direction=inbox_trade.direction,
        price=inbox_trade.price,
        quantity=inbox_trade.quantity,
        date=inbox_trade.date,
        fees=inbox_trade.fees,
        taxes=inbox_trade.taxes,
        notes=notes if notes is not None else inbox_trade.notes,
        order_type=inbox_trade.order_type,
        external_id=inbox_trade.external_id,
        brokerage_account_id=inbox_trade.brokerage_account_id,
        source=inbox_trade.source,
        trade_plan_id=plan_id,
        campaign_id=resolve_campaign_linkage(plan_id, plan_campaign_id, campaign_id),
    )
    return AcceptResult(accepted=True, trade=trade)
