"""Tests for the pure import and accept functions.

**Feature: trade-journal**
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradejournal.errors import InvalidInputError, NotFoundError
from tradejournal.imports.ingestion import (
    NOT_PENDING_REVIEW,
    DedupKey,
    accept_inbox_trade,
    dedup_key,
    import_candidates,
    parse_export,
)
from tradejournal.imports.validation import NO_EXTERNAL_ID, PRICE_REQUIRED
from tradejournal.models import PENDING_REVIEW, InboxTrade, InboxTradeCandidate, Trade, TradePlan

OWNER = "owner-1"


def candidate(**overrides) -> InboxTradeCandidate:
    fields = {
        "source": "ibkr",
        "ticker": "aapl",
        "asset_type": "stock",
        "side": "buy",
        "direction": "long",
        "price": 180.0,
        "quantity": 10,
        "date": 1_705_311_000_000,
        "external_id": "X1",
    }
    fields.update(overrides)
    return InboxTradeCandidate(**fields)


def inbox_row(**overrides) -> InboxTrade:
    return InboxTrade(owner_id=OWNER, **candidate(**overrides).model_dump())


def canonical_trade(source: str = "ibkr", external_id: str = "X1") -> Trade:
    return Trade(
        id=1,
        owner_id=OWNER,
        ticker="AAPL",
        asset_type="stock",
        side="buy",
        direction="long",
        price=180.0,
        quantity=10,
        date=1_705_311_000_000,
        external_id=external_id,
        source=source,
    )


class TestImportDedup:
    """
    **Feature: trade-journal, Property 6: Import dedup**

    Duplicates within a batch and against existing trades are skipped.
    """

    def test_duplicate_within_batch(self):
        summary = import_candidates(OWNER, [candidate(), candidate()], [], [])

        assert summary.imported == 1
        assert summary.skipped_duplicates == 1

    def test_duplicate_of_canonical_trade(self):
        summary = import_candidates(OWNER, [candidate()], [canonical_trade()], [])

        assert summary.imported == 0
        assert summary.skipped_duplicates == 1
        assert summary.new_inbox_rows == []

    def test_duplicate_of_pending_inbox_row(self):
        summary = import_candidates(OWNER, [candidate()], [], [inbox_row()])

        assert summary.imported == 0
        assert summary.skipped_duplicates == 1

    def test_same_external_id_other_source_is_not_duplicate(self):
        summary = import_candidates(OWNER, [candidate()], [canonical_trade(source="kraken")], [])

        assert summary.imported == 1

    def test_candidates_without_external_id_are_always_imported(self):
        summary = import_candidates(
            OWNER, [candidate(external_id=None), candidate(external_id=None)], [], []
        )

        assert summary.imported == 2
        assert summary.with_warnings == 2
        assert summary.new_inbox_rows[0].validation_warnings == [NO_EXTERNAL_ID]

    @given(
        ids=st.lists(st.one_of(st.none(), st.sampled_from(["A", "B", "C", "D"])), max_size=20)
    )
    @settings(max_examples=100)
    def test_counts_add_up(self, ids: list):
        candidates = [candidate(external_id=external_id) for external_id in ids]

        summary = import_candidates(OWNER, candidates, [], [])

        distinct = {external_id for external_id in ids if external_id is not None}
        without_id = sum(1 for external_id in ids if external_id is None)
        assert summary.imported == len(distinct) + without_id
        assert summary.imported + summary.skipped_duplicates == len(ids)


class TestImportRows:
    """Tests for the shape of imported inbox rows."""

    def test_rows_are_pending_and_normalized(self):
        summary = import_candidates(OWNER, [candidate(ticker=" msft ")], [], [])

        row = summary.new_inbox_rows[0]
        assert row.owner_id == OWNER
        assert row.status == PENDING_REVIEW
        assert row.ticker == "MSFT"
        assert row.id is None

    def test_invalid_rows_are_still_imported(self):
        summary = import_candidates(
            OWNER, [candidate(price=None, validation_errors=["stale error"])], [], []
        )

        assert summary.imported == 1
        assert summary.with_validation_errors == 1
        assert summary.new_inbox_rows[0].validation_errors == [PRICE_REQUIRED]


class TestAcceptGuard:
    """
    **Feature: trade-journal, Property 9: Accept transition guard**
    """

    def test_not_pending_row_is_rejected(self):
        row = inbox_row().model_copy(update={"status": "accepted"})

        result = accept_inbox_trade(OWNER, row)

        assert result.accepted is False
        assert result.error == NOT_PENDING_REVIEW
        assert result.trade is None


class TestAcceptInboxTrade:
    """Tests for building canonical trades from inbox rows."""

    def test_valid_row_becomes_trade(self):
        result = accept_inbox_trade(OWNER, inbox_row(ticker="aapl", notes="from import"))

        assert result.accepted is True
        trade = result.trade
        assert trade.ticker == "AAPL"
        assert trade.owner_id == OWNER
        assert trade.source == "ibkr"
        assert trade.external_id == "X1"
        assert trade.notes == "from import"
        assert trade.id is None

    def test_overrides_replace_notes_and_plan(self):
        plan = TradePlan(id=7, owner_id=OWNER, name="Plan", instrument_symbol="AAPL")

        result = accept_inbox_trade(
            OWNER,
            inbox_row(notes="old", trade_plan_id=3),
            notes="new",
            trade_plan_id=7,
            get_trade_plan=lambda plan_id: plan if plan_id == 7 else None,
        )

        assert result.trade.notes == "new"
        assert result.trade.trade_plan_id == 7

    def test_invalid_row_returns_refreshed_diagnostics(self):
        row = inbox_row(price=None, quantity=0, validation_errors=["stale"])

        result = accept_inbox_trade(OWNER, row)

        assert result.accepted is False
        assert result.error == "Price is required and must be > 0; Quantity is required and must be > 0"
        assert result.inbox_trade.validation_errors == [
            "Price is required and must be > 0",
            "Quantity is required and must be > 0",
        ]

    @pytest.mark.parametrize("plan_owner", [None, "someone-else"])
    def test_foreign_or_missing_plan_raises(self, plan_owner):
        plan = (
            TradePlan(id=7, owner_id=plan_owner, name="Plan", instrument_symbol="AAPL")
            if plan_owner
            else None
        )

        with pytest.raises(NotFoundError, match="Trade plan not found"):
            accept_inbox_trade(OWNER, inbox_row(trade_plan_id=7), get_trade_plan=lambda _: plan)

    def test_campaign_comes_from_plan(self):
        plan = TradePlan(id=7, owner_id=OWNER, name="Plan", instrument_symbol="AAPL", campaign_id=3)

        result = accept_inbox_trade(
            OWNER, inbox_row(), trade_plan_id=7, get_trade_plan=lambda _: plan
        )

        assert result.trade.campaign_id == 3

    def test_direct_campaign_without_plan(self):
        result = accept_inbox_trade(OWNER, inbox_row(), campaign_id=5)

        assert result.trade.trade_plan_id is None
        assert result.trade.campaign_id == 5

    def test_direct_campaign_must_match_plan_campaign(self):
        plan = TradePlan(id=7, owner_id=OWNER, name="Plan", instrument_symbol="AAPL", campaign_id=3)

        with pytest.raises(InvalidInputError, match="must match trade plan campaign"):
            accept_inbox_trade(
                OWNER, inbox_row(), trade_plan_id=7, get_trade_plan=lambda _: plan, campaign_id=4
            )


class TestParseExport:
    """Tests for parser dispatch and identity tagging."""

    def test_unknown_source(self):
        with pytest.raises(ValueError):
            parse_export("schwab", "")

    def test_ibkr_rows_keep_native_ids(self):
        csv = (
            "ClientAccountID,Symbol,Buy/Sell,Open/CloseIndicator,TradePrice,Quantity,DateTime\n"
            "U1,AAPL,BUY,O,180,10,20240115;093000\n"
        )

        result = parse_export("ibkr", csv)

        assert result.trades[0].external_id == "U1|AAPL|20240115;093000|180|10"

    def test_dedup_key(self):
        assert dedup_key(canonical_trade()) == DedupKey("ibkr", "X1")
        assert dedup_key(candidate(external_id=None)) is None
