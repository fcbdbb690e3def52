"""Tests for canonical trade operations.

**Feature: trade-journal**
"""

import tempfile
from pathlib import Path

import pytest

from tradejournal.db.store import DataStore
from tradejournal.errors import InvalidInputError, InvalidTransitionError, NotFoundError
from tradejournal.models import Trade
from tradejournal.services.planning import PlanningService
from tradejournal.services.trades import TradeService

OWNER = "owner-1"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield DataStore(Path(tmpdir) / "test.db")


@pytest.fixture
def trades(temp_db: DataStore) -> TradeService:
    return TradeService(temp_db)


def make_trade(owner_id: str = OWNER, **overrides) -> Trade:
    fields = {
        "owner_id": owner_id,
        "ticker": "aapl",
        "asset_type": "stock",
        "side": "buy",
        "direction": "long",
        "price": 10.0,
        "quantity": 10.0,
        "date": 1000,
    }
    fields.update(overrides)
    return Trade(**fields)


class TestManualTrades:
    """Tests for manual trade entry."""

    def test_create_uppercases_ticker(self, trades: TradeService):
        saved = trades.create_trade(make_trade())

        assert saved.id is not None
        assert saved.ticker == "AAPL"
        assert saved.source == "manual"

    def test_foreign_plan_is_rejected(self, trades: TradeService, temp_db: DataStore):
        plan = PlanningService(temp_db).create_trade_plan("someone-else", "Plan", "AAPL")

        with pytest.raises(NotFoundError):
            trades.create_trade(make_trade(trade_plan_id=plan.id))

    def test_closed_campaign_is_rejected(self, trades: TradeService, temp_db: DataStore):
        planning = PlanningService(temp_db)
        campaign = planning.create_campaign(OWNER, "Done")
        plan = planning.create_trade_plan(OWNER, "Plan", "AAPL", campaign_id=campaign.id)
        planning.update_campaign_status(OWNER, campaign.id, "closed", outcome="manual")

        with pytest.raises(InvalidTransitionError):
            trades.create_trade(make_trade(trade_plan_id=plan.id))

    def test_update_trade(self, trades: TradeService):
        saved = trades.create_trade(make_trade())

        updated = trades.update_trade(OWNER, saved.id, price=12.5, ticker="msft")

        assert updated.price == 12.5
        assert updated.ticker == "MSFT"
        assert trades.get_trade(OWNER, saved.id) == updated

    @pytest.mark.parametrize("field", ["external_id", "source", "brokerage_account_id"])
    def test_update_protected_field(self, trades: TradeService, field: str):
        saved = trades.create_trade(make_trade())

        with pytest.raises(ValueError, match=field):
            trades.update_trade(OWNER, saved.id, **{field: "x"})

        assert trades.get_trade(OWNER, saved.id) == saved

    def test_other_owner_trade_is_not_found(self, trades: TradeService):
        saved = trades.create_trade(make_trade(owner_id="someone-else"))

        with pytest.raises(NotFoundError):
            trades.get_trade(OWNER, saved.id)
        with pytest.raises(NotFoundError):
            trades.delete_trade(OWNER, saved.id)

    def test_delete_trade(self, trades: TradeService):
        saved = trades.create_trade(make_trade())

        trades.delete_trade(OWNER, saved.id)

        assert trades.list_trades(OWNER) == []


class TestTradeReporting:
    """Tests for listing trades with P&L and positions."""

    def test_list_with_pl_newest_first(self, trades: TradeService):
        buy = trades.create_trade(make_trade(date=1000))
        sell = trades.create_trade(make_trade(side="sell", price=15.0, quantity=4.0, date=2000))

        rows = trades.list_trades_with_pl(OWNER)

        assert [(t.id, pl) for t, pl in rows] == [(sell.id, 20.0), (buy.id, None)]

    def test_positions(self, trades: TradeService):
        trades.create_trade(make_trade(date=1000))
        trades.create_trade(make_trade(side="sell", price=15.0, quantity=4.0, date=2000))
        trades.create_trade(make_trade(owner_id="someone-else", ticker="MSFT"))

        positions = trades.get_positions(OWNER)

        assert len(positions) == 1
        assert positions[0].ticker == "AAPL"
        assert positions[0].quantity == 6
        assert positions[0].average_cost == 10


class TestCampaignLinkage:
    """Trades link to a campaign directly or through their trade plan."""

    def test_direct_campaign(self, trades: TradeService, temp_db: DataStore):
        campaign = PlanningService(temp_db).create_campaign(OWNER, "Theme")

        saved = trades.create_trade(make_trade(campaign_id=campaign.id))

        assert saved.campaign_id == campaign.id

    def test_campaign_is_taken_from_plan(self, trades: TradeService, temp_db: DataStore):
        planning = PlanningService(temp_db)
        campaign = planning.create_campaign(OWNER, "Theme")
        plan = planning.create_trade_plan(OWNER, "Plan", "AAPL", campaign_id=campaign.id)

        saved = trades.create_trade(make_trade(trade_plan_id=plan.id))

        assert saved.campaign_id == campaign.id

    def test_direct_campaign_must_match_plan(self, trades: TradeService, temp_db: DataStore):
        planning = PlanningService(temp_db)
        first = planning.create_campaign(OWNER, "First")
        second = planning.create_campaign(OWNER, "Second")
        plan = planning.create_trade_plan(OWNER, "Plan", "AAPL", campaign_id=first.id)

        with pytest.raises(InvalidInputError, match="must match trade plan campaign"):
            trades.create_trade(make_trade(trade_plan_id=plan.id, campaign_id=second.id))

    def test_closed_direct_campaign_is_rejected(self, trades: TradeService, temp_db: DataStore):
        planning = PlanningService(temp_db)
        campaign = planning.create_campaign(OWNER, "Done")
        planning.update_campaign_status(OWNER, campaign.id, "closed", outcome="manual")

        with pytest.raises(InvalidTransitionError):
            trades.create_trade(make_trade(campaign_id=campaign.id))

    def test_foreign_campaign_is_rejected(self, trades: TradeService, temp_db: DataStore):
        campaign = PlanningService(temp_db).create_campaign("someone-else", "Theirs")

        with pytest.raises(NotFoundError, match="Campaign not found"):
            trades.create_trade(make_trade(campaign_id=campaign.id))

    def test_changing_plan_takes_new_campaign(self, trades: TradeService, temp_db: DataStore):
        planning = PlanningService(temp_db)
        first = planning.create_campaign(OWNER, "First")
        second = planning.create_campaign(OWNER, "Second")
        first_plan = planning.create_trade_plan(OWNER, "A", "AAPL", campaign_id=first.id)
        second_plan = planning.create_trade_plan(OWNER, "B", "AAPL", campaign_id=second.id)
        saved = trades.create_trade(make_trade(trade_plan_id=first_plan.id))

        updated = trades.update_trade(OWNER, saved.id, trade_plan_id=second_plan.id)

        assert updated.campaign_id == second.id

    def test_list_campaign_trades(self, trades: TradeService, temp_db: DataStore):
        planning = PlanningService(temp_db)
        campaign = planning.create_campaign(OWNER, "Theme")
        plan = planning.create_trade_plan(OWNER, "Plan", "AAPL", campaign_id=campaign.id)
        direct = trades.create_trade(make_trade(campaign_id=campaign.id, date=1000))
        via_plan = trades.create_trade(make_trade(trade_plan_id=plan.id, date=2000))
        trades.create_trade(make_trade(date=3000))

        listed = trades.list_campaign_trades(OWNER, campaign.id)

        assert [t.id for t in listed] == [via_plan.id, direct.id]

    def test_list_foreign_campaign_trades(self, trades: TradeService, temp_db: DataStore):
        campaign = PlanningService(temp_db).create_campaign("someone-else", "Theirs")

        with pytest.raises(NotFoundError):
            trades.list_campaign_trades(OWNER, campaign.id)
