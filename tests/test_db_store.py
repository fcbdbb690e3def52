"""Property-based tests for the database store.

**Feature: trade-journal**
"""

import tempfile
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradejournal.db.store import DataStore
from tradejournal.models import AccountMapping, Campaign, InboxTrade, Trade, TradePlan


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        yield DataStore(db_path)


def make_trade(owner_id: str = "owner", **overrides) -> Trade:
    fields = {
        "owner_id": owner_id,
        "ticker": "AAPL",
        "asset_type": "stock",
        "side": "buy",
        "direction": "long",
        "price": 180.0,
        "quantity": 10.0,
        "date": 1_705_311_000_000,
    }
    fields.update(overrides)
    return Trade(**fields)


class TestDatabaseSchemaCompleteness:
    """
    **Feature: trade-journal, Database Schema Completeness**

    *For any* fresh database, all required tables should exist.
    """

    def test_schema_completeness(self, temp_db: DataStore):
        """Test that all required tables exist in a fresh database."""
        tables = temp_db.get_tables()

        for table in DataStore.REQUIRED_TABLES:
            assert table in tables, f"Required table '{table}' is missing"

    @given(st.integers(min_value=1, max_value=5))
    @settings(max_examples=10)
    def test_schema_completeness_multiple_instances(self, num_instances: int):
        """
        *For any* number of DataStore instances created with fresh databases,
        all required tables should exist in each.
        """
        with tempfile.TemporaryDirectory() as tmpdir:
            for i in range(num_instances):
                store = DataStore(Path(tmpdir) / f"test_{i}.db")
                tables = store.get_tables()

                for table in DataStore.REQUIRED_TABLES:
                    assert table in tables, f"Required table '{table}' missing in instance {i}"

    def test_reopening_keeps_data(self, temp_db: DataStore):
        temp_db.insert_trade(make_trade())

        reopened = DataStore(temp_db.db_path)

        assert len(reopened.list_trades("owner")) == 1
        assert reopened.get_stats()["trades"] == 1


class TestTradeRoundTrip:
    """
    **Feature: trade-journal, Trade persistence**

    *For any* trade stored, it should be retrievable with the same values.
    """

    @given(
        price=st.floats(min_value=0.01, max_value=100000.0, allow_nan=False, allow_infinity=False),
        quantity=st.floats(min_value=0.0001, max_value=10000.0, allow_nan=False, allow_infinity=False),
        notes=st.one_of(st.none(), st.text(alphabet=st.characters(min_codepoint=32, max_codepoint=0x2FFF), max_size=50)),
    )
    @settings(max_examples=25)
    def test_trade_round_trip(self, price: float, quantity: float, notes):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = DataStore(Path(tmpdir) / "test.db")
            saved = store.insert_trade(make_trade(price=price, quantity=quantity, notes=notes))

            assert store.get_trade(saved.id) == saved

    def test_list_is_owner_scoped(self, temp_db: DataStore):
        temp_db.insert_trade(make_trade("a"))
        temp_db.insert_trade(make_trade("b"))
        temp_db.insert_trade(make_trade("a", ticker="MSFT"))

        assert [t.ticker for t in temp_db.list_trades("a")] == ["AAPL", "MSFT"]

    def test_update_and_delete(self, temp_db: DataStore):
        saved = temp_db.insert_trade(make_trade())

        temp_db.update_trade(saved.model_copy(update={"notes": "edited"}))
        assert temp_db.get_trade(saved.id).notes == "edited"

        temp_db.delete_trade(saved.id)
        assert temp_db.get_trade(saved.id) is None

    def test_update_requires_id(self, temp_db: DataStore):
        with pytest.raises(ValueError):
            temp_db.update_trade(make_trade())


class TestInboxPersistence:
    """Diagnostics lists survive storage."""

    def test_diagnostics_round_trip(self, temp_db: DataStore):
        row = temp_db.insert_inbox_trade(
            InboxTrade(
                owner_id="owner",
                source="kraken",
                ticker="BTC",
                validation_errors=["Side is required", "Price is required and must be > 0"],
                validation_warnings=["No externalId provided; dedup cannot be guaranteed."],
            )
        )

        stored = temp_db.get_inbox_trade(row.id)

        assert stored == row
        assert stored.status == "pending_review"

    def test_list_filters_status(self, temp_db: DataStore):
        temp_db.insert_inbox_trade(InboxTrade(owner_id="owner", source="ibkr"))
        temp_db.insert_inbox_trade(InboxTrade(owner_id="owner", source="ibkr", status="accepted"))

        assert len(temp_db.list_inbox_trades("owner")) == 1
        assert len(temp_db.list_inbox_trades("owner", status="accepted")) == 1


class TestPlanningPersistence:
    """Campaigns, plans and account mappings are stored per owner."""

    def test_campaign_and_plan(self, temp_db: DataStore):
        campaign = temp_db.insert_campaign(Campaign(owner_id="owner", name="AI", created_at=5))
        plan = temp_db.insert_trade_plan(
            TradePlan(owner_id="owner", name="NVDA", instrument_symbol="NVDA", campaign_id=campaign.id)
        )

        assert temp_db.get_campaign(campaign.id) == campaign
        assert temp_db.get_trade_plan(plan.id) == plan
        assert temp_db.list_trade_plans("other") == []

    def test_account_mapping_lookup(self, temp_db: DataStore):
        mapping = temp_db.insert_account_mapping(
            AccountMapping(owner_id="owner", source="ibkr", account_id="U1", friendly_name="Main")
        )

        assert temp_db.get_account_mapping("owner", "ibkr", "U1") == mapping
        assert temp_db.get_account_mapping("other", "ibkr", "U1") is None
        assert temp_db.get_account_mapping("owner", "kraken", "U1") is None
