"""SQLite data store for Trade Journal.

Every record carries an ``owner_id``. Lookups by id return the record
regardless of owner; callers check ownership with
:func:`tradejournal.errors.assert_owner`. List queries are owner-scoped and
return rows in insertion order.
"""

import json
import sqlite3
from pathlib import Path
from typing import Optional

from tradejournal.models import (
    PENDING_REVIEW,
    AccountMapping,
    Campaign,
    CampaignNote,
    InboxTrade,
    PortfolioSnapshot,
    Trade,
    TradePlan,
)

TRADE_COLUMNS = [
    "owner_id",
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
    "order_type",
    "external_id",
    "brokerage_account_id",
    "source",
    "trade_plan_id",
    "campaign_id",
]

INBOX_COLUMNS = [
    "owner_id",
    "status",
    "source",
    "ticker",
    "asset_type",
    "side",
    "direction",
    "price",
    "quantity",
    "date",
    "fees",
    "taxes",
    "order_type",
    "external_id",
    "brokerage_account_id",
    "notes",
    "trade_plan_id",
    "validation_errors",
    "validation_warnings",
]

TRADE_PLAN_COLUMNS = [
    "owner_id",
    "name",
    "instrument_symbol",
    "direction",
    "status",
    "campaign_id",
    "entry_conditions",
    "exit_conditions",
    "target_conditions",
    "rationale",
    "sort_order",
    "closed_at",
    "created_at",
]

CAMPAIGN_COLUMNS = [
    "owner_id",
    "name",
    "thesis",
    "status",
    "outcome",
    "closed_at",
    "retrospective",
    "created_at",
]

ACCOUNT_MAPPING_COLUMNS = ["owner_id", "source", "account_id", "friendly_name"]

CAMPAIGN_NOTE_COLUMNS = ["owner_id", "campaign_id", "content", "created_at"]

SNAPSHOT_COLUMNS = ["owner_id", "date", "total_value", "cash_balance", "source"]

# Columns holding JSON-encoded string lists
_JSON_COLUMNS = {"validation_errors", "validation_warnings"}


def _encode(column: str, value):
    if column in _JSON_COLUMNS:
        return json.dumps(list(value or []))
    return value


def _decode_row(row: sqlite3.Row) -> dict:
    data = dict(row)
    for column in _JSON_COLUMNS:
        if column in data:
            data[column] = json.loads(data[column] or "[]")
    return data


class DataStore:
    """SQLite-based data store for Trade Journal."""

    REQUIRED_TABLES = [
        "trades",
        "inbox_trades",
        "trade_plans",
        "campaigns",
        "campaign_notes",
        "account_mappings",
        "portfolio_snapshots",
    ]

    def __init__(self, db_path: Path):
        """Initialize the data store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trades (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner_id TEXT NOT NULL,
                    ticker TEXT NOT NULL,
                    asset_type TEXT NOT NULL,
                    side TEXT NOT NULL,
                    direction TEXT NOT NULL,
                    price REAL NOT NULL,
                    quantity REAL NOT NULL,
                    date INTEGER NOT NULL,
                    fees REAL,
                    taxes REAL,
                    notes TEXT,
                    order_type TEXT,
                    external_id TEXT,
                    brokerage_account_id TEXT,
                    source TEXT NOT NULL DEFAULT 'manual',
                    trade_plan_id INTEGER,
                    campaign_id INTEGER
                )
            """)
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_trades_owner ON trades (owner_id, date)"
            )

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS inbox_trades (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner_id TEXT NOT NULL,
                    status TEXT NOT NULL,
                    source TEXT NOT NULL,
                    ticker TEXT,
                    asset_type TEXT,
                    side TEXT,
                    direction TEXT,
                    price REAL,
                    quantity REAL,
                    date INTEGER,
                    fees REAL,
                    taxes REAL,
                    order_type TEXT,
                    external_id TEXT,
                    brokerage_account_id TEXT,
                    notes TEXT,
                    trade_plan_id INTEGER,
                    validation_errors TEXT NOT NULL DEFAULT '[]',
                    validation_warnings TEXT NOT NULL DEFAULT '[]'
                )
            """)
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_inbox_owner_status "
                "ON inbox_trades (owner_id, status)"
            )

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trade_plans (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    instrument_symbol TEXT NOT NULL,
                    direction TEXT NOT NULL DEFAULT 'long',
                    status TEXT NOT NULL,
                    campaign_id INTEGER,
                    entry_conditions TEXT NOT NULL DEFAULT '',
                    exit_conditions TEXT NOT NULL DEFAULT '',
                    target_conditions TEXT NOT NULL DEFAULT '',
                    rationale TEXT,
                    sort_order INTEGER,
                    closed_at INTEGER,
                    created_at INTEGER NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS campaigns (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    thesis TEXT NOT NULL DEFAULT '',
                    status TEXT NOT NULL,
                    outcome TEXT,
                    closed_at INTEGER,
                    retrospective TEXT,
                    created_at INTEGER NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS campaign_notes (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner_id TEXT NOT NULL,
                    campaign_id INTEGER NOT NULL,
                    content TEXT NOT NULL,
                    created_at INTEGER NOT NULL
                )
            """)
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_campaign_notes_campaign "
                "ON campaign_notes (campaign_id)"
            )

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS portfolio_snapshots (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner_id TEXT NOT NULL,
                    date INTEGER NOT NULL,
                    total_value REAL NOT NULL,
                    cash_balance REAL,
                    source TEXT NOT NULL DEFAULT 'manual'
                )
            """)
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_snapshots_owner_date "
                "ON portfolio_snapshots (owner_id, date)"
            )

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS account_mappings (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner_id TEXT NOT NULL,
                    source TEXT NOT NULL,
                    account_id TEXT NOT NULL,
                    friendly_name TEXT NOT NULL,
                    UNIQUE(owner_id, source, account_id)
                )
            """)

            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Generic helpers ====================

    def _insert(self, table: str, columns: list[str], record) -> int:
        data = record.model_dump()
        placeholders = ", ".join("?" for _ in columns)
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
                [_encode(column, data[column]) for column in columns],
            )
            conn.commit()
            return cursor.lastrowid or 0
        finally:
            conn.close()

    def _update(self, table: str, columns: list[str], record) -> None:
        if record.id is None:
            raise ValueError(f"Cannot update {table} record without an id")
        data = record.model_dump()
        assignments = ", ".join(f"{column} = ?" for column in columns)
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"UPDATE {table} SET {assignments} WHERE id = ?",
                [_encode(column, data[column]) for column in columns] + [record.id],
            )
            conn.commit()
        finally:
            conn.close()

    def _delete(self, table: str, record_id: int) -> None:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
            conn.commit()
        finally:
            conn.close()

    def _fetch_one(self, table: str, record_id: int) -> Optional[dict]:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f"SELECT * FROM {table} WHERE id = ?", (record_id,))
            row = cursor.fetchone()
            return _decode_row(row) if row else None
        finally:
            conn.close()

    def _fetch_all(self, query: str, params: tuple) -> list[dict]:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [_decode_row(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Trades ====================

    def insert_trade(self, trade: Trade) -> Trade:
        """Insert a canonical trade.

        Returns:
            The trade with its database id.
        """
        trade_id = self._insert("trades", TRADE_COLUMNS, trade)
        return trade.model_copy(update={"id": trade_id})

    def get_trade(self, trade_id: int) -> Optional[Trade]:
        row = self._fetch_one("trades", trade_id)
        return Trade(**row) if row else None

    def update_trade(self, trade: Trade) -> None:
        self._update("trades", TRADE_COLUMNS, trade)

    def delete_trade(self, trade_id: int) -> None:
        self._delete("trades", trade_id)

    def list_trades(self, owner_id: str) -> list[Trade]:
        """Get all trades of an owner in insertion order."""
        rows = self._fetch_all(
            "SELECT * FROM trades WHERE owner_id = ? ORDER BY id",
            (owner_id,),
        )
        return [Trade(**row) for row in rows]

    # ==================== Inbox ====================

    def insert_inbox_trade(self, inbox_trade: InboxTrade) -> InboxTrade:
        """Insert an inbox row.

        Returns:
            The row with its database id.
        """
        inbox_id = self._insert("inbox_trades", INBOX_COLUMNS, inbox_trade)
        return inbox_trade.model_copy(update={"id": inbox_id})

    def get_inbox_trade(self, inbox_trade_id: int) -> Optional[InboxTrade]:
        row = self._fetch_one("inbox_trades", inbox_trade_id)
        return InboxTrade(**row) if row else None

    def update_inbox_trade(self, inbox_trade: InboxTrade) -> None:
        self._update("inbox_trades", INBOX_COLUMNS, inbox_trade)

    def delete_inbox_trade(self, inbox_trade_id: int) -> None:
        self._delete("inbox_trades", inbox_trade_id)

    def list_inbox_trades(self, owner_id: str, status: str = PENDING_REVIEW) -> list[InboxTrade]:
        """Get an owner's inbox rows with the given status, in insertion order."""
        rows = self._fetch_all(
            "SELECT * FROM inbox_trades WHERE owner_id = ? AND status = ? ORDER BY id",
            (owner_id, status),
        )
        return [InboxTrade(**row) for row in rows]

    # ==================== Trade plans ====================

    def insert_trade_plan(self, plan: TradePlan) -> TradePlan:
        plan_id = self._insert("trade_plans", TRADE_PLAN_COLUMNS, plan)
        return plan.model_copy(update={"id": plan_id})

    def get_trade_plan(self, plan_id: int) -> Optional[TradePlan]:
        row = self._fetch_one("trade_plans", plan_id)
        return TradePlan(**row) if row else None

    def update_trade_plan(self, plan: TradePlan) -> None:
        self._update("trade_plans", TRADE_PLAN_COLUMNS, plan)

    def list_trade_plans(self, owner_id: str) -> list[TradePlan]:
        rows = self._fetch_all(
            "SELECT * FROM trade_plans WHERE owner_id = ? ORDER BY id",
            (owner_id,),
        )
        return [TradePlan(**row) for row in rows]

    # ==================== Campaigns ====================

    def insert_campaign(self, campaign: Campaign) -> Campaign:
        campaign_id = self._insert("campaigns", CAMPAIGN_COLUMNS, campaign)
        return campaign.model_copy(update={"id": campaign_id})

    def get_campaign(self, campaign_id: int) -> Optional[Campaign]:
        row = self._fetch_one("campaigns", campaign_id)
        return Campaign(**row) if row else None

    def update_campaign(self, campaign: Campaign) -> None:
        self._update("campaigns", CAMPAIGN_COLUMNS, campaign)

    def list_campaigns(self, owner_id: str) -> list[Campaign]:
        rows = self._fetch_all(
            "SELECT * FROM campaigns WHERE owner_id = ? ORDER BY id",
            (owner_id,),
        )
        return [Campaign(**row) for row in rows]

    # ==================== Campaign notes ====================

    def insert_campaign_note(self, note: CampaignNote) -> CampaignNote:
        note_id = self._insert("campaign_notes", CAMPAIGN_NOTE_COLUMNS, note)
        return note.model_copy(update={"id": note_id})

    def list_campaign_notes(self, owner_id: str, campaign_id: int) -> list[CampaignNote]:
        rows = self._fetch_all(
            "SELECT * FROM campaign_notes WHERE owner_id = ? AND campaign_id = ? ORDER BY id",
            (owner_id, campaign_id),
        )
        return [CampaignNote(**row) for row in rows]

    # ==================== Portfolio snapshots ====================

    def insert_snapshot(self, snapshot: PortfolioSnapshot) -> PortfolioSnapshot:
        snapshot_id = self._insert("portfolio_snapshots", SNAPSHOT_COLUMNS, snapshot)
        return snapshot.model_copy(update={"id": snapshot_id})

    def list_snapshots(self, owner_id: str) -> list[PortfolioSnapshot]:
        rows = self._fetch_all(
            "SELECT * FROM portfolio_snapshots WHERE owner_id = ? ORDER BY id",
            (owner_id,),
        )
        return [PortfolioSnapshot(**row) for row in rows]

    # ==================== Account mappings ====================

    def get_account_mapping(
        self, owner_id: str, source: str, account_id: str
    ) -> Optional[AccountMapping]:
        rows = self._fetch_all(
            """
            SELECT * FROM account_mappings
            WHERE owner_id = ? AND source = ? AND account_id = ?
            """,
            (owner_id, source, account_id),
        )
        return AccountMapping(**rows[0]) if rows else None

    def insert_account_mapping(self, mapping: AccountMapping) -> AccountMapping:
        mapping_id = self._insert("account_mappings", ACCOUNT_MAPPING_COLUMNS, mapping)
        return mapping.model_copy(update={"id": mapping_id})

    def update_account_mapping(self, mapping: AccountMapping) -> None:
        self._update("account_mappings", ACCOUNT_MAPPING_COLUMNS, mapping)

    def list_account_mappings(self, owner_id: str) -> list[AccountMapping]:
        rows = self._fetch_all(
            "SELECT * FROM account_mappings WHERE owner_id = ? ORDER BY id",
            (owner_id,),
        )
        return [AccountMapping(**row) for row in rows]

    # ==================== Stats ====================

    def get_stats(self) -> dict:
        """Get database statistics.

        Returns:
            Dictionary with table record counts.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            stats = {}
            for table in self.REQUIRED_TABLES:
                cursor.execute(f"SELECT COUNT(*) as count FROM {table}")
                stats[table] = cursor.fetchone()["count"]
            return stats
        finally:
            conn.close()
