"""Brokerage account display names."""

import logging
from typing import Optional

from tradejournal.db.store import DataStore
from tradejournal.errors import InvalidInputError
from tradejournal.imports.constants import (
    KRAKEN_DEFAULT_ACCOUNT_FRIENDLY_NAME,
    KRAKEN_DEFAULT_ACCOUNT_ID,
)
from tradejournal.models import AccountMapping, KnownAccount

logger = logging.getLogger(__name__)

BROKERAGE_SOURCES = ("ibkr", "kraken")


def normalize_source(value: str) -> str:
    if value not in BROKERAGE_SOURCES:
        raise InvalidInputError("Invalid brokerage source")
    return value


def normalize_account_id_for_source(source: str, account_id: Optional[str]) -> Optional[str]:
    """Trim an account id; Kraken exports carry none, so use the default."""
    normalized = (account_id or "").strip() or None
    if source == "kraken":
        return normalized or KRAKEN_DEFAULT_ACCOUNT_ID
    return normalized


class AccountService:
    """Owner-scoped brokerage account mappings."""

    def __init__(self, data_store: DataStore):
        self._store = data_store

    def upsert_account_mapping(
        self, owner_id: str, source: str, account_id: str, friendly_name: str
    ) -> AccountMapping:
        """Create or rename the mapping for ``(source, account_id)``.

        Raises:
            InvalidInputError: If the source is unknown or a value is blank.
        """
        source = normalize_source(source)
        account_id = normalize_account_id_for_source(source, account_id)
        name = friendly_name.strip()
        if source == "kraken" and not name:
            name = KRAKEN_DEFAULT_ACCOUNT_FRIENDLY_NAME

        if not account_id:
            raise InvalidInputError("Account ID is required")
        if not name:
            raise InvalidInputError("Friendly name is required")

        existing = self._store.get_account_mapping(owner_id, source, account_id)
        if existing:
            updated = existing.model_copy(update={"friendly_name": name})
            self._store.update_account_mapping(updated)
            return updated

        mapping = self._store.insert_account_mapping(
            AccountMapping(owner_id=owner_id, source=source, account_id=account_id, friendly_name=name)
        )
        logger.info("Mapped %s account %s to '%s'", source, account_id, name)
        return mapping

    def list_account_mappings(self, owner_id: str) -> list[AccountMapping]:
        return sorted(
            self._store.list_account_mappings(owner_id),
            key=lambda m: (m.source, m.account_id, m.friendly_name),
        )

    def friendly_name_for(self, owner_id: str, source: str, account_id: Optional[str]) -> Optional[str]:
        """Display name of an account, or None when it is not mapped."""
        normalized = normalize_account_id_for_source(source, account_id)
        if not normalized:
            return None
        mapping = self._store.get_account_mapping(owner_id, source, normalized)
        return mapping.friendly_name if mapping else None

    def list_known_brokerage_accounts(self, owner_id: str) -> list[KnownAccount]:
        """Accounts seen in the owner's trades or pending inbox, with counts."""
        counts: dict[tuple[str, str], dict[str, int]] = {}

        for trade in self._store.list_trades(owner_id):
            if trade.source not in BROKERAGE_SOURCES:
                continue
            account_id = normalize_account_id_for_source(trade.source, trade.brokerage_account_id)
            if not account_id:
                continue
            entry = counts.setdefault((trade.source, account_id), {"trades": 0, "inbox": 0})
            entry["trades"] += 1

        for row in self._store.list_inbox_trades(owner_id):
            account_id = normalize_account_id_for_source(row.source, row.brokerage_account_id)
            if not account_id:
                continue
            entry = counts.setdefault((row.source, account_id), {"trades": 0, "inbox": 0})
            entry["inbox"] += 1

        return [
            KnownAccount(
                source=source,
                account_id=account_id,
                trade_count=entry["trades"],
                inbox_trade_count=entry["inbox"],
            )
            for (source, account_id), entry in sorted(counts.items())
        ]
