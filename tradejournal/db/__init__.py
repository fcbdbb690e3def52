"""Persistence layer for Trade Journal."""

from tradejournal.db.store import DataStore

__all__ = ["DataStore"]
