"""Data models for Trade Journal."""

from tradejournal.models.account import AccountMapping, KnownAccount
from tradejournal.models.inbox import (
    PENDING_REVIEW,
    AcceptAllResult,
    AcceptResult,
    ImportSummary,
    InboxTrade,
    InboxTradeCandidate,
    InboxTradePatch,
    InboxTradeValidationResult,
)
from tradejournal.models.plan import Campaign, CampaignNote, TradePlan
from tradejournal.models.position import Position, PositionKey
from tradejournal.models.snapshot import PortfolioSnapshot
from tradejournal.models.trade import Trade

__all__ = [
    "PENDING_REVIEW",
    "AcceptAllResult",
    "AcceptResult",
    "AccountMapping",
    "Campaign",
    "CampaignNote",
    "ImportSummary",
    "InboxTrade",
    "InboxTradeCandidate",
    "InboxTradePatch",
    "InboxTradeValidationResult",
    "KnownAccount",
    "PortfolioSnapshot",
    "Position",
    "PositionKey",
    "Trade",
    "TradePlan",
]
