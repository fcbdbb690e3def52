"""Brokerage import pipeline: normalizers, identity, validation and inbox."""

from tradejournal.imports.identity import (
    ExecutionIdentity,
    build_execution_identity,
    tag_execution_identity,
)
from tradejournal.imports.ibkr import parse_ibkr_csv
from tradejournal.imports.inbox import InboxService
from tradejournal.imports.ingestion import (
    DedupKey,
    accept_inbox_trade,
    import_candidates,
    parse_export,
)
from tradejournal.imports.kraken import parse_kraken_csv
from tradejournal.imports.linkage import resolve_campaign_linkage, trade_belongs_to_campaign
from tradejournal.imports.reader import ParseResult
from tradejournal.imports.suggestion import TradePlanSuggestion, pick_trade_plan_suggestion
from tradejournal.imports.validation import validate_inbox_trade_candidate

__all__ = [
    "DedupKey",
    "ExecutionIdentity",
    "InboxService",
    "ParseResult",
    "TradePlanSuggestion",
    "accept_inbox_trade",
    "build_execution_identity",
    "import_candidates",
    "parse_export",
    "parse_ibkr_csv",
    "parse_kraken_csv",
    "pick_trade_plan_suggestion",
    "resolve_campaign_linkage",
    "tag_execution_identity",
    "trade_belongs_to_campaign",
    "validate_inbox_trade_candidate",
]
