"""Inbox trade data models.

An inbox trade is a brokerage execution that has been imported but not yet
accepted into the canonical trade ledger. Every business field is optional so
that partially parseable rows still surface for manual repair.
"""

from typing import Optional

from pydantic import BaseModel, Field

from tradejournal.models.trade import (
    AssetType,
    BrokerageSource,
    Direction,
    Side,
    Trade,
)

PENDING_REVIEW = "pending_review"


class InboxTradeCandidate(BaseModel):
    """Canonical candidate shape produced by the brokerage normalizers."""

    source: BrokerageSource = Field(..., description="Brokerage the row came from")
    ticker: Optional[str] = Field(default=None, description="Trading symbol")
    asset_type: Optional[AssetType] = Field(default=None, description="Asset type")
    side: Optional[Side] = Field(default=None, description="Trade side")
    direction: Optional[Direction] = Field(default=None, description="Position direction")
    price: Optional[float] = Field(default=None, description="Execution price")
    quantity: Optional[float] = Field(default=None, description="Trade quantity")
    date: Optional[int] = Field(default=None, description="Epoch milliseconds")
    fees: Optional[float] = Field(default=None, description="Fees paid")
    taxes: Optional[float] = Field(default=None, description="Taxes paid")
    order_type: Optional[str] = Field(default=None, description="Broker order type")
    external_id: Optional[str] = Field(default=None, description="Broker execution id")
    brokerage_account_id: Optional[str] = Field(
        default=None, description="Brokerage account id"
    )
    notes: Optional[str] = Field(default=None, description="User notes")
    trade_plan_id: Optional[int] = Field(default=None, description="Linked trade plan")
    validation_errors: list[str] = Field(default_factory=list)
    validation_warnings: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    def apply_patch(self, patch: "InboxTradePatch") -> "InboxTradeCandidate":
        """Return a copy with the explicitly set fields of ``patch`` applied."""
        return self.model_copy(update=patch.model_dump(exclude_unset=True))


class InboxTrade(InboxTradeCandidate):
    """An inbox candidate persisted for an owner."""

    id: Optional[int] = Field(default=None, description="Database ID")
    owner_id: str = Field(..., min_length=1, description="Owning user identifier")
    status: str = Field(default=PENDING_REVIEW, description="Inbox status")

    @property
    def is_pending(self) -> bool:
        return self.status == PENDING_REVIEW


class InboxTradePatch(BaseModel):
    """Partial update for a pending inbox trade.

    Only fields that were explicitly passed are applied; passing ``None``
    clears the field.
    """

    ticker: Optional[str] = None
    asset_type: Optional[AssetType] = None
    side: Optional[Side] = None
    direction: Optional[Direction] = None
    price: Optional[float] = None
    quantity: Optional[float] = None
    date: Optional[int] = None
    fees: Optional[float] = None
    taxes: Optional[float] = None
    order_type: Optional[str] = None
    notes: Optional[str] = None
    trade_plan_id: Optional[int] = None

    model_config = {"frozen": True}


class InboxTradeValidationResult(BaseModel):
    """Outcome of validating an inbox candidate."""

    normalized_ticker: Optional[str] = None
    validation_errors: list[str] = Field(default_factory=list)
    validation_warnings: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class ImportSummary(BaseModel):
    """Counts returned by an inbox import."""

    imported: int = Field(default=0, ge=0)
    skipped_duplicates: int = Field(default=0, ge=0)
    with_validation_errors: int = Field(default=0, ge=0)
    with_warnings: int = Field(default=0, ge=0)
    new_inbox_rows: list[InboxTrade] = Field(default_factory=list)

    model_config = {"frozen": True}


class AcceptResult(BaseModel):
    """Result of accepting a single inbox trade.

    ``inbox_trade`` carries the re-validated row when acceptance failed on
    validation, so the caller can persist the fresh diagnostics.
    """

    accepted: bool
    error: Optional[str] = None
    trade: Optional[Trade] = None
    inbox_trade: Optional[InboxTrade] = None

    model_config = {"frozen": True}


class AcceptAllResult(BaseModel):
    """Aggregate result of accepting every pending inbox trade."""

    accepted: int = Field(default=0, ge=0)
    skipped_invalid: int = Field(default=0, ge=0)
    errors: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}
