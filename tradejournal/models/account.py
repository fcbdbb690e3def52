"""Brokerage account mapping models."""

from typing import Optional

from pydantic import BaseModel, Field

from tradejournal.models.trade import BrokerageSource


class AccountMapping(BaseModel):
    """Friendly display name for a brokerage account."""

    id: Optional[int] = Field(default=None, description="Database ID")
    owner_id: str = Field(..., min_length=1, description="Owning user identifier")
    source: BrokerageSource = Field(..., description="Brokerage")
    account_id: str = Field(..., min_length=1, description="Brokerage account id")
    friendly_name: str = Field(..., min_length=1, description="Display name")

    model_config = {"frozen": True}


class KnownAccount(BaseModel):
    """A brokerage account seen in trades or the inbox."""

    source: BrokerageSource
    account_id: str
    trade_count: int = Field(default=0, ge=0)
    inbox_trade_count: int = Field(default=0, ge=0)

    model_config = {"frozen": True}
