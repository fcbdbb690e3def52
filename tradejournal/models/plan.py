"""TradePlan and Campaign data models."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from tradejournal.models.trade import Direction

TradePlanStatus = Literal["idea", "watching", "active", "closed"]
CampaignStatus = Literal["planning", "active", "closed"]
CampaignOutcome = Literal["manual", "profit_target", "stop_loss"]


class Campaign(BaseModel):
    """A themed group of trade plans sharing one thesis."""

    id: Optional[int] = Field(default=None, description="Database ID")
    owner_id: str = Field(..., min_length=1, description="Owning user identifier")
    name: str = Field(..., min_length=1, description="Campaign name")
    thesis: str = Field(default="", description="Investment thesis")
    status: CampaignStatus = Field(default="planning", description="Campaign status")
    outcome: Optional[CampaignOutcome] = Field(default=None, description="How it closed")
    closed_at: Optional[int] = Field(default=None, description="Epoch ms when closed")
    retrospective: Optional[str] = Field(default=None, description="Post-mortem notes")
    created_at: int = Field(default=0, description="Epoch ms when created")

    model_config = {"frozen": True}


class TradePlan(BaseModel):
    """A plan for trading a single instrument."""

    id: Optional[int] = Field(default=None, description="Database ID")
    owner_id: str = Field(..., min_length=1, description="Owning user identifier")
    name: str = Field(..., min_length=1, description="Plan name")
    instrument_symbol: str = Field(..., min_length=1, description="Uppercase symbol")
    direction: Direction = Field(default="long", description="Planned position direction")
    status: TradePlanStatus = Field(default="idea", description="Plan status")
    campaign_id: Optional[int] = Field(default=None, description="Linked campaign")
    entry_conditions: str = Field(default="", description="When to enter")
    exit_conditions: str = Field(default="", description="When to exit")
    target_conditions: str = Field(default="", description="Profit targets")
    rationale: Optional[str] = Field(default=None, description="Why this plan exists")
    sort_order: Optional[int] = Field(default=None, description="Manual ordering")
    closed_at: Optional[int] = Field(default=None, description="Epoch ms when closed")
    created_at: int = Field(default=0, description="Epoch ms when created")

    model_config = {"frozen": True}


class CampaignNote(BaseModel):
    """A dated journal entry on a campaign."""

    id: Optional[int] = Field(default=None, description="Database ID")
    owner_id: str = Field(..., min_length=1, description="Owning user identifier")
    campaign_id: int = Field(..., description="Campaign the note belongs to")
    content: str = Field(..., min_length=1, description="Note text")
    created_at: int = Field(default=0, description="Epoch ms when written")

    model_config = {"frozen": True}
