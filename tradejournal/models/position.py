"""Position data model."""

from typing import NamedTuple

from pydantic import BaseModel, Field

from tradejournal.models.trade import Direction


class PositionKey(NamedTuple):
    """Grouping key for position tracking."""

    ticker: str
    direction: str


class Position(BaseModel):
    """Represents an open position derived from canonical trades."""

    ticker: str = Field(..., min_length=1, description="Trading symbol")
    direction: Direction = Field(..., description="Position direction")
    quantity: float = Field(..., description="Net open quantity")
    average_cost: float = Field(..., ge=0, description="Weighted average entry price")

    model_config = {"frozen": True}
