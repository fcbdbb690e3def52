"""Portfolio snapshot data model."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

SnapshotSource = Literal["api", "calculated", "manual"]


class PortfolioSnapshot(BaseModel):
    """Total portfolio value recorded at a point in time."""

    id: Optional[int] = Field(default=None, description="Database ID")
    owner_id: str = Field(..., min_length=1, description="Owning user identifier")
    date: int = Field(..., description="Epoch ms the value applies to")
    total_value: float = Field(..., description="Total portfolio value")
    cash_balance: Optional[float] = Field(default=None, description="Cash part of the value")
    source: SnapshotSource = Field(default="manual", description="Where the value came from")

    model_config = {"frozen": True}
