"""Trade data model."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

AssetType = Literal["stock", "crypto"]
Side = Literal["buy", "sell"]
Direction = Literal["long", "short"]
BrokerageSource = Literal["ibkr", "kraken"]
TradeSource = Literal["ibkr", "kraken", "manual"]


class Trade(BaseModel):
    """Represents a canonical, accepted trade."""

    id: Optional[int] = Field(default=None, description="Database ID")
    owner_id: str = Field(..., min_length=1, description="Owning user identifier")
    ticker: str = Field(..., min_length=1, description="Uppercase trading symbol")
    asset_type: AssetType = Field(..., description="Asset type (stock/crypto)")
    side: Side = Field(..., description="Trade side (buy/sell)")
    direction: Direction = Field(..., description="Position direction (long/short)")
    price: float = Field(..., gt=0, description="Execution price")
    quantity: float = Field(..., gt=0, description="Trade quantity")
    date: int = Field(..., description="Execution time in epoch milliseconds")
    fees: Optional[float] = Field(default=None, description="Fees paid")
    taxes: Optional[float] = Field(default=None, description="Taxes paid")
    notes: Optional[str] = Field(default=None, description="User notes")
    order_type: Optional[str] = Field(default=None, description="Broker order type")
    external_id: Optional[str] = Field(
        default=None, description="Broker execution id used for dedup"
    )
    brokerage_account_id: Optional[str] = Field(
        default=None, description="Brokerage account the trade came from"
    )
    source: TradeSource = Field(default="manual", description="Where the trade came from")
    trade_plan_id: Optional[int] = Field(default=None, description="Linked trade plan")
    campaign_id: Optional[int] = Field(default=None, description="Linked campaign")

    model_config = {"frozen": True}
