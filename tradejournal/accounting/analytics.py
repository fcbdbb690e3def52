"""Dashboard statistics computed from trades, plans and campaigns."""

from datetime import datetime
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from tradejournal.accounting.pnl import (
    build_position_trackers,
    calculate_trades_pl,
    is_flat,
)
from tradejournal.imports.linkage import trade_belongs_to_campaign
from tradejournal.models import Campaign, Trade, TradePlan


class DashboardStats(BaseModel):
    """Portfolio-level summary statistics."""

    total_realized_pl: float = Field(default=0.0, description="Realized P&L across all trades")
    total_realized_pl_ytd: float = Field(default=0.0, description="Realized P&L this calendar year")
    closed_campaign_count: int = Field(default=0, ge=0)
    open_campaign_count: int = Field(default=0, ge=0)
    winning_campaign_count: int = Field(default=0, ge=0)
    win_rate: Optional[float] = Field(default=None, description="Winning / closed campaigns, in percent")
    avg_win: Optional[float] = Field(default=None, description="Average P&L of winning campaigns")
    avg_loss: Optional[float] = Field(default=None, description="Average P&L of losing campaigns (negative)")
    profit_factor: Optional[float] = Field(default=None, description="Total gains / total losses")
    total_trade_count: int = Field(default=0, ge=0)
    open_position_count: int = Field(default=0, ge=0)

    model_config = {"frozen": True}


def _year_start_millis(now: datetime) -> int:
    return int(datetime(now.year, 1, 1).timestamp() * 1000)


def get_dashboard_stats(
    trades: Iterable[Trade],
    trade_plans: Iterable[TradePlan],
    campaigns: Iterable[Campaign],
    now: Optional[datetime] = None,
) -> DashboardStats:
    """Calculate dashboard statistics for one owner.

    Campaign P&L is the realized P&L of trades linked to the campaign
    directly or through their trade plan. Win rate and averages are per
    closed campaign.

    Args:
        trades: The owner's canonical trades.
        trade_plans: The owner's trade plans.
        campaigns: The owner's campaigns.
        now: Reference time for the year-to-date figure. Defaults to now.

    Returns:
        DashboardStats for the owner.
    """
    trades = list(trades)
    now = now or datetime.now()
    pl_by_trade = calculate_trades_pl(trades)

    total_realized = 0.0
    total_ytd = 0.0
    ytd_start = _year_start_millis(now)
    for trade in trades:
        pl = pl_by_trade.get(trade.id)
        if pl is None:
            continue
        total_realized += pl
        if trade.date >= ytd_start:
            total_ytd += pl

    campaign_by_plan = {plan.id: plan.campaign_id for plan in trade_plans}
    closed_trades = [
        (trade, pl_by_trade[trade.id]) for trade in trades if pl_by_trade.get(trade.id) is not None
    ]

    closed = 0
    open_count = 0
    winning = 0
    losing = 0
    total_wins = 0.0
    total_losses = 0.0
    for campaign in campaigns:
        if campaign.status != "closed":
            open_count += 1
            continue
        closed += 1
        pl = sum(
            trade_pl
            for trade, trade_pl in closed_trades
            if trade_belongs_to_campaign(
                campaign.id, trade.campaign_id, campaign_by_plan.get(trade.trade_plan_id)
            )
        )
        if pl > 0:
            winning += 1
            total_wins += pl
        elif pl < 0:
            losing += 1
            total_losses += abs(pl)

    open_positions = sum(
        1
        for tracker in build_position_trackers(trades).values()
        if tracker.net_quantity > 0 and not is_flat(tracker.net_quantity)
    )

    return DashboardStats(
        total_realized_pl=total_realized,
        total_realized_pl_ytd=total_ytd,
        closed_campaign_count=closed,
        open_campaign_count=open_count,
        winning_campaign_count=winning,
        win_rate=(winning / closed * 100) if closed > 0 else None,
        avg_win=(total_wins / winning) if winning > 0 else None,
        avg_loss=-(total_losses / losing) if losing > 0 else None,
        profit_factor=(total_wins / total_losses) if total_losses > 0 else None,
        total_trade_count=len(trades),
        open_position_count=open_positions,
    )
