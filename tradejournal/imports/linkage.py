"""Campaign linkage of trades.

A trade reaches a campaign either directly through its ``campaign_id`` or
through the campaign of its trade plan.
"""

from typing import Optional

from tradejournal.errors import InvalidInputError

CAMPAIGN_MISMATCH = "Direct campaign must match trade plan campaign"


def resolve_campaign_linkage(
    trade_plan_id: Optional[int],
    trade_plan_campaign_id: Optional[int],
    campaign_id: Optional[int],
) -> Optional[int]:
    """Return the campaign a trade should be stored with.

    Without a trade plan, or with a plan that has no campaign, the direct
    campaign is kept. Otherwise the plan's campaign wins, and a direct
    campaign is only accepted when it is the same one.

    Raises:
        InvalidInputError: If the direct campaign differs from the plan's.
    """
    if trade_plan_id is None or trade_plan_campaign_id is None:
        return campaign_id
    if campaign_id is not None and campaign_id != trade_plan_campaign_id:
        raise InvalidInputError(CAMPAIGN_MISMATCH)
    return trade_plan_campaign_id


def trade_belongs_to_campaign(
    campaign_id: int,
    trade_campaign_id: Optional[int],
    trade_plan_campaign_id: Optional[int],
) -> bool:
    return trade_campaign_id == campaign_id or trade_plan_campaign_id == campaign_id
