"""Trade plan suggestions for imported executions."""

from typing import Iterable, Literal, Optional

from pydantic import BaseModel

from tradejournal.imports.validation import normalize_ticker
from tradejournal.models import TradePlan

SuggestionReason = Literal["none", "symbol_and_side_match"]


class TradePlanSuggestion(BaseModel):
    """The plan an execution most likely belongs to, if any."""

    reason: SuggestionReason = "none"
    suggested_trade_plan_id: Optional[int] = None

    model_config = {"frozen": True}


def is_side_direction_consistent(side: str, direction: str) -> bool:
    """Whether ``side`` opens a position in ``direction``."""
    return (direction == "long" and side == "buy") or (direction == "short" and side == "sell")


def pick_trade_plan_suggestion(
    side: str, symbol: str, trade_plans: Iterable[TradePlan]
) -> TradePlanSuggestion:
    """Pick the first plan trading ``symbol`` in the direction ``side`` opens.

    Args:
        side: Execution side (buy/sell).
        symbol: Execution symbol, in any case.
        trade_plans: Candidate plans in preference order.
    """
    normalized = normalize_ticker(symbol)
    for plan in trade_plans:
        if normalize_ticker(plan.instrument_symbol) == normalized and is_side_direction_consistent(
            side, plan.direction
        ):
            return TradePlanSuggestion(reason="symbol_and_side_match", suggested_trade_plan_id=plan.id)
    return TradePlanSuggestion()
