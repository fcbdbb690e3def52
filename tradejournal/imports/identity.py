"""Execution identity used to deduplicate brokerage fills."""

import logging
from typing import Literal, Optional

from pydantic import BaseModel

from tradejournal.imports.constants import KRAKEN_DEFAULT_ACCOUNT_ID
from tradejournal.models import InboxTradeCandidate

logger = logging.getLogger(__name__)

IDENTITY_DELIMITER = "|"


class ExecutionIdentity(BaseModel):
    """Dedup key for one execution.

    ``native`` identities come from the broker and are guaranteed unique.
    ``hash`` identities are derived from the fill's fields, so two real fills
    with identical provider, account, symbol, side, quantity, price and
    timestamp collide.
    """

    kind: Literal["native", "hash"]
    value: str

    model_config = {"frozen": True}


def _format_number(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def build_execution_identity(
    provider: str,
    account_ref: str,
    symbol: str,
    side: str,
    quantity: float,
    price: float,
    occurred_at: int,
    external_execution_id: Optional[str] = None,
) -> ExecutionIdentity:
    """Derive the dedup identity of an execution."""
    if external_execution_id:
        return ExecutionIdentity(kind="native", value=external_execution_id)

    parts = [
        provider,
        account_ref,
        symbol.strip().upper(),
        side,
        _format_number(quantity),
        _format_number(price),
        str(occurred_at),
    ]
    return ExecutionIdentity(kind="hash", value=IDENTITY_DELIMITER.join(parts))


def default_account_ref(candidate: InboxTradeCandidate) -> str:
    if candidate.brokerage_account_id:
        return candidate.brokerage_account_id
    if candidate.source == "kraken":
        return KRAKEN_DEFAULT_ACCOUNT_ID
    return ""


def tag_execution_identity(candidate: InboxTradeCandidate) -> InboxTradeCandidate:
    """Stamp a fallback external id on a candidate that lacks one.

    Candidates missing any field the hash needs are returned unchanged; they
    stay without an external id and are never treated as duplicates.
    """
    if candidate.external_id:
        return candidate

    required = (
        candidate.ticker,
        candidate.side,
        candidate.quantity,
        candidate.price,
        candidate.date,
    )
    if any(value is None for value in required):
        return candidate

    identity = build_execution_identity(
        provider=candidate.source,
        account_ref=default_account_ref(candidate),
        symbol=candidate.ticker,
        side=candidate.side,
        quantity=candidate.quantity,
        price=candidate.price,
        occurred_at=candidate.date,
    )
    logger.debug("Tagged %s execution with %s identity %s", candidate.source, identity.kind, identity.value)
    return candidate.model_copy(update={"external_id": identity.value})
