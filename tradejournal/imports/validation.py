"""Validation of inbox trade candidates."""

import math
from typing import Optional

from tradejournal.models import InboxTradeCandidate, InboxTradeValidationResult

TICKER_REQUIRED = "Ticker is required"
ASSET_TYPE_REQUIRED = "Asset type is required"
SIDE_REQUIRED = "Side is required"
DIRECTION_REQUIRED = "Direction is required"
DATE_REQUIRED = "Date is required and must be a valid timestamp"
PRICE_REQUIRED = "Price is required and must be > 0"
QUANTITY_REQUIRED = "Quantity is required and must be > 0"
NO_EXTERNAL_ID = "No externalId provided; dedup cannot be guaranteed."


def normalize_ticker(ticker: Optional[str]) -> Optional[str]:
    """Trim and uppercase a ticker, returning None when empty."""
    if ticker is None:
        return None
    return ticker.strip().upper() or None


def _is_finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def validate_inbox_trade_candidate(
    candidate: InboxTradeCandidate,
    include_existing: bool = True,
) -> InboxTradeValidationResult:
    """Check a candidate's required fields and numeric domains.

    Every rule is evaluated so the caller gets the complete set of
    diagnostics. The candidate itself is never modified.

    Args:
        candidate: Candidate to validate.
        include_existing: Carry the candidate's current diagnostics forward
            and append new findings. When False, start from empty lists.

    Returns:
        Normalized ticker plus error and warning lists.
    """
    errors = list(candidate.validation_errors) if include_existing else []
    warnings = list(candidate.validation_warnings) if include_existing else []

    normalized_ticker = normalize_ticker(candidate.ticker)

    if not normalized_ticker:
        errors.append(TICKER_REQUIRED)
    if not candidate.asset_type:
        errors.append(ASSET_TYPE_REQUIRED)
    if not candidate.side:
        errors.append(SIDE_REQUIRED)
    if not candidate.direction:
        errors.append(DIRECTION_REQUIRED)

    if not _is_finite(candidate.date):
        errors.append(DATE_REQUIRED)
    if not _is_finite(candidate.price) or candidate.price <= 0:
        errors.append(PRICE_REQUIRED)
    if not _is_finite(candidate.quantity) or candidate.quantity <= 0:
        errors.append(QUANTITY_REQUIRED)

    if not candidate.external_id:
        warnings.append(NO_EXTERNAL_ID)

    return InboxTradeValidationResult(
        normalized_ticker=normalized_ticker,
        validation_errors=errors,
        validation_warnings=warnings,
    )


def with_validation(
    candidate: InboxTradeCandidate,
    include_existing: bool = True,
) -> InboxTradeCandidate:
    """Return a copy of ``candidate`` carrying its validation diagnostics.

    The ticker is replaced by its normalized form when one exists.
    """
    result = validate_inbox_trade_candidate(candidate, include_existing=include_existing)
    update = {
        "validation_errors": result.validation_errors,
        "validation_warnings": result.validation_warnings,
    }
    if result.normalized_ticker:
        update["ticker"] = result.normalized_ticker
    return candidate.model_copy(update=update)
