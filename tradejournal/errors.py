"""Exceptions raised by Trade Journal operations.

Validation problems on imported rows are never raised; they are recorded on
the row as ``validation_errors`` / ``validation_warnings``.
"""

from typing import Optional, TypeVar

T = TypeVar("T")


class TradeJournalError(Exception):
    """Base class for all Trade Journal errors."""


class NotFoundError(TradeJournalError):
    """Record is missing or belongs to another owner."""


class InvalidTransitionError(TradeJournalError):
    """Operation is not allowed in the record's current state."""


class InvalidInputError(TradeJournalError, ValueError):
    """A required argument is missing or malformed."""


def assert_owner(record: Optional[T], owner_id: str, not_found_message: str = "Record not found") -> T:
    """Return ``record`` if it exists and belongs to ``owner_id``.

    Missing records and records of other owners raise the same
    :class:`NotFoundError` so existence is not leaked across owners.
    """
    if record is None or getattr(record, "owner_id", None) != owner_id:
        raise NotFoundError(not_found_message)
    return record
