"""Interactive Brokers flex-query trade export normalizer.

Rows are order-level records. Summary rows, repeated headers (multi-account
exports) and fill-level ``ExchTrade`` rows are skipped.
"""

import logging
from datetime import datetime
from typing import Optional

from tradejournal.imports.constants import IBKR_FILL_TRANSACTION_TYPE
from tradejournal.imports.reader import (
    CsvReadError,
    ParseResult,
    parse_float,
    read_csv_rows,
    skipped_lines_errors,
)
from tradejournal.imports.validation import normalize_ticker, with_validation
from tradejournal.models import InboxTradeCandidate

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = [
    "ClientAccountID",
    "Symbol",
    "Buy/Sell",
    "Open/CloseIndicator",
    "TradePrice",
    "Quantity",
    "DateTime",
]

IBKR_DATETIME_FORMAT = "%Y%m%d;%H%M%S"

# (Open/CloseIndicator, Buy/Sell) -> direction
DIRECTION_MATRIX = {
    ("O", "BUY"): "long",
    ("O", "SELL"): "short",
    ("C", "SELL"): "long",
    ("C", "BUY"): "short",
}

SIDE_MAP = {"BUY": "buy", "SELL": "sell"}


def parse_ibkr_datetime(value: str) -> int:
    """Parse ``YYYYMMDD;HHMMSS`` in local time to epoch milliseconds.

    Raises:
        ValueError: If the value does not match the format.
    """
    parsed = datetime.strptime(value.strip(), IBKR_DATETIME_FORMAT)
    return int(round(parsed.timestamp() * 1000))


def infer_direction(open_close: str, buy_sell: str) -> Optional[str]:
    """Infer direction from the open/close indicator and side.

    Returns None for combinations outside the matrix.
    """
    key = (open_close.strip().upper(), buy_sell.strip().upper())
    return DIRECTION_MATRIX.get(key)


def _is_skipped(row: dict[str, str]) -> bool:
    if row["ClientAccountID"] == "ClientAccountID":
        return True
    if not row["Open/CloseIndicator"].strip():
        return True
    if row.get("TransactionType", "").strip() == IBKR_FILL_TRANSACTION_TYPE:
        return True
    if not row["DateTime"].strip():
        return True
    return False


def _row_to_candidate(row: dict[str, str]) -> InboxTradeCandidate:
    parse_errors = []

    try:
        date = parse_ibkr_datetime(row["DateTime"])
    except ValueError:
        date = None
        parse_errors.append(f"Could not parse IBKR DateTime '{row['DateTime']}'")

    raw_quantity = parse_float(row["Quantity"])
    quantity = abs(raw_quantity) if raw_quantity is not None else None
    taxes = parse_float(row.get("Taxes", ""))
    external_id = "|".join(
        [
            row["ClientAccountID"],
            row["Symbol"],
            row["DateTime"],
            row["TradePrice"],
            row["Quantity"],
        ]
    )

    return InboxTradeCandidate(
        source="ibkr",
        ticker=normalize_ticker(row["Symbol"]),
        asset_type="stock",
        side=SIDE_MAP.get(row["Buy/Sell"].strip().upper()),
        direction=infer_direction(row["Open/CloseIndicator"], row["Buy/Sell"]),
        price=parse_float(row["TradePrice"]),
        quantity=quantity,
        date=date,
        fees=0.0,
        taxes=taxes or None,
        order_type=row.get("OrderType", "").strip() or None,
        external_id=external_id,
        brokerage_account_id=row["ClientAccountID"].strip() or None,
        validation_errors=parse_errors,
    )


def parse_ibkr_csv(csv_content: str) -> ParseResult:
    """Parse an IBKR trade export into inbox candidates.

    Args:
        csv_content: UTF-8 CSV text with a header row.

    Returns:
        ParseResult with one validated candidate per order-level row.
    """
    try:
        csv_rows = read_csv_rows(csv_content, REQUIRED_COLUMNS)
    except CsvReadError as e:
        return ParseResult(errors=[f"IBKR: {e}"])

    trades = []
    skipped = 0
    for row in csv_rows.rows:
        if _is_skipped(row):
            skipped += 1
            continue
        trades.append(with_validation(_row_to_candidate(row), include_existing=True))

    logger.debug("Parsed %d IBKR trades, skipped %d rows", len(trades), skipped)
    return ParseResult(trades=trades, errors=skipped_lines_errors("IBKR", csv_rows))
