"""Kraken trade history export normalizer.

Kraken exports one row per fill. Fills sharing an ``ordertxid`` are partial
fills of the same order and are aggregated into one trade.
"""

import logging
from typing import Optional

import pandas as pd

from tradejournal.imports.constants import KRAKEN_EQUITY_ASSET_CLASS
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

REQUIRED_COLUMNS = ["aclass", "cost", "fee", "ordertxid", "pair", "time", "type", "vol"]

SIDE_MAP = {"buy": "buy", "sell": "sell"}


def parse_kraken_time(value: str) -> Optional[int]:
    """Parse a Kraken fill time (UTC) to epoch milliseconds.

    Returns None when the value is blank or unparseable.
    """
    if not value or not value.strip():
        return None
    try:
        timestamp = pd.to_datetime(value.strip(), utc=True)
    except (ValueError, OverflowError):
        return None
    if pd.isna(timestamp):
        return None
    return int(timestamp.value // 1_000_000)


def ticker_from_pair(pair: str) -> Optional[str]:
    """Return the base asset of a ``BASE/QUOTE`` pair."""
    return normalize_ticker(pair.split("/")[0])


def _sum_field(
    fills: list[dict[str, str]], field: str, order_id: str, parse_errors: list[str]
) -> Optional[float]:
    """Sum a numeric field over all fills, or None if any fill is unparseable."""
    total = 0.0
    complete = True
    for fill in fills:
        value = parse_float(fill[field])
        if value is None:
            parse_errors.append(f"Could not parse Kraken {field} '{fill[field]}' for order {order_id}")
            complete = False
            continue
        total += value
    return total if complete else None


def _aggregate_order(order_id: str, fills: list[dict[str, str]]) -> InboxTradeCandidate:
    parse_errors = []

    total_cost = _sum_field(fills, "cost", order_id, parse_errors)
    total_volume = _sum_field(fills, "vol", order_id, parse_errors)
    total_fee = _sum_field(fills, "fee", order_id, parse_errors)

    times = []
    for fill in fills:
        parsed = parse_kraken_time(fill["time"])
        if parsed is None:
            parse_errors.append(f"Could not parse Kraken time '{fill['time']}' for order {order_id}")
            continue
        times.append(parsed)

    last = fills[-1]
    # A partial sum would skew the average, so leave the price unset
    if total_cost is None or total_volume is None:
        average_price = None
    else:
        average_price = total_cost / total_volume if total_volume > 0 else 0.0

    return InboxTradeCandidate(
        source="kraken",
        ticker=ticker_from_pair(last["pair"]),
        asset_type="crypto",
        side=SIDE_MAP.get(last["type"].strip().lower()),
        direction="long",
        price=average_price,
        quantity=total_volume,
        date=min(times) if times else None,
        fees=total_fee,
        taxes=0.0,
        order_type=last.get("ordertype", "").strip() or None,
        external_id=order_id,
        validation_errors=parse_errors,
    )


def parse_kraken_csv(csv_content: str) -> ParseResult:
    """Parse a Kraken trades export into inbox candidates.

    Only ``equity_pair`` rows are considered; rows without ``ordertxid``
    cannot be grouped or deduplicated and are dropped.

    Args:
        csv_content: UTF-8 CSV text with a header row.

    Returns:
        ParseResult with one validated candidate per order, in the order the
        orders first appear.
    """
    try:
        csv_rows = read_csv_rows(csv_content, REQUIRED_COLUMNS)
    except CsvReadError as e:
        return ParseResult(errors=[f"Kraken: {e}"])

    orders: dict[str, list[dict[str, str]]] = {}
    for row in csv_rows.rows:
        if row["aclass"].strip() != KRAKEN_EQUITY_ASSET_CLASS:
            continue
        order_id = row["ordertxid"].strip()
        if not order_id:
            logger.debug("Dropping Kraken fill without ordertxid")
            continue
        orders.setdefault(order_id, []).append(row)

    trades = [
        with_validation(_aggregate_order(order_id, fills), include_existing=True)
        for order_id, fills in orders.items()
    ]

    logger.debug("Parsed %d Kraken orders from %d rows", len(trades), len(csv_rows.rows))
    return ParseResult(trades=trades, errors=skipped_lines_errors("Kraken", csv_rows))
