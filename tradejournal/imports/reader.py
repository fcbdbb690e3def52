"""CSV reading helpers shared by the brokerage normalizers."""

import io
import logging
from typing import Iterable, NamedTuple, Optional

import pandas as pd
from pydantic import BaseModel, Field

from tradejournal.models import InboxTradeCandidate

logger = logging.getLogger(__name__)


class ParseResult(BaseModel):
    """Candidates parsed from one export plus file-level errors."""

    trades: list[InboxTradeCandidate] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class CsvReadError(Exception):
    """The export could not be read as CSV."""


class CsvRows(NamedTuple):
    """Rows read from an export and the number of malformed lines dropped."""

    rows: list[dict[str, str]]
    skipped_lines: int


def read_csv_rows(csv_content: str, required_columns: Iterable[str]) -> CsvRows:
    """Read CSV text with a header row into a list of string dicts.

    All cells are kept as strings; missing cells become empty strings.
    Lines with more fields than the header are dropped and counted.

    Raises:
        CsvReadError: If the text is not CSV or required columns are missing.
    """
    bad_lines: list[list[str]] = []

    def _skip_bad_line(fields: list[str]) -> None:
        bad_lines.append(fields)
        return None

    try:
        frame = pd.read_csv(
            io.StringIO(csv_content),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=_skip_bad_line,
        )
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise CsvReadError(f"Could not read CSV: {e}") from e

    frame.columns = [str(column).strip() for column in frame.columns]
    missing = [column for column in required_columns if column not in frame.columns]
    if missing:
        raise CsvReadError(f"Missing required columns: {', '.join(missing)}")

    if bad_lines:
        logger.warning("Skipped %d malformed CSV lines", len(bad_lines))

    frame = frame.fillna("")
    logger.debug("Read %d CSV rows with columns %s", len(frame), list(frame.columns))
    rows = [
        {key: str(value) for key, value in record.items()}
        for record in frame.to_dict(orient="records")
    ]
    return CsvRows(rows=rows, skipped_lines=len(bad_lines))


def skipped_lines_errors(broker: str, csv_rows: CsvRows) -> list[str]:
    """File-level error reporting dropped lines, or an empty list."""
    if not csv_rows.skipped_lines:
        return []
    return [f"{broker}: Skipped {csv_rows.skipped_lines} malformed CSV line(s)"]


def parse_float(value: Optional[str]) -> Optional[float]:
    """Parse a numeric cell, returning None for blank or malformed values."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None
