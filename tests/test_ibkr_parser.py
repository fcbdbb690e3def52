"""Tests for the IBKR trade export normalizer.

**Feature: trade-journal**
"""

from datetime import datetime

import pytest

from tradejournal.imports.ibkr import infer_direction, parse_ibkr_csv, parse_ibkr_datetime
from tradejournal.imports.validation import DATE_REQUIRED, DIRECTION_REQUIRED

HEADER = (
    "ClientAccountID,Symbol,Buy/Sell,Open/CloseIndicator,TradePrice,Quantity,"
    "DateTime,TransactionType,Taxes,OrderType"
)


def make_csv(*rows: str) -> str:
    return "\n".join([HEADER, *rows]) + "\n"


class TestIBKRDirectionMatrix:
    """
    **Feature: trade-journal, Property 8: IBKR direction matrix**

    The four (Open/Close, Buy/Sell) combinations map to long, short, long,
    short; anything else yields no direction and a validation error.
    """

    @pytest.mark.parametrize(
        "open_close,buy_sell,expected",
        [
            ("O", "BUY", "long"),
            ("O", "SELL", "short"),
            ("C", "SELL", "long"),
            ("C", "BUY", "short"),
        ],
    )
    def test_matrix(self, open_close: str, buy_sell: str, expected: str):
        assert infer_direction(open_close, buy_sell) == expected

    @pytest.mark.parametrize(
        "open_close,buy_sell",
        [("X", "BUY"), ("O", "HOLD"), ("C;O", "SELL"), ("O", "")],
    )
    def test_outside_matrix_is_none(self, open_close: str, buy_sell: str):
        assert infer_direction(open_close, buy_sell) is None

    def test_unknown_indicator_is_flagged(self):
        result = parse_ibkr_csv(make_csv("U1,AAPL,BUY,X,180,10,20240115;093000,,,LMT"))

        assert len(result.trades) == 1
        trade = result.trades[0]
        assert trade.direction is None
        assert DIRECTION_REQUIRED in trade.validation_errors

    def test_parsed_rows_follow_matrix(self):
        result = parse_ibkr_csv(
            make_csv(
                "U1,AAPL,BUY,O,180,10,20240115;093000,,,LMT",
                "U1,AAPL,SELL,C,190,-10,20240116;093000,,,LMT",
                "U1,TSLA,SELL,O,200,-5,20240117;093000,,,MKT",
                "U1,TSLA,BUY,C,150,5,20240118;093000,,,MKT",
            )
        )

        assert [(t.side, t.direction) for t in result.trades] == [
            ("buy", "long"),
            ("sell", "long"),
            ("sell", "short"),
            ("buy", "short"),
        ]


class TestIBKRRowMapping:
    """Tests for mapping order-level rows to candidates."""

    def test_order_row(self):
        result = parse_ibkr_csv(make_csv("U123,aapl,SELL,C,190.25,-10,20240115;093000,,1.5,LMT"))

        assert result.errors == []
        trade = result.trades[0]
        assert trade.source == "ibkr"
        assert trade.ticker == "AAPL"
        assert trade.asset_type == "stock"
        assert trade.side == "sell"
        assert trade.price == 190.25
        assert trade.quantity == 10
        assert trade.fees == 0.0
        assert trade.taxes == 1.5
        assert trade.order_type == "LMT"
        assert trade.brokerage_account_id == "U123"
        assert trade.external_id == "U123|aapl|20240115;093000|190.25|-10"
        assert trade.validation_errors == []
        assert trade.validation_warnings == []

    def test_datetime_is_local_time(self):
        result = parse_ibkr_csv(make_csv("U1,AAPL,BUY,O,180,10,20240115;093000,,,LMT"))

        expected = int(datetime(2024, 1, 15, 9, 30, 0).timestamp() * 1000)
        assert result.trades[0].date == expected

    def test_blank_taxes_is_none(self):
        result = parse_ibkr_csv(make_csv("U1,AAPL,BUY,O,180,10,20240115;093000,,,LMT"))

        assert result.trades[0].taxes is None

    def test_bad_datetime_is_reported(self):
        result = parse_ibkr_csv(make_csv("U1,AAPL,BUY,O,180,10,2024-01-15,,,LMT"))

        trade = result.trades[0]
        assert trade.date is None
        assert trade.validation_errors[0] == "Could not parse IBKR DateTime '2024-01-15'"
        assert DATE_REQUIRED in trade.validation_errors

    def test_parse_ibkr_datetime_rejects_other_formats(self):
        with pytest.raises(ValueError):
            parse_ibkr_datetime("2024-01-15 09:30:00")


class TestIBKRSkipRules:
    """Summary rows, repeated headers, fill rows and undated rows are skipped."""

    def test_skip_rules(self):
        result = parse_ibkr_csv(
            make_csv(
                "U1,AAPL,BUY,O,180,10,20240115;093000,,,LMT",
                HEADER,
                "U1,AAPL,BUY,,180,10,20240115;093000,,,",
                "U1,AAPL,BUY,O,180,10,20240115;093000,ExchTrade,,LMT",
                "U1,AAPL,BUY,O,180,10,,,,LMT",
                "U2,MSFT,SELL,O,400,-3,20240116;100000,,,LMT",
            )
        )

        assert [t.ticker for t in result.trades] == ["AAPL", "MSFT"]

    def test_missing_columns_is_a_file_error(self):
        result = parse_ibkr_csv("Symbol,Quantity\nAAPL,10\n")

        assert result.trades == []
        assert len(result.errors) == 1
        assert result.errors[0].startswith("IBKR: Missing required columns")

    def test_empty_file_is_a_file_error(self):
        result = parse_ibkr_csv("")

        assert result.trades == []
        assert result.errors

    def test_malformed_lines_are_counted(self):
        result = parse_ibkr_csv(
            make_csv(
                "U1,AAPL,BUY,O,180,10,20240115;093000,,,LMT",
                "U1,AAPL,BUY,O,180,10,20240115;093000,,,LMT,extra,fields",
                "U1,MSFT,BUY,O,400,1,20240116;093000,,,LMT",
            )
        )

        assert [t.ticker for t in result.trades] == ["AAPL", "MSFT"]
        assert result.errors == ["IBKR: Skipped 1 malformed CSV line(s)"]
