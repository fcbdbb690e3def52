"""Property-based tests for inbox candidate validation.

**Feature: trade-journal**
"""

import math

from hypothesis import given, settings
from hypothesis import strategies as st

from tradejournal.imports.validation import (
    ASSET_TYPE_REQUIRED,
    DATE_REQUIRED,
    DIRECTION_REQUIRED,
    NO_EXTERNAL_ID,
    PRICE_REQUIRED,
    QUANTITY_REQUIRED,
    SIDE_REQUIRED,
    TICKER_REQUIRED,
    normalize_ticker,
    validate_inbox_trade_candidate,
    with_validation,
)
from tradejournal.models import InboxTradeCandidate

TICKER_CHARS = st.characters(min_codepoint=32, max_codepoint=126)


def candidate_strategy():
    """Generate candidates with any mix of missing and invalid fields."""
    numbers = st.one_of(
        st.none(),
        st.floats(allow_nan=True, allow_infinity=True),
    )
    return st.builds(
        InboxTradeCandidate,
        source=st.sampled_from(["ibkr", "kraken"]),
        ticker=st.one_of(st.none(), st.text(alphabet=TICKER_CHARS, max_size=8)),
        asset_type=st.one_of(st.none(), st.sampled_from(["stock", "crypto"])),
        side=st.one_of(st.none(), st.sampled_from(["buy", "sell"])),
        direction=st.one_of(st.none(), st.sampled_from(["long", "short"])),
        price=numbers,
        quantity=numbers,
        date=st.one_of(st.none(), st.integers(min_value=0, max_value=4_102_444_800_000)),
        external_id=st.one_of(st.none(), st.text(max_size=12)),
        validation_errors=st.lists(st.text(max_size=10), max_size=2),
        validation_warnings=st.lists(st.text(max_size=10), max_size=2),
    )


def valid_candidate(**overrides) -> InboxTradeCandidate:
    fields = {
        "source": "ibkr",
        "ticker": "aapl",
        "asset_type": "stock",
        "side": "buy",
        "direction": "long",
        "price": 180.5,
        "quantity": 10,
        "date": 1_705_311_000_000,
        "external_id": "U123|AAPL|20240115;093000|180.5|10",
    }
    fields.update(overrides)
    return InboxTradeCandidate(**fields)


class TestValidationIdempotence:
    """
    **Feature: trade-journal, Property 1: Idempotent validation**

    *For any* candidate, validating the validated candidate again without
    existing diagnostics yields the same errors and warnings.
    """

    @given(candidate=candidate_strategy())
    @settings(max_examples=200)
    def test_revalidation_is_stable(self, candidate: InboxTradeCandidate):
        first = with_validation(candidate, include_existing=False)
        second = validate_inbox_trade_candidate(first, include_existing=False)

        assert second.validation_errors == first.validation_errors
        assert second.validation_warnings == first.validation_warnings

    @given(candidate=candidate_strategy())
    @settings(max_examples=100)
    def test_validation_does_not_modify_candidate(self, candidate: InboxTradeCandidate):
        before = candidate.model_dump()
        validate_inbox_trade_candidate(candidate)
        after = candidate.model_dump()
        # NaN never compares equal to itself
        for key, value in before.items():
            if isinstance(value, float) and math.isnan(value):
                assert math.isnan(after[key])
            else:
                assert after[key] == value


class TestValidationRules:
    """Every rule is evaluated and reported with its exact message."""

    def test_valid_candidate_has_no_errors(self):
        result = validate_inbox_trade_candidate(valid_candidate())

        assert result.validation_errors == []
        assert result.validation_warnings == []
        assert result.normalized_ticker == "AAPL"

    def test_empty_candidate_reports_every_error(self):
        result = validate_inbox_trade_candidate(InboxTradeCandidate(source="ibkr"))

        assert result.validation_errors == [
            TICKER_REQUIRED,
            ASSET_TYPE_REQUIRED,
            SIDE_REQUIRED,
            DIRECTION_REQUIRED,
            DATE_REQUIRED,
            PRICE_REQUIRED,
            QUANTITY_REQUIRED,
        ]
        assert result.validation_warnings == [NO_EXTERNAL_ID]
        assert result.normalized_ticker is None

    def test_whitespace_ticker_is_missing(self):
        result = validate_inbox_trade_candidate(valid_candidate(ticker="   "))

        assert TICKER_REQUIRED in result.validation_errors
        assert result.normalized_ticker is None

    def test_ticker_is_trimmed_and_uppercased(self):
        result = validate_inbox_trade_candidate(valid_candidate(ticker="  msft "))

        assert result.normalized_ticker == "MSFT"

    def test_non_positive_price_and_quantity(self):
        result = validate_inbox_trade_candidate(valid_candidate(price=0, quantity=-1))

        assert PRICE_REQUIRED in result.validation_errors
        assert QUANTITY_REQUIRED in result.validation_errors

    def test_non_finite_numbers(self):
        result = validate_inbox_trade_candidate(
            valid_candidate(price=float("nan"), quantity=float("inf"))
        )

        assert PRICE_REQUIRED in result.validation_errors
        assert QUANTITY_REQUIRED in result.validation_errors

    def test_missing_external_id_is_only_a_warning(self):
        result = validate_inbox_trade_candidate(valid_candidate(external_id=None))

        assert result.validation_errors == []
        assert result.validation_warnings == [NO_EXTERNAL_ID]

    def test_include_existing_unions_diagnostics(self):
        candidate = valid_candidate(
            side=None,
            validation_errors=["Could not parse IBKR DateTime 'x'"],
            validation_warnings=["earlier warning"],
        )

        result = validate_inbox_trade_candidate(candidate, include_existing=True)

        assert result.validation_errors == ["Could not parse IBKR DateTime 'x'", SIDE_REQUIRED]
        assert result.validation_warnings == ["earlier warning"]

    def test_exclude_existing_starts_fresh(self):
        candidate = valid_candidate(validation_errors=["stale"], validation_warnings=["stale"])

        result = validate_inbox_trade_candidate(candidate, include_existing=False)

        assert result.validation_errors == []
        assert result.validation_warnings == []

    def test_with_validation_sets_normalized_ticker(self):
        validated = with_validation(valid_candidate(ticker=" nvda"))

        assert validated.ticker == "NVDA"
        assert validated.validation_errors == []


class TestNormalizeTicker:
    """Tests for ticker normalization."""

    @given(st.text(alphabet=TICKER_CHARS, max_size=12))
    @settings(max_examples=100)
    def test_normalize_is_idempotent(self, ticker: str):
        once = normalize_ticker(ticker)
        assert normalize_ticker(once) == once

    def test_none_and_blank(self):
        assert normalize_ticker(None) is None
        assert normalize_ticker("  ") is None
