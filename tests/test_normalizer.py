"""
Tests for the order record normalizer.

Validates:
- Amount parsing defaults to zero on bad input
- Flags are derived from the rounded discrepancy
- Display-style, canonical and camelCase rows all normalize
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from reconciliation.models import MATCH, OVERCHARGE, UNDERCHARGE
from reconciliation.normalizer import classify_flag, normalize_row, normalize_rows, parse_amount
from tests.conftest import MOCK_ROWS, make_row


class TestParseAmount:
    @pytest.mark.parametrize("value,expected", [
        ("100.00", 100.0),
        ("  42.5 ", 42.5),
        ("-12.25", -12.25),
        ("12.50 CAD", 12.5),
        ("1e2", 100.0),
        (".5", 0.5),
        (Decimal("19.99"), 19.99),
        (7, 7.0),
    ])
    def test_parses_numbers(self, value, expected):
        assert parse_amount(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", ["", "n/a", "$12", None, "NaN", float("nan"), float("inf"), True])
    def test_defaults_to_zero(self, value):
        assert parse_amount(value) == 0.0


class TestClassifyFlag:
    def test_tolerance_band(self):
        assert classify_flag(0.01) == MATCH
        assert classify_flag(-0.01) == MATCH
        assert classify_flag(0.0) == MATCH
        assert classify_flag(0.02) == OVERCHARGE
        assert classify_flag(-0.02) == UNDERCHARGE


class TestNormalizeRow:
    def test_display_columns(self):
        record = normalize_row(MOCK_ROWS[0])
        assert record["order_number"] == "1001"
        assert record["customer"] == "ACME CORP"
        assert record["date"] == "2025-10-01"
        assert record["lane"] == "QC -> ON"
        assert record["selling_price"] == 100.0
        assert record["billed_price"] == 150.0
        assert record["discrepancy"] == 50.0
        assert record["margin"] == 50.0
        assert record["margin_pct"] == pytest.approx(33.33)
        assert record["flag"] == OVERCHARGE

    def test_match_and_undercharge(self):
        assert normalize_row(MOCK_ROWS[1])["flag"] == MATCH
        beta = normalize_row(MOCK_ROWS[2])
        assert beta["discrepancy"] == -50.0
        assert beta["flag"] == UNDERCHARGE

    def test_missing_customer_is_unknown(self):
        row = make_row(1, "", "10", "10")
        assert normalize_row(row)["customer"] == "Unknown"
        del row["Organization Name"]
        assert normalize_row(row)["customer"] == "Unknown"

    def test_customer_name_kept_verbatim(self):
        assert normalize_row(make_row(1, " ACME", "10", "20"))["customer"] == " ACME"
        assert normalize_row(make_row(2, "   ", "10", "20"))["customer"] == "Unknown"

    def test_bad_prices_default_to_zero(self):
        record = normalize_row(make_row(1, "ACME", "oops", ""))
        assert record["selling_price"] == 0.0
        assert record["billed_price"] == 0.0
        assert record["discrepancy"] == 0.0
        assert record["flag"] == MATCH

    def test_discrepancy_rounded_to_cents(self):
        record = normalize_row(make_row(1, "ACME", "0.1", "0.3"))
        assert record["discrepancy"] == 0.2

    def test_flag_follows_rounded_discrepancy(self):
        # 0.014 rounds to 0.01, which sits inside the match band
        record = normalize_row(make_row(1, "ACME", "10.000", "10.014"))
        assert record["discrepancy"] == 0.01
        assert record["flag"] == MATCH

    def test_timestamp_dates_truncated(self):
        row = make_row(1, "ACME", "1", "1", date="2025-10-01T14:30:00Z")
        assert normalize_row(row)["date"] == "2025-10-01"

    @pytest.mark.parametrize("value", [date(2025, 10, 1), datetime(2025, 10, 1, 8, 0)])
    def test_driver_date_objects(self, value):
        row = make_row(1, "ACME", "1", "1", date=value)
        assert normalize_row(row)["date"] == "2025-10-01"

    def test_canonical_and_camel_case_rows(self):
        snake = normalize_row({
            "order_number": "A1", "customer": "ACME", "date": "2025-01-02",
            "selling_price": 10, "billed_price": 12,
        })
        camel = normalize_row({
            "orderNumber": "A1", "customer": "ACME", "date": "2025-01-02",
            "sellingPrice": "10", "billedPrice": "12", "flag": "undercharge",
        })
        assert snake["discrepancy"] == camel["discrepancy"] == 2.0
        # flag is always recomputed, never taken from the input
        assert camel["flag"] == OVERCHARGE
        assert camel["order_number"] == "A1"


class TestNormalizeRows:
    def test_drops_blank_rows(self):
        blank = {key: "" for key in MOCK_ROWS[0]}
        records = normalize_rows([MOCK_ROWS[0], blank, {}, MOCK_ROWS[2]])
        assert [r["order_number"] for r in records] == ["1001", "1003"]

    def test_keeps_partial_rows(self):
        records = normalize_rows([{"Order Number": "9", "Selling Price (CAD)": ""}])
        assert len(records) == 1
        assert records[0]["customer"] == "Unknown"
