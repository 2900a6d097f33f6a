from __future__ import annotations

from datetime import date

import pytest

from docengine.models.numbering import NumberingPolicy, NumberingSequence, ParsedNumber
from docengine.services.exceptions import ConfigurationError, ValidationError
from docengine.services.numbering import (
    default_sequences,
    format_number,
    next_number,
    parse_number,
    preview,
)


@pytest.fixture
def monthly() -> NumberingSequence:
    return NumberingSequence(
        "invoice", "INV", policy=NumberingPolicy.MONTHLY_RESET, counter=42, period="2025-01"
    )


class TestSequential:
    def test_first_number(self):
        number, seq = next_number(NumberingSequence("quotation", "QUO"))
        assert number == "QUO-0001"
        assert seq.counter == 1

    def test_increments(self):
        seq = NumberingSequence("purchase_order", "PO", counter=9)
        first, seq = next_number(seq)
        second, seq = next_number(seq)
        assert (first, second) == ("PO-0010", "PO-0011")

    def test_input_sequence_unchanged(self):
        seq = NumberingSequence("quotation", "QUO", counter=5)
        next_number(seq)
        assert seq.counter == 5

    def test_counter_beyond_padding(self):
        number, _ = next_number(NumberingSequence("quotation", "QUO", counter=9999))
        assert number == "QUO-10000"

    def test_ignores_date(self):
        number, _ = next_number(NumberingSequence("quotation", "QUO"), on=date(2030, 1, 1))
        assert number == "QUO-0001"

    def test_custom_separator_and_padding(self):
        seq = NumberingSequence("quotation", "Q", padding=6, separator="/")
        assert next_number(seq)[0] == "Q/000001"

    def test_numbers_unique(self):
        seq = NumberingSequence("quotation", "QUO")
        issued = set()
        for _ in range(50):
            number, seq = next_number(seq)
            issued.add(number)
        assert len(issued) == 50


class TestMonthlyReset:
    def test_same_month_increments(self, monthly):
        number, seq = next_number(monthly, on=date(2025, 1, 31))
        assert number == "INV-2025-01-0043"
        assert seq.counter == 43

    def test_new_month_resets(self, monthly):
        number, seq = next_number(monthly, on=date(2025, 2, 1))
        assert number == "INV-2025-02-0001"
        assert seq.period == "2025-02"
        assert seq.counter == 1

    def test_new_year_resets(self, monthly):
        number, _ = next_number(monthly, on=date(2026, 1, 5))
        assert number == "INV-2026-01-0001"

    def test_fresh_sequence(self):
        seq = NumberingSequence("invoice", "INV", policy="monthly_reset")
        number, seq = next_number(seq, on=date(2025, 3, 10))
        assert number == "INV-2025-03-0001"

    def test_earlier_period_rejected(self, monthly):
        with pytest.raises(ValidationError, match="precedes"):
            next_number(monthly, on=date(2024, 12, 31))


class TestPreviewAndParse:
    def test_preview_does_not_advance(self, monthly):
        assert preview(monthly, on=date(2025, 1, 2)) == "INV-2025-01-0043"
        assert monthly.counter == 42

    def test_format_current(self, monthly):
        assert format_number(monthly) == "INV-2025-01-0042"

    def test_parse_monthly(self, monthly):
        assert parse_number(monthly, "INV-2025-02-0007") == ParsedNumber("INV", 7, "2025-02")

    def test_parse_sequential(self):
        seq = NumberingSequence("quotation", "QUO")
        assert parse_number(seq, "QUO-0123") == ParsedNumber("QUO", 123)

    def test_parse_mismatch(self, monthly):
        assert parse_number(monthly, "QUO-0001") is None


class TestSequenceModel:
    def test_defaults(self):
        seqs = default_sequences()
        assert {k: s.prefix for k, s in seqs.items()} == {
            "quotation": "QUO",
            "invoice": "INV",
            "purchase_order": "PO",
        }

    def test_from_dict_to_dict(self):
        seq = NumberingSequence.from_dict(
            "invoice", {"prefix": "INV", "policy": "monthly_reset", "counter": 3, "period": "2025-04"}
        )
        assert seq.policy is NumberingPolicy.MONTHLY_RESET
        assert seq.to_dict()["counter"] == 3
        assert seq.to_dict()["policy"] == "monthly_reset"

    def test_unknown_policy(self):
        with pytest.raises(ConfigurationError, match="unknown numbering policy"):
            NumberingSequence.from_dict("invoice", {"prefix": "INV", "policy": "yearly"})

    def test_negative_counter(self):
        with pytest.raises(ConfigurationError):
            NumberingSequence("invoice", "INV", counter=-1)

    def test_bad_period(self):
        with pytest.raises(ValidationError, match="YYYY-MM"):
            NumberingSequence("invoice", "INV", period="2025-13")

    def test_unknown_policy_direct(self):
        with pytest.raises(ConfigurationError, match="unknown numbering policy 'yearly'"):
            NumberingSequence("invoice", "INV", policy="yearly")  # type: ignore[arg-type]


class TestSuffix:
    def test_sequential_suffix(self):
        seq = NumberingSequence("quotation", "QUO", suffix="JKT")
        assert next_number(seq)[0] == "QUO-0001-JKT"

    def test_monthly_suffix(self, monthly):
        seq = NumberingSequence.from_dict(
            "invoice", {**monthly.to_dict(), "suffix": "REV"}
        )
        assert next_number(seq, on=date(2025, 1, 20))[0] == "INV-2025-01-0043-REV"

    def test_parse_with_suffix(self):
        seq = NumberingSequence("quotation", "QUO", suffix="JKT")
        assert parse_number(seq, "QUO-0012-JKT") == ParsedNumber("QUO", 12, suffix="JKT")
        assert parse_number(seq, "QUO-0012") is None
