from __future__ import annotations

from decimal import Decimal

import pytest

from docengine.models.tax import ExclusiveTax, InclusiveTax, NoTax, tax_from_dict
from docengine.services.exceptions import ConfigurationError
from docengine.services.tax import apply_tax, is_inclusive


class TestApplyTax:
    def test_no_tax(self):
        assert apply_tax(Decimal("270000"), NoTax()) == 0

    def test_exclusive(self):
        assert apply_tax(Decimal("270000"), ExclusiveTax(Decimal("11"))) == Decimal("29700")

    def test_inclusive_backs_out_tax(self):
        assert apply_tax(Decimal("111000"), InclusiveTax(Decimal("11"))) == Decimal("11000")

    def test_zero_rate(self):
        assert apply_tax(Decimal("1000"), ExclusiveTax(Decimal("0"))) == 0

    def test_non_positive_base(self):
        assert apply_tax(Decimal("0"), ExclusiveTax()) == 0
        assert apply_tax(Decimal("-10"), InclusiveTax()) == 0

    def test_is_inclusive(self):
        assert is_inclusive(InclusiveTax())
        assert not is_inclusive(ExclusiveTax())
        assert not is_inclusive(NoTax())


class TestTaxConfig:
    def test_default_ppn_rate_and_name(self):
        tax = ExclusiveTax()
        assert tax.rate == Decimal("11")
        assert tax.name == "PPN 11%"

    def test_inclusive_default_name(self):
        assert InclusiveTax(Decimal("12")).name == "Inclusive Tax 12%"

    def test_custom_name(self):
        assert ExclusiveTax(Decimal("10"), name="VAT").name == "VAT"

    def test_rate_out_of_range(self):
        with pytest.raises(ConfigurationError):
            ExclusiveTax(Decimal("101"))


class TestTaxFromDict:
    def test_empty(self):
        assert tax_from_dict(None) == NoTax()

    def test_exclusive_defaults_to_ppn(self):
        assert tax_from_dict({"type": "exclusive"}) == ExclusiveTax(Decimal("11"))

    def test_inclusive(self):
        tax = tax_from_dict({"type": "inclusive", "rate": 11, "name": "PPN incl."})
        assert tax == InclusiveTax(Decimal("11"), name="PPN incl.")

    def test_unknown_type(self):
        with pytest.raises(ConfigurationError, match="Unknown tax type"):
            tax_from_dict({"type": "gst"})
