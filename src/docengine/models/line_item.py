from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from docengine.models.discount import DiscountConfig, NoDiscount, discount_from_dict
from docengine.models.tax import NoTax, TaxConfig, tax_from_dict
from docengine.services.exceptions import ConfigurationError, ValidationError
from docengine.utils.validators import validate_quantity, validate_unit_price

ZERO = Decimal("0")


@dataclass(frozen=True)
class LineItem:
    """One row of a document. Quantity and price are validated on construction."""

    id: str
    quantity: Decimal
    unit_price: Decimal
    discount: DiscountConfig = field(default_factory=NoDiscount)
    tax: TaxConfig = field(default_factory=NoTax)
    product_id: str | None = None
    description: str = ""
    unit: str = "pcs"

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise ValidationError("Line item id must be a non-empty string", "id")
        object.__setattr__(self, "quantity", validate_quantity(self.quantity))
        object.__setattr__(self, "unit_price", validate_unit_price(self.unit_price))
        if not isinstance(self.discount, DiscountConfig):
            raise ConfigurationError(f"Line item {self.id}: unsupported discount config {self.discount!r}")
        if not isinstance(self.tax, TaxConfig):
            raise ConfigurationError(f"Line item {self.id}: unsupported tax config {self.tax!r}")

    @classmethod
    def from_dict(cls, d: dict) -> LineItem:
        """Create a LineItem from a YAML/JSON-loaded dict, applying defaults for optional fields."""
        product_id = d.get("product_id")
        return cls(
            id=str(d["id"]),
            quantity=d["quantity"],
            unit_price=d["unit_price"],
            discount=discount_from_dict(d.get("discount")),
            tax=tax_from_dict(d.get("tax")),
            product_id=str(product_id) if product_id is not None else None,
            description=d.get("description", ""),
            unit=d.get("unit", "pcs"),
        )


@dataclass(frozen=True)
class LineComputation:
    """Derived amounts for one line. Never stored; recomputed on demand."""

    subtotal: Decimal
    discount_amount: Decimal
    taxable_base: Decimal
    tax_amount: Decimal
    line_total: Decimal
    reporting_base: Decimal  # taxable base net of embedded (inclusive) tax
    rounded_total: Decimal


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: Decimal = ZERO
    total_discount: Decimal = ZERO
    taxable_amount: Decimal = ZERO
    reporting_base: Decimal = ZERO
    total_tax: Decimal = ZERO
    total_before_rounding: Decimal = ZERO
    rounding_adjustment: Decimal = ZERO
    grand_total: Decimal = ZERO
    lines: tuple[LineComputation, ...] = ()
