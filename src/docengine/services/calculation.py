"""Line and document totals.

Order of operations is fixed: discount, then tax, then rounding. Rounding is
applied once, to the final amount, so that many lines never compound
rounding error. Reordering these steps changes totals by rounding-sized
amounts.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from decimal import Decimal

from docengine.models.line_item import DocumentTotals, LineComputation, LineItem
from docengine.models.rounding import NoRounding, RoundingMode
from docengine.models.tax import ExclusiveTax, InclusiveTax
from docengine.services.discount import apply_discount
from docengine.services.rounding import round_amount
from docengine.services.tax import apply_tax

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


def compute_line(item: LineItem, rounding: RoundingMode | None = None) -> LineComputation:
    """Compute the amounts of one line item.

    Intermediate values keep full precision; only ``rounded_total`` is
    rounded, with the document's rounding mode.
    """
    mode = rounding if rounding is not None else NoRounding()
    subtotal = item.quantity * item.unit_price
    discount_amount = apply_discount(subtotal, item.discount, quantity=item.quantity)
    taxable_base = subtotal - discount_amount
    tax_amount = apply_tax(taxable_base, item.tax)

    if isinstance(item.tax, ExclusiveTax):
        line_total = taxable_base + tax_amount
    else:
        line_total = taxable_base

    if isinstance(item.tax, InclusiveTax):
        reporting_base = taxable_base - tax_amount
    else:
        reporting_base = taxable_base

    return LineComputation(
        subtotal=subtotal,
        discount_amount=discount_amount,
        taxable_base=taxable_base,
        tax_amount=tax_amount,
        line_total=line_total,
        reporting_base=reporting_base,
        rounded_total=round_amount(line_total, mode),
    )


def compute_document(
    items: Iterable[LineItem],
    rounding: RoundingMode | None = None,
    *,
    per_line_rounding: bool = False,
) -> DocumentTotals:
    """Sum line computations and round the grand total once.

    With *per_line_rounding* each line's rounded total is summed instead,
    for documents that display rounded line totals.
    """
    mode = rounding if rounding is not None else NoRounding()
    lines = tuple(compute_line(item, mode) for item in items)

    raw_total = sum((c.line_total for c in lines), _ZERO)
    if per_line_rounding:
        grand_total = round_amount(sum((c.rounded_total for c in lines), _ZERO), mode)
    else:
        grand_total = round_amount(raw_total, mode)

    totals = DocumentTotals(
        subtotal=sum((c.subtotal for c in lines), _ZERO),
        total_discount=sum((c.discount_amount for c in lines), _ZERO),
        taxable_amount=sum((c.taxable_base for c in lines), _ZERO),
        reporting_base=sum((c.reporting_base for c in lines), _ZERO),
        total_tax=sum((c.tax_amount for c in lines), _ZERO),
        total_before_rounding=raw_total,
        rounding_adjustment=grand_total - raw_total,
        grand_total=grand_total,
        lines=lines,
    )
    logger.debug(
        "Computed document totals: %d lines, grand total %s (adjustment %s)",
        len(lines),
        totals.grand_total,
        totals.rounding_adjustment,
    )
    return totals


@dataclass(frozen=True)
class CalculationService:
    """Binds a document rounding mode to the calculation functions."""

    rounding: RoundingMode = field(default_factory=NoRounding)
    per_line_rounding: bool = False

    def compute_line(self, item: LineItem) -> LineComputation:
        return compute_line(item, self.rounding)

    def compute_document(self, items: Iterable[LineItem]) -> DocumentTotals:
        return compute_document(items, self.rounding, per_line_rounding=self.per_line_rounding)

    def with_rounding(self, rounding: RoundingMode) -> CalculationService:
        """Return a copy of this service using a different rounding mode."""
        return replace(self, rounding=rounding)
