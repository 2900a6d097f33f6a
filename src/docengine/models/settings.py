from __future__ import annotations

from dataclasses import dataclass, field, replace

from docengine.models.line_item import LineItem
from docengine.models.numbering import NumberingSequence
from docengine.models.rounding import NoRounding, RoundingMode, rounding_from_dict
from docengine.models.tax import NoTax, TaxConfig, tax_from_dict
from docengine.services.calculation import CalculationService
from docengine.services.line_items import DEFAULT_MAX_ITEMS, LineItemsManager
from docengine.services.numbering import default_sequences


@dataclass(frozen=True)
class EngineSettings:
    """Engine configuration loaded from ``engine.yaml``."""

    rounding: RoundingMode = field(default_factory=NoRounding)
    per_line_rounding: bool = False
    default_tax: TaxConfig = field(default_factory=NoTax)
    max_line_items: int = DEFAULT_MAX_ITEMS
    sequences: dict[str, NumberingSequence] = field(default_factory=default_sequences)

    @classmethod
    def from_dict(cls, d: dict | None) -> EngineSettings:
        """Create settings from a YAML-loaded dict; missing keys keep their defaults."""
        d = d or {}
        sequences = default_sequences()
        for doc_type, seq in (d.get("sequences") or {}).items():
            sequences[doc_type] = NumberingSequence.from_dict(doc_type, seq or {})
        return cls(
            rounding=rounding_from_dict(d.get("rounding")),
            per_line_rounding=bool(d.get("per_line_rounding", False)),
            default_tax=tax_from_dict(d.get("default_tax")),
            max_line_items=int(d.get("max_line_items", DEFAULT_MAX_ITEMS)),
            sequences=sequences,
        )

    def calculator(self) -> CalculationService:
        return CalculationService(rounding=self.rounding, per_line_rounding=self.per_line_rounding)

    def line_items(self) -> LineItemsManager:
        """An empty line items manager using these settings."""
        return LineItemsManager(calculator=self.calculator(), max_items=self.max_line_items)

    def line_item(self, d: dict) -> LineItem:
        """Build a line item, applying the default tax when the mapping has none."""
        item = LineItem.from_dict(d)
        if "tax" not in d:
            item = replace(item, tax=self.default_tax)
        return item
