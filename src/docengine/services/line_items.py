from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import fields, replace
from typing import Any

from docengine.models.line_item import DocumentTotals, LineComputation, LineItem
from docengine.services.calculation import CalculationService
from docengine.services.exceptions import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITEMS = 100

_PATCHABLE = frozenset(f.name for f in fields(LineItem)) - {"id"}


class LineItemsManager:
    """Ordered line items of one document.

    Items keep their id when moved. Every mutation recomputes the document
    totals through the calculation service, so ``totals`` is never stale.
    """

    def __init__(
        self,
        items: Iterable[LineItem] = (),
        *,
        calculator: CalculationService | None = None,
        max_items: int = DEFAULT_MAX_ITEMS,
    ) -> None:
        if max_items < 1:
            raise ConfigurationError(f"max_items must be at least 1, got {max_items}")
        self._calculator = calculator or CalculationService()
        self._max_items = max_items
        self._items: list[LineItem] = []
        self.replace_all(items)

    # --- Queries ---

    @property
    def items(self) -> tuple[LineItem, ...]:
        return tuple(self._items)

    @property
    def totals(self) -> DocumentTotals:
        return self._totals

    @property
    def calculator(self) -> CalculationService:
        return self._calculator

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[LineItem]:
        return iter(tuple(self._items))

    def __contains__(self, item_id: object) -> bool:
        return any(i.id == item_id for i in self._items)

    def get(self, item_id: str) -> LineItem:
        return self._items[self._index_of(item_id)]

    def line(self, item_id: str) -> LineComputation:
        """Return the computed amounts of one item."""
        return self._totals.lines[self._index_of(item_id)]

    def find_by_product(self, product_id: str) -> LineItem | None:
        return next((i for i in self._items if i.product_id == product_id), None)

    # --- Mutations ---

    def add(self, item: LineItem, index: int | None = None) -> DocumentTotals:
        """Append *item*, or insert it at *index*."""
        self._check_capacity()
        if item.id in self:
            raise ValidationError(f"Duplicate line item id: '{item.id}'", "id")
        items = list(self._items)
        if index is None:
            items.append(item)
        else:
            self._check_index(index, len(items))
            items.insert(index, item)
        return self._commit(items, "add", item.id)

    def remove(self, item_id: str) -> DocumentTotals:
        items = list(self._items)
        del items[self._index_of(item_id)]
        return self._commit(items, "remove", item_id)

    def reorder(self, item_id: str, new_index: int) -> DocumentTotals:
        """Move an item to *new_index* without changing its identity."""
        current = self._index_of(item_id)
        self._check_index(new_index, len(self._items) - 1)
        items = list(self._items)
        items.insert(new_index, items.pop(current))
        return self._commit(items, "reorder", item_id)

    def update(self, item_id: str, patch: Mapping[str, Any]) -> DocumentTotals:
        """Replace fields of an item; quantity and price are re-validated."""
        unknown = set(patch) - _PATCHABLE
        if unknown:
            raise ValidationError(
                f"Cannot update line item field(s): {', '.join(sorted(unknown))}", "patch"
            )
        idx = self._index_of(item_id)
        items = list(self._items)
        items[idx] = replace(items[idx], **patch)
        return self._commit(items, "update", item_id)

    def duplicate(self, item_id: str, new_id: str | None = None) -> DocumentTotals:
        """Insert a copy of an item right after it, under a new id."""
        self._check_capacity()
        idx = self._index_of(item_id)
        copy_id = new_id or uuid.uuid4().hex
        if copy_id in self:
            raise ValidationError(f"Duplicate line item id: '{copy_id}'", "id")
        items = list(self._items)
        items.insert(idx + 1, replace(items[idx], id=copy_id))
        return self._commit(items, "duplicate", copy_id)

    def clear(self) -> DocumentTotals:
        return self._commit([], "clear", None)

    def replace_all(self, items: Iterable[LineItem]) -> DocumentTotals:
        """Replace every item at once, enforcing the same invariants as ``add``."""
        new_items = list(items)
        if len(new_items) > self._max_items:
            raise ValidationError(
                f"A document holds at most {self._max_items} line items", "items"
            )
        seen: set[str] = set()
        for item in new_items:
            if item.id in seen:
                raise ValidationError(f"Duplicate line item id: '{item.id}'", "id")
            seen.add(item.id)
        return self._commit(new_items, "replace_all", None)

    # --- Internals ---

    def _index_of(self, item_id: str) -> int:
        for idx, item in enumerate(self._items):
            if item.id == item_id:
                return idx
        raise ValidationError(f"Line item not found: '{item_id}'", "id")

    def _check_index(self, index: int, upper: int) -> None:
        if not 0 <= index <= upper:
            raise ValidationError(f"Index {index} out of range 0..{upper}", "index")

    def _check_capacity(self) -> None:
        if len(self._items) >= self._max_items:
            raise ValidationError(
                f"A document holds at most {self._max_items} line items", "items"
            )

    def _commit(self, items: list[LineItem], action: str, item_id: str | None) -> DocumentTotals:
        """Compute totals for *items* and only then make them current."""
        totals = self._calculator.compute_document(items)
        self._items = items
        self._totals = totals
        logger.debug(
            "Line items %s (%s): %d items, grand total %s",
            action,
            item_id,
            len(self._items),
            self._totals.grand_total,
        )
        return self._totals
