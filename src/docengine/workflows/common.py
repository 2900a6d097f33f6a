"""Guards and effects shared by the document workflow definitions."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from docengine.models.workflow import Document, WorkflowEvent
from docengine.services.exceptions import ValidationError
from docengine.utils.validators import to_decimal

TOTAL_MUST_BE_POSITIVE = "total must be greater than zero"


def decimal_field(document: Document, key: str) -> Decimal:
    """Read a numeric document field, treating a missing value as zero."""
    value = document.get(key)
    if value is None:
        return Decimal("0")
    return to_decimal(value, key)


def date_field(document: Document, key: str) -> date | None:
    value = document.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"{key}: invalid date '{value}'", key) from None


def has_positive_total(document: Document, event: WorkflowEvent) -> bool:
    return decimal_field(document, "total") > 0


def date_passed(key: str) -> Callable[[Document, WorkflowEvent], bool]:
    """Guard: the date in document[*key*] is before the event's date."""

    def guard(document: Document, event: WorkflowEvent) -> bool:
        limit = date_field(document, key)
        return limit is not None and event.at.date() > limit

    return guard


def stamp(key: str, **extra: str) -> Callable[[Document, WorkflowEvent], Mapping[str, Any]]:
    """Effect: record the event time under *key*.

    Each keyword maps a document field to the payload key it is copied from;
    ``"reason"`` and ``"actor"`` refer to the event's reason and actor.
    """

    def effect(document: Document, event: WorkflowEvent) -> Mapping[str, Any]:
        patch: dict[str, Any] = {key: event.at}
        for field_name, source in extra.items():
            if source == "reason":
                patch[field_name] = event.reason or event.payload.get("reason")
            elif source == "actor":
                patch[field_name] = event.actor
            else:
                patch[field_name] = event.payload.get(source)
        return patch

    return effect
