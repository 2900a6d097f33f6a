"""Invoice lifecycle.

    draft -> sent -> partial -> paid
               \\      |
                +-> overdue
    any open state -> void;  draft -> cancelled

A payment moves the invoice to ``partial`` while a balance remains and to
``paid`` once the total is settled.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from docengine.models.workflow import (
    Document,
    StateSpec,
    Transition,
    WorkflowDefinition,
    WorkflowEvent,
)
from docengine.services.exceptions import ValidationError
from docengine.utils.formatters import format_idr
from docengine.utils.validators import to_decimal
from docengine.workflows.common import (
    TOTAL_MUST_BE_POSITIVE,
    date_passed,
    decimal_field,
    has_positive_total,
    stamp,
)

PAYABLE_STATES = ("sent", "partial", "overdue")
OPEN_STATES = ("draft", "sent", "partial", "overdue")

PAYMENT_MUST_BE_POSITIVE = "payment amount must be greater than zero"


def payment_amount(event: WorkflowEvent) -> Decimal | None:
    """The payment in the event payload, or None when missing or malformed."""
    raw = event.payload.get("amount")
    if raw is None:
        return None
    try:
        return to_decimal(raw, "amount")
    except ValidationError:
        return None


def outstanding(document: Document) -> Decimal:
    return decimal_field(document, "total") - decimal_field(document, "paid_amount")


def _leaves_balance(document: Document, event: WorkflowEvent) -> bool:
    amount = payment_amount(event)
    return amount is not None and 0 < amount < outstanding(document)


def _settles(document: Document, event: WorkflowEvent) -> bool:
    amount = payment_amount(event)
    return amount is not None and amount > 0 and amount >= outstanding(document)


def _record_payment(document: Document, event: WorkflowEvent) -> dict[str, Any]:
    amount = payment_amount(event) or Decimal("0")
    paid = decimal_field(document, "paid_amount") + amount
    return {
        "paid_amount": paid,
        "last_payment_at": event.at,
        "last_payment_note": f"{format_idr(amount)} received",
    }


def _settle(document: Document, event: WorkflowEvent) -> dict[str, Any]:
    patch = _record_payment(document, event)
    patch["paid_at"] = event.at
    return patch


INVOICE_WORKFLOW = WorkflowDefinition(
    name="invoice",
    initial="draft",
    states=(
        StateSpec("draft", "Draft", is_editable=True, description="Invoice is being prepared"),
        StateSpec("sent", "Sent", description="Invoice sent to customer"),
        StateSpec("partial", "Partial", description="Partially paid"),
        StateSpec("overdue", "Overdue", description="Payment is past due"),
        StateSpec("paid", "Paid", is_terminal=True, description="Fully paid"),
        StateSpec("void", "Void", is_terminal=True, description="Invoice voided"),
        StateSpec("cancelled", "Cancelled", is_terminal=True, description="Invoice cancelled"),
    ),
    transitions=(
        Transition(
            "draft",
            "send",
            "sent",
            guard=has_positive_total,
            guard_message=TOTAL_MUST_BE_POSITIVE,
            effect=stamp("sent_at"),
        ),
        *(
            t
            for source in PAYABLE_STATES
            for t in (
                Transition(
                    source,
                    "record_payment",
                    "partial",
                    guard=_leaves_balance,
                    guard_message=PAYMENT_MUST_BE_POSITIVE,
                    effect=_record_payment,
                ),
                Transition(
                    source,
                    "record_payment",
                    "paid",
                    guard=_settles,
                    guard_message=PAYMENT_MUST_BE_POSITIVE,
                    effect=_settle,
                ),
            )
        ),
        *(
            Transition(
                source,
                "overdue",
                "overdue",
                guard=date_passed("due_date"),
                guard_message="invoice is not past its due date",
                effect=stamp("overdue_at"),
            )
            for source in ("sent", "partial")
        ),
        *(
            Transition(source, "void", "void", effect=stamp("voided_at", void_reason="reason"))
            for source in OPEN_STATES
        ),
        Transition("draft", "cancel", "cancelled", effect=stamp("cancelled_at")),
    ),
)
