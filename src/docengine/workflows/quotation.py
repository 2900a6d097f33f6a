"""Quotation lifecycle.

    draft -> submitted -> approved -> converted
                 |            |  \\
              rejected     expired  revise -> draft (new revision)
    draft/submitted/approved -> cancelled
"""

from __future__ import annotations

from docengine.models.workflow import (
    Document,
    StateSpec,
    Transition,
    WorkflowDefinition,
    WorkflowEvent,
)
from docengine.workflows.common import (
    TOTAL_MUST_BE_POSITIVE,
    date_passed,
    has_positive_total,
    stamp,
)

_expired = date_passed("valid_until")


def _not_expired(document: Document, event: WorkflowEvent) -> bool:
    return not _expired(document, event)


def _reopen(document: Document, event: WorkflowEvent) -> dict:
    """The new revision starts as a clean draft."""
    return {
        "submitted_at": None,
        "approved_at": None,
        "approved_by": None,
        "revised_at": event.at,
    }


QUOTATION_WORKFLOW = WorkflowDefinition(
    name="quotation",
    initial="draft",
    states=(
        StateSpec("draft", "Draft", is_editable=True, description="Quotation is being prepared"),
        StateSpec("submitted", "Submitted", description="Awaiting approval"),
        StateSpec("approved", "Approved", description="Ready for conversion to invoice"),
        StateSpec("converted", "Converted", is_terminal=True, description="Converted to invoice"),
        StateSpec("rejected", "Rejected", is_terminal=True, description="Quotation was rejected"),
        StateSpec("expired", "Expired", is_terminal=True, description="Past validity date"),
        StateSpec("cancelled", "Cancelled", is_terminal=True, description="Quotation was cancelled"),
    ),
    transitions=(
        Transition(
            "draft",
            "submit",
            "submitted",
            guard=has_positive_total,
            guard_message=TOTAL_MUST_BE_POSITIVE,
            effect=stamp("submitted_at"),
        ),
        Transition(
            "submitted",
            "approve",
            "approved",
            guard=has_positive_total,
            guard_message=TOTAL_MUST_BE_POSITIVE,
            effect=stamp("approved_at", approved_by="actor"),
        ),
        Transition(
            "submitted",
            "reject",
            "rejected",
            effect=stamp("rejected_at", rejection_reason="reason"),
        ),
        Transition(
            "approved",
            "convert",
            "converted",
            guard=_not_expired,
            guard_message="cannot convert an expired quotation",
            effect=stamp("converted_at", converted_invoice_id="invoice_id"),
        ),
        Transition("approved", "revise", "draft", effect=_reopen, creates_revision=True),
        Transition(
            "approved",
            "expire",
            "expired",
            guard=_expired,
            guard_message="quotation has not expired yet",
            effect=stamp("expired_at"),
        ),
        *(
            Transition(source, "cancel", "cancelled", effect=stamp("cancelled_at", cancel_reason="reason"))
            for source in ("draft", "submitted", "approved")
        ),
    ),
)
