"""Purchase order lifecycle.

    draft -> submitted -> approved -> received -> billed
                 |
              rejected
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
from docengine.workflows.common import has_positive_total, stamp


def _ready_to_submit(document: Document, event: WorkflowEvent) -> bool:
    return bool(document.get("vendor_id")) and has_positive_total(document, event)


PURCHASE_ORDER_WORKFLOW = WorkflowDefinition(
    name="purchase_order",
    initial="draft",
    states=(
        StateSpec("draft", "Draft", is_editable=True, description="Purchase order is being prepared"),
        StateSpec("submitted", "Submitted", description="Awaiting approval"),
        StateSpec("approved", "Approved", description="Ordered from vendor"),
        StateSpec("received", "Received", description="Goods received"),
        StateSpec("billed", "Billed", is_terminal=True, description="Vendor bill recorded"),
        StateSpec("rejected", "Rejected", is_terminal=True, description="PO was rejected"),
        StateSpec("cancelled", "Cancelled", is_terminal=True, description="PO was cancelled"),
    ),
    transitions=(
        Transition(
            "draft",
            "submit",
            "submitted",
            guard=_ready_to_submit,
            guard_message="purchase order needs a vendor and a total greater than zero",
            effect=stamp("submitted_at"),
        ),
        Transition(
            "submitted",
            "approve",
            "approved",
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
            "receive",
            "received",
            effect=stamp("received_at", goods_receipt_id="receipt_id"),
        ),
        Transition("received", "bill", "billed", effect=stamp("billed_at", bill_id="bill_id")),
        *(
            Transition(source, "cancel", "cancelled", effect=stamp("cancelled_at", cancel_reason="reason"))
            for source in ("draft", "submitted", "approved")
        ),
    ),
)
