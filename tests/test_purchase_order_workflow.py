from __future__ import annotations

import pytest

from docengine.models.workflow import WorkflowInstance
from docengine.services.exceptions import GuardRejected, InvalidTransition
from docengine.services.workflow import start, transition
from docengine.workflows.purchase_order import PURCHASE_ORDER_WORKFLOW


@pytest.fixture
def draft(now) -> WorkflowInstance:
    return start(
        PURCHASE_ORDER_WORKFLOW, {"number": "PO-0001", "vendor_id": "V-01", "total": "5000000"}, at=now
    )


class TestPurchaseOrder:
    def test_full_lifecycle(self, draft, now):
        inst = draft
        for event, payload in (
            ("submit", None),
            ("approve", None),
            ("receive", {"receipt_id": "GR-7"}),
            ("bill", {"bill_id": "BILL-3"}),
        ):
            inst = transition(inst, event, payload, actor="buyer", at=now).unwrap()
        assert inst.state == "billed"
        assert inst.is_terminal
        assert inst.document["goods_receipt_id"] == "GR-7"
        assert inst.document["bill_id"] == "BILL-3"
        assert inst.document["approved_by"] == "buyer"
        assert len(inst.history) == 5

    @pytest.mark.parametrize(
        "document",
        [{"total": "100"}, {"vendor_id": "V-01", "total": 0}, {"vendor_id": "", "total": "5"}],
    )
    def test_submit_guard(self, document):
        result = transition(start(PURCHASE_ORDER_WORKFLOW, document), "submit")
        assert isinstance(result.error, GuardRejected)
        assert "vendor" in result.error.reason

    def test_reject(self, draft):
        submitted = transition(draft, "submit").unwrap()
        rejected = transition(submitted, "reject", reason="over budget").unwrap()
        assert rejected.document["rejection_reason"] == "over budget"

    @pytest.mark.parametrize("state", ["draft", "submitted", "approved"])
    def test_cancel(self, state):
        inst = WorkflowInstance(definition=PURCHASE_ORDER_WORKFLOW, state=state)
        assert transition(inst, "cancel").instance.state == "cancelled"

    def test_cannot_cancel_after_receipt(self):
        inst = WorkflowInstance(definition=PURCHASE_ORDER_WORKFLOW, state="received")
        assert isinstance(transition(inst, "cancel").error, InvalidTransition)

    def test_bill_before_receipt(self, draft):
        approved = transition(transition(draft, "submit").unwrap(), "approve").unwrap()
        assert isinstance(transition(approved, "bill").error, InvalidTransition)
