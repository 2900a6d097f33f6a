from __future__ import annotations

from docengine.models.workflow import WorkflowDefinition
from docengine.services.exceptions import ConfigurationError
from docengine.workflows.invoice import INVOICE_WORKFLOW
from docengine.workflows.purchase_order import PURCHASE_ORDER_WORKFLOW
from docengine.workflows.quotation import QUOTATION_WORKFLOW

WORKFLOWS: dict[str, WorkflowDefinition] = {
    d.name: d for d in (QUOTATION_WORKFLOW, INVOICE_WORKFLOW, PURCHASE_ORDER_WORKFLOW)
}


def get_workflow(document_type: str) -> WorkflowDefinition:
    """Return the workflow definition of a document type."""
    try:
        return WORKFLOWS[document_type]
    except KeyError:
        raise ConfigurationError(f"No workflow defined for document type '{document_type}'") from None


def list_document_types() -> list[str]:
    return sorted(WORKFLOWS)
