"""
Procurement Workflows.

State machine for purchase orders raised from approved material requests.
"""

from steps_kernel.domain.workflow import Transition, Workflow
from steps_kernel.logging_config import get_logger
from steps_modules.procurement.models import POStatus

logger = get_logger("modules.procurement.workflows")

_DRAFT = POStatus.DRAFT.value
_PAYMENT_PENDING = POStatus.PAYMENT_PENDING.value
_PAID = POStatus.PAID.value
_CANCELLED = POStatus.CANCELLED.value

PURCHASE_ORDER_WORKFLOW = Workflow(
    name="purchase_order",
    description="Purchase order review and payment",
    initial_state=_DRAFT,
    states=(_DRAFT, _PAYMENT_PENDING, _PAID, _CANCELLED),
    transitions=(
        Transition(_DRAFT, _PAYMENT_PENDING, action="review"),
        Transition(_PAYMENT_PENDING, _PAID, action="mark_paid"),
        Transition(_DRAFT, _CANCELLED, action="cancel"),
    ),
    terminal_states=(_PAID, _CANCELLED),
)

logger.info(
    "procurement_po_workflow_registered",
    extra={
        "workflow_name": PURCHASE_ORDER_WORKFLOW.name,
        "state_count": len(PURCHASE_ORDER_WORKFLOW.states),
        "transition_count": len(PURCHASE_ORDER_WORKFLOW.transitions),
        "initial_state": PURCHASE_ORDER_WORKFLOW.initial_state,
    },
)
