"""
Request Workflows.

State machines for material requests, cash advances and retirements.
All three run pending -> approved | rejected; they differ in the guard on
approval and in whether approval creates a purchase order.
"""

from steps_kernel.domain.workflow import Guard, Transition, Workflow
from steps_kernel.logging_config import get_logger
from steps_modules.requests.models import RequestKind, RequestStatus

logger = get_logger("modules.requests.workflows")

# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

VENDOR_SELECTED = Guard(
    name="vendor_selected",
    description="A vendor must be selected before approval",
    field="vendor",
)

REASON_PROVIDED = Guard(
    name="reason_provided",
    description="A reason for rejection is required",
    field="reason",
)

_PENDING = RequestStatus.PENDING.value
_APPROVED = RequestStatus.APPROVED.value
_REJECTED = RequestStatus.REJECTED.value
_STATES = (_PENDING, _APPROVED, _REJECTED)
_TERMINAL = (_APPROVED, _REJECTED)


# -----------------------------------------------------------------------------
# Workflows
# -----------------------------------------------------------------------------

MATERIAL_REQUEST_WORKFLOW = Workflow(
    name="material_request",
    description="Material request approval; approval raises a purchase order",
    initial_state=_PENDING,
    states=_STATES,
    transitions=(
        Transition(_PENDING, _APPROVED, action="approve", guard=VENDOR_SELECTED, creates_record=True),
        Transition(_PENDING, _REJECTED, action="reject", guard=REASON_PROVIDED),
    ),
    terminal_states=_TERMINAL,
)

ADVANCE_WORKFLOW = Workflow(
    name="advance_request",
    description="Cash advance approval",
    initial_state=_PENDING,
    states=_STATES,
    transitions=(
        Transition(_PENDING, _APPROVED, action="approve"),
        Transition(_PENDING, _REJECTED, action="reject", guard=REASON_PROVIDED),
    ),
    terminal_states=_TERMINAL,
)

RETIREMENT_WORKFLOW = Workflow(
    name="retirement_request",
    description="Advance retirement approval",
    initial_state=_PENDING,
    states=_STATES,
    transitions=(
        Transition(_PENDING, _APPROVED, action="approve"),
        Transition(_PENDING, _REJECTED, action="reject", guard=REASON_PROVIDED),
    ),
    terminal_states=_TERMINAL,
)

WORKFLOWS_BY_KIND: dict[RequestKind, Workflow] = {
    RequestKind.MATERIAL: MATERIAL_REQUEST_WORKFLOW,
    RequestKind.ADVANCE: ADVANCE_WORKFLOW,
    RequestKind.RETIREMENT: RETIREMENT_WORKFLOW,
}

logger.info(
    "request_workflows_registered",
    extra={
        "workflows": [w.name for w in WORKFLOWS_BY_KIND.values()],
        "guards": [VENDOR_SELECTED.name, REASON_PROVIDED.name],
    },
)
