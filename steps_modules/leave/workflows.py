"""
Leave Workflows.

Two-stage approval: the manager decides first, then HR.  Rejection at
either stage needs comments.
"""

from steps_kernel.domain.workflow import Guard, Transition, Workflow
from steps_kernel.logging_config import get_logger
from steps_modules.leave.models import LeaveStatus

logger = get_logger("modules.leave.workflows")

COMMENTS_PROVIDED = Guard(
    name="comments_provided",
    description="Comments are required when rejecting a leave request",
    field="comments",
)

_PENDING_MANAGER = LeaveStatus.PENDING_MANAGER.value
_PENDING_HR = LeaveStatus.PENDING_HR.value
_APPROVED = LeaveStatus.APPROVED.value
_REJECTED_MANAGER = LeaveStatus.REJECTED_MANAGER.value
_REJECTED = LeaveStatus.REJECTED.value

LEAVE_WORKFLOW = Workflow(
    name="leave_request",
    description="Manager then HR leave approval",
    initial_state=_PENDING_MANAGER,
    states=(_PENDING_MANAGER, _PENDING_HR, _APPROVED, _REJECTED_MANAGER, _REJECTED),
    transitions=(
        Transition(_PENDING_MANAGER, _PENDING_HR, action="approve"),
        Transition(_PENDING_MANAGER, _REJECTED_MANAGER, action="reject", guard=COMMENTS_PROVIDED),
        Transition(_PENDING_HR, _APPROVED, action="approve"),
        Transition(_PENDING_HR, _REJECTED, action="reject", guard=COMMENTS_PROVIDED),
    ),
    terminal_states=(_APPROVED, _REJECTED_MANAGER, _REJECTED),
)

logger.info(
    "leave_workflow_registered",
    extra={
        "workflow_name": LEAVE_WORKFLOW.name,
        "state_count": len(LEAVE_WORKFLOW.states),
        "transition_count": len(LEAVE_WORKFLOW.transitions),
    },
)
