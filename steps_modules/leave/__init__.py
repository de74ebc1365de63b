"""Leave Module: two-stage (manager, then HR) leave approval."""

from steps_modules.leave.models import LeaveRequest, LeaveStatus, LeaveType
from steps_modules.leave.workflows import LEAVE_WORKFLOW

__all__ = ["LeaveRequest", "LeaveStatus", "LeaveType", "LEAVE_WORKFLOW"]
