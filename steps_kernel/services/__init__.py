"""Kernel services: transaction-owning base class and workflow execution."""

from steps_kernel.services.base import SYSTEM_ACTOR_ID, BaseService
from steps_kernel.services.workflow_executor import (
    GuardExecutor,
    WorkflowExecutor,
    default_guard_executor,
)

__all__ = [
    "SYSTEM_ACTOR_ID",
    "BaseService",
    "GuardExecutor",
    "WorkflowExecutor",
    "default_guard_executor",
]
