"""
Requests Module (``steps_modules.requests``).

Responsibility
--------------
Material requests, cash advances and advance retirements: the request
model, its persistence boundary (``RequestStore``), the approval workflow
(``RequestService``) and resumable form drafts.

Invariants enforced
-------------------
* Status changes only through ``RequestService`` transitions.
* Approved and rejected requests are terminal.
* One purchase order per material request; one retirement per advance.
"""

from steps_modules.requests.models import (
    AdvanceDetails,
    LineItem,
    MaterialDetails,
    Request,
    RequestFilter,
    RequestKind,
    RequestStatus,
    RetirementDetails,
)
from steps_modules.requests.workflows import (
    ADVANCE_WORKFLOW,
    MATERIAL_REQUEST_WORKFLOW,
    RETIREMENT_WORKFLOW,
    WORKFLOWS_BY_KIND,
)

__all__ = [
    "Request",
    "RequestKind",
    "RequestStatus",
    "RequestFilter",
    "LineItem",
    "MaterialDetails",
    "AdvanceDetails",
    "RetirementDetails",
    "MATERIAL_REQUEST_WORKFLOW",
    "ADVANCE_WORKFLOW",
    "RETIREMENT_WORKFLOW",
    "WORKFLOWS_BY_KIND",
]
