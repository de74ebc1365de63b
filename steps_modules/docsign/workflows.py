"""
DocSign Workflows.

Two state machines: one per recipient (pending -> signed | declined) and
one per document (Pending -> Completed | Declined).  A signature that is
not the last one leaves the document in Pending.
"""

from steps_kernel.domain.workflow import Transition, Workflow
from steps_kernel.logging_config import get_logger
from steps_modules.docsign.models import DocumentStatus, RecipientStatus

logger = get_logger("modules.docsign.workflows")

RECIPIENT_WORKFLOW = Workflow(
    name="signature_recipient",
    description="A single recipient's signing decision",
    initial_state=RecipientStatus.PENDING.value,
    states=tuple(s.value for s in RecipientStatus),
    transitions=(
        Transition(RecipientStatus.PENDING.value, RecipientStatus.SIGNED.value, action="sign"),
        Transition(RecipientStatus.PENDING.value, RecipientStatus.DECLINED.value, action="decline"),
    ),
    terminal_states=(RecipientStatus.SIGNED.value, RecipientStatus.DECLINED.value),
)

DOCUMENT_WORKFLOW = Workflow(
    name="signature_document",
    description="Signature request lifecycle",
    initial_state=DocumentStatus.PENDING.value,
    states=tuple(s.value for s in DocumentStatus),
    transitions=(
        Transition(DocumentStatus.PENDING.value, DocumentStatus.PENDING.value, action="sign"),
        Transition(DocumentStatus.PENDING.value, DocumentStatus.COMPLETED.value, action="complete"),
        Transition(DocumentStatus.PENDING.value, DocumentStatus.DECLINED.value, action="decline"),
    ),
    terminal_states=(DocumentStatus.COMPLETED.value, DocumentStatus.DECLINED.value),
)

logger.info(
    "docsign_workflows_registered",
    extra={"workflows": [RECIPIENT_WORKFLOW.name, DOCUMENT_WORKFLOW.name]},
)
