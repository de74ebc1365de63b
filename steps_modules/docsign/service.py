"""
DocSign Module Service (``steps_modules.docsign.service``).

Responsibility
--------------
Sends composed signature requests and records each recipient's signing
decision.

Invariants enforced
-------------------
* A document is persisted only from a composer that passes
  ``build_document()`` validation.
* Sequential mode: only the pending recipient with the lowest ``order``
  may act.  Parallel mode: any pending recipient may.
* The document is ``Completed`` exactly when every recipient has signed,
  and ``Declined`` as soon as one recipient declines.

Failure modes
-------------
* Unknown document or recipient  -> ``NotFoundError``.
* Out-of-turn signature, repeated decision, or a finished document
  -> ``InvalidTransitionError``.
"""

from __future__ import annotations

from dataclasses import replace
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from steps_kernel.domain.clock import Clock
from steps_kernel.exceptions import InvalidTransitionError, NotFoundError
from steps_kernel.logging_config import LogContext, get_logger
from steps_kernel.services.base import BaseService
from steps_kernel.services.workflow_executor import WorkflowExecutor
from steps_modules.docsign.composer import SignatureComposer
from steps_modules.docsign.models import (
    DocumentStatus,
    RecipientStatus,
    SignatureDocument,
    SigningMode,
)
from steps_modules.docsign.orm import SignatureDocumentModel
from steps_modules.docsign.workflows import DOCUMENT_WORKFLOW, RECIPIENT_WORKFLOW

logger = get_logger("modules.docsign.service")


class DocSignService(BaseService):
    """
    Signature request sending and signing.

    Transaction boundary: this service commits on success, rolls back on failure.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        actor_id: UUID | None = None,
        workflow_executor: WorkflowExecutor | None = None,
    ):
        super().__init__(session, clock, actor_id)
        self._executor = workflow_executor or WorkflowExecutor()

    def _get_model(self, document_id: UUID) -> SignatureDocumentModel:
        model = self.session.get(SignatureDocumentModel, document_id)
        if model is None:
            raise NotFoundError("signature_document", str(document_id))
        return model

    def get(self, document_id: UUID) -> SignatureDocument:
        return self._get_model(document_id).to_dto()

    def list_documents(
        self,
        uploaded_by: str | None = None,
        status: DocumentStatus | None = None,
    ) -> list[SignatureDocument]:
        stmt = select(SignatureDocumentModel)
        if uploaded_by is not None:
            stmt = stmt.where(SignatureDocumentModel.uploaded_by == uploaded_by)
        if status is not None:
            stmt = stmt.where(SignatureDocumentModel.status == status.value)
        stmt = stmt.order_by(SignatureDocumentModel.created_at.desc())
        return [model.to_dto() for model in self.session.scalars(stmt)]

    def send_request(self, composer: SignatureComposer, uploaded_by: str) -> UUID:
        """Validate the composer, persist the frozen document and return its id."""
        document = composer.build_document(uploaded_by)
        with LogContext.bind(document_id=str(document.id)), self._transaction(
            "docsign_send_request",
            recipient_count=len(document.recipients),
            field_count=len(document.fields),
        ):
            self.session.add(SignatureDocumentModel.from_dto(document, self._actor_id))
            self.session.flush()
        return document.id

    def _decide(
        self,
        document_id: UUID,
        recipient_id: int,
        action: str,
        reason: str | None = None,
    ) -> SignatureDocument:
        with LogContext.bind(document_id=str(document_id)), self._transaction(
            f"docsign_{action}", recipient_id=recipient_id,
        ):
            model = self._get_model(document_id)
            document = model.to_dto()
            self._executor.require_transition(
                DOCUMENT_WORKFLOW, "signature_document", str(document.id),
                document.status.value, action,
            )
            recipient = document.recipient(recipient_id)
            if recipient is None:
                raise NotFoundError("recipient", str(recipient_id))
            result = self._executor.require_transition(
                RECIPIENT_WORKFLOW, "signature_recipient", str(recipient_id),
                recipient.status.value, action,
            )
            if document.signing_mode is SigningMode.SEQUENTIAL:
                next_up = document.pending_recipients()[0]
                if next_up.id != recipient_id:
                    raise InvalidTransitionError(
                        entity_type="signature_recipient",
                        entity_id=str(recipient_id),
                        current_state=recipient.status.value,
                        action=action,
                        reason=f"waiting for {next_up.display_name} to sign first",
                    )

            now = self._clock.now()
            decided = replace(
                recipient,
                status=RecipientStatus(result.new_state),
                signed_at=now if action == "sign" else None,
                decline_reason=reason if action == "decline" else None,
            )
            updated = replace(
                document,
                recipients=tuple(decided if r.id == recipient_id else r for r in document.recipients),
            )
            if action == "decline":
                updated = replace(updated, status=DocumentStatus.DECLINED)
            elif updated.all_signed:
                self._executor.require_transition(
                    DOCUMENT_WORKFLOW, "signature_document", str(document.id),
                    document.status.value, "complete",
                )
                updated = replace(updated, status=DocumentStatus.COMPLETED, completed_at=now)
            model.apply_state(updated)
            model.updated_by_id = self._actor_id
            self.session.flush()
        logger.info(
            f"docsign_recipient_{result.new_state}",
            extra={
                "document_id": str(document_id),
                "recipient_id": recipient_id,
                "document_status": updated.status.value,
            },
        )
        return updated

    def sign(self, document_id: UUID, recipient_id: int) -> SignatureDocument:
        return self._decide(document_id, recipient_id, "sign")

    def decline(self, document_id: UUID, recipient_id: int, reason: str = "") -> SignatureDocument:
        """Record a refusal; the whole request is declined."""
        return self._decide(document_id, recipient_id, "decline", reason or None)
