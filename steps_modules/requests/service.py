"""
Requests Module Service (``steps_modules.requests.service``).

Responsibility
--------------
The Workflow Engine: creates material requests, cash advances and
retirements, and applies ``approve`` / ``reject`` through the declarative
workflows in ``steps_modules.requests.workflows``.  Approving a material
request raises its purchase order in the same unit of work.

Architecture position
---------------------
**Modules layer** -- orchestrates ``RequestStore`` and ``WorkflowExecutor``.
Owns the transaction boundary: commit on success, rollback on any failure.

Invariants enforced
-------------------
* Transitions are computed on a copy of the loaded request
  (``dataclasses.replace``); the store is written only once the whole
  transition, including any linked record, has been computed.
* Status is re-read inside the transaction, so a second ``approve`` finds
  the request terminal and fails.
* A material request links at most one vendor and one purchase order.
* An advance is retired at most once.

Failure modes
-------------
* Unknown id  -> ``NotFoundError``.
* Action from a terminal state  -> ``InvalidTransitionError``.
* Blank vendor / reason / required form field  -> ``ValidationError``.
* Retiring an ineligible advance  -> ``AdvanceNotEligibleError``.
* Storage failure  -> ``RemoteError``; nothing is persisted and the
  caller's previously loaded copy remains authoritative.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from steps_config.schema import AppConfig
from steps_kernel.domain.clock import Clock
from steps_kernel.exceptions import (
    AdvanceNotEligibleError,
    InvalidTransitionError,
    ValidationError,
)
from steps_kernel.logging_config import LogContext, get_logger
from steps_kernel.services.base import BaseService
from steps_kernel.services.workflow_executor import WorkflowExecutor
from steps_modules.procurement.service import format_po_number, purchase_order_from_request
from steps_modules.requests.drafts import DraftStore, RequestDraft
from steps_modules.requests.models import (
    AdvanceDetails,
    LineItem,
    MaterialDetails,
    Request,
    RequestFilter,
    RequestKind,
    RequestStatus,
    RetirementDetails,
    to_decimal,
)
from steps_modules.requests.store import RequestStore, SqlRequestStore
from steps_modules.requests.workflows import WORKFLOWS_BY_KIND

logger = get_logger("modules.requests.service")

LineInput = LineItem | Mapping[str, Any]


def _to_line(line: LineInput) -> LineItem:
    if isinstance(line, LineItem):
        return line
    return LineItem(
        item_name=str(line.get("item_name") or ""),
        quantity=line.get("quantity"),
        quantity_type=str(line.get("quantity_type") or ""),
        amount=line.get("amount"),
        description=str(line.get("description") or ""),
    )


def _check_non_negative(lines: Iterable[LineItem]) -> None:
    for line in lines:
        if to_decimal(line.quantity) < 0 or to_decimal(line.amount) < 0:
            raise ValidationError(
                "line_items", f"line '{line.item_name}' has a negative quantity or amount"
            )


def _require(field_name: str, value: str | None) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(field_name, f"{field_name} is required")
    return str(value).strip()


class RequestService(BaseService):
    """
    Facade for the request approval workflow.

    Transaction boundary: this service commits on success, rolls back on failure.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        actor_id: UUID | None = None,
        config: AppConfig | None = None,
        store: RequestStore | None = None,
        workflow_executor: WorkflowExecutor | None = None,
        draft_store: DraftStore | None = None,
    ):
        super().__init__(session, clock, actor_id)
        self._config = config or AppConfig()
        self._store = store or SqlRequestStore(session, self._actor_id)
        self._executor = workflow_executor or WorkflowExecutor()
        self._drafts = draft_store

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, request_id: str) -> Request:
        return self._store.load(request_id)

    def list_requests(
        self,
        status: RequestStatus | str | None = None,
        kind: RequestKind | None = None,
        requested_by: str | None = None,
    ) -> list[Request]:
        """Requests for the list screens. ``status="all"`` means no status filter."""
        if isinstance(status, str) and not isinstance(status, RequestStatus):
            status = None if status == "all" else RequestStatus(status)
        return self._store.list(
            RequestFilter(status=status, kind=kind, requested_by=requested_by)
        )

    # =========================================================================
    # Creation
    # =========================================================================

    def _next_id(self, kind: RequestKind) -> str:
        cfg = self._config.requests
        prefix = {
            RequestKind.MATERIAL: cfg.material_prefix,
            RequestKind.ADVANCE: cfg.advance_prefix,
            RequestKind.RETIREMENT: cfg.retirement_prefix,
        }[kind]
        return f"{prefix}-{self._store.next_sequence(kind):0{cfg.id_width}d}"

    def submit_request(
        self,
        kind: RequestKind,
        requested_by: str,
        approver: str,
        line_items: Sequence[LineInput],
        request_type: str = "",
        department: str = "",
        message: str = "",
        attachments: Sequence[str] = (),
        currency: str | None = None,
        purpose: str = "",
        repayment_period: str | None = None,
    ) -> Request:
        """Create a pending material request or cash advance.

        Only lines with a name, a quantity and a quantity type are kept.
        Retirements go through ``submit_retirement``.
        """
        if kind is RequestKind.RETIREMENT:
            raise ValidationError("kind", "retirements are submitted against an advance")

        lines = tuple(line for line in map(_to_line, line_items) if line.is_complete())
        if not lines:
            raise ValidationError("line_items", "at least one complete line item is required")
        _check_non_negative(lines)
        request_type = _require("request_type", request_type)
        approver = _require("approver", approver)
        requested_by = _require("requested_by", requested_by)

        if kind is RequestKind.MATERIAL:
            details = MaterialDetails()
        else:
            details = AdvanceDetails(
                currency=currency or self._config.requests.default_currency,
                purpose=purpose,
                repayment_period=repayment_period,
            )

        with self._transaction("request_submit", kind=kind.value, requested_by=requested_by):
            request = Request(
                id=self._next_id(kind),
                kind=kind,
                requested_by=requested_by,
                department=department,
                approver=approver,
                request_date=self._clock.today(),
                details=details,
                request_type=request_type,
                line_items=lines,
                message=message,
                attachments=tuple(attachments),
            )
            self._store.save(request)
        logger.info(
            "request_submitted",
            extra={
                "request_id": request.id,
                "kind": kind.value,
                "line_count": len(lines),
                "total_amount": str(request.total_amount()),
            },
        )
        return request

    def submit_draft(self, draft: RequestDraft) -> Request:
        """Submit a saved form; the draft is discarded only if submission succeeds."""
        fields = draft.fields
        request = self.submit_request(
            draft.kind,
            requested_by=fields.get("requested_by") or draft.owner,
            approver=fields.get("approver", ""),
            line_items=draft.line_items,
            request_type=fields.get("request_type", ""),
            department=fields.get("department", ""),
            message=draft.message,
            currency=fields.get("currency"),
            purpose=fields.get("purpose", ""),
            repayment_period=fields.get("repayment_period"),
        )
        if self._drafts is not None:
            self._drafts.discard(draft.kind, draft.owner)
        return request

    def submit_retirement(
        self,
        advance_id: str,
        line_items: Sequence[LineInput],
        month_year: str = "",
        previous_closing_balance: Decimal | str | None = None,
        inflow_amount: Decimal | str | None = None,
        message: str = "",
        attachments: Sequence[str] = (),
    ) -> Request:
        """Retire an approved advance.

        Marks the advance ``has_retirement`` and creates the pending
        retirement in one transaction.
        """
        lines = tuple(line for line in map(_to_line, line_items) if line.line_total() > 0)
        if not lines:
            raise ValidationError("line_items", "at least one expense line is required")
        _check_non_negative(lines)

        with LogContext.bind(request_id=advance_id), self._transaction(
            "request_submit_retirement", advance_id=advance_id,
        ):
            advance = self._store.load(advance_id)
            if advance.kind is not RequestKind.ADVANCE:
                raise AdvanceNotEligibleError(
                    advance_id, advance.status.value, f"{advance.kind.value} request is not an advance",
                )
            if advance.status is not RequestStatus.APPROVED:
                raise AdvanceNotEligibleError(
                    advance_id, advance.status.value, "advance is not approved",
                )
            if advance.details.has_retirement:
                raise AdvanceNotEligibleError(
                    advance_id, advance.status.value, "advance already has a retirement",
                )

            retirement = Request(
                id=self._next_id(RequestKind.RETIREMENT),
                kind=RequestKind.RETIREMENT,
                requested_by=advance.requested_by,
                department=advance.department,
                approver=advance.approver,
                request_date=self._clock.today(),
                details=RetirementDetails(
                    advance_id=advance.id,
                    month_year=month_year,
                    previous_closing_balance=to_decimal(previous_closing_balance),
                    inflow_amount=to_decimal(inflow_amount),
                ),
                request_type=advance.request_type,
                line_items=lines,
                message=message,
                attachments=tuple(attachments),
            )
            retired = replace(advance, details=replace(advance.details, has_retirement=True))
            self._store.save(retired)
            self._store.create_linked(retirement)
        logger.info(
            "advance_retirement_submitted",
            extra={"advance_id": advance_id, "retirement_id": retirement.id},
        )
        return retirement

    def update_lines(self, request_id: str, line_items: Sequence[LineInput]) -> Request:
        """Replace the line items of a pending request."""
        lines = tuple(line for line in map(_to_line, line_items) if line.is_complete())
        if not lines:
            raise ValidationError("line_items", "at least one complete line item is required")
        _check_non_negative(lines)
        with LogContext.bind(request_id=request_id), self._transaction(
            "request_update_lines", line_count=len(lines),
        ):
            current = self._store.load(request_id)
            if current.is_terminal:
                raise InvalidTransitionError(
                    entity_type=current.kind.value,
                    entity_id=current.id,
                    current_state=current.status.value,
                    action="update_lines",
                    reason="only pending requests can be edited",
                )
            updated = replace(current, line_items=lines)
            self._store.save(updated)
        return updated

    # =========================================================================
    # Transitions
    # =========================================================================

    def approve(self, request_id: str, vendor: str | None = None) -> Request:
        """Approve a pending request.

        Material requests need a vendor; approving one links the vendor and
        raises a draft purchase order.
        """
        with LogContext.bind(request_id=request_id), self._transaction(
            "request_approve", vendor=vendor,
        ):
            current = self._store.load(request_id)
            result = self._executor.require_transition(
                WORKFLOWS_BY_KIND[current.kind],
                current.kind.value,
                current.id,
                current.status.value,
                "approve",
                {"vendor": vendor},
            )
            approved = replace(current, status=RequestStatus(result.new_state))
            purchase_order = None
            if result.creates_record:
                vendor = str(vendor).strip()
                po_number = format_po_number(
                    self._store.next_po_sequence(), self._config.procurement,
                )
                purchase_order = purchase_order_from_request(
                    approved, vendor, po_number, self._clock.today(), self._config.procurement,
                )
                approved = replace(
                    approved,
                    details=replace(
                        approved.details,
                        linked_vendor=vendor,
                        purchase_order_number=po_number,
                    ),
                )
            self._store.save(approved)
            if purchase_order is not None:
                self._store.create_linked(purchase_order)
        logger.info(
            "request_approved",
            extra={
                "request_id": request_id,
                "kind": approved.kind.value,
                "po_number": purchase_order.po_number if purchase_order else None,
            },
        )
        return approved

    def reject(self, request_id: str, reason: str) -> Request:
        """Reject a pending request, storing the reason."""
        with LogContext.bind(request_id=request_id), self._transaction("request_reject"):
            current = self._store.load(request_id)
            result = self._executor.require_transition(
                WORKFLOWS_BY_KIND[current.kind],
                current.kind.value,
                current.id,
                current.status.value,
                "reject",
                {"reason": reason},
            )
            rejected = replace(
                current,
                status=RequestStatus(result.new_state),
                rejection_reason=reason.strip(),
            )
            self._store.save(rejected)
        logger.info(
            "request_rejected",
            extra={"request_id": request_id, "kind": rejected.kind.value},
        )
        return rejected
