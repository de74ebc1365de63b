"""
Procurement Module Service (``steps_modules.procurement.service``).

Responsibility
--------------
Builds purchase orders from approved material requests and moves them
through review and payment.

Invariants enforced
-------------------
* Each public method owns the transaction boundary (commit on success,
  rollback on failure or exception).
* PO totals are always recomputed from the lines.
* Review replaces lines only while the PO is in ``draft``.

Failure modes
-------------
* Unknown PO number  -> ``NotFoundError``.
* Action from the wrong state  -> ``InvalidTransitionError``.
* Negative quantities or prices  -> ``ValidationError``.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from steps_config.schema import ProcurementConfig
from steps_kernel.domain.clock import Clock
from steps_kernel.exceptions import NotFoundError, ValidationError
from steps_kernel.logging_config import get_logger
from steps_kernel.services.base import BaseService
from steps_kernel.services.workflow_executor import WorkflowExecutor
from steps_modules.procurement.models import POStatus, PurchaseOrder, PurchaseOrderLine
from steps_modules.procurement.orm import PurchaseOrderModel
from steps_modules.procurement.workflows import PURCHASE_ORDER_WORKFLOW
from steps_modules.requests.models import to_decimal

logger = get_logger("modules.procurement.service")


def format_po_number(sequence: int, config: ProcurementConfig) -> str:
    """``PO-000001`` style number for the given sequence."""
    return f"{config.po_prefix}-{sequence:0{config.po_number_width}d}"


def purchase_order_from_request(
    request,
    vendor: str,
    po_number: str,
    order_date: date,
    config: ProcurementConfig,
) -> PurchaseOrder:
    """Map an approved material request onto a new draft purchase order."""
    lines = tuple(
        PurchaseOrderLine(
            item_name=line.item_name,
            description=line.description or "",
            quantity=to_decimal(line.quantity),
            unit=line.quantity_type or config.default_unit,
            unit_price=to_decimal(line.amount),
        )
        for line in request.line_items
    )
    return PurchaseOrder(
        id=uuid4(),
        po_number=po_number,
        vendor=vendor,
        requester=request.requested_by,
        approver=request.approver,
        order_date=order_date,
        status=POStatus.DRAFT,
        lines=lines,
        message=request.message,
        attachments=request.attachments,
        material_request_id=request.id,
    )


def _line_from_input(
    line: PurchaseOrderLine | dict[str, Any],
    config: ProcurementConfig,
) -> PurchaseOrderLine:
    if isinstance(line, PurchaseOrderLine):
        return line
    try:
        return PurchaseOrderLine(
            item_name=str(line.get("item_name", "")),
            description=str(line.get("description", "")),
            quantity=to_decimal(line.get("quantity")),
            unit=str(line.get("unit") or config.default_unit),
            unit_price=to_decimal(line.get("unit_price")),
        )
    except ValueError as exc:
        raise ValidationError("lines", str(exc)) from exc


class PurchaseOrderService(BaseService):
    """
    Purchase order review and payment.

    Transaction boundary: this service commits on success, rolls back on failure.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        actor_id: UUID | None = None,
        workflow_executor: WorkflowExecutor | None = None,
        config: ProcurementConfig | None = None,
    ):
        super().__init__(session, clock, actor_id)
        self._executor = workflow_executor or WorkflowExecutor()
        self._config = config or ProcurementConfig()

    # =========================================================================
    # Queries
    # =========================================================================

    def _get_model(self, po_number: str) -> PurchaseOrderModel:
        model = self.session.scalars(
            select(PurchaseOrderModel).where(PurchaseOrderModel.po_number == po_number)
        ).one_or_none()
        if model is None:
            raise NotFoundError("purchase_order", po_number)
        return model

    def get(self, po_number: str) -> PurchaseOrder:
        return self._get_model(po_number).to_dto()

    def get_for_request(self, material_request_id: str) -> PurchaseOrder | None:
        """The PO raised by a material request, if it has been approved."""
        model = self.session.scalars(
            select(PurchaseOrderModel).where(
                PurchaseOrderModel.material_request_id == material_request_id
            )
        ).one_or_none()
        return model.to_dto() if model is not None else None

    def list_orders(self, status: POStatus | None = None) -> list[PurchaseOrder]:
        stmt = select(PurchaseOrderModel)
        if status is not None:
            stmt = stmt.where(PurchaseOrderModel.status == status.value)
        stmt = stmt.order_by(PurchaseOrderModel.po_number.desc())
        return [model.to_dto() for model in self.session.scalars(stmt)]

    # =========================================================================
    # Transitions
    # =========================================================================

    def _advance(self, model: PurchaseOrderModel, action: str) -> POStatus:
        result = self._executor.require_transition(
            PURCHASE_ORDER_WORKFLOW,
            "purchase_order",
            model.po_number,
            model.status,
            action,
        )
        return POStatus(result.new_state)

    def review(
        self,
        po_number: str,
        vendor: str | None = None,
        lines: Sequence[PurchaseOrderLine | dict[str, Any]] | None = None,
        delivery_date: date | None = None,
        review_notes: str | None = None,
    ) -> PurchaseOrder:
        """Apply procurement review changes and send the PO to finance for payment."""
        with self._transaction("procurement_po_review", po_number=po_number):
            model = self._get_model(po_number)
            new_status = self._advance(model, "review")
            if vendor is not None:
                if not vendor.strip():
                    raise ValidationError("vendor", "vendor must not be blank")
                model.vendor = vendor.strip()
            if lines is not None:
                new_lines = [_line_from_input(line, self._config) for line in lines]
                if not new_lines:
                    raise ValidationError("lines", "a purchase order needs at least one line")
                model.lines.clear()
                self.session.flush()
                model.replace_lines(new_lines, self._actor_id)
            if delivery_date is not None:
                model.delivery_date = delivery_date
            if review_notes:
                model.review_notes = review_notes
            model.status = new_status.value
            model.updated_by_id = self._actor_id
            self.session.flush()
            dto = model.to_dto()
        logger.info(
            "procurement_po_reviewed",
            extra={"po_number": po_number, "total_amount": str(dto.total_amount)},
        )
        return dto

    def mark_paid(self, po_number: str) -> PurchaseOrder:
        """Record payment of a reviewed PO."""
        with self._transaction("procurement_po_mark_paid", po_number=po_number):
            model = self._get_model(po_number)
            model.status = self._advance(model, "mark_paid").value
            model.paid_date = self._clock.today()
            model.updated_by_id = self._actor_id
            self.session.flush()
            dto = model.to_dto()
        return dto

    def cancel(self, po_number: str) -> PurchaseOrder:
        """Cancel a PO that has not been reviewed yet."""
        with self._transaction("procurement_po_cancel", po_number=po_number):
            model = self._get_model(po_number)
            model.status = self._advance(model, "cancel").value
            model.updated_by_id = self._actor_id
            self.session.flush()
            dto = model.to_dto()
        return dto

