"""
Request Store (``steps_modules.requests.store``).

Responsibility
--------------
The persistence boundary consumed by the request workflow.  Four
operations: ``load``, ``save``, ``list`` and ``create_linked`` (purchase
orders and retirements created as a side effect of a transition).

Architecture position
---------------------
**Modules layer** -- flushes within the caller's transaction and never
commits or rolls back; ``RequestService`` owns the boundary.  No retries, no
caching.

Failure modes
-------------
* Unknown id  -> ``NotFoundError``.
* Any SQLAlchemy failure  -> ``RemoteError`` (original chained).
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from steps_kernel.exceptions import NotFoundError
from steps_kernel.logging_config import get_logger
from steps_kernel.services.base import wrap_store_errors
from steps_modules.procurement.models import PurchaseOrder
from steps_modules.procurement.orm import PurchaseOrderModel
from steps_modules.requests.models import Request, RequestFilter, RequestKind
from steps_modules.requests.orm import RequestLineModel, RequestModel

logger = get_logger("modules.requests.store")


class RequestStore(Protocol):
    """Persistence operations the workflow engine depends on."""

    def load(self, request_id: str) -> Request:
        ...

    def save(self, request: Request) -> None:
        ...

    def list(self, request_filter: RequestFilter | None = None) -> list[Request]:
        ...

    def create_linked(self, record: PurchaseOrder | Request) -> None:
        ...

    def next_sequence(self, kind: RequestKind) -> int:
        ...

    def next_po_sequence(self) -> int:
        ...


class SqlRequestStore:
    """``RequestStore`` backed by a SQLAlchemy session."""

    def __init__(self, session: Session, actor_id: UUID):
        self._session = session
        self._actor_id = actor_id

    def _get_model(self, request_id: str) -> RequestModel | None:
        return self._session.scalars(
            select(RequestModel).where(RequestModel.request_id == request_id)
        ).one_or_none()

    @wrap_store_errors("load")
    def load(self, request_id: str) -> Request:
        model = self._get_model(request_id)
        if model is None:
            raise NotFoundError("request", request_id)
        return model.to_dto()

    @wrap_store_errors("save")
    def save(self, request: Request) -> None:
        """Insert a new request or write the mutable fields of an existing one."""
        model = self._get_model(request.id)
        if model is None:
            self._session.add(RequestModel.from_dto(request, self._actor_id))
        else:
            model.apply_mutable(request)
            model.updated_by_id = self._actor_id
            current = tuple(line.to_dto() for line in model.lines)
            if current != request.line_items:
                self._replace_lines(model, request)
        self._session.flush()
        logger.debug(
            "request_saved",
            extra={"request_id": request.id, "status": request.status.value},
        )

    def _replace_lines(self, model: RequestModel, request: Request) -> None:
        # Flush deletes first so (request_pk, line_number) can be reused
        model.lines.clear()
        self._session.flush()
        model.lines.extend(
            RequestLineModel.from_dto(line, line_number, self._actor_id)
            for line_number, line in enumerate(request.line_items, start=1)
        )

    @wrap_store_errors("list")
    def list(self, request_filter: RequestFilter | None = None) -> list[Request]:
        """Requests matching the filter, newest business id first."""
        f = request_filter or RequestFilter()
        stmt = select(RequestModel)
        if f.status is not None:
            stmt = stmt.where(RequestModel.status == f.status.value)
        if f.kind is not None:
            stmt = stmt.where(RequestModel.kind == f.kind.value)
        if f.requested_by is not None:
            stmt = stmt.where(RequestModel.requested_by == f.requested_by)
        if f.approver is not None:
            stmt = stmt.where(RequestModel.approver == f.approver)
        stmt = stmt.order_by(RequestModel.request_date.desc(), RequestModel.request_id.desc())
        return [model.to_dto() for model in self._session.scalars(stmt)]

    @wrap_store_errors("create_linked")
    def create_linked(self, record: PurchaseOrder | Request) -> None:
        """Persist a record created as a side effect of a transition."""
        if isinstance(record, PurchaseOrder):
            self._session.add(PurchaseOrderModel.from_dto(record, self._actor_id))
            log_fields = {"record_type": "purchase_order", "record_id": record.po_number}
        else:
            self._session.add(RequestModel.from_dto(record, self._actor_id))
            log_fields = {"record_type": record.kind.value, "record_id": record.id}
        self._session.flush()
        logger.info("linked_record_created", extra=log_fields)

    @wrap_store_errors("next_sequence")
    def next_sequence(self, kind: RequestKind) -> int:
        count = self._session.scalar(
            select(func.count()).select_from(RequestModel).where(RequestModel.kind == kind.value)
        )
        return (count or 0) + 1

    @wrap_store_errors("next_po_sequence")
    def next_po_sequence(self) -> int:
        count = self._session.scalar(select(func.count()).select_from(PurchaseOrderModel))
        return (count or 0) + 1
