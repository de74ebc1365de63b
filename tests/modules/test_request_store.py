"""Tests for SqlRequestStore: the persistence boundary of the request workflow."""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import SQLAlchemyError

from steps_kernel.exceptions import NotFoundError, RemoteError
from steps_modules.procurement.models import PurchaseOrder, PurchaseOrderLine
from steps_modules.requests.models import (
    AdvanceDetails,
    LineItem,
    MaterialDetails,
    Request,
    RequestFilter,
    RequestKind,
    RequestStatus,
)
from steps_modules.requests.store import SqlRequestStore


@pytest.fixture
def store(session, test_actor_id):
    return SqlRequestStore(session, test_actor_id)


def _material(request_id="MR-000001", requested_by="Ada Obi", day=1) -> Request:
    return Request(
        id=request_id,
        kind=RequestKind.MATERIAL,
        requested_by=requested_by,
        department="Operations",
        approver="Chidi Eze",
        request_date=date(2024, 1, day),
        details=MaterialDetails(),
        request_type="Site supplies",
        line_items=(
            LineItem(item_name="Cement", quantity=Decimal("2"), quantity_type="bags", amount=Decimal("10")),
        ),
        attachments=("quote.pdf",),
    )


class TestLoadSave:
    def test_round_trip(self, store):
        store.save(_material())
        loaded = store.load("MR-000001")
        assert loaded.requested_by == "Ada Obi"
        assert loaded.attachments == ("quote.pdf",)
        assert loaded.line_items[0].item_name == "Cement"
        assert loaded.total_amount() == Decimal("20")

    def test_load_unknown(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            store.load("MR-404")
        assert exc_info.value.entity_id == "MR-404"

    def test_save_updates_mutable_fields(self, store):
        store.save(_material())
        approved = replace(
            store.load("MR-000001"),
            status=RequestStatus.APPROVED,
            details=MaterialDetails(linked_vendor="VendorX", purchase_order_number="PO-000001"),
        )
        store.save(approved)
        loaded = store.load("MR-000001")
        assert loaded.status is RequestStatus.APPROVED
        assert loaded.details.linked_vendor == "VendorX"

    def test_save_replaces_lines(self, store):
        store.save(_material())
        edited = replace(
            store.load("MR-000001"),
            line_items=(
                LineItem(item_name="Sand", quantity="1", quantity_type="tonnes", amount="5"),
                LineItem(item_name="Gravel", quantity="2", quantity_type="tonnes", amount="7"),
            ),
        )
        store.save(edited)
        assert [line.item_name for line in store.load("MR-000001").line_items] == ["Sand", "Gravel"]

    def test_advance_payload_round_trip(self, store):
        advance = Request(
            id="ADV-000001",
            kind=RequestKind.ADVANCE,
            requested_by="Ada Obi",
            department="",
            approver="Chidi Eze",
            request_date=date(2024, 1, 1),
            details=AdvanceDetails(currency="USD", purpose="Conference", repayment_period="3 months"),
        )
        store.save(advance)
        details = store.load("ADV-000001").details
        assert details == AdvanceDetails(currency="USD", purpose="Conference", repayment_period="3 months")


class TestList:
    def test_newest_first(self, store):
        store.save(_material("MR-000001", day=1))
        store.save(_material("MR-000002", day=3))
        store.save(_material("MR-000003", day=2))
        assert [r.id for r in store.list()] == ["MR-000002", "MR-000003", "MR-000001"]

    def test_filter(self, store):
        store.save(_material("MR-000001", requested_by="Ada Obi"))
        store.save(_material("MR-000002", requested_by="Bola Ade"))
        result = store.list(RequestFilter(requested_by="Bola Ade", status=RequestStatus.PENDING))
        assert [r.id for r in result] == ["MR-000002"]


class TestCreateLinked:
    def test_purchase_order(self, store, session):
        store.save(_material())
        store.create_linked(
            PurchaseOrder(
                id=uuid4(),
                po_number="PO-000001",
                vendor="VendorX",
                requester="Ada Obi",
                approver="Chidi Eze",
                order_date=date(2024, 1, 1),
                lines=(PurchaseOrderLine(item_name="Cement", quantity=Decimal("2"), unit_price=Decimal("10")),),
                material_request_id="MR-000001",
            )
        )
        assert store.next_po_sequence() == 2

    def test_next_sequence_per_kind(self, store):
        store.save(_material("MR-000001"))
        store.save(_material("MR-000002"))
        assert store.next_sequence(RequestKind.MATERIAL) == 3
        assert store.next_sequence(RequestKind.ADVANCE) == 1


class TestErrorWrapping:
    def test_driver_failure_becomes_remote_error(self, store, session, monkeypatch):
        def boom(*args, **kwargs):
            raise SQLAlchemyError("server closed the connection")

        monkeypatch.setattr(session, "scalars", boom)
        with pytest.raises(RemoteError) as exc_info:
            store.load("MR-000001")
        assert exc_info.value.operation == "load"
        assert isinstance(exc_info.value.__cause__, SQLAlchemyError)
