"""
Pytest fixtures for the stepsERP test suite.

Provides:
- An in-memory SQLite database per test, with every module table created
- A session per test
- Deterministic clock and actor
- Service fixtures wired to the shared session and clock
- A temporary draft directory

No fixture is autouse except the logging ones.
"""

import json
import logging
from datetime import date
from io import StringIO
from typing import Generator
from uuid import UUID

import pytest
from sqlalchemy.orm import Session

from steps_config import get_active_config
from steps_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from steps_kernel.domain.clock import DeterministicClock
from steps_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from steps_modules.docsign.service import DocSignService
from steps_modules.leave.service import LeaveService
from steps_modules.procurement.service import PurchaseOrderService
from steps_modules.requests.drafts import DraftStore
from steps_modules.requests.models import LineItem, RequestKind
from steps_modules.requests.service import RequestService

TEST_ACTOR_ID = UUID("00000000-0000-4000-a000-000000000100")


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture steps_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, request_service):
            request_service.approve(...)
            logs = captured_logs()
            assert any(r["message"] == "request_approved" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("steps_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    """Fresh in-memory database with all module tables."""
    eng = init_engine_from_url("sqlite://")
    create_tables()
    yield eng
    drop_tables()
    reset_engine()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    s = get_session()
    yield s
    s.close()


# =============================================================================
# Common fixtures
# =============================================================================


@pytest.fixture
def test_actor_id() -> UUID:
    """Provide a consistent test actor ID."""
    return TEST_ACTOR_ID


@pytest.fixture
def deterministic_clock():
    """Clock fixed at 2024-01-01 12:00 UTC."""
    return DeterministicClock()


@pytest.fixture
def app_config():
    """The shipped default configuration set."""
    return get_active_config()


@pytest.fixture
def draft_store(tmp_path) -> DraftStore:
    return DraftStore(tmp_path / "drafts")


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def request_service(session, deterministic_clock, test_actor_id, app_config, draft_store):
    return RequestService(
        session,
        clock=deterministic_clock,
        actor_id=test_actor_id,
        config=app_config,
        draft_store=draft_store,
    )


@pytest.fixture
def po_service(session, deterministic_clock, test_actor_id, app_config):
    return PurchaseOrderService(
        session,
        clock=deterministic_clock,
        actor_id=test_actor_id,
        config=app_config.procurement,
    )


@pytest.fixture
def docsign_service(session, deterministic_clock, test_actor_id):
    return DocSignService(session, clock=deterministic_clock, actor_id=test_actor_id)


@pytest.fixture
def leave_service(session, deterministic_clock, test_actor_id):
    return LeaveService(session, clock=deterministic_clock, actor_id=test_actor_id)


# =============================================================================
# Request builders
# =============================================================================


@pytest.fixture
def cement_lines() -> list[LineItem]:
    """Two complete lines: 2 x 10 + 1 x 5."""
    return [
        LineItem(item_name="Cement", quantity="2", quantity_type="bags", amount="10"),
        LineItem(item_name="Sand", quantity="1", quantity_type="tonnes", amount="5"),
    ]


@pytest.fixture
def material_request(request_service, cement_lines):
    """A pending material request totalling 25."""
    return request_service.submit_request(
        RequestKind.MATERIAL,
        requested_by="Ada Obi",
        approver="Chidi Eze",
        line_items=cement_lines,
        request_type="Site supplies",
        department="Operations",
        message="For block 4",
    )


@pytest.fixture
def advance_request(request_service):
    """A pending cash advance."""
    return request_service.submit_request(
        RequestKind.ADVANCE,
        requested_by="Ada Obi",
        approver="Chidi Eze",
        line_items=[
            LineItem(item_name="Transport", quantity="1", quantity_type="trip", amount="150"),
        ],
        request_type="Travel",
        purpose="Site visit to Abuja",
        repayment_period="1 month",
    )


@pytest.fixture
def approved_advance(request_service, advance_request):
    return request_service.approve(advance_request.id)


@pytest.fixture
def leave_dates() -> tuple[date, date]:
    return date(2024, 2, 5), date(2024, 2, 9)
