"""
BaseService -- common constructor for module services.

Responsibility:
    Every module service receives a SQLAlchemy ``Session``, an injectable
    ``Clock`` and the acting user's id.  Concrete services own the
    transaction boundary of each public operation: commit on success,
    rollback and re-raise on failure.

Invariants enforced:
    - Stores and other collaborators only flush; the service is the single
      place that commits or rolls back.
"""

import functools
from abc import ABC
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from steps_kernel.domain.clock import Clock, SystemClock
from steps_kernel.exceptions import RemoteError
from steps_kernel.logging_config import get_logger

logger = get_logger("services.base")

# Actor recorded on rows written without an authenticated user (seeding, jobs)
SYSTEM_ACTOR_ID = UUID("00000000-0000-4000-8000-000000000000")


class BaseService(ABC):
    """
    Abstract base class for module services.

    Guarantees:
        - ``_transaction()`` commits on normal exit and rolls back on any
          exception, wrapping driver errors in ``RemoteError``.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        actor_id: UUID | None = None,
    ):
        self.session = session
        self._clock = clock or SystemClock()
        self._actor_id = actor_id or SYSTEM_ACTOR_ID

    @contextmanager
    def _transaction(self, operation: str, **log_fields: Any) -> Iterator[None]:
        """Run a block as one unit of work, logging start and outcome."""
        logger.info(f"{operation}_started", extra=log_fields)
        try:
            yield
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.warning(f"{operation}_rolled_back", extra=log_fields, exc_info=True)
            raise RemoteError(operation, str(exc)) from exc
        except Exception:
            self.session.rollback()
            logger.warning(f"{operation}_rolled_back", extra=log_fields, exc_info=True)
            raise
        logger.info(f"{operation}_committed", extra=log_fields)


def wrap_store_errors(operation: str) -> Callable:
    """Decorator translating SQLAlchemy failures inside a store method into RemoteError."""

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except SQLAlchemyError as exc:
                raise RemoteError(operation, str(exc)) from exc

        return wrapper

    return decorator
