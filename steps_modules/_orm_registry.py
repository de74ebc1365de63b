"""
Module ORM Registry (``steps_modules._orm_registry``).

Responsibility
--------------
Ensure all module-level SQLAlchemy ORM models are imported so that
``Base.metadata`` contains their table definitions before
``steps_kernel.db.engine.create_tables()`` runs ``create_all()``.

Architecture position
---------------------
**Modules layer** -- utility.  MUST NOT be imported at module level by
``steps_kernel``; the engine imports it lazily inside ``create_tables()``.
"""


def import_all_orm_models() -> None:
    """Import every ``steps_modules.*.orm`` module. Idempotent."""
    # fmt: off
    import steps_modules.docsign.orm  # noqa: F401
    import steps_modules.leave.orm  # noqa: F401
    import steps_modules.procurement.orm  # noqa: F401
    import steps_modules.requests.orm  # noqa: F401
    # fmt: on
