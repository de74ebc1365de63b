"""
stepsERP kernel.

Shared infrastructure for the request workflow modules:
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging with request-scoped context
- Workflow state machine value objects and executor
- SQLAlchemy base classes and session management
"""

__version__ = "0.1.0"
