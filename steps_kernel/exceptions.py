"""
Typed Exception Hierarchy for stepsERP.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every error a workflow operation can produce is surfaced to a person filling
in a form or clicking an approve button.  Callers must be able to tell a
missing vendor apart from an already-approved request without parsing
message strings, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        service.approve("MR-000042", vendor="")
    except ValidationError as e:
        notify_user(f"Please provide {e.field}")
    except InvalidTransitionError as e:
        notify_user(f"Request is already {e.current_state}")

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    StepsError (base)
    |
    +-- ValidationError            missing or malformed input, no state change
    |
    +-- InvalidTransitionError     action attempted from a wrong/terminal state
    |   +-- AdvanceNotEligibleError
    |
    +-- NotFoundError              referenced id does not resolve
    |
    +-- RemoteError                persistence call failed

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                    | When Raised
------------------------|----------------------------------------------------
VALIDATION_ERROR        | Required field blank (vendor, reason, subject, ...)
INVALID_TRANSITION      | approve/reject from approved or rejected, etc.
ADVANCE_NOT_ELIGIBLE    | Retirement against unapproved/already-retired advance
NOT_FOUND               | Request, document, PO or leave id missing
REMOTE_ERROR            | Database / store failure (session rolled back)

None of these are fatal.  Services roll back their transaction and re-raise;
the caller converts the error into a user-visible notification.  There is no
automatic retry.
"""


class StepsError(Exception):
    """
    Base exception for all stepsERP errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "STEPS_ERROR"


class ValidationError(StepsError):
    """A required field is missing or a value is malformed."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class InvalidTransitionError(StepsError):
    """Action is not permitted from the entity's current state."""

    code: str = "INVALID_TRANSITION"

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        current_state: str,
        action: str,
        reason: str | None = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.current_state = current_state
        self.action = action
        self.reason = reason or (
            f"No transition from '{current_state}' via action '{action}'"
        )
        super().__init__(
            f"Cannot {action} {entity_type} {entity_id}: {self.reason}"
        )


class AdvanceNotEligibleError(InvalidTransitionError):
    """
    Advance cannot be retired.

    Raised when the referenced advance is not approved or already has a
    retirement.  This is a cross-entity precondition, not a state of the
    advance's own workflow.
    """

    code: str = "ADVANCE_NOT_ELIGIBLE"

    def __init__(self, advance_id: str, current_state: str, reason: str):
        super().__init__(
            entity_type="advance",
            entity_id=advance_id,
            current_state=current_state,
            action="submit_retirement",
            reason=reason,
        )


class NotFoundError(StepsError):
    """Referenced entity does not exist."""

    code: str = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found: {entity_id}")


class RemoteError(StepsError):
    """
    The persistence call failed.

    Wraps driver and ORM failures so callers only ever catch stepsERP types.
    The originating exception is chained as ``__cause__``.
    """

    code: str = "REMOTE_ERROR"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Store operation '{operation}' failed: {reason}")
