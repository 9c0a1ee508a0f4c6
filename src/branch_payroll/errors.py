"""Error kinds reported by payroll operations.

Every public service operation either returns its result or raises exactly one
of these. The HTTP layer maps ``code`` to a status code.
"""

from __future__ import annotations

from uuid import UUID


class PayrollError(Exception):
    """Base class for all reported payroll errors."""

    code = "PAYROLL_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(PayrollError):
    """Malformed or missing input. Carries every failed constraint."""

    code = "VALIDATION_ERROR"

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class DuplicateError(PayrollError):
    """A uniqueness rule was violated (FNPF/TIN number, active batch key)."""

    code = "DUPLICATE"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class NotFoundError(PayrollError):
    """A referenced employee, entry, or batch does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, identifier: object):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} {identifier} not found")


class StateConflictError(PayrollError):
    """The target slot is already pending or approved, or the state forbids the action."""

    code = "STATE_CONFLICT"

    def __init__(self, message: str, approval_id: UUID | None = None):
        self.approval_id = approval_id
        if approval_id is not None:
            message = f"{message} (approval {approval_id})"
        super().__init__(message)


class ConfirmationError(PayrollError):
    """The administrative confirmation secret was missing or did not match."""

    code = "CONFIRMATION_REJECTED"

    def __init__(self, message: str = "Incorrect admin confirmation"):
        super().__init__(message)


class StoreUnavailableError(PayrollError):
    """The persistent store could not be reached."""

    code = "STORE_UNAVAILABLE"
