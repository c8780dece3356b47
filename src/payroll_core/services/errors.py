"""Typed errors raised by the payroll services.

Every rejection is explicit and carries a stable ``code`` so the calling
layer can tell, for example, a duplicate record during a bulk re-run apart
from an overlapping period.
"""

from __future__ import annotations

from typing import Any


class PayrollError(Exception):
    """Base class for all payroll engine errors."""

    code = "PAYROLL_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# ===== Validation =====


class ValidationError(PayrollError):
    """Caller-correctable input error."""

    code = "VALIDATION_ERROR"


class InvalidPeriodRangeError(ValidationError):
    """Raised when a period's start does not precede its end."""

    code = "INVALID_RANGE"

    def __init__(self, period_start: Any, period_end: Any):
        self.period_start = period_start
        self.period_end = period_end
        super().__init__(
            f"Period start date {period_start} must be before period end date {period_end}"
        )


# ===== Not found =====


class NotFoundError(PayrollError):
    """Raised when a referenced entity does not exist."""

    code = "NOT_FOUND"
    entity = "Entity"

    def __init__(self, entity_id: Any):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} with id {entity_id} not found")


class EmployeeNotFoundError(NotFoundError):
    entity = "Employee"


class PeriodNotFoundError(NotFoundError):
    entity = "Payroll period"


class RecordNotFoundError(NotFoundError):
    entity = "Payroll record"


class SalaryComponentNotFoundError(NotFoundError):
    entity = "Salary component"


class AssignmentNotFoundError(NotFoundError):
    entity = "Employee salary component"


# ===== Conflicts =====


class ConflictError(PayrollError):
    """Raised when a request conflicts with existing state."""

    code = "CONFLICT"


class PeriodOverlapError(ConflictError):
    """Raised when a new period's range intersects an existing period."""

    code = "PERIOD_OVERLAP"

    def __init__(self, conflicting_period_ids: list[int]):
        self.conflicting_period_ids = conflicting_period_ids
        ids = ", ".join(str(i) for i in conflicting_period_ids)
        super().__init__(f"Payroll period overlaps with existing period(s): {ids}")


class DuplicateRecordError(ConflictError):
    """Raised when a record already exists for the employee and period."""

    code = "DUPLICATE_RECORD"

    def __init__(self, employee_id: int, period_id: int):
        self.employee_id = employee_id
        self.period_id = period_id
        super().__init__(
            f"Payroll record already exists for employee {employee_id} "
            f"and period {period_id}"
        )


class DuplicateAssignmentError(ConflictError):
    """Raised when a component is already assigned to the employee."""

    code = "DUPLICATE_ASSIGNMENT"

    def __init__(self, employee_id: int, salary_component_id: int):
        self.employee_id = employee_id
        self.salary_component_id = salary_component_id
        super().__init__(
            f"Salary component {salary_component_id} is already assigned "
            f"to employee {employee_id}"
        )


class DuplicateEmployeeError(ConflictError):
    """Raised when an employee code or email is already taken."""

    code = "DUPLICATE_EMPLOYEE"


class InvalidTransitionError(ConflictError):
    """Raised when an invalid period state transition is attempted."""

    code = "INVALID_TRANSITION"

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class PeriodAlreadyClosedError(InvalidTransitionError):
    """Raised when closing a period that is already closed."""

    code = "ALREADY_CLOSED"

    def __init__(self, period_id: int):
        self.period_id = period_id
        super().__init__("closed", "closed", f"payroll period {period_id} is already closed")


# ===== Preconditions =====


class PreconditionFailedError(PayrollError):
    """Raised when the target is not in a state that allows the operation."""

    code = "PRECONDITION_FAILED"


class PeriodClosedError(PreconditionFailedError):
    """Raised on any mutating call against a closed period."""

    code = "PERIOD_CLOSED"

    def __init__(self, period_id: int, action: str = "modify payroll records"):
        self.period_id = period_id
        self.action = action
        super().__init__(f"Cannot {action} for closed payroll period {period_id}")
