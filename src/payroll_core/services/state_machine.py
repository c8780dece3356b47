"""Payroll period state machine with transition validation."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from payroll_core.services.errors import (
    InvalidTransitionError,
    PeriodAlreadyClosedError,
    PeriodClosedError,
)

if TYPE_CHECKING:
    from payroll_core.models import PayrollPeriod


class PeriodStatus(str, Enum):
    """Payroll period status values."""

    OPEN = "open"
    CLOSED = "closed"


class PeriodStateMachine:
    """State machine for payroll period status transitions.

    Allowed transitions:
    - open → closed

    Closed is terminal; reopening is not supported.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PeriodStatus.OPEN: [PeriodStatus.CLOSED],
        PeriodStatus.CLOSED: [],  # Terminal state
    }

    # Statuses where records can be created, updated or bulk processed
    RECORDS_MUTABLE = {PeriodStatus.OPEN}

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def can_modify_records(cls, status: str) -> bool:
        """Check if records may be created or updated in this status."""
        return status in cls.RECORDS_MUTABLE

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])

    @classmethod
    def validate_close(cls, period: PayrollPeriod) -> None:
        """Validate closing a period.

        Raises PeriodAlreadyClosedError when the period is already closed.
        """
        if period.is_closed:
            raise PeriodAlreadyClosedError(period.id)
        cls.validate_transition(period.status, PeriodStatus.CLOSED)

    @classmethod
    def ensure_records_mutable(
        cls, period: PayrollPeriod, action: str = "modify payroll records"
    ) -> None:
        """Raise PeriodClosedError unless records may change in this period."""
        if not cls.can_modify_records(period.status):
            raise PeriodClosedError(period.id, action)
