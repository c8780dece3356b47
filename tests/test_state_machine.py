"""Tests for payroll period state machine."""

import pytest

from payroll_core.models import PayrollPeriod
from payroll_core.services.errors import (
    InvalidTransitionError,
    PeriodAlreadyClosedError,
    PeriodClosedError,
)
from payroll_core.services.state_machine import PeriodStateMachine, PeriodStatus


class TestPeriodStateMachine:
    """Test state machine transitions."""

    def test_valid_transitions(self):
        """open → closed is the only allowed transition."""
        assert PeriodStateMachine.can_transition("open", "closed") is True

    def test_invalid_transitions(self):
        """Closed is terminal and there is no reopen."""
        assert PeriodStateMachine.can_transition("closed", "open") is False
        assert PeriodStateMachine.can_transition("closed", "closed") is False
        assert PeriodStateMachine.can_transition("open", "open") is False
        assert PeriodStateMachine.can_transition("unknown", "closed") is False

    def test_validate_transition_raises(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            PeriodStateMachine.validate_transition("closed", "open")

        assert exc_info.value.from_status == "closed"
        assert exc_info.value.to_status == "open"

    def test_get_next_statuses(self):
        assert PeriodStateMachine.get_next_statuses("open") == [PeriodStatus.CLOSED]
        assert PeriodStateMachine.get_next_statuses("closed") == []

    def test_records_mutable_only_when_open(self):
        assert PeriodStateMachine.can_modify_records("open") is True
        assert PeriodStateMachine.can_modify_records("closed") is False


class TestPeriodChecks:
    """Checks applied to period instances."""

    def test_validate_close_open_period(self):
        period = PayrollPeriod(id=1, is_closed=False)
        PeriodStateMachine.validate_close(period)

    def test_validate_close_closed_period(self):
        period = PayrollPeriod(id=7, is_closed=True)

        with pytest.raises(PeriodAlreadyClosedError) as exc_info:
            PeriodStateMachine.validate_close(period)

        assert exc_info.value.period_id == 7
        # Also an invalid transition, distinguishable by its code
        assert isinstance(exc_info.value, InvalidTransitionError)
        assert exc_info.value.code == "ALREADY_CLOSED"

    def test_ensure_records_mutable_closed(self):
        period = PayrollPeriod(id=3, is_closed=True)

        with pytest.raises(PeriodClosedError) as exc_info:
            PeriodStateMachine.ensure_records_mutable(period, "update payroll records")

        assert exc_info.value.period_id == 3
        assert "update payroll records" in str(exc_info.value)

    def test_status_property(self):
        assert PayrollPeriod(is_closed=False).status == "open"
        assert PayrollPeriod(is_closed=True).status == "closed"
