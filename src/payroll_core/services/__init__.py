"""Payroll core services."""

from payroll_core.services.bulk_service import BulkPayrollService
from payroll_core.services.directory_service import (
    AssignmentService,
    EmployeeService,
    SalaryComponentService,
)
from payroll_core.services.period_service import PeriodService
from payroll_core.services.record_service import RecordService, RecordWithDetails
from payroll_core.services.report_service import DepartmentSummary, ReportService
from payroll_core.services.state_machine import PeriodStateMachine, PeriodStatus

__all__ = [
    "AssignmentService",
    "BulkPayrollService",
    "DepartmentSummary",
    "EmployeeService",
    "PeriodService",
    "PeriodStateMachine",
    "PeriodStatus",
    "RecordService",
    "RecordWithDetails",
    "ReportService",
    "SalaryComponentService",
]
