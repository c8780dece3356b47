"""ORM models for the payroll core."""

from payroll_core.models.base import Base, TimestampMixin, AuditTimestampMixin
from payroll_core.models.employee import Employee, EmployeeSalaryComponent, SalaryComponent
from payroll_core.models.payroll import PayrollDetail, PayrollPeriod, PayrollRecord

__all__ = [
    "Base",
    "TimestampMixin",
    "AuditTimestampMixin",
    "Employee",
    "EmployeeSalaryComponent",
    "SalaryComponent",
    "PayrollDetail",
    "PayrollPeriod",
    "PayrollRecord",
]
