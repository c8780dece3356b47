"""Department roll-ups of computed payroll records."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_core.calculators import SalaryCalculator
from payroll_core.models import Employee, PayrollPeriod, PayrollRecord
from payroll_core.services.errors import ValidationError


@dataclass(frozen=True)
class DepartmentSummary:
    """Payroll totals for one department in one year/month."""

    department: str
    employee_count: int
    total_gross_salary: Decimal
    total_net_salary: Decimal
    total_allowances: Decimal
    total_deductions: Decimal


class ReportService:
    """Read-only consumer of payroll records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def generate_report(
        self, year: int, month: int, department: str | None = None
    ) -> list[DepartmentSummary]:
        """Summarize records of the year/month's periods by department."""
        if not 1 <= month <= 12:
            raise ValidationError(f"Month must be between 1 and 12, got {month}")

        query = (
            select(
                Employee.department,
                func.count(func.distinct(Employee.id)),
                func.coalesce(func.sum(PayrollRecord.gross_salary), 0),
                func.coalesce(func.sum(PayrollRecord.net_salary), 0),
                func.coalesce(func.sum(PayrollRecord.total_allowances), 0),
                func.coalesce(func.sum(PayrollRecord.total_deductions), 0),
            )
            .join(Employee, PayrollRecord.employee_id == Employee.id)
            .join(PayrollPeriod, PayrollRecord.payroll_period_id == PayrollPeriod.id)
            .where(PayrollPeriod.year == year, PayrollPeriod.month == month)
            .group_by(Employee.department)
            .order_by(Employee.department)
        )
        if department:
            query = query.where(Employee.department == department)

        result = await self.session.execute(query)
        return [
            DepartmentSummary(
                department=row[0],
                employee_count=int(row[1]),
                total_gross_salary=_money(row[2]),
                total_net_salary=_money(row[3]),
                total_allowances=_money(row[4]),
                total_deductions=_money(row[5]),
            )
            for row in result.all()
        ]


def _money(value: object) -> Decimal:
    # SQLite hands back sums as float or int; go through str to stay exact
    return SalaryCalculator.round_to_cents(Decimal(str(value)))
