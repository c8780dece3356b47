"""Payroll record creation, recomputation and retrieval."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import ColumnElement, exists, func, literal, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from payroll_core.calculators import (
    ADJUSTMENT_FIELDS,
    PayAdjustments,
    SalaryAggregator,
    SalaryCalculator,
    SalaryTotals,
)
from payroll_core.calculators.types import ZERO
from payroll_core.models import (
    Employee,
    PayrollDetail,
    PayrollPeriod,
    PayrollRecord,
    SalaryComponent,
)
from payroll_core.models.base import MONEY
from payroll_core.services.errors import (
    DuplicateRecordError,
    EmployeeNotFoundError,
    RecordNotFoundError,
    ValidationError,
)
from payroll_core.services.period_service import PeriodService

logger = logging.getLogger(__name__)

# overtime_hours is stored as Numeric(8, 2)
HOURS_PRECISION = Decimal("0.01")
MAX_HOURS = Decimal("999999.99")


@dataclass
class DetailLine:
    """One component's contribution as shown on a payslip."""

    component: SalaryComponent
    amount: Decimal


@dataclass
class RecordWithDetails:
    """A record together with its employee, period and detail lines."""

    record: PayrollRecord
    employee: Employee
    period: PayrollPeriod
    details: list[DetailLine]


def _to_decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"{field_name} must be a number, got {value!r}") from None
    if not number.is_finite():
        raise ValidationError(f"{field_name} must be a number, got {value!r}")
    return number


def to_money(value: Any, field_name: str) -> Decimal | None:
    """Coerce an adjustment value to a non-negative Decimal (or None)."""
    if value is None:
        return None
    amount = _to_decimal(value, field_name)
    if amount < 0:
        raise ValidationError(f"{field_name} must be a non-negative amount, got {value!r}")
    return SalaryCalculator.round_to_cents(amount)


def to_hours(value: Any) -> Decimal | None:
    """Validate overtime hours: non-negative, at most two decimal places."""
    if value is None:
        return None
    hours = _to_decimal(value, "overtime_hours")
    if hours < 0 or hours > MAX_HOURS:
        raise ValidationError(
            f"overtime_hours must be between 0 and {MAX_HOURS} hours, got {value!r}"
        )
    if hours != hours.quantize(HOURS_PRECISION):
        raise ValidationError(
            f"overtime_hours allows at most two decimal places, got {value!r}"
        )
    return hours.quantize(HOURS_PRECISION)


def to_days(value: Any) -> int | None:
    """Validate attendance days (non-negative integer or None)."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"attendance_days must be a non-negative integer, got {value!r}")
    return value


def normalize_adjustments(adjustments: PayAdjustments) -> PayAdjustments:
    """Validate and normalize every adjustment field."""
    return PayAdjustments(
        overtime_hours=to_hours(adjustments.overtime_hours),
        overtime_amount=to_money(adjustments.overtime_amount, "overtime_amount"),
        bonus_amount=to_money(adjustments.bonus_amount, "bonus_amount"),
        attendance_days=to_days(adjustments.attendance_days),
    )


class RecordService:
    """Service for computing and persisting payroll records.

    Key invariants:
    1. At most one record per (employee, period), enforced by a unique
       constraint; the application-level check only produces a clean error.
    2. base/allowance/deduction totals are a snapshot taken at creation and
       never recomputed from current assignments.
    3. No record in a closed period is created or updated. The period is
       re-validated under a row lock in the writing transaction.

    The service flushes but never commits; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.periods = PeriodService(session)
        self.aggregator = SalaryAggregator(session)

    async def create_record(
        self,
        employee_id: int,
        period_id: int,
        adjustments: PayAdjustments | None = None,
    ) -> PayrollRecord:
        """Create a payroll record for one employee in an open period.

        Raises:
            EmployeeNotFoundError: employee does not exist
            PeriodNotFoundError: period does not exist
            PeriodClosedError: period is closed
            DuplicateRecordError: record already exists for employee + period
            ValidationError: an adjustment value is invalid
        """
        adjustments = normalize_adjustments(adjustments or PayAdjustments())

        if await self.session.get(Employee, employee_id) is None:
            raise EmployeeNotFoundError(employee_id)

        period = await self.periods.ensure_open(period_id, "create payroll records")

        if await self.record_exists(employee_id, period.id):
            raise DuplicateRecordError(employee_id, period.id)

        totals = await self.aggregator.aggregate(employee_id)
        record = await self.persist_record(employee_id, period.id, totals, adjustments)

        logger.info(
            "Created payroll record %s for employee %s in period %s (gross=%s net=%s)",
            record.id,
            employee_id,
            period.id,
            record.gross_salary,
            record.net_salary,
        )
        return record

    async def record_exists(self, employee_id: int, period_id: int) -> bool:
        """Check whether a record exists for the employee and period."""
        result = await self.session.execute(
            select(
                exists().where(
                    PayrollRecord.employee_id == employee_id,
                    PayrollRecord.payroll_period_id == period_id,
                )
            )
        )
        return bool(result.scalar())

    async def persist_record(
        self,
        employee_id: int,
        period_id: int,
        totals: SalaryTotals,
        adjustments: PayAdjustments,
    ) -> PayrollRecord:
        """Insert a record with snapshot totals and one detail per component.

        A unique-constraint violation on flush means a concurrent caller
        created the record first; it surfaces as DuplicateRecordError after
        the failed transaction is rolled back.
        """
        pay = SalaryCalculator.compute_from_totals(
            totals,
            overtime_amount=adjustments.overtime_amount,
            bonus_amount=adjustments.bonus_amount,
        )
        record = PayrollRecord(
            employee_id=employee_id,
            payroll_period_id=period_id,
            base_salary=totals.base,
            total_allowances=totals.allowances,
            total_deductions=totals.deductions,
            overtime_hours=adjustments.overtime_hours,
            overtime_amount=adjustments.overtime_amount,
            bonus_amount=adjustments.bonus_amount,
            attendance_days=adjustments.attendance_days,
            gross_salary=pay.gross,
            net_salary=pay.net,
        )
        self.session.add(record)

        try:
            await self.session.flush()
            if totals.components:
                self.session.add_all(
                    [
                        PayrollDetail(
                            payroll_record_id=record.id,
                            salary_component_id=component.component_id,
                            amount=SalaryCalculator.round_to_cents(component.amount),
                        )
                        for component in totals.components
                    ]
                )
                await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            if await self.record_exists(employee_id, period_id):
                raise DuplicateRecordError(employee_id, period_id) from None
            raise

        return record

    async def update_record(
        self, record_id: int, changes: Mapping[str, Any]
    ) -> PayrollRecord:
        """Apply corrected variable inputs and recompute gross/net.

        Only keys present in ``changes`` are touched; a key mapped to None
        clears that field. Snapshot totals stay as they were at creation.

        Raises:
            RecordNotFoundError: record does not exist
            PeriodClosedError: record's period is closed
            ValidationError: unknown field or invalid value
        """
        unknown = set(changes) - ADJUSTMENT_FIELDS
        if unknown:
            raise ValidationError(
                f"Cannot update payroll record fields: {', '.join(sorted(unknown))}"
            )

        values: dict[str, Any] = {}
        for field_name, value in changes.items():
            if field_name == "attendance_days":
                values[field_name] = to_days(value)
            elif field_name == "overtime_hours":
                values[field_name] = to_hours(value)
            else:
                values[field_name] = to_money(value, field_name)

        record = await self.get_record(record_id, for_update=True)
        await self.periods.ensure_open(record.payroll_period_id, "update payroll records")

        # Evaluated against the row as it is at write time, so overtime or
        # bonus committed by another caller after our read are still counted
        gross = (
            PayrollRecord.base_salary
            + PayrollRecord.total_allowances
            + _adjustment_term(values, "overtime_amount")
            + _adjustment_term(values, "bonus_amount")
        )
        await self.session.execute(
            update(PayrollRecord)
            .where(PayrollRecord.id == record_id)
            .values(
                **values,
                gross_salary=gross,
                net_salary=gross - PayrollRecord.total_deductions,
            )
            .execution_options(synchronize_session=False)
        )
        record = await self.get_record(record_id)

        logger.info(
            "Updated payroll record %s (%s): gross=%s net=%s",
            record.id,
            ", ".join(sorted(changes)) or "no fields",
            record.gross_salary,
            record.net_salary,
        )
        return record

    async def get_record(self, record_id: int, for_update: bool = False) -> PayrollRecord:
        """Load a record, raising RecordNotFoundError if absent."""
        query = (
            select(PayrollRecord)
            .where(PayrollRecord.id == record_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        record = result.scalar_one_or_none()
        if record is None:
            raise RecordNotFoundError(record_id)
        return record

    async def get_record_with_details(self, record_id: int) -> RecordWithDetails:
        """Load a record with its employee, period and component breakdown."""
        result = await self.session.execute(
            select(PayrollRecord)
            .where(PayrollRecord.id == record_id)
            .options(
                selectinload(PayrollRecord.employee),
                selectinload(PayrollRecord.period),
                selectinload(PayrollRecord.details).selectinload(
                    PayrollDetail.salary_component
                ),
            )
            .execution_options(populate_existing=True)
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise RecordNotFoundError(record_id)

        return RecordWithDetails(
            record=record,
            employee=record.employee,
            period=record.period,
            details=[
                DetailLine(component=detail.salary_component, amount=detail.amount)
                for detail in record.details
            ],
        )

    async def list_records(self, period_id: int | None = None) -> list[PayrollRecord]:
        """List records, optionally for one period, ordered by employee name."""
        query = select(PayrollRecord).join(
            Employee, PayrollRecord.employee_id == Employee.id
        )
        if period_id is not None:
            query = query.where(PayrollRecord.payroll_period_id == period_id)
        query = query.order_by(Employee.full_name, PayrollRecord.id)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def employee_history(self, employee_id: int) -> list[PayrollRecord]:
        """List an employee's records, most recent period first."""
        result = await self.session.execute(
            select(PayrollRecord)
            .join(PayrollPeriod, PayrollRecord.payroll_period_id == PayrollPeriod.id)
            .where(PayrollRecord.employee_id == employee_id)
            .order_by(
                PayrollPeriod.year.desc(),
                PayrollPeriod.month.desc(),
                PayrollRecord.created_at.desc(),
            )
        )
        return list(result.scalars().all())


def _adjustment_term(values: Mapping[str, Any], field_name: str) -> ColumnElement[Decimal]:
    """SQL term for an optional amount: the new value if given, else the stored one."""
    if field_name in values:
        value = values[field_name]
        return literal(value if value is not None else ZERO, MONEY)
    return func.coalesce(getattr(PayrollRecord, field_name), literal(ZERO, MONEY))
