"""Tests for payroll record computation, snapshots and corrections."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_core.calculators import PayAdjustments, SalaryComponentType
from payroll_core.database import create_engine_for_url, create_schema, create_session_factory
from payroll_core.models import Employee, PayrollDetail, PayrollPeriod, PayrollRecord
from payroll_core.services import (
    AssignmentService,
    EmployeeService,
    PeriodService,
    RecordService,
    SalaryComponentService,
)
from payroll_core.services.errors import (
    DuplicateRecordError,
    EmployeeNotFoundError,
    PeriodClosedError,
    PeriodNotFoundError,
    RecordNotFoundError,
    ValidationError,
)

pytestmark = pytest.mark.asyncio


async def _count(session: AsyncSession, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


class TestCreateRecord:
    """Test record creation from live assignments."""

    async def test_totals_from_assignments(
        self, session: AsyncSession, employee: Employee, period: PayrollPeriod
    ):
        record = await RecordService(session).create_record(employee.id, period.id)
        await session.commit()

        assert record.base_salary == Decimal("5000000")
        assert record.total_allowances == Decimal("1000000")
        assert record.total_deductions == Decimal("500000")
        assert record.gross_salary == Decimal("6000000")
        assert record.net_salary == Decimal("5500000")
        assert record.overtime_amount is None
        assert record.bonus_amount is None

    async def test_one_detail_per_assignment(
        self, session: AsyncSession, employee: Employee, period: PayrollPeriod
    ):
        service = RecordService(session)
        record = await service.create_record(employee.id, period.id)
        await session.commit()

        result = await service.get_record_with_details(record.id)

        assert result.employee.id == employee.id
        assert result.period.id == period.id
        assert [(d.component.name, d.amount) for d in result.details] == [
            ("Base Salary", Decimal("5000000")),
            ("Transport Allowance", Decimal("1000000")),
            ("Social Insurance", Decimal("500000")),
        ]

    async def test_with_adjustments(
        self, session: AsyncSession, employee: Employee, period: PayrollPeriod
    ):
        record = await RecordService(session).create_record(
            employee.id,
            period.id,
            PayAdjustments(
                overtime_hours=Decimal("10"),
                overtime_amount=Decimal("200000"),
                bonus_amount=Decimal("500000"),
                attendance_days=22,
            ),
        )
        await session.commit()

        assert record.gross_salary == Decimal("6700000")
        assert record.net_salary == Decimal("6200000")
        assert record.overtime_hours == Decimal("10")
        assert record.attendance_days == 22

    async def test_employee_without_assignments(
        self, session: AsyncSession, employee_factory, period: PayrollPeriod
    ):
        emp = await employee_factory(full_name="Tran Thi B")

        record = await RecordService(session).create_record(emp.id, period.id)
        await session.commit()

        assert record.base_salary == Decimal("0")
        assert record.gross_salary == Decimal("0")
        assert record.net_salary == Decimal("0")
        assert await _count(session, PayrollDetail) == 0

    async def test_duplicate_rejected(
        self, session: AsyncSession, employee: Employee, period: PayrollPeriod
    ):
        service = RecordService(session)
        await service.create_record(employee.id, period.id)
        await session.commit()

        with pytest.raises(DuplicateRecordError) as exc_info:
            await service.create_record(employee.id, period.id)

        assert exc_info.value.employee_id == employee.id
        assert exc_info.value.period_id == period.id
        assert await _count(session, PayrollRecord) == 1

    async def test_unique_constraint_surfaces_as_duplicate(
        self, session: AsyncSession, employee: Employee, period: PayrollPeriod
    ):
        """A concurrent insert that slips past the existence check still maps cleanly."""
        service = RecordService(session)
        await service.create_record(employee.id, period.id)
        await session.commit()

        totals = await service.aggregator.aggregate(employee.id)
        with pytest.raises(DuplicateRecordError):
            await service.persist_record(employee.id, period.id, totals, PayAdjustments())

        assert await _count(session, PayrollRecord) == 1

    async def test_closed_period_rejected(
        self, session: AsyncSession, employee: Employee, period: PayrollPeriod
    ):
        await PeriodService(session).close_period(period.id)
        await session.commit()

        with pytest.raises(PeriodClosedError):
            await RecordService(session).create_record(employee.id, period.id)

        assert await _count(session, PayrollRecord) == 0

    async def test_unknown_employee(self, session: AsyncSession, period: PayrollPeriod):
        with pytest.raises(EmployeeNotFoundError):
            await RecordService(session).create_record(999, period.id)

    async def test_unknown_period(self, session: AsyncSession, employee: Employee):
        with pytest.raises(PeriodNotFoundError):
            await RecordService(session).create_record(employee.id, 999)

    async def test_negative_bonus_rejected(
        self, session: AsyncSession, employee: Employee, period: PayrollPeriod
    ):
        with pytest.raises(ValidationError):
            await RecordService(session).create_record(
                employee.id, period.id, PayAdjustments(bonus_amount=Decimal("-1"))
            )


class TestSnapshot:
    """Record totals never follow later assignment edits."""

    async def test_assignment_edit_does_not_touch_record(
        self,
        session: AsyncSession,
        employee: Employee,
        period: PayrollPeriod,
    ):
        service = RecordService(session)
        record = await service.create_record(employee.id, period.id)
        await session.commit()

        assignments = await AssignmentService(session).list_for_employee(employee.id)
        base_assignment = assignments[0]
        await AssignmentService(session).update_amount(base_assignment.id, Decimal("7000000"))
        await session.commit()

        reloaded = await service.get_record(record.id)
        assert reloaded.base_salary == Decimal("5000000")
        assert reloaded.gross_salary == Decimal("6000000")

        # Recomputation on update also uses the snapshot
        updated = await service.update_record(record.id, {"bonus_amount": Decimal("100000")})
        assert updated.base_salary == Decimal("5000000")
        assert updated.gross_salary == Decimal("6100000")


class TestUpdateRecord:
    """Test correction of variable inputs."""

    async def _record_with_adjustments(
        self, session: AsyncSession, employee: Employee, period: PayrollPeriod
    ) -> PayrollRecord:
        record = await RecordService(session).create_record(
            employee.id,
            period.id,
            PayAdjustments(overtime_amount=Decimal("200000"), bonus_amount=Decimal("500000")),
        )
        await session.commit()
        return record

    async def test_explicit_null_clears_bonus(
        self, session: AsyncSession, employee: Employee, period: PayrollPeriod
    ):
        record = await self._record_with_adjustments(session, employee, period)

        updated = await RecordService(session).update_record(record.id, {"bonus_amount": None})
        await session.commit()

        assert updated.bonus_amount is None
        assert updated.overtime_amount == Decimal("200000")
        assert updated.gross_salary == Decimal("6200000")
        assert updated.net_salary == Decimal("5700000")
        assert updated.base_salary == Decimal("5000000")
        assert updated.total_allowances == Decimal("1000000")
        assert updated.total_deductions == Decimal("500000")

    async def test_omitted_fields_unchanged(
        self, session: AsyncSession, employee: Employee, period: PayrollPeriod
    ):
        record = await self._record_with_adjustments(session, employee, period)

        updated = await RecordService(session).update_record(record.id, {"attendance_days": 20})

        assert updated.attendance_days == 20
        assert updated.bonus_amount == Decimal("500000")
        assert updated.gross_salary == Decimal("6700000")
        assert updated.net_salary == Decimal("6200000")

    async def test_unknown_field_rejected(
        self, session: AsyncSession, employee: Employee, period: PayrollPeriod
    ):
        record = await self._record_with_adjustments(session, employee, period)

        with pytest.raises(ValidationError):
            await RecordService(session).update_record(
                record.id, {"base_salary": Decimal("1")}
            )

    async def test_closed_period_rejected(
        self, session: AsyncSession, employee: Employee, period: PayrollPeriod
    ):
        record = await self._record_with_adjustments(session, employee, period)
        await PeriodService(session).close_period(period.id)
        await session.commit()

        with pytest.raises(PeriodClosedError):
            await RecordService(session).update_record(record.id, {"bonus_amount": None})

        reloaded = await RecordService(session).get_record(record.id)
        assert reloaded.bonus_amount == Decimal("500000")

    async def test_missing_record(self, session: AsyncSession):
        with pytest.raises(RecordNotFoundError):
            await RecordService(session).update_record(404, {"bonus_amount": None})


class TestConcurrentUpdate:
    """Test corrections to one record from two sessions on a shared database."""

    async def test_stale_update_keeps_concurrent_bonus(self, tmp_path, monkeypatch):
        engine = create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'payroll.db'}")
        await create_schema(engine)
        factory = create_session_factory(engine)
        try:
            async with factory() as setup:
                base = await SalaryComponentService(setup).create_component(
                    "Base Salary", SalaryComponentType.BASE_SALARY
                )
                emp = await EmployeeService(setup).create_employee(
                    employee_code="EMP001",
                    full_name="Nguyen Van A",
                    position="Engineer",
                    department="Engineering",
                    start_date=date(2023, 1, 1),
                    bank_account="0011000001",
                    email="employee1@example.com",
                    phone="0900000000",
                )
                await AssignmentService(setup).assign(emp.id, base.id, Decimal("1000"))
                period = await PeriodService(setup).create_period(
                    2024, 1, date(2024, 1, 1), date(2024, 1, 31)
                )
                record = await RecordService(setup).create_record(emp.id, period.id)
                await setup.commit()
                record_id = record.id

            async with factory() as session_a, factory() as session_b:
                service_b = RecordService(session_b)
                ensure_open = service_b.periods.ensure_open

                # Session A commits a bonus after B has read the record
                async def ensure_open_after_bonus(period_id: int, action: str):
                    await RecordService(session_a).update_record(
                        record_id, {"bonus_amount": Decimal("100")}
                    )
                    await session_a.commit()
                    return await ensure_open(period_id, action)

                monkeypatch.setattr(service_b.periods, "ensure_open", ensure_open_after_bonus)
                await service_b.update_record(record_id, {"overtime_amount": Decimal("50")})
                await session_b.commit()

            async with factory() as check:
                final = await RecordService(check).get_record(record_id)
        finally:
            await engine.dispose()

        assert final.bonus_amount == Decimal("100")
        assert final.overtime_amount == Decimal("50")
        assert final.gross_salary == Decimal("1150")
        assert final.net_salary == Decimal("1150")


class TestQueries:
    """Test listing and history."""

    async def test_list_records_by_period_ordered_by_name(
        self,
        session: AsyncSession,
        employee_factory,
        period: PayrollPeriod,
    ):
        zed = await employee_factory(full_name="Zed")
        amy = await employee_factory(full_name="Amy")
        service = RecordService(session)
        await service.create_record(zed.id, period.id)
        await service.create_record(amy.id, period.id)
        await session.commit()

        records = await service.list_records(period.id)

        assert [r.employee_id for r in records] == [amy.id, zed.id]
        assert await service.list_records(period.id + 1) == []

    async def test_employee_history_most_recent_first(
        self, session: AsyncSession, employee: Employee, period: PayrollPeriod
    ):
        feb = await PeriodService(session).create_period(
            2024, 2, date(2024, 2, 1), date(2024, 2, 29)
        )
        service = RecordService(session)
        await service.create_record(employee.id, period.id)
        await service.create_record(employee.id, feb.id)
        await session.commit()

        history = await service.employee_history(employee.id)

        assert [r.payroll_period_id for r in history] == [feb.id, period.id]

    async def test_history_of_unknown_employee_is_empty(self, session: AsyncSession):
        assert await RecordService(session).employee_history(999) == []
