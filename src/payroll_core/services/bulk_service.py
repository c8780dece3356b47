"""Bulk payroll processing for every not-yet-processed employee in a period."""

from __future__ import annotations

import logging

from sqlalchemy import and_, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_core.calculators import PayAdjustments
from payroll_core.models import Employee, PayrollRecord
from payroll_core.services.errors import DuplicateRecordError
from payroll_core.services.period_service import PeriodService
from payroll_core.services.record_service import RecordService

logger = logging.getLogger(__name__)


class BulkPayrollService:
    """Creates one payroll record per eligible employee for a period.

    Each employee is its own unit of work: aggregate, compute, insert the
    record and its details, then commit. A failure stops the run and is
    re-raised, but employees committed before it stay committed. Because
    employees that already have a record are skipped, re-running the same
    period resumes where the failed run stopped.

    Unlike the other services this one commits, once per employee.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.periods = PeriodService(session)
        self.records = RecordService(session)

    async def get_eligible_employee_ids(self, period_id: int) -> list[int]:
        """Employees without a record for the period, ordered by id."""
        already_processed = exists().where(
            and_(
                PayrollRecord.employee_id == Employee.id,
                PayrollRecord.payroll_period_id == period_id,
            )
        )
        result = await self.session.execute(
            select(Employee.id).where(~already_processed).order_by(Employee.id)
        )
        return list(result.scalars().all())

    async def process_period(self, period_id: int) -> list[PayrollRecord]:
        """Process payroll for all employees lacking a record in the period.

        Returns only the records created by this call; skipped employees are
        absent from the result.

        Raises:
            PeriodNotFoundError: period does not exist
            PeriodClosedError: period is closed (also if it closes mid-run)
        """
        await self.periods.ensure_open(period_id, "process payroll")
        employee_ids = await self.get_eligible_employee_ids(period_id)
        # Release the read lock taken above before the per-employee loop
        await self.session.commit()

        logger.info(
            "Bulk processing period %s: %d eligible employee(s)",
            period_id,
            len(employee_ids),
        )

        created_ids: list[int] = []
        skipped = 0
        for employee_id in employee_ids:
            try:
                record = await self._process_employee(employee_id, period_id)
            except DuplicateRecordError:
                # Created concurrently by another caller since the eligibility query
                skipped += 1
                logger.info(
                    "Skipping employee %s in period %s: record already exists",
                    employee_id,
                    period_id,
                )
                continue
            except Exception:
                await self.session.rollback()
                logger.exception(
                    "Bulk processing of period %s failed at employee %s "
                    "after %d record(s) committed",
                    period_id,
                    employee_id,
                    len(created_ids),
                )
                raise
            created_ids.append(record.id)

        logger.info(
            "Bulk processing period %s done: %d created, %d skipped",
            period_id,
            len(created_ids),
            skipped,
        )
        return await self._load_records(created_ids)

    async def _load_records(self, record_ids: list[int]) -> list[PayrollRecord]:
        # A rollback on a skipped employee expires everything loaded so far
        if not record_ids:
            return []
        result = await self.session.execute(
            select(PayrollRecord)
            .where(PayrollRecord.id.in_(record_ids))
            .order_by(PayrollRecord.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def _process_employee(self, employee_id: int, period_id: int) -> PayrollRecord:
        """Aggregate, compute and persist one employee's record, then commit."""
        await self.periods.ensure_open(period_id, "process payroll")
        if await self.records.record_exists(employee_id, period_id):
            raise DuplicateRecordError(employee_id, period_id)

        totals = await self.records.aggregator.aggregate(employee_id)
        record = await self.records.persist_record(
            employee_id, period_id, totals, PayAdjustments()
        )
        await self.session.commit()
        return record
