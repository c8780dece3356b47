"""Payroll period lifecycle: creation, overlap validation and closing."""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_core.database import acquire_xact_lock
from payroll_core.models import PayrollPeriod
from payroll_core.services.errors import (
    InvalidPeriodRangeError,
    PeriodNotFoundError,
    PeriodOverlapError,
    ValidationError,
)
from payroll_core.services.state_machine import PeriodStateMachine

logger = logging.getLogger(__name__)

# Advisory lock key serializing overlap check + insert across creators
PERIOD_CREATE_LOCK_KEY = "payroll_period:create"


class PeriodService:
    """Service for managing payroll period lifecycle.

    Operations:
    - create_period: validate range, reject overlaps, insert open period
    - close_period: open → closed (terminal)
    - list_periods / get_period: read access

    The service flushes but never commits; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_period(self, period_id: int, for_update: bool = False) -> PayrollPeriod:
        """Load a period, raising PeriodNotFoundError if absent."""
        query = select(PayrollPeriod).where(PayrollPeriod.id == period_id)
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(query)
        period = result.scalar_one_or_none()
        if period is None:
            raise PeriodNotFoundError(period_id)
        return period

    async def list_periods(self) -> list[PayrollPeriod]:
        """List periods, most recent year/month first."""
        result = await self.session.execute(
            select(PayrollPeriod).order_by(
                PayrollPeriod.year.desc(),
                PayrollPeriod.month.desc(),
                PayrollPeriod.period_start.desc(),
            )
        )
        return list(result.scalars().all())

    async def find_overlapping(
        self, period_start: date, period_end: date
    ) -> list[PayrollPeriod]:
        """Find existing periods whose inclusive range intersects the given one.

        Matches when the new range starts inside an existing period, ends
        inside one, or fully contains one. With inclusive bounds these cover
        every intersection, including an existing period that contains the
        new range and exact duplicates.
        """
        result = await self.session.execute(
            select(PayrollPeriod)
            .where(
                or_(
                    and_(
                        PayrollPeriod.period_start <= period_start,
                        PayrollPeriod.period_end >= period_start,
                    ),
                    and_(
                        PayrollPeriod.period_start <= period_end,
                        PayrollPeriod.period_end >= period_end,
                    ),
                    and_(
                        PayrollPeriod.period_start >= period_start,
                        PayrollPeriod.period_end <= period_end,
                    ),
                )
            )
            .order_by(PayrollPeriod.period_start)
        )
        return list(result.scalars().all())

    async def create_period(
        self,
        year: int,
        month: int,
        period_start: date,
        period_end: date,
    ) -> PayrollPeriod:
        """Create a new open payroll period.

        Raises:
            ValidationError: month outside 1..12
            InvalidPeriodRangeError: period_start is not before period_end
            PeriodOverlapError: range intersects an existing period
        """
        if not 1 <= month <= 12:
            raise ValidationError(f"Month must be between 1 and 12, got {month}")
        if period_start >= period_end:
            raise InvalidPeriodRangeError(period_start, period_end)

        # Serialize concurrent creators for the rest of this transaction
        await acquire_xact_lock(self.session, PERIOD_CREATE_LOCK_KEY)

        overlapping = await self.find_overlapping(period_start, period_end)
        if overlapping:
            raise PeriodOverlapError([p.id for p in overlapping])

        period = PayrollPeriod(
            year=year,
            month=month,
            period_start=period_start,
            period_end=period_end,
            is_closed=False,
        )
        self.session.add(period)
        await self.session.flush()

        logger.info(
            "Created payroll period %s (%04d-%02d, %s..%s)",
            period.id,
            year,
            month,
            period_start,
            period_end,
        )
        return period

    async def close_period(self, period_id: int) -> PayrollPeriod:
        """Close a period. Closing is terminal and never silently repeated.

        Raises:
            PeriodNotFoundError: period does not exist
            PeriodAlreadyClosedError: period is already closed
        """
        period = await self.get_period(period_id, for_update=True)
        PeriodStateMachine.validate_close(period)

        period.is_closed = True
        await self.session.flush()

        logger.info("Closed payroll period %s", period.id)
        return period

    async def ensure_open(self, period_id: int, action: str) -> PayrollPeriod:
        """Load a period under a shared row lock and require it to be open.

        Holding the lock until the caller's transaction ends keeps a
        concurrent close from committing between this check and the write.
        """
        query = (
            select(PayrollPeriod)
            .where(PayrollPeriod.id == period_id)
            .with_for_update(read=True)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        period = result.scalar_one_or_none()
        if period is None:
            raise PeriodNotFoundError(period_id)
        PeriodStateMachine.ensure_records_mutable(period, action)
        return period
