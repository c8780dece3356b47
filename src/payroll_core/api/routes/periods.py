"""Payroll period endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, status

from payroll_core.api.dependencies import DbSession
from payroll_core.api.schemas import (
    BulkProcessResponse,
    ErrorResponse,
    PayrollPeriodCreate,
    PayrollPeriodResponse,
    PayrollRecordResponse,
)
from payroll_core.services.bulk_service import BulkPayrollService
from payroll_core.services.period_service import PeriodService

router = APIRouter(prefix="/periods", tags=["periods"])


@router.post(
    "",
    response_model=PayrollPeriodResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_period(
    db: DbSession,
    payload: PayrollPeriodCreate,
) -> PayrollPeriodResponse:
    """Create a new open payroll period."""
    period = await PeriodService(db).create_period(
        year=payload.year,
        month=payload.month,
        period_start=payload.period_start,
        period_end=payload.period_end,
    )
    await db.commit()
    return PayrollPeriodResponse.model_validate(period)


@router.get("", response_model=list[PayrollPeriodResponse])
async def list_periods(db: DbSession) -> list[PayrollPeriodResponse]:
    """List payroll periods, most recent first."""
    periods = await PeriodService(db).list_periods()
    return [PayrollPeriodResponse.model_validate(p) for p in periods]


@router.get(
    "/{period_id}",
    response_model=PayrollPeriodResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_period(
    db: DbSession,
    period_id: Annotated[int, Path()],
) -> PayrollPeriodResponse:
    """Get a specific payroll period."""
    period = await PeriodService(db).get_period(period_id)
    return PayrollPeriodResponse.model_validate(period)


@router.post(
    "/{period_id}/close",
    response_model=PayrollPeriodResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def close_period(
    db: DbSession,
    period_id: Annotated[int, Path()],
) -> PayrollPeriodResponse:
    """Close a payroll period. Closed periods are immutable."""
    period = await PeriodService(db).close_period(period_id)
    await db.commit()
    return PayrollPeriodResponse.model_validate(period)


@router.post(
    "/{period_id}/process",
    response_model=BulkProcessResponse,
    responses={404: {"model": ErrorResponse}, 423: {"model": ErrorResponse}},
)
async def process_period(
    db: DbSession,
    period_id: Annotated[int, Path()],
) -> BulkProcessResponse:
    """Create records for every employee not yet processed in the period.

    Safe to re-run: employees that already have a record are skipped.
    """
    records = await BulkPayrollService(db).process_period(period_id)
    return BulkProcessResponse(
        payroll_period_id=period_id,
        created_count=len(records),
        records=[PayrollRecordResponse.model_validate(r) for r in records],
    )
