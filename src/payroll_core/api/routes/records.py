"""Payroll record endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, Query, status

from payroll_core.api.dependencies import DbSession
from payroll_core.api.schemas import (
    ErrorResponse,
    PayrollRecordCreate,
    PayrollRecordResponse,
    PayrollRecordUpdate,
    PayrollRecordWithDetailsResponse,
)
from payroll_core.calculators import PayAdjustments
from payroll_core.services.record_service import RecordService

router = APIRouter(prefix="/records", tags=["records"])


@router.post(
    "",
    response_model=PayrollRecordResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        423: {"model": ErrorResponse},
    },
)
async def create_record(
    db: DbSession,
    payload: PayrollRecordCreate,
) -> PayrollRecordResponse:
    """Compute and store one employee's payroll record for a period."""
    record = await RecordService(db).create_record(
        employee_id=payload.employee_id,
        period_id=payload.payroll_period_id,
        adjustments=PayAdjustments(
            overtime_hours=payload.overtime_hours,
            overtime_amount=payload.overtime_amount,
            bonus_amount=payload.bonus_amount,
            attendance_days=payload.attendance_days,
        ),
    )
    await db.commit()
    return PayrollRecordResponse.model_validate(record)


@router.get("", response_model=list[PayrollRecordResponse])
async def list_records(
    db: DbSession,
    period_id: Annotated[int | None, Query()] = None,
) -> list[PayrollRecordResponse]:
    """List payroll records ordered by employee name."""
    records = await RecordService(db).list_records(period_id)
    return [PayrollRecordResponse.model_validate(r) for r in records]


@router.get(
    "/{record_id}",
    response_model=PayrollRecordWithDetailsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_record(
    db: DbSession,
    record_id: Annotated[int, Path()],
) -> PayrollRecordWithDetailsResponse:
    """Get a record with its employee, period and component breakdown."""
    result = await RecordService(db).get_record_with_details(record_id)
    return PayrollRecordWithDetailsResponse.model_validate(result)


@router.patch(
    "/{record_id}",
    response_model=PayrollRecordResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        423: {"model": ErrorResponse},
    },
)
async def update_record(
    db: DbSession,
    record_id: Annotated[int, Path()],
    payload: PayrollRecordUpdate,
) -> PayrollRecordResponse:
    """Correct overtime, bonus or attendance and recompute gross/net."""
    record = await RecordService(db).update_record(
        record_id, payload.model_dump(exclude_unset=True)
    )
    await db.commit()
    return PayrollRecordResponse.model_validate(record)
