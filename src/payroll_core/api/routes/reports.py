"""Payroll report endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from payroll_core.api.dependencies import DbSession
from payroll_core.api.schemas import DepartmentSummaryResponse
from payroll_core.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/payroll", response_model=list[DepartmentSummaryResponse])
async def payroll_report(
    db: DbSession,
    year: Annotated[int, Query()],
    month: Annotated[int, Query(ge=1, le=12)],
    department: Annotated[str | None, Query()] = None,
) -> list[DepartmentSummaryResponse]:
    """Summarize a month's payroll by department."""
    summaries = await ReportService(db).generate_report(year, month, department)
    return [DepartmentSummaryResponse.model_validate(s) for s in summaries]
