"""Employee salary component assignment endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, status

from payroll_core.api.dependencies import DbSession
from payroll_core.api.schemas import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentUpdate,
    ErrorResponse,
)
from payroll_core.services.directory_service import AssignmentService

router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.post(
    "",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_assignment(db: DbSession, payload: AssignmentCreate) -> AssignmentResponse:
    """Assign a salary component to an employee."""
    assignment = await AssignmentService(db).assign(
        payload.employee_id, payload.salary_component_id, payload.amount
    )
    await db.commit()
    return AssignmentResponse.model_validate(assignment)


@router.patch(
    "/{assignment_id}",
    response_model=AssignmentResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_assignment(
    db: DbSession,
    assignment_id: Annotated[int, Path()],
    payload: AssignmentUpdate,
) -> AssignmentResponse:
    """Change an assignment's amount. Existing payroll records are untouched."""
    assignment = await AssignmentService(db).update_amount(assignment_id, payload.amount)
    await db.commit()
    return AssignmentResponse.model_validate(assignment)


@router.delete(
    "/{assignment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_assignment(db: DbSession, assignment_id: Annotated[int, Path()]) -> None:
    """Remove a salary component from an employee."""
    await AssignmentService(db).unassign(assignment_id)
    await db.commit()
