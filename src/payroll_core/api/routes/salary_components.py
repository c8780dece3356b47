"""Salary component endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, Query, status

from payroll_core.api.dependencies import DbSession
from payroll_core.api.schemas import (
    ErrorResponse,
    SalaryComponentCreate,
    SalaryComponentResponse,
    SalaryComponentUpdate,
)
from payroll_core.calculators import SalaryComponentType
from payroll_core.services.directory_service import SalaryComponentService

router = APIRouter(prefix="/salary-components", tags=["salary-components"])


@router.post(
    "",
    response_model=SalaryComponentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_salary_component(
    db: DbSession, payload: SalaryComponentCreate
) -> SalaryComponentResponse:
    """Create a salary component definition."""
    component = await SalaryComponentService(db).create_component(
        name=payload.name,
        component_type=payload.type,
        description=payload.description,
    )
    await db.commit()
    return SalaryComponentResponse.model_validate(component)


@router.get("", response_model=list[SalaryComponentResponse])
async def list_salary_components(
    db: DbSession,
    component_type: Annotated[SalaryComponentType | None, Query(alias="type")] = None,
) -> list[SalaryComponentResponse]:
    """List salary components, optionally filtered by type."""
    components = await SalaryComponentService(db).list_components(component_type)
    return [SalaryComponentResponse.model_validate(c) for c in components]


@router.patch(
    "/{component_id}",
    response_model=SalaryComponentResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_salary_component(
    db: DbSession,
    component_id: Annotated[int, Path()],
    payload: SalaryComponentUpdate,
) -> SalaryComponentResponse:
    """Update a salary component definition."""
    component = await SalaryComponentService(db).update_component(
        component_id, payload.model_dump(exclude_unset=True)
    )
    await db.commit()
    return SalaryComponentResponse.model_validate(component)


@router.delete(
    "/{component_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_salary_component(
    db: DbSession, component_id: Annotated[int, Path()]
) -> None:
    """Delete a component with its assignments and historical detail lines."""
    await SalaryComponentService(db).delete_component(component_id)
    await db.commit()
