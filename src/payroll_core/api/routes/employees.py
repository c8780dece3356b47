"""Employee endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, status

from payroll_core.api.dependencies import DbSession
from payroll_core.api.schemas import (
    EmployeeComponentResponse,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeSalaryComponentsResponse,
    EmployeeUpdate,
    ErrorResponse,
    PayrollRecordResponse,
    SalaryComponentResponse,
)
from payroll_core.services.directory_service import AssignmentService, EmployeeService
from payroll_core.services.record_service import RecordService

router = APIRouter(prefix="/employees", tags=["employees"])


@router.post(
    "",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_employee(db: DbSession, payload: EmployeeCreate) -> EmployeeResponse:
    """Create an employee."""
    employee = await EmployeeService(db).create_employee(**payload.model_dump())
    await db.commit()
    return EmployeeResponse.model_validate(employee)


@router.get("", response_model=list[EmployeeResponse])
async def list_employees(db: DbSession) -> list[EmployeeResponse]:
    """List employees by name."""
    employees = await EmployeeService(db).list_employees()
    return [EmployeeResponse.model_validate(e) for e in employees]


@router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_employee(
    db: DbSession, employee_id: Annotated[int, Path()]
) -> EmployeeResponse:
    """Get a specific employee."""
    employee = await EmployeeService(db).get_employee(employee_id)
    return EmployeeResponse.model_validate(employee)


@router.patch(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_employee(
    db: DbSession,
    employee_id: Annotated[int, Path()],
    payload: EmployeeUpdate,
) -> EmployeeResponse:
    """Update employee fields."""
    employee = await EmployeeService(db).update_employee(
        employee_id, payload.model_dump(exclude_unset=True)
    )
    await db.commit()
    return EmployeeResponse.model_validate(employee)


@router.delete(
    "/{employee_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_employee(db: DbSession, employee_id: Annotated[int, Path()]) -> None:
    """Delete an employee together with assignments and payroll records."""
    await EmployeeService(db).delete_employee(employee_id)
    await db.commit()


@router.get(
    "/{employee_id}/salary-components",
    response_model=EmployeeSalaryComponentsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_employee_salary_components(
    db: DbSession, employee_id: Annotated[int, Path()]
) -> EmployeeSalaryComponentsResponse:
    """Get an employee with the salary components assigned to them."""
    employee = await EmployeeService(db).get_employee(employee_id)
    assignments = await AssignmentService(db).list_for_employee(employee_id)
    return EmployeeSalaryComponentsResponse(
        employee=EmployeeResponse.model_validate(employee),
        salary_components=[
            EmployeeComponentResponse(
                component=SalaryComponentResponse.model_validate(a.salary_component),
                amount=a.amount,
            )
            for a in assignments
        ],
    )


@router.get(
    "/{employee_id}/payroll-history",
    response_model=list[PayrollRecordResponse],
)
async def get_employee_payroll_history(
    db: DbSession, employee_id: Annotated[int, Path()]
) -> list[PayrollRecordResponse]:
    """List an employee's payroll records, most recent period first."""
    records = await RecordService(db).employee_history(employee_id)
    return [PayrollRecordResponse.model_validate(r) for r in records]
