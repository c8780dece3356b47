"""Employee, salary component and assignment management.

These are the collaborators the payroll engine reads from. Edits here never
touch payroll records that were already computed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from payroll_core.calculators import SalaryCalculator, SalaryComponentType
from payroll_core.models import Employee, EmployeeSalaryComponent, SalaryComponent
from payroll_core.services.errors import (
    AssignmentNotFoundError,
    DuplicateAssignmentError,
    DuplicateEmployeeError,
    EmployeeNotFoundError,
    SalaryComponentNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

EMPLOYEE_FIELDS = frozenset(
    {
        "employee_code",
        "full_name",
        "position",
        "department",
        "start_date",
        "bank_account",
        "email",
        "phone",
    }
)
COMPONENT_FIELDS = frozenset({"name", "type", "description"})


def _positive_amount(amount: Any) -> Decimal:
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except InvalidOperation:
        raise ValidationError(f"Assignment amount must be a number, got {amount!r}") from None
    if not value.is_finite() or value <= 0:
        raise ValidationError(f"Assignment amount must be positive, got {amount!r}")
    return SalaryCalculator.round_to_cents(value)


def _check_fields(changes: Mapping[str, Any], allowed: frozenset[str], entity: str) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise ValidationError(f"Cannot update {entity} fields: {', '.join(sorted(unknown))}")


class EmployeeService:
    """CRUD for employees."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_employee(self, employee_id: int) -> Employee:
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        return employee

    async def list_employees(self) -> list[Employee]:
        result = await self.session.execute(
            select(Employee).order_by(Employee.full_name, Employee.id)
        )
        return list(result.scalars().all())

    async def _ensure_unique(
        self, employee_code: str | None, email: str | None, exclude_id: int | None = None
    ) -> None:
        conditions = []
        if employee_code is not None:
            conditions.append(Employee.employee_code == employee_code)
        if email is not None:
            conditions.append(Employee.email == email)
        if not conditions:
            return
        query = select(Employee).where(or_(*conditions))
        if exclude_id is not None:
            query = query.where(Employee.id != exclude_id)
        existing = (await self.session.execute(query.limit(1))).scalar_one_or_none()
        if existing is not None:
            raise DuplicateEmployeeError(
                "An employee with this employee code or email already exists"
            )

    async def create_employee(
        self,
        employee_code: str,
        full_name: str,
        position: str,
        department: str,
        start_date: date,
        bank_account: str,
        email: str,
        phone: str,
    ) -> Employee:
        await self._ensure_unique(employee_code, email)
        employee = Employee(
            employee_code=employee_code,
            full_name=full_name,
            position=position,
            department=department,
            start_date=start_date,
            bank_account=bank_account,
            email=email,
            phone=phone,
        )
        self.session.add(employee)
        await self.session.flush()
        logger.info("Created employee %s (%s)", employee.id, employee_code)
        return employee

    async def update_employee(self, employee_id: int, changes: Mapping[str, Any]) -> Employee:
        _check_fields(changes, EMPLOYEE_FIELDS, "employee")
        employee = await self.get_employee(employee_id)
        await self._ensure_unique(
            changes.get("employee_code"), changes.get("email"), exclude_id=employee_id
        )
        for field_name, value in changes.items():
            if value is None:
                raise ValidationError(f"Employee {field_name} cannot be empty")
            setattr(employee, field_name, value)
        await self.session.flush()
        return employee

    async def delete_employee(self, employee_id: int) -> None:
        """Delete an employee; assignments, records and details cascade."""
        await self.get_employee(employee_id)
        await self.session.execute(delete(Employee).where(Employee.id == employee_id))
        self.session.expunge_all()
        logger.info("Deleted employee %s", employee_id)


class SalaryComponentService:
    """CRUD for salary component definitions."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_component(self, component_id: int) -> SalaryComponent:
        component = await self.session.get(SalaryComponent, component_id)
        if component is None:
            raise SalaryComponentNotFoundError(component_id)
        return component

    async def list_components(
        self, component_type: SalaryComponentType | None = None
    ) -> list[SalaryComponent]:
        query = select(SalaryComponent)
        if component_type is not None:
            query = query.where(SalaryComponent.type == SalaryComponentType(component_type).value)
        result = await self.session.execute(query.order_by(SalaryComponent.name, SalaryComponent.id))
        return list(result.scalars().all())

    async def create_component(
        self,
        name: str,
        component_type: SalaryComponentType | str,
        description: str | None = None,
    ) -> SalaryComponent:
        component = SalaryComponent(
            name=name,
            type=self._coerce_type(component_type),
            description=description,
        )
        self.session.add(component)
        await self.session.flush()
        logger.info("Created salary component %s (%s, %s)", component.id, name, component.type)
        return component

    async def update_component(
        self, component_id: int, changes: Mapping[str, Any]
    ) -> SalaryComponent:
        _check_fields(changes, COMPONENT_FIELDS, "salary component")
        component = await self.get_component(component_id)
        if "name" in changes:
            if not changes["name"]:
                raise ValidationError("Salary component name cannot be empty")
            component.name = changes["name"]
        if "type" in changes:
            component.type = self._coerce_type(changes["type"])
        if "description" in changes:
            component.description = changes["description"]
        await self.session.flush()
        return component

    async def delete_component(self, component_id: int) -> None:
        """Delete a component; assignments and historical details cascade.

        Record totals already computed are snapshots and stay unchanged.
        """
        await self.get_component(component_id)
        await self.session.execute(
            delete(SalaryComponent).where(SalaryComponent.id == component_id)
        )
        self.session.expunge_all()
        logger.info("Deleted salary component %s", component_id)

    @staticmethod
    def _coerce_type(component_type: SalaryComponentType | str) -> str:
        try:
            return SalaryComponentType(component_type).value
        except ValueError:
            raise ValidationError(f"Unknown salary component type: {component_type!r}") from None


class AssignmentService:
    """Manages which components an employee receives and for how much."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_assignment(self, assignment_id: int) -> EmployeeSalaryComponent:
        assignment = await self.session.get(EmployeeSalaryComponent, assignment_id)
        if assignment is None:
            raise AssignmentNotFoundError(assignment_id)
        return assignment

    async def list_for_employee(self, employee_id: int) -> list[EmployeeSalaryComponent]:
        """An employee's assignments with their components loaded."""
        if await self.session.get(Employee, employee_id) is None:
            raise EmployeeNotFoundError(employee_id)
        result = await self.session.execute(
            select(EmployeeSalaryComponent)
            .where(EmployeeSalaryComponent.employee_id == employee_id)
            .options(selectinload(EmployeeSalaryComponent.salary_component))
            .order_by(EmployeeSalaryComponent.id)
        )
        return list(result.scalars().all())

    async def assign(
        self, employee_id: int, salary_component_id: int, amount: Decimal
    ) -> EmployeeSalaryComponent:
        value = _positive_amount(amount)
        if await self.session.get(Employee, employee_id) is None:
            raise EmployeeNotFoundError(employee_id)
        if await self.session.get(SalaryComponent, salary_component_id) is None:
            raise SalaryComponentNotFoundError(salary_component_id)

        existing = await self.session.execute(
            select(EmployeeSalaryComponent.id).where(
                EmployeeSalaryComponent.employee_id == employee_id,
                EmployeeSalaryComponent.salary_component_id == salary_component_id,
            )
        )
        if existing.first() is not None:
            raise DuplicateAssignmentError(employee_id, salary_component_id)

        assignment = EmployeeSalaryComponent(
            employee_id=employee_id,
            salary_component_id=salary_component_id,
            amount=value,
        )
        self.session.add(assignment)
        await self.session.flush()
        return assignment

    async def update_amount(self, assignment_id: int, amount: Decimal) -> EmployeeSalaryComponent:
        """Change an assignment's amount. Existing payroll records keep their snapshot."""
        value = _positive_amount(amount)
        assignment = await self.get_assignment(assignment_id)
        assignment.amount = value
        await self.session.flush()
        return assignment

    async def unassign(self, assignment_id: int) -> None:
        assignment = await self.get_assignment(assignment_id)
        await self.session.delete(assignment)
        await self.session.flush()
