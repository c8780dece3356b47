"""Salary aggregation from an employee's live component assignments."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_core.calculators.salary_calculator import SalaryCalculator
from payroll_core.calculators.types import ComponentAmount, SalaryComponentType, SalaryTotals
from payroll_core.models import EmployeeSalaryComponent, SalaryComponent


def sum_components(components: Iterable[ComponentAmount]) -> SalaryTotals:
    """Sum component amounts into base/allowance/deduction buckets.

    An empty input yields all-zero totals and an empty component list.
    """
    totals = SalaryTotals()
    for component in components:
        amount = SalaryCalculator.round_to_cents(component.amount)
        if component.type == SalaryComponentType.BASE_SALARY:
            totals.base += amount
        elif component.type == SalaryComponentType.ALLOWANCE:
            totals.allowances += amount
        elif component.type == SalaryComponentType.DEDUCTION:
            totals.deductions += amount
        else:
            raise ValueError(f"Unknown salary component type: {component.type!r}")
        totals.components.append(component)
    return totals


class SalaryAggregator:
    """Reads an employee's assignments and sums them by component type.

    Works purely on the employee's current assignment state and knows
    nothing about payroll periods.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_assignments(self, employee_id: int) -> list[ComponentAmount]:
        """Load assignments joined to their component type, in assignment order."""
        result = await self.session.execute(
            select(
                EmployeeSalaryComponent.salary_component_id,
                SalaryComponent.type,
                EmployeeSalaryComponent.amount,
            )
            .join(
                SalaryComponent,
                EmployeeSalaryComponent.salary_component_id == SalaryComponent.id,
            )
            .where(EmployeeSalaryComponent.employee_id == employee_id)
            .order_by(EmployeeSalaryComponent.id)
        )
        return [
            ComponentAmount(
                component_id=component_id,
                type=SalaryComponentType(component_type),
                amount=amount,
            )
            for component_id, component_type, amount in result.all()
        ]

    async def aggregate(self, employee_id: int) -> SalaryTotals:
        """Aggregate an employee's assignments into totals."""
        return sum_components(await self.get_assignments(employee_id))
