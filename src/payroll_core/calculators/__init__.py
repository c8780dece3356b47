"""Salary aggregation and pay calculation."""

from payroll_core.calculators.aggregator import SalaryAggregator, sum_components
from payroll_core.calculators.salary_calculator import SalaryCalculator
from payroll_core.calculators.types import (
    ADJUSTMENT_FIELDS,
    ComponentAmount,
    PayAdjustments,
    PayResult,
    SalaryComponentType,
    SalaryTotals,
)

__all__ = [
    "ADJUSTMENT_FIELDS",
    "ComponentAmount",
    "PayAdjustments",
    "PayResult",
    "SalaryAggregator",
    "SalaryCalculator",
    "SalaryComponentType",
    "SalaryTotals",
    "sum_components",
]
