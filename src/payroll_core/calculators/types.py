"""Type definitions for the salary calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

ZERO = Decimal("0")


class SalaryComponentType(str, Enum):
    """How an assigned amount contributes to a record's totals."""

    BASE_SALARY = "base_salary"
    ALLOWANCE = "allowance"
    DEDUCTION = "deduction"


@dataclass(frozen=True)
class ComponentAmount:
    """One assigned component as seen by the aggregator."""

    component_id: int
    type: SalaryComponentType
    amount: Decimal


@dataclass
class SalaryTotals:
    """Per-type totals for an employee plus the contributing components."""

    base: Decimal = ZERO
    allowances: Decimal = ZERO
    deductions: Decimal = ZERO
    components: list[ComponentAmount] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.components


@dataclass(frozen=True)
class PayAdjustments:
    """Variable inputs supplied per record (overtime, bonus, attendance)."""

    overtime_hours: Decimal | None = None
    overtime_amount: Decimal | None = None
    bonus_amount: Decimal | None = None
    attendance_days: int | None = None


@dataclass(frozen=True)
class PayResult:
    """Gross and net salary derived from totals and adjustments."""

    gross: Decimal
    net: Decimal


# Record fields that may be corrected after creation
ADJUSTMENT_FIELDS = frozenset(
    {"overtime_hours", "overtime_amount", "bonus_amount", "attendance_days"}
)
