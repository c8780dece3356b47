"""Gross and net salary computation."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from payroll_core.calculators.types import ZERO, PayResult, SalaryTotals


class SalaryCalculator:
    """Derives gross and net salary from snapshot totals.

    gross = base + allowances + overtime_amount + bonus_amount
    net   = gross - deductions

    Missing overtime or bonus amounts count as zero. All arithmetic is done
    in Decimal and rounded half-up to cents.
    """

    OUTPUT_PRECISION = Decimal("0.01")

    @staticmethod
    def round_to_cents(amount: Decimal) -> Decimal:
        """Round amount to 2 decimal places (cents)."""
        return Decimal(amount).quantize(SalaryCalculator.OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    @classmethod
    def compute(
        cls,
        base: Decimal,
        allowances: Decimal,
        deductions: Decimal,
        overtime_amount: Decimal | None = None,
        bonus_amount: Decimal | None = None,
    ) -> PayResult:
        """Compute gross and net salary."""
        gross = (
            base
            + allowances
            + (overtime_amount if overtime_amount is not None else ZERO)
            + (bonus_amount if bonus_amount is not None else ZERO)
        )
        gross = cls.round_to_cents(gross)
        net = cls.round_to_cents(gross - deductions)
        return PayResult(gross=gross, net=net)

    @classmethod
    def compute_from_totals(
        cls,
        totals: SalaryTotals,
        overtime_amount: Decimal | None = None,
        bonus_amount: Decimal | None = None,
    ) -> PayResult:
        """Compute gross and net salary from aggregated totals."""
        return cls.compute(
            totals.base,
            totals.allowances,
            totals.deductions,
            overtime_amount=overtime_amount,
            bonus_amount=bonus_amount,
        )
