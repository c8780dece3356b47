"""Payroll period, record and detail models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_core.models.base import MONEY, AuditTimestampMixin, Base, TimestampMixin

if TYPE_CHECKING:
    from payroll_core.models.employee import Employee, SalaryComponent


# ===== Periods =====


class PayrollPeriod(Base, AuditTimestampMixin):
    """Bounded date range for which payroll is computed once, then closed."""

    __tablename__ = "payroll_period"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    is_closed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint("month BETWEEN 1 AND 12", name="payroll_period_month_check"),
        CheckConstraint("period_start < period_end", name="payroll_period_dates_check"),
        Index("ix_payroll_period_range", "period_start", "period_end"),
    )

    # Relationships
    records: Mapped[list[PayrollRecord]] = relationship(
        back_populates="period",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def status(self) -> str:
        """Lifecycle status derived from ``is_closed``."""
        return "closed" if self.is_closed else "open"

    def overlaps(self, period_start: date, period_end: date) -> bool:
        """Check whether an inclusive date range intersects this period."""
        return self.period_start <= period_end and period_start <= self.period_end


# ===== Records =====


class PayrollRecord(Base, AuditTimestampMixin):
    """Computed, snapshotted pay result for one employee in one period."""

    __tablename__ = "payroll_record"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employee.id", ondelete="CASCADE"),
        nullable=False,
    )
    payroll_period_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("payroll_period.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Snapshot totals taken from assignments at creation time
    base_salary: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    total_allowances: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    # Variable inputs
    overtime_hours: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    overtime_amount: Mapped[Decimal | None] = mapped_column(MONEY, nullable=True)
    bonus_amount: Mapped[Decimal | None] = mapped_column(MONEY, nullable=True)
    attendance_days: Mapped[int | None] = mapped_column(Integer, nullable=True)

    gross_salary: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    net_salary: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "employee_id",
            "payroll_period_id",
            name="payroll_record_employee_period_unique",
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="payroll_records")
    period: Mapped[PayrollPeriod] = relationship(back_populates="records")
    details: Mapped[list[PayrollDetail]] = relationship(
        back_populates="record",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PayrollDetail.id",
    )


class PayrollDetail(Base, TimestampMixin):
    """Audit line recording one component's contribution to a record."""

    __tablename__ = "payroll_detail"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    payroll_record_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("payroll_record.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    salary_component_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("salary_component.id", ondelete="CASCADE"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    # Relationships
    record: Mapped[PayrollRecord] = relationship(back_populates="details")
    salary_component: Mapped[SalaryComponent] = relationship(
        back_populates="payroll_details"
    )
