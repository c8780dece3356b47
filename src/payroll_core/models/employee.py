"""Employee, salary component and assignment models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_core.models.base import MONEY, AuditTimestampMixin, Base

if TYPE_CHECKING:
    from payroll_core.models.payroll import PayrollDetail, PayrollRecord


class Employee(Base, AuditTimestampMixin):
    """Employee record.

    Payroll computation only relies on existence, ``full_name`` (listing
    order) and ``department`` (report grouping).
    """

    __tablename__ = "employee"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_code: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(String, nullable=False)
    position: Mapped[str] = mapped_column(String, nullable=False)
    department: Mapped[str] = mapped_column(String, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    bank_account: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    phone: Mapped[str] = mapped_column(String, nullable=False)

    # Relationships
    salary_components: Mapped[list[EmployeeSalaryComponent]] = relationship(
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    payroll_records: Mapped[list[PayrollRecord]] = relationship(
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class SalaryComponent(Base, AuditTimestampMixin):
    """Named, typed contributor to pay (base salary, allowance or deduction)."""

    __tablename__ = "salary_component"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "type IN ('base_salary', 'allowance', 'deduction')",
            name="salary_component_type_check",
        ),
    )

    # Relationships
    assignments: Mapped[list[EmployeeSalaryComponent]] = relationship(
        back_populates="salary_component",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    payroll_details: Mapped[list[PayrollDetail]] = relationship(
        back_populates="salary_component",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class EmployeeSalaryComponent(Base, AuditTimestampMixin):
    """Live binding of a salary component to an employee with an amount."""

    __tablename__ = "employee_salary_component"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employee.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    salary_component_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("salary_component.id", ondelete="CASCADE"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "employee_id",
            "salary_component_id",
            name="employee_salary_component_unique",
        ),
        CheckConstraint("amount > 0", name="employee_salary_component_amount_positive"),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="salary_components")
    salary_component: Mapped[SalaryComponent] = relationship(back_populates="assignments")
