"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from payroll_core.calculators import SalaryComponentType


# ============================================================================
# Errors
# ============================================================================


class ErrorResponse(BaseModel):
    """Error body returned for every rejected request."""

    detail: str
    code: str


# ============================================================================
# Employee schemas
# ============================================================================


class EmployeeCreate(BaseModel):
    """Schema for creating an employee."""

    employee_code: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    position: str
    department: str
    start_date: date
    bank_account: str
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    phone: str


class EmployeeUpdate(BaseModel):
    """Schema for a partial employee update."""

    employee_code: str | None = Field(default=None, min_length=1)
    full_name: str | None = Field(default=None, min_length=1)
    position: str | None = None
    department: str | None = None
    start_date: date | None = None
    bank_account: str | None = None
    email: str | None = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    phone: str | None = None


class EmployeeResponse(BaseModel):
    """Schema for employee response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_code: str
    full_name: str
    position: str
    department: str
    start_date: date
    bank_account: str
    email: str
    phone: str
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Salary component schemas
# ============================================================================


class SalaryComponentCreate(BaseModel):
    """Schema for creating a salary component."""

    name: str = Field(min_length=1)
    type: SalaryComponentType
    description: str | None = None


class SalaryComponentUpdate(BaseModel):
    """Schema for a partial salary component update."""

    name: str | None = Field(default=None, min_length=1)
    type: SalaryComponentType | None = None
    description: str | None = None


class SalaryComponentResponse(BaseModel):
    """Schema for salary component response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: SalaryComponentType
    description: str | None = None
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Assignment schemas
# ============================================================================


class AssignmentCreate(BaseModel):
    """Schema for assigning a salary component to an employee."""

    employee_id: int
    salary_component_id: int
    amount: Decimal = Field(gt=0, max_digits=15, decimal_places=2)


class AssignmentUpdate(BaseModel):
    """Schema for changing an assignment's amount."""

    amount: Decimal = Field(gt=0, max_digits=15, decimal_places=2)


class AssignmentResponse(BaseModel):
    """Schema for assignment response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    salary_component_id: int
    amount: Decimal
    created_at: datetime
    updated_at: datetime


class EmployeeComponentResponse(BaseModel):
    """An assigned component with its amount."""

    component: SalaryComponentResponse
    amount: Decimal


class EmployeeSalaryComponentsResponse(BaseModel):
    """Employee with all assigned salary components."""

    employee: EmployeeResponse
    salary_components: list[EmployeeComponentResponse]


# ============================================================================
# Payroll period schemas
# ============================================================================


class PayrollPeriodCreate(BaseModel):
    """Schema for creating a payroll period."""

    year: int = Field(ge=1900, le=9999)
    month: int = Field(ge=1, le=12)
    period_start: date
    period_end: date


class PayrollPeriodResponse(BaseModel):
    """Schema for payroll period response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    year: int
    month: int
    period_start: date
    period_end: date
    is_closed: bool
    status: str
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Payroll record schemas
# ============================================================================


class PayrollRecordCreate(BaseModel):
    """Schema for creating a payroll record."""

    employee_id: int
    payroll_period_id: int
    overtime_hours: Decimal | None = Field(default=None, ge=0, max_digits=8, decimal_places=2)
    overtime_amount: Decimal | None = Field(default=None, ge=0, max_digits=15, decimal_places=2)
    bonus_amount: Decimal | None = Field(default=None, ge=0, max_digits=15, decimal_places=2)
    attendance_days: int | None = Field(default=None, ge=0)


class PayrollRecordUpdate(BaseModel):
    """Schema for correcting a record's variable inputs.

    Omitted fields are left unchanged; an explicit null clears the field.
    """

    overtime_hours: Decimal | None = Field(default=None, ge=0, max_digits=8, decimal_places=2)
    overtime_amount: Decimal | None = Field(default=None, ge=0, max_digits=15, decimal_places=2)
    bonus_amount: Decimal | None = Field(default=None, ge=0, max_digits=15, decimal_places=2)
    attendance_days: int | None = Field(default=None, ge=0)


class PayrollRecordResponse(BaseModel):
    """Schema for payroll record response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    payroll_period_id: int
    base_salary: Decimal
    total_allowances: Decimal
    total_deductions: Decimal
    overtime_hours: Decimal | None = None
    overtime_amount: Decimal | None = None
    bonus_amount: Decimal | None = None
    attendance_days: int | None = None
    gross_salary: Decimal
    net_salary: Decimal
    created_at: datetime
    updated_at: datetime


class PayrollDetailLineResponse(BaseModel):
    """One component's contribution on a payslip."""

    model_config = ConfigDict(from_attributes=True)

    component: SalaryComponentResponse
    amount: Decimal


class PayrollRecordWithDetailsResponse(BaseModel):
    """Record with employee, period and component breakdown (payslip data)."""

    model_config = ConfigDict(from_attributes=True)

    record: PayrollRecordResponse
    employee: EmployeeResponse
    period: PayrollPeriodResponse
    details: list[PayrollDetailLineResponse]


class BulkProcessResponse(BaseModel):
    """Result of bulk processing a period."""

    payroll_period_id: int
    created_count: int
    records: list[PayrollRecordResponse]


# ============================================================================
# Report schemas
# ============================================================================


class DepartmentSummaryResponse(BaseModel):
    """Payroll totals for one department."""

    model_config = ConfigDict(from_attributes=True)

    department: str
    employee_count: int
    total_gross_salary: Decimal
    total_net_salary: Decimal
    total_allowances: Decimal
    total_deductions: Decimal
