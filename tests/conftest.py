"""Pytest fixtures for payroll core tests."""

from __future__ import annotations

import itertools
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import date
from decimal import Decimal
from typing import Any

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from payroll_core.api.app import create_app
from payroll_core.api.dependencies import get_db_session
from payroll_core.calculators import SalaryComponentType
from payroll_core.database import create_engine_for_url, create_schema, create_session_factory
from payroll_core.models import (
    Employee,
    EmployeeSalaryComponent,
    PayrollPeriod,
    SalaryComponent,
)
from payroll_core.services import (
    AssignmentService,
    EmployeeService,
    PeriodService,
    SalaryComponentService,
)

# In-memory SQLite shared through a single connection; a fresh schema per test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine with all tables."""
    engine = create_engine_for_url(TEST_DATABASE_URL)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, wired to the test database."""
    app = create_app()

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as db:
            yield db

    app.dependency_overrides[get_db_session] = override_get_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ===== Seed data =====


@pytest_asyncio.fixture
async def components(session: AsyncSession) -> dict[str, SalaryComponent]:
    """One salary component of each type."""
    service = SalaryComponentService(session)
    base = await service.create_component("Base Salary", SalaryComponentType.BASE_SALARY)
    allowance = await service.create_component(
        "Transport Allowance", SalaryComponentType.ALLOWANCE
    )
    deduction = await service.create_component(
        "Social Insurance", SalaryComponentType.DEDUCTION
    )
    await session.commit()
    return {"base": base, "allowance": allowance, "deduction": deduction}


@pytest_asyncio.fixture
async def employee_factory(
    session: AsyncSession,
) -> Callable[..., Awaitable[Employee]]:
    """Create employees with unique codes and emails."""
    service = EmployeeService(session)
    counter = itertools.count(1)

    async def create(
        full_name: str = "Nguyen Van A",
        department: str = "Engineering",
        **overrides: Any,
    ) -> Employee:
        n = next(counter)
        fields: dict[str, Any] = {
            "employee_code": f"EMP{n:03d}",
            "full_name": full_name,
            "position": "Engineer",
            "department": department,
            "start_date": date(2023, 1, 1),
            "bank_account": f"0011{n:06d}",
            "email": f"employee{n}@example.com",
            "phone": "0900000000",
        }
        fields.update(overrides)
        employee = await service.create_employee(**fields)
        await session.commit()
        return employee

    return create


@pytest_asyncio.fixture
async def assign(
    session: AsyncSession,
) -> Callable[[Employee, SalaryComponent, str], Awaitable[EmployeeSalaryComponent]]:
    """Assign a component amount to an employee and commit."""
    service = AssignmentService(session)

    async def create(
        employee: Employee, component: SalaryComponent, amount: str
    ) -> EmployeeSalaryComponent:
        assignment = await service.assign(employee.id, component.id, Decimal(amount))
        await session.commit()
        return assignment

    return create


@pytest_asyncio.fixture
async def employee(
    employee_factory: Callable[..., Awaitable[Employee]],
    components: dict[str, SalaryComponent],
    assign: Callable[..., Awaitable[EmployeeSalaryComponent]],
) -> Employee:
    """Employee with base 5,000,000, allowance 1,000,000 and deduction 500,000."""
    emp = await employee_factory(full_name="Nguyen Van A")
    await assign(emp, components["base"], "5000000")
    await assign(emp, components["allowance"], "1000000")
    await assign(emp, components["deduction"], "500000")
    return emp


@pytest_asyncio.fixture
async def period(session: AsyncSession) -> PayrollPeriod:
    """Open period for January 2024."""
    p = await PeriodService(session).create_period(
        2024, 1, date(2024, 1, 1), date(2024, 1, 31)
    )
    await session.commit()
    return p
