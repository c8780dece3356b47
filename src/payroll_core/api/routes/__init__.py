"""API routes."""

from payroll_core.api.routes.assignments import router as assignments_router
from payroll_core.api.routes.employees import router as employees_router
from payroll_core.api.routes.health import router as health_router
from payroll_core.api.routes.periods import router as periods_router
from payroll_core.api.routes.records import router as records_router
from payroll_core.api.routes.reports import router as reports_router
from payroll_core.api.routes.salary_components import router as salary_components_router

__all__ = [
    "assignments_router",
    "employees_router",
    "health_router",
    "periods_router",
    "records_router",
    "reports_router",
    "salary_components_router",
]
