"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from payroll_core.api.routes import (
    assignments_router,
    employees_router,
    health_router,
    periods_router,
    records_router,
    reports_router,
    salary_components_router,
)
from payroll_core.config import configure_logging, get_settings
from payroll_core.database import create_schema, dispose_db, init_db
from payroll_core.services.errors import (
    ConflictError,
    NotFoundError,
    PayrollError,
    PreconditionFailedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first; PayrollError itself falls through to 400
ERROR_STATUS_CODES: list[tuple[type[PayrollError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (PreconditionFailedError, status.HTTP_423_LOCKED),
]


def status_code_for(exc: PayrollError) -> int:
    """Map a payroll error to its HTTP status code."""
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings = get_settings()
    configure_logging(settings.log_level)
    init_db()
    if settings.create_schema:
        await create_schema()
    logger.info("Payroll core API %s started", settings.app_version)
    yield
    await dispose_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Payroll Core API",
        description="Payroll periods, record computation and bulk processing",
        version=get_settings().app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(PayrollError)
    async def payroll_exception_handler(request: Request, exc: PayrollError) -> JSONResponse:
        """Render typed payroll errors with their code."""
        status_code = status_code_for(exc)
        logger.info(
            "%s %s rejected with %s: %s",
            request.method,
            request.url.path,
            exc.code,
            exc.message,
        )
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "code": exc.code},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.error(
            "Unhandled error on %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(periods_router, prefix="/api/v1")
    app.include_router(records_router, prefix="/api/v1")
    app.include_router(reports_router, prefix="/api/v1")
    app.include_router(employees_router, prefix="/api/v1")
    app.include_router(salary_components_router, prefix="/api/v1")
    app.include_router(assignments_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
