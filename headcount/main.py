"""FastAPI application entry point with structured logging and health checks."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from headcount.api import audit, companies, reports, review, statistics
from headcount.database import init_db
from headcount.dependencies import get_settings
from headcount.errors import (
    AuthorizationError,
    ConflictError,
    HeadcountError,
    NotFoundError,
    ValidationError,
)
from headcount.health import router as health_router
from headcount.logging_config import get_logger, setup_logging

settings = get_settings()

# Setup structured logging
setup_logging(json_logs=settings.json_logs, log_level=settings.log_level)
logger = get_logger(__name__)

# Domain error -> HTTP status
ERROR_STATUS = {
    ValidationError: 422,
    AuthorizationError: 403,
    ConflictError: 409,
    NotFoundError: 404,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the FastAPI application."""
    logger.info("application_startup", version="1.0.0")
    init_db()
    logger.info("database_initialized")
    yield
    logger.info("application_shutdown")


app = FastAPI(
    title="Headcount Monitor",
    description=(
        "Collects monthly headcount reports from enterprises, routes them "
        "through review, and aggregates them into workforce statistics."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "X-Request-ID",
        "X-Principal-Role",
        "X-Principal-Id",
        "X-Company-Id",
        "X-Town",
    ],
)


@app.exception_handler(HeadcountError)
async def headcount_error_handler(request: Request, exc: HeadcountError) -> JSONResponse:
    status = next((code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 400)
    logger.warning(
        "request_rejected",
        path=request.url.path,
        code=exc.code,
        status=status,
        field=exc.field,
        key=exc.key,
    )
    return JSONResponse(status_code=status, content={"error": exc.to_dict()})


# Health checks (no versioning)
app.include_router(health_router, tags=["health"])

API_V1_PREFIX = "/api/v1"

app.include_router(reports.router, prefix=f"{API_V1_PREFIX}/reports", tags=["reports"])
app.include_router(review.router, prefix=f"{API_V1_PREFIX}/review", tags=["review"])
app.include_router(statistics.router, prefix=f"{API_V1_PREFIX}/statistics", tags=["statistics"])
app.include_router(companies.router, prefix=f"{API_V1_PREFIX}/companies", tags=["companies"])
app.include_router(audit.router, prefix=f"{API_V1_PREFIX}/audit-logs", tags=["audit"])


@app.get("/")
def root():
    """Root endpoint - API information and available endpoints."""
    logger.info("root_endpoint_accessed")
    return {
        "service": "Headcount Monitor API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "health_detailed": "/health/detailed",
        "api_version": "v1",
        "endpoints": {
            "reports": "/api/v1/reports/",
            "review": "/api/v1/review/{report_month}",
            "statistics": "/api/v1/statistics/summary",
            "companies": "/api/v1/companies/",
            "audit_logs": "/api/v1/audit-logs/",
        },
    }
