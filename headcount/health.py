"""Health check endpoints with dependency checking.

The only external dependency of the service is its database.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.orm import Session

from headcount.config import Settings
from headcount.database import get_db
from headcount.dependencies import get_settings
from headcount.logging_config import get_logger

router = APIRouter()
logger = get_logger(__name__)

SERVICE = "headcount-monitor"
VERSION = "1.0.0"


def check_database(db: Session) -> Dict[str, Any]:
    """Check database connectivity.

    Args:
        db: Database session.

    Returns:
        Dict with status and optional error message.
    """
    try:
        db.execute(text("SELECT 1"))
        return {"healthy": True, "message": "Database connected"}
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))
        return {"healthy": False, "message": f"Database error: {str(e)}"}


@router.get("/health")
def health_check() -> Dict[str, Any]:
    """Basic health check - just app status."""
    return {"status": "healthy", "service": SERVICE, "version": VERSION}


@router.get("/health/detailed")
def detailed_health_check(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Detailed health check with dependency status and active thresholds."""
    checks = {"database": check_database(db)}

    all_healthy = all(check["healthy"] for check in checks.values())
    overall_status = "healthy" if all_healthy else "degraded"

    logger.info(
        "health_check_performed",
        status=overall_status,
        database=checks["database"]["healthy"],
    )

    return {
        "status": overall_status,
        "service": settings.app_name,
        "version": VERSION,
        "checks": checks,
        "thresholds": {
            "anomaly": settings.anomaly_threshold,
            "filing_completion": settings.filing_completion_threshold,
        },
    }


@router.get("/health/ready")
def readiness_check(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Kubernetes-style readiness probe: 200 if the database answers, else 503."""
    try:
        db.execute(text("SELECT 1"))
        return {"ready": True}
    except Exception:
        raise HTTPException(status_code=503, detail={"ready": False, "reason": "Database unavailable"})


@router.get("/health/live")
def liveness_check() -> Dict[str, Any]:
    """Kubernetes-style liveness probe."""
    return {"alive": True}
