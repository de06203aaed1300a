"""Audit log endpoint: super admins only."""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from headcount.database import get_db
from headcount.dependencies import get_audit_recorder, get_principal
from headcount.domain.authorization import Principal, require_super_admin
from headcount.logging_config import get_logger
from headcount.schemas.audit import AuditLogEntry

logger = get_logger(__name__)
router = APIRouter()


@router.get("/", response_model=List[AuditLogEntry])
def list_audit_logs(
    limit: int = Query(100, ge=1, le=1000),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> List[AuditLogEntry]:
    """Most recent administrative actions, newest first."""
    require_super_admin(principal)
    entries = get_audit_recorder(db).recent(limit=limit)
    logger.info("audit_logs_listed", count=len(entries))
    return entries
