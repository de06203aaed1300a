"""Append-only audit trail for administrative actions.

Audit writes are best effort: they run in their own commit *after* the
business change has been committed, and a failure is logged and
swallowed so the triggering operation still succeeds.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from headcount.logging_config import get_logger
from headcount.models.audit_log import AuditLogModel
from headcount.repositories.audit_repo import AuditLogRepository
from headcount.schemas.audit import AuditAction, AuditLogEntry

logger = get_logger(__name__)


class AuditRecorder:
    def __init__(self, db: Session, audit_repo: AuditLogRepository):
        self.db = db
        self.audit = audit_repo

    def record(
        self,
        admin_id: Optional[int],
        action: AuditAction,
        *,
        target_company_id: Optional[int] = None,
        target_user_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> Optional[AuditLogModel]:
        """Append one entry. Returns None (after logging) if the write failed."""
        try:
            entry = self.audit.create(AuditLogModel(
                admin_id=admin_id,
                action=AuditAction(action).value,
                target_company_id=target_company_id,
                target_user_id=target_user_id,
                details=details or {},
            ))
            self.db.commit()
        except Exception as exc:
            self.db.rollback()
            logger.error(
                "audit_write_failed",
                action=str(getattr(action, "value", action)),
                admin_id=admin_id,
                target_company_id=target_company_id,
                target_user_id=target_user_id,
                error=str(exc),
            )
            return None

        logger.info(
            "audit_recorded",
            action=entry.action,
            admin_id=admin_id,
            target_company_id=target_company_id,
        )
        return entry

    def recent(self, limit: int = 100) -> List[AuditLogEntry]:
        return [AuditLogEntry.model_validate(row) for row in self.audit.recent(limit=limit)]
