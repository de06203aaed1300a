"""Audit log repository: append and read only."""

from typing import List

from sqlalchemy.orm import Session

from headcount.models.audit_log import AuditLogModel
from headcount.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLogModel]):
    def __init__(self, db: Session):
        super().__init__(db, AuditLogModel)

    def recent(self, *, limit: int = 100) -> List[AuditLogModel]:
        return (
            self.db.query(self.model)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .limit(limit)
            .all()
        )

    def for_company(self, company_id: int) -> List[AuditLogModel]:
        return (
            self.db.query(self.model)
            .filter(self.model.target_company_id == company_id)
            .order_by(self.model.id.asc())
            .all()
        )
