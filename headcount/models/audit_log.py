"""Administrative audit log ORM model: append-only."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.types import JSON

from headcount.database import Base


class AuditLogModel(Base):
    __tablename__ = "admin_audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    admin_id = Column(Integer, index=True)
    action = Column(String, nullable=False, index=True)  # AuditAction enum value
    target_company_id = Column(Integer, ForeignKey("companies.id"), index=True)
    target_user_id = Column(Integer)
    details = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<AuditLog id={self.id} action={self.action} company_id={self.target_company_id}>"
