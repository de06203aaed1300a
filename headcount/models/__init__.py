"""SQLAlchemy ORM models: imported here so Base.metadata sees them."""

from headcount.models.audit_log import AuditLogModel
from headcount.models.company import CompanyModel
from headcount.models.monthly_report import MonthlyReportModel

__all__ = [
    "CompanyModel",
    "MonthlyReportModel",
    "AuditLogModel",
]
