"""Data access repositories."""

from headcount.repositories.audit_repo import AuditLogRepository
from headcount.repositories.base import BaseRepository
from headcount.repositories.company_repo import CompanyRepository
from headcount.repositories.report_repo import ReportRepository

__all__ = [
    "BaseRepository",
    "CompanyRepository",
    "ReportRepository",
    "AuditLogRepository",
]
