"""Service-layer orchestration modules."""

from headcount.services.audit_service import AuditRecorder
from headcount.services.company_service import CompanyService
from headcount.services.report_service import ReportLifecycleService
from headcount.services.review_service import ReviewService
from headcount.services.statistics_service import StatisticsService

__all__ = [
    "AuditRecorder",
    "CompanyService",
    "ReportLifecycleService",
    "ReviewService",
    "StatisticsService",
]
