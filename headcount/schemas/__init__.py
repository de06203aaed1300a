"""Pydantic schemas for request/response validation and domain types."""

from headcount.schemas.audit import AuditAction, AuditLogEntry
from headcount.schemas.company import Company, CompanyCreate, CompanyPage, CompanyUpdate
from headcount.schemas.report import (
    MonthlyReport,
    RejectRequest,
    ReportCorrection,
    ReportState,
    ReportSubmission,
    SalaryInputs,
    ShortageDetail,
)
from headcount.schemas.review import AnomalyWarning, ReviewBoard, ReviewItem, ReviewMetrics
from headcount.schemas.statistics import (
    CompanyRanking,
    EnterprisePage,
    EnterpriseSnapshot,
    FilterOptions,
    IndustryStat,
    QuarterPoint,
    RankingMetric,
    ReportFilters,
    SeasonalPoint,
    SkillGap,
    Summary,
    TownStat,
    TrendPoint,
    YearMetrics,
)

__all__ = [
    "Company", "CompanyCreate", "CompanyUpdate", "CompanyPage",
    "MonthlyReport", "ReportState", "ReportSubmission", "ReportCorrection",
    "RejectRequest", "ShortageDetail", "SalaryInputs",
    "AuditAction", "AuditLogEntry",
    "AnomalyWarning", "ReviewBoard", "ReviewItem", "ReviewMetrics",
    "ReportFilters", "Summary", "IndustryStat", "TownStat", "TrendPoint",
    "RankingMetric", "CompanyRanking", "YearMetrics", "QuarterPoint",
    "SeasonalPoint", "SkillGap", "FilterOptions", "EnterpriseSnapshot",
    "EnterprisePage",
]
