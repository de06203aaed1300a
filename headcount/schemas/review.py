"""Anomaly warning and review board schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from headcount.domain.status import ReportStatus


class AnomalyWarning(BaseModel):
    """Result of comparing a month's headcount with the previous month's."""

    flagged: bool = False
    detail: str = ""
    change_percent: Optional[float] = None  # unrounded fraction, 0.3 == 30%
    previous_employees: Optional[int] = None
    current_employees: Optional[int] = None


class ReviewItem(BaseModel):
    company_id: int
    name: str
    town: str
    industry: str
    status: ReportStatus
    updated_at: Optional[datetime] = None
    employees_total: Optional[int] = None
    previous_employees: Optional[int] = None
    warning: AnomalyWarning
    # Only still-SUBMITTED reports surface their warning to reviewers
    surfaced: bool = False


class ReviewMetrics(BaseModel):
    total: int = 0
    filed: int = 0
    awaiting_review: int = 0
    approved: int = 0
    rejected: int = 0
    pending: int = 0
    warnings: int = 0
    completion_rate: Optional[float] = None


class ReviewBoard(BaseModel):
    report_month: str
    metrics: ReviewMetrics
    items: list[ReviewItem]
