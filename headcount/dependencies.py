"""Dependency injection / factory functions for FastAPI.

Every service is constructed here with its full dependency tree. The
caller's principal is read from headers forwarded by the authenticating
gateway in front of this service.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from headcount.config import Settings
from headcount.database import get_db
from headcount.domain.authorization import (
    AllCompanies,
    AssignedCompanies,
    Enterprise,
    Principal,
    Reviewer,
)
from headcount.engines.aggregation_engine import AggregationEngine
from headcount.engines.anomaly_detector import AnomalyDetector
from headcount.errors import AuthorizationError
from headcount.repositories.audit_repo import AuditLogRepository
from headcount.repositories.company_repo import CompanyRepository
from headcount.repositories.report_repo import ReportRepository
from headcount.services.audit_service import AuditRecorder
from headcount.services.company_service import CompanyService
from headcount.services.report_service import ReportLifecycleService
from headcount.services.review_service import ReviewService
from headcount.services.statistics_service import StatisticsService


@lru_cache
def get_settings() -> Settings:
    return Settings()


# ── Singletons (stateless, reusable) ────────────────────────────────────

@lru_cache
def get_anomaly_detector() -> AnomalyDetector:
    return AnomalyDetector(threshold=get_settings().anomaly_threshold)


@lru_cache
def get_aggregation_engine() -> AggregationEngine:
    s = get_settings()
    return AggregationEngine(
        completion_threshold=s.filing_completion_threshold,
        minor_town_employee_floor=s.minor_town_employee_floor,
        skill_gap_shortage_floor=s.skill_gap_shortage_floor,
    )


# ── Per-request (need a DB session) ─────────────────────────────────────

def get_audit_recorder(db: Session) -> AuditRecorder:
    return AuditRecorder(db=db, audit_repo=AuditLogRepository(db))


def get_report_service(db: Session) -> ReportLifecycleService:
    return ReportLifecycleService(
        db=db,
        report_repo=ReportRepository(db),
        company_repo=CompanyRepository(db),
        audit=get_audit_recorder(db),
    )


def get_review_service(db: Session) -> ReviewService:
    return ReviewService(
        company_repo=CompanyRepository(db),
        report_repo=ReportRepository(db),
        anomaly_detector=get_anomaly_detector(),
    )


def get_company_service(db: Session) -> CompanyService:
    s = get_settings()
    return CompanyService(
        db=db,
        company_repo=CompanyRepository(db),
        audit=get_audit_recorder(db),
        towns=s.towns,
        industries=s.industries,
    )


def get_statistics_service(db: Session) -> StatisticsService:
    return StatisticsService(
        report_repo=ReportRepository(db),
        company_repo=CompanyRepository(db),
        engine=get_aggregation_engine(),
    )


# ── Authorization adapter ───────────────────────────────────────────────

def get_principal(
    x_principal_role: Optional[str] = Header(None),
    x_principal_id: Optional[int] = Header(None),
    x_company_id: Optional[int] = Header(None),
    x_town: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> Principal:
    """Build the caller's capability from gateway headers.

    A TOWN_ADMIN is scoped to the companies assigned to it plus every
    company located in its town.
    """
    role = (x_principal_role or "").strip().upper()
    if role == "ENTERPRISE":
        if x_company_id is None:
            raise AuthorizationError("Enterprise principal has no bound company")
        return Enterprise(user_id=x_principal_id, company_id=x_company_id)
    if x_principal_id is None:
        raise AuthorizationError("Missing principal id", details={"role": role or None})
    if role == "SUPER_ADMIN":
        return Reviewer(user_id=x_principal_id, scope=AllCompanies())
    if role == "TOWN_ADMIN":
        ids = CompanyRepository(db).ids_for_reviewer(x_principal_id, town=x_town)
        return Reviewer(user_id=x_principal_id, scope=AssignedCompanies(frozenset(ids)))
    raise AuthorizationError("Unknown or missing principal role", details={"role": role or None})
