"""Shared test fixtures.

Every test gets a fresh in-memory SQLite database so tests are fully isolated.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from headcount.database import Base
from headcount.domain.authorization import AllCompanies, AssignedCompanies, Enterprise, Reviewer
from headcount.models.company import CompanyModel
from headcount.models.monthly_report import MonthlyReportModel
from headcount.repositories.audit_repo import AuditLogRepository
from headcount.repositories.company_repo import CompanyRepository
from headcount.repositories.report_repo import ReportRepository
from headcount.services.audit_service import AuditRecorder
from headcount.services.report_service import ReportLifecycleService

CURRENT = "2026-10-01"
PREVIOUS = "2026-09-01"


@pytest.fixture()
def db_engine():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(db_engine) -> Session:
    session = sessionmaker(bind=db_engine)()
    yield session
    session.close()


# ── Convenience fixtures ─────────────────────────────────────────────────

def make_report(company_id: int, month: str, **overrides) -> MonthlyReportModel:
    """A filed report row; shortage_total follows the detail unless overridden."""
    values = dict(
        status="SUBMITTED",
        employees_total=0,
        recruited_new=0,
        resigned_total=0,
        shortage_general=0,
        shortage_tech=0,
        shortage_management=0,
        planned_recruitment=0,
    )
    values.update(overrides)
    values.setdefault(
        "shortage_total",
        values["shortage_general"] + values["shortage_tech"] + values["shortage_management"],
    )
    return MonthlyReportModel(company_id=company_id, report_month=month, **values)


@pytest.fixture()
def sample_company(db: Session) -> CompanyModel:
    company = CompanyModel(
        name="汉川纺织有限公司",
        town="岳口",
        industry="纺织服装",
        contact_person="张三",
        contact_phone="13800000001",
        manager_id=7,
    )
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


@pytest.fixture()
def other_company(db: Session) -> CompanyModel:
    company = CompanyModel(
        name="多祥电子科技",
        town="多祥",
        industry="电子信息",
        contact_phone="13800000002",
    )
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


@pytest.fixture()
def baseline_report(db: Session, sample_company: CompanyModel) -> MonthlyReportModel:
    """Approved previous-month report with 100 employees."""
    row = make_report(sample_company.id, PREVIOUS, status="APPROVED", employees_total=100)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture()
def enterprise(sample_company: CompanyModel) -> Enterprise:
    return Enterprise(user_id=101, company_id=sample_company.id)


@pytest.fixture()
def super_admin() -> Reviewer:
    return Reviewer(user_id=1, scope=AllCompanies())


@pytest.fixture()
def town_admin(sample_company: CompanyModel) -> Reviewer:
    return Reviewer(user_id=7, scope=AssignedCompanies(frozenset({sample_company.id})))


@pytest.fixture()
def audit_recorder(db: Session) -> AuditRecorder:
    return AuditRecorder(db=db, audit_repo=AuditLogRepository(db))


@pytest.fixture()
def report_service(db: Session, audit_recorder: AuditRecorder) -> ReportLifecycleService:
    return ReportLifecycleService(
        db=db,
        report_repo=ReportRepository(db),
        company_repo=CompanyRepository(db),
        audit=audit_recorder,
    )


@pytest.fixture()
def add_report(db: Session):
    """Persist a report row: ``add_report(company_id, month, employees_total=..)``."""

    def _add(company_id: int, month: str, **overrides) -> MonthlyReportModel:
        row = make_report(company_id, month, **overrides)
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _add
