"""Dependency Injection Container.

Centralized definition of all application dependencies using
dependency-injector. The process entry point builds one container, and
everything below it receives its collaborators through constructors.

Usage::

    from headcount.container import AppContainer

    container = AppContainer()
    container.init_resources()  # Create tables, open the session

    reports = container.report_service()
    reports.submit(principal, company_id, "2026-10-01", payload, current_month="2026-10-01")

    container.shutdown_resources()
"""

from dependency_injector import containers, providers

from headcount.config import Settings
from headcount.database import Base, build_engine, build_session_factory
from headcount.engines.aggregation_engine import AggregationEngine
from headcount.engines.anomaly_detector import AnomalyDetector
from headcount.repositories.audit_repo import AuditLogRepository
from headcount.repositories.company_repo import CompanyRepository
from headcount.repositories.report_repo import ReportRepository
from headcount.services.audit_service import AuditRecorder
from headcount.services.company_service import CompanyService
from headcount.services.report_service import ReportLifecycleService
from headcount.services.review_service import ReviewService
from headcount.services.statistics_service import StatisticsService


def _init_database(engine):
    """Create tables for every registered model."""
    import headcount.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    return engine


def _open_session(factory):
    """Session resource: yielded once, closed on shutdown."""
    session = factory()
    try:
        yield session
    finally:
        session.close()


class AppContainer(containers.DeclarativeContainer):
    """Application Dependency Injection Container.

    - Configuration (Settings)
    - Database (engine, session)
    - Repositories (data access)
    - Engines (pure business logic)
    - Services (orchestration)
    """

    # ══════════════════════════════════════════════════════════════════
    # CONFIGURATION
    # ══════════════════════════════════════════════════════════════════

    settings = providers.Singleton(Settings)

    # ══════════════════════════════════════════════════════════════════
    # DATABASE
    # ══════════════════════════════════════════════════════════════════

    db_engine = providers.Singleton(
        build_engine,
        database_url=settings.provided.database_url,
        echo=False,
    )

    db_initialized = providers.Resource(
        _init_database,
        engine=db_engine,
    )

    session_factory = providers.Singleton(
        build_session_factory,
        engine=db_engine,
    )

    db_session = providers.Resource(
        _open_session,
        factory=session_factory,
    )

    # ══════════════════════════════════════════════════════════════════
    # REPOSITORIES (Data Access Layer)
    # ══════════════════════════════════════════════════════════════════

    company_repo = providers.Factory(
        CompanyRepository,
        db=db_session,
    )

    report_repo = providers.Factory(
        ReportRepository,
        db=db_session,
    )

    audit_repo = providers.Factory(
        AuditLogRepository,
        db=db_session,
    )

    # ══════════════════════════════════════════════════════════════════
    # ENGINES (Business Logic Layer)
    # ══════════════════════════════════════════════════════════════════

    anomaly_detector = providers.Singleton(
        AnomalyDetector,
        threshold=settings.provided.anomaly_threshold,
    )

    aggregation_engine = providers.Singleton(
        AggregationEngine,
        completion_threshold=settings.provided.filing_completion_threshold,
        minor_town_employee_floor=settings.provided.minor_town_employee_floor,
        skill_gap_shortage_floor=settings.provided.skill_gap_shortage_floor,
    )

    # ══════════════════════════════════════════════════════════════════
    # SERVICES (Orchestration Layer)
    # ══════════════════════════════════════════════════════════════════

    audit_recorder = providers.Factory(
        AuditRecorder,
        db=db_session,
        audit_repo=audit_repo,
    )

    report_service = providers.Factory(
        ReportLifecycleService,
        db=db_session,
        report_repo=report_repo,
        company_repo=company_repo,
        audit=audit_recorder,
    )

    review_service = providers.Factory(
        ReviewService,
        company_repo=company_repo,
        report_repo=report_repo,
        anomaly_detector=anomaly_detector,
    )

    company_service = providers.Factory(
        CompanyService,
        db=db_session,
        company_repo=company_repo,
        audit=audit_recorder,
        towns=settings.provided.towns,
        industries=settings.provided.industries,
    )

    statistics_service = providers.Factory(
        StatisticsService,
        report_repo=report_repo,
        company_repo=company_repo,
        engine=aggregation_engine,
    )
