"""Tests for the statistics service (repository scan + engine)."""

import pytest

from headcount.engines.aggregation_engine import AggregationEngine
from headcount.errors import AuthorizationError
from headcount.repositories.company_repo import CompanyRepository
from headcount.repositories.report_repo import ReportRepository
from headcount.schemas.statistics import RankingMetric, ReportFilters
from headcount.services.statistics_service import StatisticsService

CURRENT = "2026-10-01"


@pytest.fixture
def statistics_service(db) -> StatisticsService:
    return StatisticsService(
        report_repo=ReportRepository(db),
        company_repo=CompanyRepository(db),
        engine=AggregationEngine(completion_threshold=0.5),
    )


@pytest.fixture
def population(sample_company, other_company, add_report):
    add_report(sample_company.id, CURRENT, employees_total=100, shortage_general=10)
    add_report(other_company.id, CURRENT, employees_total=200, recruited_new=5)


class TestStatisticsService:
    def test_summary(self, statistics_service, super_admin, population):
        s = statistics_service.summary(super_admin, ReportFilters())
        assert s.total_companies == 2
        assert s.current_employees == 300
        assert s.shortage_rate == pytest.approx(10 / 310)

    def test_industry_filter(self, statistics_service, super_admin, population):
        s = statistics_service.summary(super_admin, ReportFilters(industry="电子信息"))
        assert s.total_companies == 1
        assert s.current_employees == 200

    def test_company_name_filter(self, statistics_service, super_admin, population):
        stats = statistics_service.by_town(super_admin, ReportFilters(company_name="纺织"))
        assert [t.name for t in stats] == ["岳口"]

    def test_town_admin_is_scoped(self, statistics_service, town_admin, population):
        s = statistics_service.summary(town_admin, ReportFilters())
        assert s.total_companies == 1
        assert s.current_employees == 100

    def test_rejected_reports_excluded(
        self, statistics_service, super_admin, sample_company, add_report
    ):
        add_report(sample_company.id, CURRENT, status="REJECTED", employees_total=999)
        s = statistics_service.summary(super_admin, ReportFilters())
        assert s.has_data is False
        assert s.current_employees == 0

    def test_top_n(self, statistics_service, super_admin, population, other_company):
        ranking = statistics_service.top_n(super_admin, RankingMetric.RECRUITED, 1, ReportFilters())
        assert ranking[0].company_id == other_company.id

    def test_other_views_run(self, statistics_service, super_admin, population):
        f = ReportFilters()
        assert len(statistics_service.trend(super_admin, f)) == 1
        assert len(statistics_service.by_industry(super_admin, f)) == 2
        assert len(statistics_service.year_over_year(super_admin, f)) == 1
        assert len(statistics_service.quarterly(super_admin, f)) == 1
        assert len(statistics_service.seasonal(super_admin, f)) == 12
        assert len(statistics_service.skill_gap(super_admin, f)) == 2
        assert statistics_service.target_enterprises(super_admin, f) == []
        assert statistics_service.enterprises(super_admin, f).total == 2
        assert statistics_service.filter_options(super_admin).towns == ["多祥", "岳口"]

    def test_enterprise_refused(self, statistics_service, enterprise):
        with pytest.raises(AuthorizationError):
            statistics_service.summary(enterprise, ReportFilters())

    def test_deactivated_company_reports_ignored(
        self, statistics_service, super_admin, db, population, other_company
    ):
        other_company.is_active = False
        db.commit()

        s = statistics_service.summary(super_admin, ReportFilters())
        assert s.total_companies == 1
        assert s.current_employees == 100
        assert s.completion_rate == 1.0
        assert statistics_service.enterprises(super_admin, ReportFilters()).total == 1
