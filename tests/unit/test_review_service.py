"""Tests for the reviewer dashboard."""

import pytest

from headcount.domain.authorization import AssignedCompanies, Reviewer
from headcount.domain.status import ReportStatus
from headcount.engines.anomaly_detector import AnomalyDetector
from headcount.errors import AuthorizationError
from headcount.models.company import CompanyModel
from headcount.repositories.company_repo import CompanyRepository
from headcount.repositories.report_repo import ReportRepository
from headcount.services.review_service import ReviewService

CURRENT = "2026-10-01"
PREVIOUS = "2026-09-01"


@pytest.fixture
def review_service(db) -> ReviewService:
    return ReviewService(
        company_repo=CompanyRepository(db),
        report_repo=ReportRepository(db),
        anomaly_detector=AnomalyDetector(threshold=0.30),
    )


class TestBoard:
    def test_lists_every_company_with_status(
        self, review_service, super_admin, sample_company, other_company, add_report
    ):
        add_report(sample_company.id, PREVIOUS, status="APPROVED", employees_total=100)
        add_report(sample_company.id, CURRENT, employees_total=140)

        board = review_service.board(super_admin, CURRENT)

        assert board.report_month == CURRENT
        by_id = {i.company_id: i for i in board.items}
        submitted = by_id[sample_company.id]
        assert submitted.status == ReportStatus.SUBMITTED
        assert submitted.previous_employees == 100
        assert submitted.warning.flagged is True
        assert submitted.surfaced is True
        assert by_id[other_company.id].status == ReportStatus.NOT_FILED
        assert by_id[other_company.id].warning.flagged is False

        # Awaiting review first
        assert board.items[0].company_id == sample_company.id

    def test_metrics(self, review_service, super_admin, sample_company, other_company, add_report):
        add_report(sample_company.id, CURRENT, employees_total=10)

        m = review_service.board(super_admin, CURRENT).metrics
        assert m.total == 2
        assert m.filed == 1
        assert m.awaiting_review == 1
        assert m.pending == 1
        assert m.completion_rate == 0.5

    def test_rejected_report_is_not_filed(
        self, review_service, super_admin, sample_company, other_company, add_report
    ):
        add_report(sample_company.id, CURRENT, status="REJECTED", reject_reason="bad data")
        add_report(other_company.id, CURRENT, status="APPROVED")

        m = review_service.board(super_admin, CURRENT).metrics
        assert m.filed == 1
        assert m.rejected == 1
        assert m.pending == 0
        assert m.completion_rate == 0.5

    def test_approved_warning_is_not_surfaced(
        self, review_service, super_admin, sample_company, add_report
    ):
        add_report(sample_company.id, PREVIOUS, status="APPROVED", employees_total=100)
        add_report(sample_company.id, CURRENT, status="APPROVED", employees_total=200)

        board = review_service.board(super_admin, CURRENT)
        item = board.items[0]
        assert item.warning.flagged is True
        assert item.surfaced is False
        assert board.metrics.warnings == 0
        assert board.metrics.approved == 1

    def test_rejected_previous_month_is_ignored(
        self, review_service, super_admin, sample_company, add_report
    ):
        add_report(sample_company.id, PREVIOUS, status="REJECTED", employees_total=10)
        add_report(sample_company.id, CURRENT, employees_total=200)

        item = review_service.board(super_admin, CURRENT).items[0]
        assert item.previous_employees is None
        assert item.warning.flagged is False

    def test_town_admin_sees_only_scope(
        self, review_service, town_admin, sample_company, other_company
    ):
        board = review_service.board(town_admin, CURRENT)
        assert [i.company_id for i in board.items] == [sample_company.id]

    def test_empty_scope(self, review_service, sample_company):
        reviewer = Reviewer(user_id=99, scope=AssignedCompanies(frozenset()))
        board = review_service.board(reviewer, CURRENT)
        assert board.items == []
        assert board.metrics.completion_rate is None

    def test_inactive_companies_are_hidden(self, review_service, super_admin, sample_company, db):
        db.add(CompanyModel(name="停业企业", town="侯口", industry="其他", is_active=False))
        db.commit()
        board = review_service.board(super_admin, CURRENT)
        assert [i.company_id for i in board.items] == [sample_company.id]

    def test_enterprise_refused(self, review_service, enterprise):
        with pytest.raises(AuthorizationError):
            review_service.board(enterprise, CURRENT)
