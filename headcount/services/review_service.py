"""Reviewer dashboard: every company in scope with its status for a month."""

import logging
from typing import Dict, List, Optional

from headcount.domain.authorization import AssignedCompanies, Principal, require_reviewer
from headcount.domain.months import parse_month, previous_month
from headcount.domain.status import ReportStatus
from headcount.engines.anomaly_detector import AnomalyDetector
from headcount.models.monthly_report import MonthlyReportModel
from headcount.repositories.company_repo import CompanyRepository
from headcount.repositories.report_repo import ReportRepository
from headcount.schemas.review import ReviewBoard, ReviewItem, ReviewMetrics
from headcount.utils.rates import safe_rate

logger = logging.getLogger(__name__)

# Reports needing attention first
_STATUS_ORDER = {
    ReportStatus.SUBMITTED: 0,
    ReportStatus.NOT_FILED: 1,
    ReportStatus.REJECTED: 2,
    ReportStatus.APPROVED: 3,
}


class ReviewService:
    def __init__(
        self,
        company_repo: CompanyRepository,
        report_repo: ReportRepository,
        anomaly_detector: AnomalyDetector,
    ):
        self.companies = company_repo
        self.reports = report_repo
        self.detector = anomaly_detector

    def board(self, principal: Principal, report_month: str) -> ReviewBoard:
        month = parse_month(report_month)
        reviewer = require_reviewer(principal)

        ids: Optional[set] = None
        if isinstance(reviewer.scope, AssignedCompanies):
            ids = set(reviewer.scope.company_ids)
        companies = [c for c in self.companies.filtered(ids=ids) if c.is_active is not False]
        scoped = {c.id for c in companies}

        current = self._by_company(self.reports.get_for_month(month, scoped))
        # Rejected figures are not a trustworthy comparison point
        previous = {
            cid: r
            for cid, r in self._by_company(
                self.reports.get_for_month(previous_month(month), scoped)
            ).items()
            if ReportStatus.from_stored(r.status) != ReportStatus.REJECTED
        }

        items: List[ReviewItem] = []
        for company in companies:
            row = current.get(company.id)
            prev = previous.get(company.id)
            status = ReportStatus.from_stored(row.status) if row else ReportStatus.NOT_FILED
            warning = self.detector.detect_warning(row, prev)
            items.append(ReviewItem(
                company_id=company.id,
                name=company.name,
                town=company.town,
                industry=company.industry,
                status=status,
                updated_at=row.updated_at if row else None,
                employees_total=row.employees_total if row else None,
                previous_employees=prev.employees_total if prev else None,
                warning=warning,
                surfaced=AnomalyDetector.is_surfaced(warning, status),
            ))
        items.sort(key=lambda i: (_STATUS_ORDER[i.status], i.company_id))

        metrics = self._metrics(items)
        logger.info(
            "Review board %s: %d companies, %d awaiting review, %d warnings",
            month, metrics.total, metrics.awaiting_review, metrics.warnings,
        )
        return ReviewBoard(report_month=month, metrics=metrics, items=items)

    @staticmethod
    def _by_company(rows: List[MonthlyReportModel]) -> Dict[int, MonthlyReportModel]:
        return {r.company_id: r for r in rows}

    @staticmethod
    def _metrics(items: List[ReviewItem]) -> ReviewMetrics:
        counts = {s: 0 for s in ReportStatus}
        for item in items:
            counts[item.status] += 1
        filed = counts[ReportStatus.SUBMITTED] + counts[ReportStatus.APPROVED]
        return ReviewMetrics(
            total=len(items),
            filed=filed,
            awaiting_review=counts[ReportStatus.SUBMITTED],
            approved=counts[ReportStatus.APPROVED],
            rejected=counts[ReportStatus.REJECTED],
            pending=counts[ReportStatus.NOT_FILED],
            warnings=sum(1 for i in items if i.surfaced),
            completion_rate=safe_rate(filed, len(items)),
        )
