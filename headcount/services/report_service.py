"""Monthly report lifecycle: submit, approve (with corrections), reject.

Each operation checks the caller's capability once on entry, validates
the payload, performs a single-row upsert keyed by (company, month) and
commits. Audit entries for reviewer actions are written afterwards by
the best-effort AuditRecorder.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from headcount.domain.authorization import (
    Principal,
    actor_id,
    require_access,
    require_enterprise,
    require_reviewer,
)
from headcount.domain.months import parse_month
from headcount.domain.status import ReportStatus, can_approve, can_reject, can_submit_over
from headcount.errors import ConflictError, NotFoundError, ValidationError
from headcount.models.monthly_report import MonthlyReportModel
from headcount.repositories.company_repo import CompanyRepository
from headcount.repositories.report_repo import ReportRepository
from headcount.schemas.audit import AuditAction
from headcount.schemas.report import (
    MonthlyReport,
    ReportCorrection,
    ReportState,
    ReportSubmission,
)
from headcount.services.audit_service import AuditRecorder

logger = logging.getLogger(__name__)

# Fields compared to decide whether a repeated submission is a no-op
_PAYLOAD_FIELDS = (
    "employees_total",
    "recruited_new",
    "resigned_total",
    "shortage_general",
    "shortage_tech",
    "shortage_management",
    "planned_recruitment",
    "salary_general",
    "salary_tech",
    "salary_management",
)


def _require_non_negative(values: Dict[str, Any]) -> None:
    for field, value in values.items():
        if value is not None and value < 0:
            raise ValidationError(
                f"{field} must not be negative (got {value})",
                field=field,
                details={"value": value},
            )


def _submission_numbers(data: ReportSubmission) -> Dict[str, Any]:
    return {
        "recruited_new": data.recruited_new,
        "resigned_total": data.resigned_total,
        "shortage.general": data.shortage.general,
        "shortage.tech": data.shortage.tech,
        "shortage.management": data.shortage.management,
        "planned_recruitment": data.planned_recruitment,
        "salary.general": data.salary.general,
        "salary.tech": data.salary.tech,
        "salary.management": data.salary.management,
    }


def _correction_columns(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten a correction payload onto model column names."""
    columns = {k: v for k, v in changes.items() if k != "shortage"}
    shortage = changes.get("shortage")
    if shortage is not None:
        columns["shortage_general"] = shortage.get("general", 0)
        columns["shortage_tech"] = shortage.get("tech", 0)
        columns["shortage_management"] = shortage.get("management", 0)
    return columns


class ReportLifecycleService:
    def __init__(
        self,
        db: Session,
        report_repo: ReportRepository,
        company_repo: CompanyRepository,
        audit: AuditRecorder,
    ):
        self.db = db
        self.reports = report_repo
        self.companies = company_repo
        self.audit = audit

    # ── reads ────────────────────────────────────────────────────────

    def baseline(self, company_id: int, report_month: str) -> int:
        """Headcount the month starts from.

        The ``employees_total`` of the most recent earlier report that
        was not rejected, or zero for a company's first filing.
        """
        previous = self.reports.get_latest_before(company_id, parse_month(report_month))
        if previous is None:
            return 0
        return previous.employees_total or 0

    def get_state(self, principal: Principal, company_id: int, report_month: str) -> ReportState:
        month = parse_month(report_month)
        require_access(principal, company_id)
        row = self.reports.get_for_key(company_id, month)
        if row is None:
            return ReportState(
                company_id=company_id, report_month=month, status=ReportStatus.NOT_FILED
            )
        report = MonthlyReport.from_model(row)
        return ReportState(
            company_id=company_id, report_month=month, status=report.status, report=report
        )

    def history(self, principal: Principal, company_id: int) -> List[MonthlyReport]:
        require_access(principal, company_id)
        self._company_or_404(company_id)
        return [MonthlyReport.from_model(r) for r in self.reports.get_for_company(company_id)]

    # ── transitions ──────────────────────────────────────────────────

    def submit(
        self,
        principal: Principal,
        company_id: int,
        report_month: str,
        data: ReportSubmission,
        current_month: str,
    ) -> MonthlyReport:
        """File the company's report for the current month.

        ``employees_total`` is derived as ``max(0, baseline + recruited -
        resigned)``. Re-submitting an identical payload over a SUBMITTED
        report is a no-op; anything else over SUBMITTED or APPROVED is a
        ConflictError. A REJECTED report is overwritten and its reason
        cleared.
        """
        month = parse_month(report_month)
        require_enterprise(principal, company_id)
        if month != parse_month(current_month, field="current_month"):
            raise ValidationError(
                f"Reports may only be filed for the current month ({current_month})",
                field="report_month",
                key={"company_id": company_id, "report_month": month},
            )
        _require_non_negative(_submission_numbers(data))
        self._company_or_404(company_id)

        existing = self.reports.get_for_key(company_id, month)
        status = ReportStatus.from_stored(existing.status) if existing else ReportStatus.NOT_FILED

        baseline = self.baseline(company_id, month)
        values = {
            "employees_total": max(0, baseline + data.recruited_new - data.resigned_total),
            "recruited_new": data.recruited_new,
            "resigned_total": data.resigned_total,
            "shortage_general": data.shortage.general,
            "shortage_tech": data.shortage.tech,
            "shortage_management": data.shortage.management,
            "shortage_total": data.shortage.total,
            "planned_recruitment": data.planned_recruitment,
            "salary_general": data.salary.general,
            "salary_tech": data.salary.tech,
            "salary_management": data.salary.management,
        }

        if status == ReportStatus.SUBMITTED and self._same_payload(existing, values):
            logger.info("Duplicate submission for company %d %s ignored", company_id, month)
            return MonthlyReport.from_model(existing)
        if not can_submit_over(status):
            raise ConflictError(
                f"A {status.value} report already exists for this month",
                key={"company_id": company_id, "report_month": month},
                details={"status": status.value},
            )

        values.update(
            status=ReportStatus.SUBMITTED.value,
            reject_reason=None,
            corrected=False,
        )
        try:
            row = self.reports.upsert(company_id, month, values)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Report submitted: company %d %s (baseline %d, employees %d, was %s)",
            company_id, month, baseline, row.employees_total, status.value,
        )
        return MonthlyReport.from_model(row)

    def approve(
        self,
        principal: Principal,
        company_id: int,
        report_month: str,
        correction: Optional[ReportCorrection] = None,
    ) -> MonthlyReport:
        """Approve a report, optionally overwriting figures with reviewer values.

        Also accepted on an APPROVED report as a reconciliation step. The
        audit entry is always written, corrections or not.
        """
        month = parse_month(report_month)
        reviewer = require_reviewer(principal, company_id)
        row = self._report_or_404(company_id, month)

        status_before = ReportStatus.from_stored(row.status)
        if not can_approve(status_before):
            raise ConflictError(
                f"Cannot approve a {status_before.value} report",
                key={"company_id": company_id, "report_month": month},
                details={"status": status_before.value},
            )

        changes = correction.changed_fields() if correction else {}
        columns = _correction_columns(changes)
        _require_non_negative(columns)

        try:
            for name, value in columns.items():
                setattr(row, name, value)
            row.shortage_total = (
                (row.shortage_general or 0)
                + (row.shortage_tech or 0)
                + (row.shortage_management or 0)
            )
            row.status = ReportStatus.APPROVED.value
            row.reject_reason = None
            row.corrected = bool(row.corrected) or bool(columns)
            row.updated_at = datetime.now(timezone.utc)
            self.reports.update(row)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Report approved: company %d %s by reviewer %s (%d corrections)",
            company_id, month, reviewer.user_id, len(columns),
        )
        self.audit.record(
            actor_id(reviewer),
            AuditAction.EDIT_REPORT_DATA,
            target_company_id=company_id,
            details={
                "report_month": month,
                "status_before": status_before.value,
                "corrections": changes,
                "employees_total": row.employees_total,
            },
        )
        return MonthlyReport.from_model(row)

    def reject(
        self,
        principal: Principal,
        company_id: int,
        report_month: str,
        reason: str,
    ) -> MonthlyReport:
        month = parse_month(report_month)
        reviewer = require_reviewer(principal, company_id)
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError(
                "A rejection reason is required",
                field="reason",
                key={"company_id": company_id, "report_month": month},
            )
        row = self._report_or_404(company_id, month)

        status_before = ReportStatus.from_stored(row.status)
        if not can_reject(status_before):
            raise ConflictError(
                f"Cannot reject a {status_before.value} report",
                key={"company_id": company_id, "report_month": month},
                details={"status": status_before.value},
            )

        try:
            row.status = ReportStatus.REJECTED.value
            row.reject_reason = reason
            row.updated_at = datetime.now(timezone.utc)
            self.reports.update(row)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Report rejected: company %d %s by reviewer %s", company_id, month, reviewer.user_id)
        self.audit.record(
            actor_id(reviewer),
            AuditAction.REJECT_REPORT,
            target_company_id=company_id,
            details={"report_month": month, "reason": reason, "status_before": status_before.value},
        )
        return MonthlyReport.from_model(row)

    # ── helpers ──────────────────────────────────────────────────────

    def _company_or_404(self, company_id: int):
        company = self.companies.get(company_id)
        if company is None:
            raise NotFoundError(f"Company {company_id} not found", key={"company_id": company_id})
        return company

    def _report_or_404(self, company_id: int, month: str) -> MonthlyReportModel:
        row = self.reports.get_for_key(company_id, month)
        if row is None:
            raise NotFoundError(
                "No report has been filed for this month",
                key={"company_id": company_id, "report_month": month},
            )
        return row

    @staticmethod
    def _same_payload(row: MonthlyReportModel, values: Dict[str, Any]) -> bool:
        return all(getattr(row, name) == values[name] for name in _PAYLOAD_FIELDS)
