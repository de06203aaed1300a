"""Monthly report repository."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from headcount.domain.snapshot import ReportRow
from headcount.domain.status import ReportStatus
from headcount.models.company import CompanyModel
from headcount.models.monthly_report import MonthlyReportModel
from headcount.repositories.base import BaseRepository


class ReportRepository(BaseRepository[MonthlyReportModel]):
    def __init__(self, db: Session):
        super().__init__(db, MonthlyReportModel)

    def _not_rejected(self):
        return or_(
            self.model.status.is_(None),
            self.model.status != ReportStatus.REJECTED.value,
        )

    # ── reads ────────────────────────────────────────────────────────

    def get_for_key(self, company_id: int, report_month: str) -> Optional[MonthlyReportModel]:
        return (
            self.db.query(self.model)
            .filter(
                self.model.company_id == company_id,
                self.model.report_month == report_month,
            )
            .first()
        )

    def get_latest_before(
        self, company_id: int, report_month: str
    ) -> Optional[MonthlyReportModel]:
        """Most recent non-rejected report strictly earlier than *report_month*."""
        return (
            self.db.query(self.model)
            .filter(
                self.model.company_id == company_id,
                self.model.report_month < report_month,
                self._not_rejected(),
            )
            .order_by(self.model.report_month.desc())
            .first()
        )

    def get_for_company(self, company_id: int) -> List[MonthlyReportModel]:
        """Full history for a company, oldest first."""
        return (
            self.db.query(self.model)
            .filter(self.model.company_id == company_id)
            .order_by(self.model.report_month.asc())
            .all()
        )

    def get_for_month(
        self, report_month: str, company_ids: Optional[Set[int]] = None
    ) -> List[MonthlyReportModel]:
        query = self.db.query(self.model).filter(self.model.report_month == report_month)
        if company_ids is not None:
            if not company_ids:
                return []
            query = query.filter(self.model.company_id.in_(company_ids))
        return query.all()

    def scan(
        self,
        *,
        industry: Optional[str] = None,
        town: Optional[str] = None,
        name_contains: Optional[str] = None,
        include_rejected: bool = False,
    ) -> List[ReportRow]:
        """Every report joined with its company, flattened into snapshot rows.

        Company-level predicates are pushed into SQL; month handling is
        left to the aggregation engine, which needs the history around
        any month filter.
        """
        query = self.db.query(self.model, CompanyModel).join(
            CompanyModel, CompanyModel.id == self.model.company_id
        )
        if industry:
            query = query.filter(CompanyModel.industry == industry)
        if town:
            query = query.filter(CompanyModel.town == town)
        if name_contains:
            query = query.filter(CompanyModel.name.contains(name_contains))
        if not include_rejected:
            query = query.filter(self._not_rejected())

        rows = query.order_by(self.model.report_month.asc(), self.model.company_id.asc()).all()
        return [ReportRow.from_models(report, company) for report, company in rows]

    # ── writes ───────────────────────────────────────────────────────

    def upsert(
        self, company_id: int, report_month: str, values: Dict[str, Any]
    ) -> MonthlyReportModel:
        """Insert or fully overwrite the row for (company, month).

        Last writer wins: every field in *values* is written in one flush,
        so a racing writer never sees a half-merged row. If a concurrent
        insert wins the unique key, the session is rolled back and the
        winner's row is overwritten. Call this as the first write of a
        unit of work for that reason.
        """
        values = {**values, "updated_at": datetime.now(timezone.utc)}
        row = self.get_for_key(company_id, report_month)
        if row is None:
            row = self.model(company_id=company_id, report_month=report_month, **values)
            try:
                self.db.add(row)
                self.db.flush()
                return row
            except IntegrityError:
                self.db.rollback()
                row = self.get_for_key(company_id, report_month)
                if row is None:
                    raise

        for name, value in values.items():
            setattr(row, name, value)
        self.db.flush()
        return row
