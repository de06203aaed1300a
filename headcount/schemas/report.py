"""Monthly report schemas: submission payloads, corrections, and reads."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from headcount.domain.status import ReportStatus


class ShortageDetail(BaseModel):
    """Declared staffing gap by category. The total is always derived."""

    general: int = 0
    tech: int = 0
    management: int = 0

    @property
    def total(self) -> int:
        return self.general + self.tech + self.management


class SalaryInputs(BaseModel):
    """Average monthly salary by category: informational only."""

    general: Optional[float] = None
    tech: Optional[float] = None
    management: Optional[float] = None


class ReportSubmission(BaseModel):
    """What an enterprise files for the current month.

    ``employees_total`` is not part of the payload: it is derived from the
    company's baseline plus hires minus separations.
    """

    recruited_new: int = 0
    resigned_total: int = 0
    shortage: ShortageDetail = Field(default_factory=ShortageDetail)
    planned_recruitment: int = 0
    salary: SalaryInputs = Field(default_factory=SalaryInputs)


class ReportCorrection(BaseModel):
    """Reviewer ground-truth overrides applied on approval."""

    employees_total: Optional[int] = None
    recruited_new: Optional[int] = None
    resigned_total: Optional[int] = None
    shortage: Optional[ShortageDetail] = None
    planned_recruitment: Optional[int] = None

    def changed_fields(self) -> dict:
        """Only the fields the reviewer actually supplied."""
        return self.model_dump(exclude_none=True)


class RejectRequest(BaseModel):
    reason: str = ""


class MonthlyReport(BaseModel):
    company_id: int
    report_month: str
    status: ReportStatus

    employees_total: int
    recruited_new: int
    resigned_total: int

    shortage: ShortageDetail
    shortage_total: int
    planned_recruitment: int
    salary: SalaryInputs

    reject_reason: Optional[str] = None
    corrected: bool = False
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, row) -> "MonthlyReport":
        shortage = ShortageDetail(
            general=row.shortage_general or 0,
            tech=row.shortage_tech or 0,
            management=row.shortage_management or 0,
        )
        return cls(
            company_id=row.company_id,
            report_month=row.report_month,
            status=ReportStatus.from_stored(row.status),
            employees_total=row.employees_total or 0,
            recruited_new=row.recruited_new or 0,
            resigned_total=row.resigned_total or 0,
            shortage=shortage,
            shortage_total=shortage.total,
            planned_recruitment=row.planned_recruitment or 0,
            salary=SalaryInputs(
                general=row.salary_general,
                tech=row.salary_tech,
                management=row.salary_management,
            ),
            reject_reason=row.reject_reason,
            corrected=bool(row.corrected),
            updated_at=row.updated_at,
        )


class ReportState(BaseModel):
    """Status of a (company, month) key; ``report`` is None when NOT_FILED."""

    company_id: int
    report_month: str
    status: ReportStatus
    report: Optional[MonthlyReport] = None
