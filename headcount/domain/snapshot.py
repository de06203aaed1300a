"""Read-only snapshot rows fed to the aggregation engine.

Repositories flatten ORM rows into these frozen records so the engine
stays pure: no sessions, no lazy loads, and no nulls (missing numbers
are already coerced to zero).
"""

from dataclasses import dataclass

from headcount.domain.catalog import OTHER, normalize_industry
from headcount.domain.status import ReportStatus


@dataclass(frozen=True)
class CompanyRef:
    id: int
    name: str
    industry: str
    town: str

    @classmethod
    def from_model(cls, company) -> "CompanyRef":
        return cls(
            id=company.id,
            name=company.name or "",
            industry=normalize_industry(company.industry),
            town=company.town or OTHER,
        )


@dataclass(frozen=True)
class ReportRow:
    company_id: int
    company_name: str
    industry: str
    town: str
    report_month: str
    status: ReportStatus
    employees_total: int = 0
    recruited_new: int = 0
    resigned_total: int = 0
    shortage_general: int = 0
    shortage_tech: int = 0
    shortage_management: int = 0
    planned_recruitment: int = 0

    @property
    def shortage_total(self) -> int:
        return self.shortage_general + self.shortage_tech + self.shortage_management

    @classmethod
    def from_models(cls, report, company) -> "ReportRow":
        ref = CompanyRef.from_model(company)
        return cls(
            company_id=report.company_id,
            company_name=ref.name,
            industry=ref.industry,
            town=ref.town,
            report_month=report.report_month,
            status=ReportStatus.from_stored(report.status),
            employees_total=report.employees_total or 0,
            recruited_new=report.recruited_new or 0,
            resigned_total=report.resigned_total or 0,
            shortage_general=report.shortage_general or 0,
            shortage_tech=report.shortage_tech or 0,
            shortage_management=report.shortage_management or 0,
            planned_recruitment=report.planned_recruitment or 0,
        )
