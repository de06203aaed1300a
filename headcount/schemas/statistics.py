"""Aggregation schemas: plain data handed to the presentation layer.

Rates are unrounded fractions (0.0323 == 3.23%). ``None`` is the "no
data" value whenever a denominator is zero.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator

from headcount.domain.months import parse_month

# Dropdown value meaning "no filter"
ALL = "全部"


class ReportFilters(BaseModel):
    industry: Optional[str] = None
    town: Optional[str] = None
    company_name: Optional[str] = None
    month: Optional[str] = None

    @field_validator("industry", "town", "company_name")
    @classmethod
    def blank_means_all(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v or v == ALL:
            return None
        return v

    @field_validator("month")
    @classmethod
    def canonical_month(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return parse_month(v, field="month")


class Summary(BaseModel):
    has_data: bool = False
    total_companies: int = 0

    # Reference-month selection
    latest_month: Optional[str] = None
    reference_month: Optional[str] = None
    data_year: Optional[int] = None
    completion_rate: Optional[float] = None
    is_fallback: bool = False
    skipped_month: Optional[str] = None
    skipped_completion_rate: Optional[float] = None

    # Headcount
    current_employees: int = 0
    average_monthly_employees: Optional[float] = None
    start_employees: int = 0
    headcount_change: int = 0
    current_shortage: int = 0

    # Year to date
    cumulative_recruited: int = 0
    cumulative_resigned: int = 0
    net_growth: int = 0

    shortage_rate: Optional[float] = None
    turnover_rate: Optional[float] = None


class GroupStat(BaseModel):
    name: str
    company_count: int = 0
    total_employees: int = 0
    average_employees: Optional[float] = None
    shortage_count: int = 0
    shortage_rate: Optional[float] = None
    recruited: int = 0
    resigned: int = 0
    turnover_rate: Optional[float] = None
    employee_share: Optional[float] = None
    top_subgroup: Optional[str] = None
    top_subgroup_employees: int = 0


class IndustryStat(GroupStat):
    """Rollup for one industry; ``top_subgroup`` is the dominant town."""


class TownStat(GroupStat):
    """Rollup for one town; ``top_subgroup`` is the dominant industry."""


class TrendPoint(BaseModel):
    month: str
    report_count: int = 0
    employees: int = 0
    shortage: int = 0
    recruited: int = 0
    resigned: int = 0


class RankingMetric(str, Enum):
    SHORTAGE = "shortage"
    RECRUITED = "recruited"
    TURNOVER = "turnover"
    NET_GROWTH = "net_growth"


class CompanyRanking(BaseModel):
    rank: int
    company_id: int
    name: str
    industry: str
    town: str
    metric: RankingMetric
    value: float
    employees: int = 0
    period: str  # "reference_month" or "year_to_date"


class YearMetrics(BaseModel):
    year: int
    avg_employees: Optional[float] = None
    total_recruited: int = 0
    total_resigned: int = 0
    avg_shortage: Optional[float] = None
    growth_rate: Optional[float] = None


class QuarterPoint(BaseModel):
    year: int
    quarter: int
    employees: Optional[float] = None
    shortage: Optional[float] = None
    recruited: int = 0
    resigned: int = 0


class SeasonalPoint(BaseModel):
    month: int
    sample_years: int = 0
    avg_recruited: float = 0.0
    avg_resigned: float = 0.0
    avg_shortage: float = 0.0


class SkillGap(BaseModel):
    industry: str
    total_shortage: int = 0
    general: int = 0
    tech: int = 0
    management: int = 0
    tech_ratio: Optional[float] = None


class FilterOptions(BaseModel):
    industries: list[str]
    towns: list[str]


class EnterpriseSnapshot(BaseModel):
    company_id: int
    name: str
    industry: str
    town: str
    report_month: str
    employees: int = 0
    shortage: int = 0
    recruited: int = 0
    resigned: int = 0
    cumulative_recruited: int = 0
    cumulative_resigned: int = 0
    peak_shortage: int = 0
    turnover_rate: Optional[float] = None


class EnterprisePage(BaseModel):
    items: list[EnterpriseSnapshot]
    total: int
    page: int
    page_size: int


class TargetEnterprise(BaseModel):
    """A company worth approaching for vocational training placements."""

    company_id: int
    name: str
    industry: str
    town: str
    report_month: str
    total_shortage: int = 0
    tech_shortage: int = 0
    tags: list[str] = []
