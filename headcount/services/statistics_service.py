"""Loads the report population and hands it to the aggregation engine.

Town-level reviewers only ever see their own companies; super admins see
the whole market.
"""

import logging
from typing import List, Optional, Tuple

from headcount.domain.authorization import AssignedCompanies, Principal, require_reviewer
from headcount.domain.snapshot import CompanyRef, ReportRow
from headcount.engines.aggregation_engine import AggregationEngine
from headcount.repositories.company_repo import CompanyRepository
from headcount.repositories.report_repo import ReportRepository
from headcount.schemas.statistics import (
    CompanyRanking,
    EnterprisePage,
    FilterOptions,
    IndustryStat,
    QuarterPoint,
    RankingMetric,
    ReportFilters,
    SeasonalPoint,
    SkillGap,
    Summary,
    TargetEnterprise,
    TownStat,
    TrendPoint,
    YearMetrics,
)

logger = logging.getLogger(__name__)


class StatisticsService:
    def __init__(
        self,
        report_repo: ReportRepository,
        company_repo: CompanyRepository,
        engine: AggregationEngine,
    ):
        self.reports = report_repo
        self.companies = company_repo
        self.engine = engine

    def _load(
        self, principal: Principal, filters: ReportFilters
    ) -> Tuple[List[ReportRow], List[CompanyRef]]:
        reviewer = require_reviewer(principal)
        ids: Optional[set] = None
        if isinstance(reviewer.scope, AssignedCompanies):
            ids = set(reviewer.scope.company_ids)

        rows = self.reports.scan(
            industry=filters.industry,
            town=filters.town,
            name_contains=filters.company_name,
        )
        companies = [
            CompanyRef.from_model(c)
            for c in self.companies.filtered(
                industry=filters.industry,
                town=filters.town,
                name_contains=filters.company_name,
                ids=ids,
            )
            if c.is_active is not False
        ]
        # reports of out-of-scope or deactivated companies never reach the engine
        known = {c.id for c in companies}
        rows = [r for r in rows if r.company_id in known]

        logger.debug("Loaded %d report rows for %d companies", len(rows), len(companies))
        return rows, companies

    def summary(self, principal: Principal, filters: ReportFilters) -> Summary:
        rows, companies = self._load(principal, filters)
        return self.engine.summarize(rows, companies, filters)

    def by_industry(self, principal: Principal, filters: ReportFilters) -> List[IndustryStat]:
        rows, _ = self._load(principal, filters)
        return self.engine.by_industry(rows, filters)

    def by_town(self, principal: Principal, filters: ReportFilters) -> List[TownStat]:
        rows, _ = self._load(principal, filters)
        return self.engine.by_town(rows, filters)

    def trend(self, principal: Principal, filters: ReportFilters) -> List[TrendPoint]:
        rows, _ = self._load(principal, filters)
        return self.engine.trend(rows, filters)

    def top_n(
        self, principal: Principal, metric: RankingMetric, n: int, filters: ReportFilters
    ) -> List[CompanyRanking]:
        rows, companies = self._load(principal, filters)
        return self.engine.top_n(metric, n, rows, companies, filters)

    def year_over_year(self, principal: Principal, filters: ReportFilters) -> List[YearMetrics]:
        rows, _ = self._load(principal, filters)
        return self.engine.year_over_year(rows, filters)

    def quarterly(self, principal: Principal, filters: ReportFilters) -> List[QuarterPoint]:
        rows, _ = self._load(principal, filters)
        return self.engine.quarterly(rows, filters)

    def seasonal(self, principal: Principal, filters: ReportFilters) -> List[SeasonalPoint]:
        rows, _ = self._load(principal, filters)
        return self.engine.seasonal(rows, filters)

    def skill_gap(self, principal: Principal, filters: ReportFilters) -> List[SkillGap]:
        rows, companies = self._load(principal, filters)
        return self.engine.skill_gap(rows, companies, filters)

    def target_enterprises(
        self, principal: Principal, filters: ReportFilters, limit: int = 10
    ) -> List[TargetEnterprise]:
        rows, companies = self._load(principal, filters)
        return self.engine.target_enterprises(rows, companies, filters, limit=limit)

    def filter_options(self, principal: Principal) -> FilterOptions:
        rows, _ = self._load(principal, ReportFilters())
        return self.engine.filter_options(rows)

    def enterprises(
        self, principal: Principal, filters: ReportFilters, *, page: int = 1, page_size: int = 20
    ) -> EnterprisePage:
        rows, _ = self._load(principal, filters)
        return self.engine.enterprise_snapshot(rows, filters, page=page, page_size=page_size)
