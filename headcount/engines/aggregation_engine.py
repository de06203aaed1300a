"""Dashboard statistics over the monthly report population.

Everything here is a pure function of the snapshot rows handed in: no
sessions, no caching, no side effects. Rows whose status is not filed
(i.e. REJECTED) are ignored; SUBMITTED figures are provisional but count.

"Current" always means the *reference month*: the latest month in the
data, unless its filing completion is below the configured threshold,
in which case the most recent month that did reach it is used instead
and the summary is marked as a fallback.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Type, TypeVar

from headcount.domain.catalog import OTHER, industry_rank, sort_by_industry_policy
from headcount.domain.months import month_of, month_range, quarter_of, year_of
from headcount.domain.snapshot import CompanyRef, ReportRow
from headcount.domain.status import is_filed
from headcount.schemas.statistics import (
    CompanyRanking,
    EnterprisePage,
    EnterpriseSnapshot,
    FilterOptions,
    GroupStat,
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
from headcount.utils.rates import growth_rate, mean, safe_rate, shortage_rate, turnover_rate

logger = logging.getLogger(__name__)

G = TypeVar("G", bound=GroupStat)

# Target-enterprise tagging rules for training outreach
TARGET_MIN_SHORTAGE = 20
TAG_URGENT_TECH = "急需技工"
TAG_URGENT_TECH_MIN = 30
TAG_LARGE_EMPLOYER = "用工大户"
TAG_LARGE_EMPLOYER_MIN = 100
TAG_TECH_INTENSIVE = "技术密集需求"
TAG_TECH_INTENSIVE_RATIO = 0.4


@dataclass(frozen=True)
class ReferenceMonth:
    """Outcome of reference-month selection."""

    month: Optional[str] = None
    latest_month: Optional[str] = None
    completion_rate: Optional[float] = None
    is_fallback: bool = False
    skipped_month: Optional[str] = None
    skipped_completion_rate: Optional[float] = None


class AggregationEngine:
    """Summaries, rollups, trends and rankings for the dashboards."""

    def __init__(
        self,
        completion_threshold: float = 0.5,
        minor_town_employee_floor: int = 50,
        skill_gap_shortage_floor: Optional[int] = None,
    ):
        self.completion_threshold = completion_threshold
        self.minor_town_employee_floor = minor_town_employee_floor
        self.skill_gap_shortage_floor = skill_gap_shortage_floor

    # ══════════════════════════════════════════════════════════════════
    # REFERENCE MONTH
    # ══════════════════════════════════════════════════════════════════

    def completion_rates(
        self, rows: Sequence[ReportRow], companies: Sequence[CompanyRef]
    ) -> Dict[str, Optional[float]]:
        """Share of the company population that filed, per month present."""
        population = len(companies) or len({r.company_id for r in rows})
        filed: Dict[str, set] = defaultdict(set)
        for r in rows:
            filed[r.report_month].add(r.company_id)
        return {m: safe_rate(len(ids), population) for m, ids in filed.items()}

    def select_reference_month(
        self,
        rows: Sequence[ReportRow],
        companies: Sequence[CompanyRef],
        month: Optional[str] = None,
    ) -> ReferenceMonth:
        """Pick the month every "current" figure is computed for.

        An explicit *month* is honoured as-is. Otherwise the latest month
        is used unless its completion is below the threshold; then the
        most recent month meeting the threshold replaces it. When no
        earlier month qualifies either, the latest month stands.
        """
        rates = self.completion_rates(rows, companies)
        if month is not None:
            return ReferenceMonth(
                month=month,
                latest_month=max(rates) if rates else None,
                completion_rate=rates.get(month),
            )
        if not rates:
            return ReferenceMonth()

        months = sorted(rates, reverse=True)
        latest = months[0]
        latest_rate = rates[latest]
        if latest_rate is None or latest_rate >= self.completion_threshold:
            return ReferenceMonth(month=latest, latest_month=latest, completion_rate=latest_rate)

        for m in months[1:]:
            rate = rates[m]
            if rate is not None and rate >= self.completion_threshold:
                logger.info(
                    "Reference month falls back from %s (%.1f%% filed) to %s",
                    latest, latest_rate * 100, m,
                )
                return ReferenceMonth(
                    month=m,
                    latest_month=latest,
                    completion_rate=rate,
                    is_fallback=True,
                    skipped_month=latest,
                    skipped_completion_rate=latest_rate,
                )

        return ReferenceMonth(month=latest, latest_month=latest, completion_rate=latest_rate)

    # ══════════════════════════════════════════════════════════════════
    # SUMMARY
    # ══════════════════════════════════════════════════════════════════

    def summarize(
        self,
        rows: Sequence[ReportRow],
        companies: Sequence[CompanyRef],
        filters: Optional[ReportFilters] = None,
    ) -> Summary:
        filters = filters or ReportFilters()
        rows = self._filter_rows(rows, filters)
        companies = self._filter_companies(companies, filters)
        total_companies = len(companies) or len({r.company_id for r in rows})

        if not rows:
            return Summary(total_companies=total_companies)

        ref = self.select_reference_month(rows, companies, filters.month)
        ytd = self._year_to_date(rows, ref.month)
        current = [r for r in rows if r.report_month == ref.month]

        current_employees = sum(r.employees_total for r in current)
        current_shortage = sum(r.shortage_total for r in current)

        monthly_employees: Dict[str, int] = defaultdict(int)
        for r in ytd:
            monthly_employees[r.report_month] += r.employees_total
        start_employees = monthly_employees[min(monthly_employees)] if monthly_employees else 0

        recruited = sum(r.recruited_new for r in ytd)
        resigned = sum(r.resigned_total for r in ytd)

        return Summary(
            has_data=True,
            total_companies=total_companies,
            latest_month=ref.latest_month,
            reference_month=ref.month,
            data_year=year_of(ref.month) if ref.month else None,
            completion_rate=ref.completion_rate,
            is_fallback=ref.is_fallback,
            skipped_month=ref.skipped_month,
            skipped_completion_rate=ref.skipped_completion_rate,
            current_employees=current_employees,
            average_monthly_employees=mean(monthly_employees.values()),
            start_employees=start_employees,
            headcount_change=current_employees - start_employees,
            current_shortage=current_shortage,
            cumulative_recruited=recruited,
            cumulative_resigned=resigned,
            net_growth=recruited - resigned,
            shortage_rate=shortage_rate(current_shortage, current_employees),
            turnover_rate=turnover_rate(resigned, current_employees),
        )

    # ══════════════════════════════════════════════════════════════════
    # INDUSTRY / TOWN ROLLUPS
    # ══════════════════════════════════════════════════════════════════

    def by_industry(
        self, rows: Sequence[ReportRow], filters: Optional[ReportFilters] = None
    ) -> List[IndustryStat]:
        return self._rollup(
            rows, filters, IndustryStat,
            group_key=lambda r: r.industry,
            sub_key=lambda r: r.town,
            order=lambda s: (-s.total_employees, industry_rank(s.name), s.name),
        )

    def by_town(
        self, rows: Sequence[ReportRow], filters: Optional[ReportFilters] = None
    ) -> List[TownStat]:
        return self._rollup(
            rows, filters, TownStat,
            group_key=lambda r: r.town,
            sub_key=lambda r: r.industry,
            order=lambda s: (-s.total_employees, s.name),
        )

    def _rollup(
        self,
        rows: Sequence[ReportRow],
        filters: Optional[ReportFilters],
        stat_cls: Type[G],
        group_key: Callable[[ReportRow], str],
        sub_key: Callable[[ReportRow], str],
        order: Callable[[G], tuple],
    ) -> List[G]:
        filters = filters or ReportFilters()
        rows = self._filter_rows(rows, filters)
        snapshot = self._company_snapshot(rows, filters.month)
        if not snapshot:
            return []

        cumulative = self._cumulative_by_company(rows, snapshot)
        grand_total = sum(r.employees_total for r in snapshot)

        groups: Dict[str, List[ReportRow]] = defaultdict(list)
        for r in snapshot:
            groups[group_key(r)].append(r)

        stats: List[G] = []
        for name, members in groups.items():
            employees = sum(r.employees_total for r in members)
            shortage = sum(r.shortage_total for r in members)
            recruited = sum(cumulative[r.company_id][0] for r in members)
            resigned = sum(cumulative[r.company_id][1] for r in members)

            sub_totals: Dict[str, int] = defaultdict(int)
            for r in members:
                sub_totals[sub_key(r)] += r.employees_total
            top_sub = min(sub_totals, key=lambda k: (-sub_totals[k], industry_rank(k), k))

            stats.append(stat_cls(
                name=name,
                company_count=len(members),
                total_employees=employees,
                average_employees=safe_rate(employees, len(members)),
                shortage_count=shortage,
                shortage_rate=shortage_rate(shortage, employees),
                recruited=recruited,
                resigned=resigned,
                turnover_rate=turnover_rate(resigned, employees),
                employee_share=safe_rate(employees, grand_total),
                top_subgroup=top_sub,
                top_subgroup_employees=sub_totals[top_sub],
            ))

        return sorted(stats, key=order)

    # ══════════════════════════════════════════════════════════════════
    # TREND
    # ══════════════════════════════════════════════════════════════════

    def trend(
        self, rows: Sequence[ReportRow], filters: Optional[ReportFilters] = None
    ) -> List[TrendPoint]:
        """One point per calendar month from the first to the last filed month.

        Months in between with no filed reports appear with
        ``report_count == 0``; an empty list means there is no data at all.
        """
        filters = filters or ReportFilters()
        rows = self._filter_rows(rows, filters)
        if filters.month:
            rows = [r for r in rows if r.report_month <= filters.month]
        if not rows:
            return []

        # rows are month-ordered by _filter_rows
        end = filters.month or rows[-1].report_month
        points = {m: TrendPoint(month=m) for m in month_range(rows[0].report_month, end)}
        for r in rows:
            p = points[r.report_month]
            p.report_count += 1
            p.employees += r.employees_total
            p.shortage += r.shortage_total
            p.recruited += r.recruited_new
            p.resigned += r.resigned_total
        return list(points.values())

    # ══════════════════════════════════════════════════════════════════
    # RANKINGS
    # ══════════════════════════════════════════════════════════════════

    def top_n(
        self,
        metric: RankingMetric,
        n: int,
        rows: Sequence[ReportRow],
        companies: Sequence[CompanyRef],
        filters: Optional[ReportFilters] = None,
    ) -> List[CompanyRanking]:
        """Rank companies by *metric*; ties go to the lower company id.

        Shortage is read at the reference month; recruited, net growth and
        turnover accumulate over the reference month's year to date.
        """
        filters = filters or ReportFilters()
        rows = self._filter_rows(rows, filters)
        companies = self._filter_companies(companies, filters)
        if n <= 0 or not rows:
            return []

        ref = self.select_reference_month(rows, companies, filters.month)
        ytd = self._year_to_date(rows, ref.month)

        latest: Dict[int, ReportRow] = {}
        recruited: Dict[int, int] = defaultdict(int)
        resigned: Dict[int, int] = defaultdict(int)
        for r in ytd:
            latest[r.company_id] = r  # ytd is chronological
            recruited[r.company_id] += r.recruited_new
            resigned[r.company_id] += r.resigned_total

        scored: List[tuple] = []
        if metric == RankingMetric.SHORTAGE:
            period = "reference_month"
            for cid, r in latest.items():
                if r.report_month == ref.month:
                    scored.append((float(r.shortage_total), cid))
        else:
            period = "year_to_date"
            for cid, r in latest.items():
                if metric == RankingMetric.RECRUITED:
                    value: Optional[float] = float(recruited[cid])
                elif metric == RankingMetric.NET_GROWTH:
                    value = float(recruited[cid] - resigned[cid])
                else:
                    value = turnover_rate(resigned[cid], r.employees_total)
                if value is not None:
                    scored.append((value, cid))

        scored.sort(key=lambda item: (-item[0], item[1]))
        out: List[CompanyRanking] = []
        for rank, (value, cid) in enumerate(scored[:n], start=1):
            r = latest[cid]
            out.append(CompanyRanking(
                rank=rank,
                company_id=cid,
                name=r.company_name,
                industry=r.industry,
                town=r.town,
                metric=metric,
                value=value,
                employees=r.employees_total,
                period=period,
            ))
        return out

    # ══════════════════════════════════════════════════════════════════
    # LONG-RANGE VIEWS
    # ══════════════════════════════════════════════════════════════════

    def year_over_year(
        self, rows: Sequence[ReportRow], filters: Optional[ReportFilters] = None
    ) -> List[YearMetrics]:
        """Annual averages per company-month, with growth against the prior year."""
        rows = self._filter_rows(rows, filters or ReportFilters())
        by_year: Dict[int, List[ReportRow]] = defaultdict(list)
        for r in rows:
            by_year[year_of(r.report_month)].append(r)

        out: List[YearMetrics] = []
        prev_avg: Optional[float] = None
        for year in sorted(by_year):
            members = by_year[year]
            avg_emp = mean(r.employees_total for r in members)
            out.append(YearMetrics(
                year=year,
                avg_employees=avg_emp,
                total_recruited=sum(r.recruited_new for r in members),
                total_resigned=sum(r.resigned_total for r in members),
                avg_shortage=mean(r.shortage_total for r in members),
                growth_rate=(
                    growth_rate(avg_emp, prev_avg)
                    if prev_avg is not None and avg_emp is not None
                    else None
                ),
            ))
            prev_avg = avg_emp
        return out

    def quarterly(
        self, rows: Sequence[ReportRow], filters: Optional[ReportFilters] = None
    ) -> List[QuarterPoint]:
        rows = self._filter_rows(rows, filters or ReportFilters())
        by_quarter: Dict[tuple, List[ReportRow]] = defaultdict(list)
        for r in rows:
            by_quarter[(year_of(r.report_month), quarter_of(r.report_month))].append(r)

        return [
            QuarterPoint(
                year=year,
                quarter=quarter,
                employees=mean(r.employees_total for r in members),
                shortage=mean(r.shortage_total for r in members),
                recruited=sum(r.recruited_new for r in members),
                resigned=sum(r.resigned_total for r in members),
            )
            for (year, quarter), members in sorted(by_quarter.items())
        ]

    def seasonal(
        self, rows: Sequence[ReportRow], filters: Optional[ReportFilters] = None
    ) -> List[SeasonalPoint]:
        """Calendar-month averages of the monthly market totals across years."""
        rows = self._filter_rows(rows, filters or ReportFilters())

        # Pass 1: totals per YYYY-MM
        totals: Dict[str, List[int]] = defaultdict(lambda: [0, 0, 0])
        for r in rows:
            t = totals[r.report_month]
            t[0] += r.recruited_new
            t[1] += r.resigned_total
            t[2] += r.shortage_total

        # Pass 2: average those totals per calendar month
        samples: Dict[int, List[List[int]]] = defaultdict(list)
        for key, t in totals.items():
            samples[month_of(key)].append(t)

        out: List[SeasonalPoint] = []
        for month in range(1, 13):
            s = samples.get(month, [])
            out.append(SeasonalPoint(
                month=month,
                sample_years=len(s),
                avg_recruited=mean(t[0] for t in s) or 0.0,
                avg_resigned=mean(t[1] for t in s) or 0.0,
                avg_shortage=mean(t[2] for t in s) or 0.0,
            ))
        return out

    def skill_gap(
        self,
        rows: Sequence[ReportRow],
        companies: Sequence[CompanyRef],
        filters: Optional[ReportFilters] = None,
    ) -> List[SkillGap]:
        """Shortage split by category per industry at the reference month."""
        filters = filters or ReportFilters()
        rows = self._filter_rows(rows, filters)
        companies = self._filter_companies(companies, filters)
        if not rows:
            return []

        ref = self.select_reference_month(rows, companies, filters.month)
        gaps: Dict[str, SkillGap] = {}
        for r in rows:
            if r.report_month != ref.month:
                continue
            g = gaps.setdefault(r.industry, SkillGap(industry=r.industry))
            g.general += r.shortage_general
            g.tech += r.shortage_tech
            g.management += r.shortage_management
            g.total_shortage += r.shortage_total

        floor = self.skill_gap_shortage_floor
        kept = [g for g in gaps.values() if floor is None or g.total_shortage > floor]
        for g in kept:
            g.tech_ratio = safe_rate(g.tech, g.total_shortage)
        return sorted(kept, key=lambda g: (-g.tech, industry_rank(g.industry)))

    def target_enterprises(
        self,
        rows: Sequence[ReportRow],
        companies: Sequence[CompanyRef],
        filters: Optional[ReportFilters] = None,
        limit: int = 10,
    ) -> List[TargetEnterprise]:
        """Companies with the largest technical shortage at the reference month.

        Only companies short more than ``TARGET_MIN_SHORTAGE`` people are
        listed. Each one is tagged by the kind of need it shows.
        """
        filters = filters or ReportFilters()
        rows = self._filter_rows(rows, filters)
        companies = self._filter_companies(companies, filters)
        if limit <= 0 or not rows:
            return []

        ref = self.select_reference_month(rows, companies, filters.month)
        candidates = [
            r for r in rows
            if r.report_month == ref.month and r.shortage_total > TARGET_MIN_SHORTAGE
        ]
        candidates.sort(key=lambda r: (-r.shortage_tech, r.company_id))

        out: List[TargetEnterprise] = []
        for r in candidates[:limit]:
            tags = []
            if r.shortage_tech > TAG_URGENT_TECH_MIN:
                tags.append(TAG_URGENT_TECH)
            if r.shortage_total > TAG_LARGE_EMPLOYER_MIN:
                tags.append(TAG_LARGE_EMPLOYER)
            if r.shortage_tech / r.shortage_total > TAG_TECH_INTENSIVE_RATIO:
                tags.append(TAG_TECH_INTENSIVE)
            out.append(TargetEnterprise(
                company_id=r.company_id,
                name=r.company_name,
                industry=r.industry,
                town=r.town,
                report_month=r.report_month,
                total_shortage=r.shortage_total,
                tech_shortage=r.shortage_tech,
                tags=tags,
            ))
        return out

    # ══════════════════════════════════════════════════════════════════
    # LISTS
    # ══════════════════════════════════════════════════════════════════

    def filter_options(self, rows: Sequence[ReportRow]) -> FilterOptions:
        """Dropdown values: industries in policy order, towns by headcount.

        Towns below the employee floor (and "其他" itself) are folded into
        a trailing "其他" entry.
        """
        rows = [r for r in rows if is_filed(r.status)]
        industries = sort_by_industry_policy({r.industry for r in rows if r.industry})

        town_totals: Dict[str, int] = defaultdict(int)
        for r in self._company_snapshot(rows, None):
            town_totals[r.town] += r.employees_total

        major = sorted(
            (t for t, n in town_totals.items()
             if n >= self.minor_town_employee_floor and t != OTHER),
            key=lambda t: (-town_totals[t], t),
        )
        has_minor = any(
            n < self.minor_town_employee_floor or t == OTHER for t, n in town_totals.items()
        )
        return FilterOptions(industries=industries, towns=major + ([OTHER] if has_minor else []))

    def enterprise_snapshot(
        self,
        rows: Sequence[ReportRow],
        filters: Optional[ReportFilters] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> EnterprisePage:
        """Latest figures per company, largest employers first."""
        filters = filters or ReportFilters()
        rows = self._filter_rows(rows, filters)
        snapshot = self._company_snapshot(rows, filters.month)
        cumulative = self._cumulative_by_company(rows, snapshot)

        peak: Dict[int, int] = defaultdict(int)
        latest_month = {r.company_id: r.report_month for r in snapshot}
        for r in rows:
            if r.company_id in latest_month and r.report_month <= latest_month[r.company_id]:
                peak[r.company_id] = max(peak[r.company_id], r.shortage_total)

        items = [
            EnterpriseSnapshot(
                company_id=r.company_id,
                name=r.company_name,
                industry=r.industry,
                town=r.town,
                report_month=r.report_month,
                employees=r.employees_total,
                shortage=r.shortage_total,
                recruited=r.recruited_new,
                resigned=r.resigned_total,
                cumulative_recruited=cumulative[r.company_id][0],
                cumulative_resigned=cumulative[r.company_id][1],
                peak_shortage=peak[r.company_id],
                turnover_rate=turnover_rate(cumulative[r.company_id][1], r.employees_total),
            )
            for r in sorted(snapshot, key=lambda r: (-r.employees_total, r.company_id))
        ]
        page = max(page, 1)
        start = (page - 1) * page_size
        return EnterprisePage(
            items=items[start:start + page_size],
            total=len(items),
            page=page,
            page_size=page_size,
        )

    # ── helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _filter_rows(rows: Iterable[ReportRow], filters: ReportFilters) -> List[ReportRow]:
        out = [
            r for r in rows
            if is_filed(r.status)
            and (not filters.industry or r.industry == filters.industry)
            and (not filters.town or r.town == filters.town)
            and (not filters.company_name or filters.company_name in (r.company_name or ""))
        ]
        out.sort(key=lambda r: (r.report_month, r.company_id))
        return out

    @staticmethod
    def _filter_companies(
        companies: Iterable[CompanyRef], filters: ReportFilters
    ) -> List[CompanyRef]:
        return [
            c for c in companies
            if (not filters.industry or c.industry == filters.industry)
            and (not filters.town or c.town == filters.town)
            and (not filters.company_name or filters.company_name in (c.name or ""))
        ]

    @staticmethod
    def _year_to_date(rows: Sequence[ReportRow], ref_month: Optional[str]) -> List[ReportRow]:
        if ref_month is None:
            return []
        year = year_of(ref_month)
        return [r for r in rows if year_of(r.report_month) == year and r.report_month <= ref_month]

    @staticmethod
    def _company_snapshot(rows: Sequence[ReportRow], month: Optional[str]) -> List[ReportRow]:
        """One row per company: the given month's, or the company's latest."""
        if month is not None:
            return [r for r in rows if r.report_month == month]
        latest: Dict[int, ReportRow] = {}
        for r in rows:
            cur = latest.get(r.company_id)
            if cur is None or r.report_month > cur.report_month:
                latest[r.company_id] = r
        return list(latest.values())

    @staticmethod
    def _cumulative_by_company(
        rows: Sequence[ReportRow], snapshot: Sequence[ReportRow]
    ) -> Dict[int, tuple]:
        """(recruited, resigned) per company over its snapshot year to date."""
        anchor = {r.company_id: r.report_month for r in snapshot}
        sums: Dict[int, List[int]] = {cid: [0, 0] for cid in anchor}
        for r in rows:
            end = anchor.get(r.company_id)
            if end is None:
                continue
            if year_of(r.report_month) == year_of(end) and r.report_month <= end:
                sums[r.company_id][0] += r.recruited_new
                sums[r.company_id][1] += r.resigned_total
        return {cid: (s[0], s[1]) for cid, s in sums.items()}
