"""Statistics endpoints: dashboard aggregates over the report population.

All endpoints accept the same optional filters (industry, town,
company_name, month); "全部" or a blank value means no filter. They
never fail for "no data" and return zeroed or empty structures instead.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from headcount.database import get_db
from headcount.dependencies import get_principal, get_statistics_service
from headcount.domain.authorization import Principal
from headcount.errors import HeadcountError
from headcount.logging_config import get_logger
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

logger = get_logger(__name__)
router = APIRouter()


def get_filters(
    industry: Optional[str] = None,
    town: Optional[str] = None,
    company_name: Optional[str] = None,
    month: Optional[str] = None,
) -> ReportFilters:
    return ReportFilters(industry=industry, town=town, company_name=company_name, month=month)


def _run(event: str, fn, *args, **kwargs):
    """Call a service method with the router's logging and 500 mapping."""
    try:
        result = fn(*args, **kwargs)
        logger.info(f"{event}_completed")
        return result
    except (HTTPException, HeadcountError):
        raise
    except Exception as e:
        logger.error(f"{event}_failed", error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to compute statistics: {str(e)}")


@router.get("/summary", response_model=Summary)
def summary(
    filters: ReportFilters = Depends(get_filters),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> Summary:
    """Headline figures at the reference month, plus year-to-date flows.

    ``is_fallback`` is set when the latest month had too few filings and
    an earlier month was used; ``skipped_month`` names the one passed over.
    """
    logger.info("statistics_summary_requested", **filters.model_dump(exclude_none=True))
    return _run("statistics_summary", get_statistics_service(db).summary, principal, filters)


@router.get("/industries", response_model=List[IndustryStat])
def industries(
    filters: ReportFilters = Depends(get_filters),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> List[IndustryStat]:
    return _run("statistics_industries", get_statistics_service(db).by_industry, principal, filters)


@router.get("/towns", response_model=List[TownStat])
def towns(
    filters: ReportFilters = Depends(get_filters),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> List[TownStat]:
    return _run("statistics_towns", get_statistics_service(db).by_town, principal, filters)


@router.get("/trend", response_model=List[TrendPoint])
def trend(
    filters: ReportFilters = Depends(get_filters),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> List[TrendPoint]:
    """Continuous monthly series; gap months carry ``report_count == 0``."""
    return _run("statistics_trend", get_statistics_service(db).trend, principal, filters)


@router.get("/top", response_model=List[CompanyRanking])
def top(
    metric: RankingMetric = RankingMetric.SHORTAGE,
    n: int = Query(10, ge=1, le=100),
    filters: ReportFilters = Depends(get_filters),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> List[CompanyRanking]:
    logger.info("statistics_top_requested", metric=metric.value, n=n)
    return _run("statistics_top", get_statistics_service(db).top_n, principal, metric, n, filters)


@router.get("/year-over-year", response_model=List[YearMetrics])
def year_over_year(
    filters: ReportFilters = Depends(get_filters),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> List[YearMetrics]:
    return _run("statistics_yoy", get_statistics_service(db).year_over_year, principal, filters)


@router.get("/quarterly", response_model=List[QuarterPoint])
def quarterly(
    filters: ReportFilters = Depends(get_filters),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> List[QuarterPoint]:
    return _run("statistics_quarterly", get_statistics_service(db).quarterly, principal, filters)


@router.get("/seasonal", response_model=List[SeasonalPoint])
def seasonal(
    filters: ReportFilters = Depends(get_filters),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> List[SeasonalPoint]:
    return _run("statistics_seasonal", get_statistics_service(db).seasonal, principal, filters)


@router.get("/skill-gap", response_model=List[SkillGap])
def skill_gap(
    filters: ReportFilters = Depends(get_filters),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> List[SkillGap]:
    return _run("statistics_skill_gap", get_statistics_service(db).skill_gap, principal, filters)


@router.get("/target-enterprises", response_model=List[TargetEnterprise])
def target_enterprises(
    limit: int = Query(10, ge=1, le=100),
    filters: ReportFilters = Depends(get_filters),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> List[TargetEnterprise]:
    """Companies to approach first for technical training placements."""
    return _run(
        "statistics_target_enterprises",
        get_statistics_service(db).target_enterprises,
        principal,
        filters,
        limit=limit,
    )


@router.get("/filter-options", response_model=FilterOptions)
def filter_options(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> FilterOptions:
    return _run("statistics_filter_options", get_statistics_service(db).filter_options, principal)


@router.get("/enterprises", response_model=EnterprisePage)
def enterprises(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    filters: ReportFilters = Depends(get_filters),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> EnterprisePage:
    """Latest figures per company, largest employers first."""
    return _run(
        "statistics_enterprises",
        get_statistics_service(db).enterprises,
        principal,
        filters,
        page=page,
        page_size=page_size,
    )
