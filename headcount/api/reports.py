"""Report endpoints: enterprise submission and reviewer decisions.

Provides API endpoints for:
- Filing the current month's report (enterprise accounts)
- Reading a report's state and a company's history
- Approving (optionally with corrections) and rejecting reports

Domain errors propagate to the application's exception handlers, which
map them to 4xx responses; anything unexpected becomes a 500.
"""

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from headcount.database import get_db
from headcount.dependencies import get_principal, get_report_service
from headcount.domain.authorization import Principal
from headcount.domain.months import current_month
from headcount.errors import HeadcountError
from headcount.logging_config import get_logger
from headcount.schemas.report import (
    MonthlyReport,
    RejectRequest,
    ReportCorrection,
    ReportState,
    ReportSubmission,
)

logger = get_logger(__name__)
router = APIRouter()


@router.post("/{report_month}", response_model=MonthlyReport)
def submit_report(
    report_month: str,
    payload: ReportSubmission,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> MonthlyReport:
    """File the caller's own company report for the current month.

    Args:
        report_month: Month key, ``YYYY-MM-01``.
        payload: Hires, separations, shortage and planned recruitment.

    Raises:
        HTTPException: If persistence fails unexpectedly.
    """
    company_id = getattr(principal, "company_id", 0)
    logger.info("report_submit_requested", company_id=company_id, report_month=report_month)

    try:
        report = get_report_service(db).submit(
            principal, company_id, report_month, payload, current_month=current_month()
        )
        logger.info(
            "report_submitted",
            company_id=company_id,
            report_month=report.report_month,
            employees_total=report.employees_total,
        )
        return report

    except (HTTPException, HeadcountError):
        raise
    except Exception as e:
        logger.error("report_submit_failed", company_id=company_id, error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to submit report: {str(e)}")


@router.get("/{company_id}/{report_month}", response_model=ReportState)
def get_report_state(
    company_id: int,
    report_month: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> ReportState:
    """Status of one report; ``NOT_FILED`` when the company has not filed yet."""
    return get_report_service(db).get_state(principal, company_id, report_month)


@router.get("/{company_id}", response_model=List[MonthlyReport])
def get_report_history(
    company_id: int,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> List[MonthlyReport]:
    """All of a company's reports, oldest first."""
    return get_report_service(db).history(principal, company_id)


@router.post("/{company_id}/{report_month}/approve", response_model=MonthlyReport)
def approve_report(
    company_id: int,
    report_month: str,
    correction: Optional[ReportCorrection] = Body(None),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> MonthlyReport:
    """Approve a report, applying any reviewer corrections in the body."""
    logger.info("report_approve_requested", company_id=company_id, report_month=report_month)

    try:
        report = get_report_service(db).approve(principal, company_id, report_month, correction)
        logger.info(
            "report_approved",
            company_id=company_id,
            report_month=report.report_month,
            corrected=report.corrected,
        )
        return report

    except (HTTPException, HeadcountError):
        raise
    except Exception as e:
        logger.error("report_approve_failed", company_id=company_id, error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to approve report: {str(e)}")


@router.post("/{company_id}/{report_month}/reject", response_model=MonthlyReport)
def reject_report(
    company_id: int,
    report_month: str,
    request: RejectRequest,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> MonthlyReport:
    """Send a report back to the enterprise with a reason."""
    logger.info("report_reject_requested", company_id=company_id, report_month=report_month)

    try:
        report = get_report_service(db).reject(principal, company_id, report_month, request.reason)
        logger.info("report_rejected", company_id=company_id, report_month=report.report_month)
        return report

    except (HTTPException, HeadcountError):
        raise
    except Exception as e:
        logger.error("report_reject_failed", company_id=company_id, error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to reject report: {str(e)}")
