"""Review board endpoint: status of every company in the reviewer's scope."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from headcount.database import get_db
from headcount.dependencies import get_principal, get_review_service
from headcount.domain.authorization import Principal
from headcount.errors import HeadcountError
from headcount.logging_config import get_logger
from headcount.schemas.review import ReviewBoard

logger = get_logger(__name__)
router = APIRouter()


@router.get("/{report_month}", response_model=ReviewBoard)
def review_board(
    report_month: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> ReviewBoard:
    """List reports for a month with status, previous headcount and anomaly badge.

    Warnings are computed on read; only those on still-SUBMITTED reports
    are marked ``surfaced`` and counted in the metrics.
    """
    logger.info("review_board_requested", report_month=report_month)

    try:
        board = get_review_service(db).board(principal, report_month)
        logger.info(
            "review_board_completed",
            report_month=board.report_month,
            companies=board.metrics.total,
            warnings=board.metrics.warnings,
        )
        return board

    except (HTTPException, HeadcountError):
        raise
    except Exception as e:
        logger.error("review_board_failed", report_month=report_month, error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to build review board: {str(e)}")
