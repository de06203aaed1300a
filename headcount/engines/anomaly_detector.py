"""Month-over-month headcount volatility check.

Stateless and read-only: it is evaluated on demand whenever reviewers
list reports and is never persisted with the report.
"""

import logging
from typing import Any, Optional

from headcount.domain.months import previous_month
from headcount.domain.status import ReportStatus
from headcount.schemas.review import AnomalyWarning

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.30


class AnomalyDetector:
    """Flag a report whose headcount moved >= threshold against last month."""

    def __init__(self, threshold: float = DEFAULT_THRESHOLD):
        self.threshold = threshold

    def detect_warning(self, current: Any, previous: Optional[Any]) -> AnomalyWarning:
        """Compare *current* with the immediately preceding month's report.

        Both arguments only need ``report_month`` and ``employees_total``
        attributes. No warning is raised when the previous month is
        missing, is not the calendar month right before *current*, or
        recorded zero employees.
        """
        if current is None or previous is None:
            return AnomalyWarning()

        cur = current.employees_total
        prev = previous.employees_total
        if cur is None or prev is None:
            return AnomalyWarning()
        if previous.report_month != previous_month(current.report_month):
            return AnomalyWarning(previous_employees=prev, current_employees=cur)
        if prev <= 0:
            return AnomalyWarning(previous_employees=prev, current_employees=cur)

        change = abs(cur - prev) / prev
        if change < self.threshold:
            return AnomalyWarning(
                change_percent=change, previous_employees=prev, current_employees=cur
            )

        direction = "rose" if cur > prev else "fell"
        detail = (
            f"Headcount {direction} {round(change * 100)}% month over month "
            f"(previous {prev}, current {cur})"
        )
        logger.debug("Anomaly for %s: %s", current.report_month, detail)
        return AnomalyWarning(
            flagged=True,
            detail=detail,
            change_percent=change,
            previous_employees=prev,
            current_employees=cur,
        )

    @staticmethod
    def is_surfaced(warning: AnomalyWarning, status: ReportStatus) -> bool:
        """Reviewers only see warnings on reports still awaiting review."""
        return warning.flagged and status == ReportStatus.SUBMITTED
