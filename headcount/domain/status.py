"""Monthly report status and the transitions between them.

The absence of a row is modelled explicitly as ``NOT_FILED`` so that the
state machine is exhaustive:

    NOT_FILED --submit--> SUBMITTED --approve--> APPROVED
                              |                     ^
                            reject               approve (correction)
                              v                     |
                          REJECTED --submit--> SUBMITTED

Usage:
    from headcount.domain.status import ReportStatus, can_submit_over

    can_submit_over(ReportStatus.REJECTED)  # -> True
"""

from enum import Enum
from typing import FrozenSet


class ReportStatus(str, Enum):
    NOT_FILED = "NOT_FILED"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @classmethod
    def from_stored(cls, value) -> "ReportStatus":
        """Rows imported without a status were filed through the portal."""
        if not value:
            return cls.SUBMITTED
        return cls(value)


# Statuses that count as "filed" for completion-rate purposes and whose
# figures feed the aggregation engine (approved is final, submitted is
# provisional).
FILED: FrozenSet[ReportStatus] = frozenset({ReportStatus.SUBMITTED, ReportStatus.APPROVED})

_SUBMITTABLE_OVER: FrozenSet[ReportStatus] = frozenset({ReportStatus.NOT_FILED, ReportStatus.REJECTED})
_APPROVABLE_FROM: FrozenSet[ReportStatus] = frozenset({ReportStatus.SUBMITTED, ReportStatus.APPROVED})
_REJECTABLE_FROM: FrozenSet[ReportStatus] = frozenset({ReportStatus.SUBMITTED, ReportStatus.REJECTED})


def can_submit_over(status: ReportStatus) -> bool:
    return status in _SUBMITTABLE_OVER


def can_approve(status: ReportStatus) -> bool:
    return status in _APPROVABLE_FROM


def can_reject(status: ReportStatus) -> bool:
    return status in _REJECTABLE_FROM


def is_filed(status: ReportStatus) -> bool:
    return status in FILED
