"""Error taxonomy shared by services and the HTTP boundary.

Every error carries a machine-readable ``code`` plus the offending
``field`` and/or ``key`` so callers can render a precise message without
parsing strings.
"""

from typing import Any, Dict, Optional


class HeadcountError(Exception):
    """Base class for all domain errors."""

    code: str = "headcount_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        key: Optional[Dict[str, Any]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.field = field
        self.key = key or {}
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "field": self.field,
            "key": self.key,
            "details": self.details,
        }


class ValidationError(HeadcountError):
    """Negative numbers, missing rejection reason, malformed month key."""

    code = "validation_error"


class AuthorizationError(HeadcountError):
    """Principal lacks the required role or company scope."""

    code = "authorization_error"


class ConflictError(HeadcountError):
    """The requested transition is not legal from the stored state."""

    code = "conflict_error"


class NotFoundError(HeadcountError):
    """A company or report that must exist does not."""

    code = "not_found"
