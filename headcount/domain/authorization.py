"""Authorization capability checked once at each operation entry point.

An upstream collaborator authenticates the caller; this module only
models *what* the caller may do:

    Principal = Enterprise(user_id, company_id)
              | Reviewer(user_id, scope)
    scope     = AllCompanies | AssignedCompanies(company_ids)

Usage:
    from headcount.domain.authorization import Reviewer, AllCompanies, require_reviewer

    principal = Reviewer(user_id=1, scope=AllCompanies())
    require_reviewer(principal, company_id=42)   # passes
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Union

from headcount.errors import AuthorizationError


@dataclass(frozen=True)
class AllCompanies:
    """Super-admin scope: every company."""

    def covers(self, company_id: int) -> bool:
        return True


@dataclass(frozen=True)
class AssignedCompanies:
    """Town-level reviewer scope: an explicit set of companies."""

    company_ids: FrozenSet[int] = field(default_factory=frozenset)

    def covers(self, company_id: int) -> bool:
        return company_id in self.company_ids


ReviewerScope = Union[AllCompanies, AssignedCompanies]


@dataclass(frozen=True)
class Enterprise:
    user_id: Optional[int]
    company_id: int


@dataclass(frozen=True)
class Reviewer:
    user_id: int
    scope: ReviewerScope

    @property
    def is_super_admin(self) -> bool:
        return isinstance(self.scope, AllCompanies)


Principal = Union[Enterprise, Reviewer]


def actor_id(principal: Principal) -> Optional[int]:
    return principal.user_id


def require_enterprise(principal: Optional[Principal], company_id: int) -> Enterprise:
    """The caller must be the enterprise account bound to *company_id*."""
    if not isinstance(principal, Enterprise):
        raise AuthorizationError(
            "Only enterprise accounts may submit reports",
            details={"required_role": "ENTERPRISE"},
        )
    if principal.company_id != company_id:
        raise AuthorizationError(
            "Enterprise account is not bound to this company",
            key={"company_id": company_id},
        )
    return principal


def require_reviewer(principal: Optional[Principal], company_id: Optional[int] = None) -> Reviewer:
    """The caller must be a reviewer whose scope covers *company_id* (if given)."""
    if not isinstance(principal, Reviewer):
        raise AuthorizationError(
            "Reviewer privilege required",
            details={"required_role": "REVIEWER"},
        )
    if company_id is not None and not principal.scope.covers(company_id):
        raise AuthorizationError(
            "Company is outside the reviewer's scope",
            key={"company_id": company_id},
        )
    return principal


def require_super_admin(principal: Optional[Principal]) -> Reviewer:
    reviewer = require_reviewer(principal)
    if not reviewer.is_super_admin:
        raise AuthorizationError(
            "Super-admin privilege required",
            details={"required_role": "SUPER_ADMIN"},
        )
    return reviewer


def require_access(principal: Optional[Principal], company_id: int) -> Principal:
    """Read access: the bound enterprise, or a reviewer covering the company."""
    if isinstance(principal, Enterprise):
        return require_enterprise(principal, company_id)
    return require_reviewer(principal, company_id)
