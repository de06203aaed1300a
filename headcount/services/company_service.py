"""Enterprise administration: create, update and look up companies."""

import logging
from typing import Any, Dict, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from headcount.domain.authorization import (
    Principal,
    actor_id,
    require_access,
    require_reviewer,
    require_super_admin,
)
from headcount.domain.catalog import normalize_industry
from headcount.errors import ConflictError, NotFoundError, ValidationError
from headcount.models.company import CompanyModel
from headcount.repositories.company_repo import CompanyRepository
from headcount.schemas.audit import AuditAction
from headcount.schemas.company import Company, CompanyCreate, CompanyPage, CompanyUpdate
from headcount.services.audit_service import AuditRecorder

logger = logging.getLogger(__name__)


class CompanyService:
    def __init__(
        self,
        db: Session,
        company_repo: CompanyRepository,
        audit: AuditRecorder,
        towns: Sequence[str],
        industries: Sequence[str],
    ):
        self.db = db
        self.companies = company_repo
        self.audit = audit
        self.towns = list(towns)
        self.industries = list(industries)

    # ── reads ────────────────────────────────────────────────────────

    def get(self, principal: Principal, company_id: int) -> Company:
        require_access(principal, company_id)
        return Company.model_validate(self._get_or_404(company_id))

    def list(
        self, principal: Principal, *, page: int = 1, page_size: int = 15, search: str = ""
    ) -> CompanyPage:
        require_reviewer(principal)
        page = max(page, 1)
        items, total = self.companies.search(
            search=search.strip(), skip=(page - 1) * page_size, limit=page_size
        )
        return CompanyPage(
            items=[Company.model_validate(c) for c in items],
            total=total,
            page=page,
            page_size=page_size,
        )

    # ── writes ───────────────────────────────────────────────────────

    def create(self, principal: Principal, data: CompanyCreate) -> Company:
        admin = require_super_admin(principal)
        values = data.model_dump()
        values["town"] = self._check_town(values["town"])
        values["industry"] = self._check_industry(values["industry"])
        self._check_phone_free(values.get("contact_phone"))

        company = self._commit_company(CompanyModel(**values), values.get("contact_phone"))
        logger.info("Company created: %d %s", company.id, company.name)
        self.audit.record(
            actor_id(admin),
            AuditAction.CREATE_ENTERPRISE,
            target_company_id=company.id,
            details={"name": company.name, "phone": company.contact_phone},
        )
        return Company.model_validate(company)

    def update(self, principal: Principal, company_id: int, data: CompanyUpdate) -> Company:
        """Apply a partial update; the audit entry records old and new values."""
        admin = require_super_admin(principal)
        company = self._get_or_404(company_id)

        updates = data.model_dump(exclude_unset=True)
        if "name" in updates and not (updates["name"] or "").strip():
            raise ValidationError("Company name must not be blank", field="name")
        if "town" in updates:
            updates["town"] = self._check_town(updates["town"])
        if "industry" in updates:
            updates["industry"] = self._check_industry(updates["industry"])
        if updates.get("contact_phone"):
            self._check_phone_free(updates["contact_phone"], exclude_id=company_id)

        changed: Dict[str, Dict[str, Any]] = {}
        for field, value in updates.items():
            old = getattr(company, field)
            if old != value:
                changed[field] = {"old": old, "new": value}
                setattr(company, field, value)

        if not changed:
            return Company.model_validate(company)

        company = self._commit_company(company, updates.get("contact_phone"))
        logger.info("Company updated: %d (%s)", company_id, ", ".join(sorted(changed)))
        self.audit.record(
            actor_id(admin),
            AuditAction.UPDATE_ENTERPRISE,
            target_company_id=company_id,
            details={"name": company.name, "changes": changed},
        )
        return Company.model_validate(company)

    # ── helpers ──────────────────────────────────────────────────────

    def _get_or_404(self, company_id: int) -> CompanyModel:
        company = self.companies.get(company_id)
        if company is None:
            raise NotFoundError(f"Company {company_id} not found", key={"company_id": company_id})
        return company

    def _check_town(self, town: Optional[str]) -> str:
        town = (town or "").strip()
        if town not in self.towns:
            raise ValidationError(
                f"Unknown town: {town!r}", field="town", details={"allowed": self.towns}
            )
        return town

    def _check_industry(self, industry: Optional[str]) -> str:
        if not (industry or "").strip():
            raise ValidationError("Industry is required", field="industry")
        industry = normalize_industry(industry)
        if industry not in self.industries:
            raise ValidationError(
                f"Unknown industry: {industry!r}",
                field="industry",
                details={"allowed": self.industries},
            )
        return industry

    def _check_phone_free(self, phone: Optional[str], exclude_id: Optional[int] = None) -> None:
        if not phone:
            return
        holder = self.companies.get_by_phone(phone)
        if holder is not None and holder.id != exclude_id:
            raise ConflictError(
                f"Contact phone {phone} is already registered",
                field="contact_phone",
                details={"company_id": holder.id},
            )

    def _commit_company(self, company: CompanyModel, phone: Optional[str]) -> CompanyModel:
        try:
            if company.id is None:
                self.companies.create(company)
            else:
                self.companies.update(company)
            self.db.commit()
        except IntegrityError as exc:
            # Lost a race on the unique phone
            self.db.rollback()
            raise ConflictError(
                f"Contact phone {phone} is already registered",
                field="contact_phone",
            ) from exc
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(company)
        return company
