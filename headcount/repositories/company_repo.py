"""Company repository."""

from typing import List, Optional, Set, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from headcount.models.company import CompanyModel
from headcount.repositories.base import BaseRepository


class CompanyRepository(BaseRepository[CompanyModel]):
    def __init__(self, db: Session):
        super().__init__(db, CompanyModel)

    def get_by_phone(self, phone: str) -> Optional[CompanyModel]:
        return (
            self.db.query(self.model)
            .filter(self.model.contact_phone == phone)
            .first()
        )

    def search(
        self, *, search: str = "", skip: int = 0, limit: int = 15
    ) -> Tuple[List[CompanyModel], int]:
        """Page of companies matching *search* on name or phone, newest first."""
        query = self.db.query(self.model)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(self.model.name.like(pattern), self.model.contact_phone.like(pattern))
            )
        total = query.count()
        items = (
            query.order_by(self.model.created_at.desc(), self.model.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return items, total

    def filtered(
        self,
        *,
        industry: Optional[str] = None,
        town: Optional[str] = None,
        name_contains: Optional[str] = None,
        ids: Optional[Set[int]] = None,
    ) -> List[CompanyModel]:
        query = self.db.query(self.model)
        if industry:
            query = query.filter(self.model.industry == industry)
        if town:
            query = query.filter(self.model.town == town)
        if name_contains:
            query = query.filter(self.model.name.contains(name_contains))
        if ids is not None:
            if not ids:
                return []
            query = query.filter(self.model.id.in_(ids))
        return query.order_by(self.model.id).all()

    def ids_for_reviewer(self, manager_id: int, town: Optional[str] = None) -> Set[int]:
        """Companies assigned to *manager_id*, plus every company in *town*."""
        condition = self.model.manager_id == manager_id
        if town:
            condition = or_(condition, self.model.town == town)
        rows = self.db.query(self.model.id).filter(condition).all()
        return {r[0] for r in rows}
