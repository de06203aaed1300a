"""Generic base repository with reusable CRUD operations."""

from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from headcount.database import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Thin data-access layer over SQLAlchemy.

    Subclasses add domain-specific queries.
    Repositories only modify the session (add/flush) - the caller
    controls when to commit or rollback, enabling multi-step transactions.
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model

    # ── reads ────────────────────────────────────────────────────────

    def get(self, id: int) -> Optional[T]:
        return self.db.query(self.model).filter(self.model.id == id).first()

    def get_all(self, *, skip: int = 0, limit: Optional[int] = None) -> List[T]:
        query = self.db.query(self.model).order_by(self.model.id).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count(self) -> int:
        return self.db.query(self.model).count()

    # ── writes ───────────────────────────────────────────────────────

    def create(self, obj: T) -> T:
        """Add object to session (caller must commit)."""
        self.db.add(obj)
        self.db.flush()  # Assigns ID without committing
        return obj

    def update(self, obj: T) -> T:
        """Flush pending changes on an attached object (caller must commit)."""
        self.db.flush()
        return obj
