"""Company ORM model."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from headcount.database import Base


class CompanyModel(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, index=True)
    town = Column(String, nullable=False, index=True)
    industry = Column(String, nullable=False, index=True)

    contact_person = Column(String)
    # Doubles as the enterprise login name, hence unique
    contact_phone = Column(String, unique=True)

    manager_id = Column(Integer, index=True)  # assigned TOWN_ADMIN reviewer
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    reports = relationship("MonthlyReportModel", back_populates="company")

    def __repr__(self) -> str:
        return f"<Company id={self.id} {self.name} ({self.town}/{self.industry})>"
