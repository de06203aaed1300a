"""Monthly report ORM model: one row per (company, report month)."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from headcount.database import Base


class MonthlyReportModel(Base):
    __tablename__ = "monthly_reports"
    __table_args__ = (
        UniqueConstraint("company_id", "report_month", name="uq_report_company_month"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    report_month = Column(String(10), nullable=False, index=True)  # "YYYY-MM-01"

    status = Column(String, nullable=False, default="SUBMITTED")  # ReportStatus value
    reject_reason = Column(Text)

    # ── Headcount ────────────────────────────────────────────────────
    employees_total = Column(Integer, nullable=False, default=0)
    recruited_new = Column(Integer, nullable=False, default=0)
    resigned_total = Column(Integer, nullable=False, default=0)

    # ── Shortage (total is always the sum of the three parts) ───────
    shortage_general = Column(Integer, nullable=False, default=0)
    shortage_tech = Column(Integer, nullable=False, default=0)
    shortage_management = Column(Integer, nullable=False, default=0)
    shortage_total = Column(Integer, nullable=False, default=0)

    planned_recruitment = Column(Integer, nullable=False, default=0)

    # ── Salary (informational) ───────────────────────────────────────
    salary_general = Column(Float)
    salary_tech = Column(Float)
    salary_management = Column(Float)

    # Set when a reviewer overrides the figures on approval
    corrected = Column(Boolean, nullable=False, default=False)
    notes = Column(Text)

    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    company = relationship("CompanyModel", back_populates="reports")

    def __repr__(self) -> str:
        return (
            f"<MonthlyReport company_id={self.company_id} {self.report_month} "
            f"{self.status} employees={self.employees_total}>"
        )
