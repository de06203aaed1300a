"""Company schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class PhoneValidator:
    """Common validator for contact phone numbers (also the login name)."""

    @staticmethod
    def validate_phone(v: Optional[str]) -> Optional[str]:
        """Strip whitespace and require at least 11 digits.

        Raises:
            ValueError: If the phone is too short or contains non-digits.
        """
        if v is None:
            return None
        v = v.strip().replace(" ", "").replace("-", "")
        if not v:
            return None
        if not v.isdigit():
            raise ValueError(f"Phone must contain only digits: {v}")
        if len(v) < 11:
            raise ValueError(f"Phone too short: {v} (min 11 digits)")
        return v


class CompanyBase(BaseModel):
    name: str = Field(..., min_length=1)
    town: str
    industry: str
    contact_person: Optional[str] = None
    contact_phone: Optional[str] = None
    manager_id: Optional[int] = None

    @field_validator("contact_phone")
    @classmethod
    def validate_contact_phone(cls, v: Optional[str]) -> Optional[str]:
        return PhoneValidator.validate_phone(v)


class CompanyCreate(CompanyBase):
    pass


class CompanyUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    name: Optional[str] = None
    town: Optional[str] = None
    industry: Optional[str] = None
    contact_person: Optional[str] = None
    contact_phone: Optional[str] = None
    manager_id: Optional[int] = None
    is_active: Optional[bool] = None

    @field_validator("contact_phone")
    @classmethod
    def validate_contact_phone(cls, v: Optional[str]) -> Optional[str]:
        return PhoneValidator.validate_phone(v)


class Company(CompanyBase):
    id: int
    is_active: bool = True
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CompanyPage(BaseModel):
    items: list[Company]
    total: int
    page: int
    page_size: int
