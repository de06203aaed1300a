"""Audit log schemas."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class AuditAction(str, Enum):
    CREATE_ENTERPRISE = "CREATE_ENTERPRISE"
    UPDATE_ENTERPRISE = "UPDATE_ENTERPRISE"
    CREATE_MANAGER = "CREATE_MANAGER"
    RESET_PASSWORD = "RESET_PASSWORD"
    CHANGE_OWN_PASSWORD = "CHANGE_OWN_PASSWORD"
    EDIT_REPORT_DATA = "EDIT_REPORT_DATA"  # approval, with or without corrections
    REJECT_REPORT = "REJECT_REPORT"


class AuditLogEntry(BaseModel):
    id: int
    admin_id: Optional[int] = None
    action: AuditAction
    target_company_id: Optional[int] = None
    target_user_id: Optional[int] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
