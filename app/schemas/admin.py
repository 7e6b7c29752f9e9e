"""
Field Reports API — Admin view schemas
"""
from datetime import datetime

from pydantic import Field

from app.schemas.base import CamelModel, UserSummary


class UserStats(CamelModel):
    id: str
    name: str
    email: str
    is_admin: bool
    report_count: int
    last_active: datetime | None = None


class AdminCodeResponse(CamelModel):
    id: str
    code: str
    created_by: UserSummary | None = Field(
        None, validation_alias="creator", serialization_alias="createdBy"
    )
    used: bool
    expires_at: datetime
    created_at: datetime
