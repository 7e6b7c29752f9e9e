"""
Field Reports API — Report schemas
"""
from datetime import datetime

from app.schemas.base import CamelModel, UserSummary


class ReportResponse(CamelModel):
    id: str
    user: UserSummary | None = None
    school: str | None = None
    address: str | None = None
    students_reached: int | None = None
    teachers_reached: int | None = None
    milk_used: int | None = None
    bread_used: int | None = None
    images: list[str] = []
    videos: list[str] = []
    date: datetime
