"""
Field Reports API — Report Model

A report is written once at submission and never updated.
"""
import uuid
from datetime import datetime
from sqlalchemy import String, Integer, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.database import Base
from app.models.user import User, utcnow


class Report(Base):
    __tablename__ = "reports"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), index=True, nullable=False
    )
    school: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    students_reached: Mapped[int | None] = mapped_column(Integer, nullable=True)
    teachers_reached: Mapped[int | None] = mapped_column(Integer, nullable=True)
    milk_used: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bread_used: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # Public relative paths, e.g. "uploads/images/1700000000000-1a2b3c4d.jpg"
    images: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    videos: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True, nullable=False
    )

    user: Mapped[User] = relationship(lazy="raise")

    def __repr__(self) -> str:
        return f"<Report id={self.id} school={self.school}>"
