"""
Field Reports API — Admin routes
All routes require a valid JWT and a live admin record.
"""
from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.api.reports import reports_query
from app.db.admin_code_ops import issue_code, list_valid_codes
from app.db.database import get_db
from app.models.report import Report
from app.models.user import User
from app.schemas.admin import AdminCodeResponse, UserStats
from app.schemas.auth import AdminCodeIssued
from app.schemas.report import ReportResponse

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/reports", response_model=list[ReportResponse])
async def all_reports(_admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    result = await db.execute(reports_query())
    return result.scalars().all()


@router.get("/users", response_model=list[UserStats])
async def all_users(_admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    """Every user with their report count and latest report date."""
    result = await db.execute(
        select(
            User.id,
            User.name,
            User.email,
            User.is_admin,
            func.count(Report.id).label("report_count"),
            func.max(Report.date).label("last_active"),
        )
        .outerjoin(Report, Report.user_id == User.id)
        .group_by(User.id, User.name, User.email, User.is_admin)
        .order_by(User.name)
    )
    return [UserStats.model_validate(dict(row._mapping)) for row in result]


@router.post("/generate-code", response_model=AdminCodeIssued)
async def generate_code(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    admin_code = await issue_code(db, created_by=admin.id)
    return AdminCodeIssued(
        code=admin_code.code,
        expires_at=admin_code.expires_at,
        message="Admin registration code generated successfully",
    )


@router.get("/codes", response_model=list[AdminCodeResponse])
async def active_codes(_admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    """Unused, unexpired codes with their creator."""
    return await list_valid_codes(db)
