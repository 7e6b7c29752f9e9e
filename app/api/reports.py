"""
Field Reports API — Report routes

Flow for submissions:
  1. JWT validated by middleware (request.state.user set)
  2. Attachments checked by MIME type and written under UPLOAD_DIR
  3. Report row committed with the caller as owner
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import get_current_user, require_admin
from app.core.config import get_settings
from app.core.export import (
    PDF_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    build_report_pdf,
    build_reports_xlsx,
    pdf_filename,
)
from app.core.uploads import AttachmentWriter
from app.db.database import get_db
from app.models.report import Report
from app.models.user import User
from app.schemas.report import ReportResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/reports", tags=["reports"])


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def reports_query(
    user_id: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
):
    """Reports with owners loaded, newest first. Date bounds are inclusive."""
    query = select(Report).options(selectinload(Report.user)).order_by(Report.date.desc())
    if user_id is not None:
        query = query.where(Report.user_id == user_id)
    if start_date is not None:
        query = query.where(Report.date >= _as_utc(start_date))
    if end_date is not None:
        query = query.where(Report.date <= _as_utc(end_date))
    return query


async def get_report_or_404(db: AsyncSession, report_id: str) -> Report:
    result = await db.execute(
        select(Report)
        .where(Report.id == report_id)
        .options(selectinload(Report.user))
        .execution_options(populate_existing=True)
    )
    report = result.scalar_one_or_none()
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    return report


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    school: str | None = Form(None),
    address: str | None = Form(None),
    students_reached: int | None = Form(None, alias="studentsReached"),
    teachers_reached: int | None = Form(None, alias="teachersReached"),
    milk_used: int | None = Form(None, alias="milkUsed"),
    bread_used: int | None = Form(None, alias="breadUsed"),
    images: list[UploadFile] | None = File(None),
    videos: list[UploadFile] | None = File(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Submit a report with optional image and video attachments."""
    settings = get_settings()
    images = images or []
    videos = videos or []

    if len(images) > settings.MAX_IMAGES or len(videos) > settings.MAX_VIDEOS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Too many files: at most {settings.MAX_IMAGES} images and {settings.MAX_VIDEOS} videos.",
        )

    writer = AttachmentWriter(settings.UPLOAD_DIR, settings.MAX_UPLOAD_BYTES)
    writer.check_types(images + videos)
    try:
        report = Report(
            user_id=user.id,
            school=school,
            address=address,
            students_reached=students_reached,
            teachers_reached=teachers_reached,
            milk_used=milk_used,
            bread_used=bread_used,
            images=await writer.save_all(images),
            videos=await writer.save_all(videos),
        )
        db.add(report)
        await db.commit()
    except Exception:
        writer.discard()
        raise

    logger.info(
        "Report %s created by %s (%d images, %d videos)",
        report.id, user.email, len(report.images), len(report.videos),
    )
    return await get_report_or_404(db, report.id)


@router.get("", response_model=list[ReportResponse])
async def list_reports(
    user_id: str | None = Query(None, alias="userId"),
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Regular users only ever see their own reports. Admins see everyone's,
    or one user's when ``userId`` is given (``all`` means no filter).
    """
    if not user.is_admin:
        owner = user.id
    elif user_id and user_id != "all":
        owner = user_id
    else:
        owner = None

    result = await db.execute(reports_query(owner, start_date, end_date))
    return result.scalars().all()


@router.get("/export")
async def export_reports(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Export every report to an Excel workbook (admin only)."""
    result = await db.execute(reports_query())
    content = build_reports_xlsx(result.scalars().all())
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=reports.xlsx"},
    )


@router.get("/{report_id}/download")
async def download_report(
    report_id: str,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Render one report as a PDF document (admin only)."""
    report = await get_report_or_404(db, report_id)
    return Response(
        content=build_report_pdf(report),
        media_type=PDF_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{pdf_filename(report)}"'},
    )
