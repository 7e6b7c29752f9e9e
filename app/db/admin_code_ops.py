"""
Field Reports API — Admin code issuance and redemption
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import get_settings
from app.models.admin_code import AdminCode

logger = logging.getLogger(__name__)


def new_code_value() -> str:
    """Eight upper-case hex characters, e.g. ``9F04A1C2``."""
    return secrets.token_hex(4).upper()


async def purge_expired_codes(db: AsyncSession) -> int:
    result = await db.execute(
        delete(AdminCode).where(AdminCode.expires_at <= datetime.now(timezone.utc))
    )
    if result.rowcount:
        logger.info("Purged %d expired admin codes", result.rowcount)
    return result.rowcount or 0


async def issue_code(db: AsyncSession, created_by: str | None = None) -> AdminCode:
    """Create and commit a new admin code. ``created_by`` is None for bootstrap codes."""
    settings = get_settings()
    await purge_expired_codes(db)
    admin_code = AdminCode(
        code=new_code_value(),
        created_by=created_by,
        expires_at=datetime.now(timezone.utc) + timedelta(hours=settings.ADMIN_CODE_TTL_HOURS),
    )
    db.add(admin_code)
    await db.commit()
    logger.info("Issued admin code %s (created_by=%s)", admin_code.code, created_by)
    return admin_code


async def redeem_code(db: AsyncSession, code: str, user_id: str) -> bool:
    """
    Mark ``code`` as used by ``user_id`` in a single conditional UPDATE.

    Only a row that is still unused and unexpired matches, so two concurrent
    redemptions of the same code cannot both succeed. The caller owns the
    transaction and must roll back when this returns False.
    """
    result = await db.execute(
        update(AdminCode)
        .where(
            AdminCode.code == code.strip().upper(),
            AdminCode.used.is_(False),
            AdminCode.expires_at > datetime.now(timezone.utc),
        )
        .values(used=True, used_by=user_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def list_valid_codes(db: AsyncSession) -> list[AdminCode]:
    await purge_expired_codes(db)
    await db.commit()
    result = await db.execute(
        select(AdminCode)
        .where(
            AdminCode.used.is_(False),
            AdminCode.expires_at > datetime.now(timezone.utc),
        )
        .options(selectinload(AdminCode.creator))
        .order_by(AdminCode.created_at.desc())
    )
    return list(result.scalars().all())
