"""
Field Reports API — Auth API routes
"""
import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.security import create_access_token, hash_password, verify_password
from app.db.admin_code_ops import issue_code, redeem_code
from app.db.database import get_db
from app.models.user import User
from app.schemas.auth import (
    AdminCodeIssued,
    AdminRegisterRequest,
    AdminRegisterResponse,
    InitAdminRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    TokenResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])

USER_EXISTS = "User already exists"


async def _email_taken(db: AsyncSession, email: str) -> bool:
    result = await db.execute(select(User.id).where(User.email == email))
    return result.scalar_one_or_none() is not None


async def _commit_new_user(db: AsyncSession) -> None:
    # Two concurrent registrations can both pass the lookup; the unique index decides.
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=USER_EXISTS)


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Register a regular field account."""
    if await _email_taken(db, payload.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=USER_EXISTS)

    user = User(
        name=payload.name,
        email=payload.email,
        hashed_password=hash_password(payload.password),
        is_admin=False,
    )
    db.add(user)
    await _commit_new_user(db)
    logger.info("Registered user %s", user.email)

    return TokenResponse(token=create_access_token(user.id, user.email, user.is_admin))


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Validate credentials and issue a JWT."""
    result = await db.execute(select(User).where(User.email == payload.email))
    user: User | None = result.scalar_one_or_none()

    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid credentials")

    return LoginResponse(
        token=create_access_token(user.id, user.email, user.is_admin),
        is_admin=user.is_admin,
    )


@router.post("/init-admin", response_model=AdminCodeIssued)
async def init_admin(payload: InitAdminRequest, db: AsyncSession = Depends(get_db)):
    """Issue an admin code against the operator-configured bootstrap secret."""
    expected = get_settings().ADMIN_REGISTRATION_CODE
    if not expected or not secrets.compare_digest(
        payload.secret_key.encode(), expected.encode()
    ):
        logger.warning("Rejected init-admin request with an invalid secret key")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid secret key")

    admin_code = await issue_code(db)
    return AdminCodeIssued(
        code=admin_code.code,
        expires_at=admin_code.expires_at,
        message="Initial admin code generated successfully",
    )


@router.post(
    "/admin/register",
    response_model=AdminRegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def admin_register(payload: AdminRegisterRequest, db: AsyncSession = Depends(get_db)):
    """
    Register through the admin onboarding path.

    The account is an admin when no admin exists yet, or when a valid admin
    code is redeemed. A supplied code that cannot be redeemed rejects the
    whole registration. Otherwise a regular account is created.
    """
    if await _email_taken(db, payload.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=USER_EXISTS)

    admin_count = await db.scalar(select(func.count()).select_from(User).where(User.is_admin.is_(True)))
    is_first_admin = admin_count == 0

    user = User(
        name=payload.name,
        email=payload.email,
        hashed_password=hash_password(payload.password),
        is_admin=is_first_admin,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=USER_EXISTS)

    if payload.admin_code:
        if not await redeem_code(db, payload.admin_code, user.id):
            await db.rollback()
            logger.warning("Rejected admin registration for %s: invalid admin code", payload.email)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired admin code"
            )
        user.is_admin = True
        logger.info("Admin code redeemed by %s", payload.email)

    await _commit_new_user(db)
    logger.info("Registered %s via admin onboarding (admin=%s)", user.email, user.is_admin)

    return AdminRegisterResponse(
        token=create_access_token(user.id, user.email, user.is_admin),
        is_admin=user.is_admin,
        message="Admin account created successfully" if user.is_admin else "User account created successfully",
    )
