"""
Field Reports API — Auth schemas
"""
from datetime import datetime

from pydantic import EmailStr, Field

from app.schemas.base import CamelModel


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class AdminRegisterRequest(RegisterRequest):
    admin_code: str | None = Field(None, max_length=16)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class InitAdminRequest(CamelModel):
    secret_key: str


class TokenResponse(CamelModel):
    token: str


class LoginResponse(CamelModel):
    token: str
    is_admin: bool


class AdminRegisterResponse(CamelModel):
    token: str
    is_admin: bool
    message: str


class AdminCodeIssued(CamelModel):
    code: str
    expires_at: datetime
    message: str


class HealthResponse(CamelModel):
    status: str
    service: str
    version: str
    dependencies: dict[str, str]
