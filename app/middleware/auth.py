"""
Field Reports API — JWT Authentication Middleware
Validates the Bearer token on protected routes; returns 401 on failure.
"""
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from jose import JWTError

from app.core.security import decode_token

# Path prefixes that require authentication
PROTECTED_PREFIXES = (
    "/api/reports",
    "/api/admin",
)


def _unauthorized(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


class JWTAuthMiddleware(BaseHTTPMiddleware):
    """
    Validates the JWT Bearer token on protected paths.
    Attaches decoded claims to request.state.user on success.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method == "OPTIONS":
            return await call_next(request)

        if not request.url.path.startswith(PROTECTED_PREFIXES):
            return await call_next(request)

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return _unauthorized("Missing or invalid Authorization header. Expected: Bearer <token>")

        token = auth_header.split(" ", 1)[1].strip()
        try:
            request.state.user = decode_token(token)
        except JWTError:
            return _unauthorized("Invalid or expired token")

        return await call_next(request)
