"""
Field Reports API — FastAPI application entrypoint
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.core.uploads import ensure_upload_dirs
from app.db.database import create_engine, create_sessionmaker, init_models
from app.middleware.auth import JWTAuthMiddleware
from app.api import admin, auth, health, reports

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    engine = create_engine(settings.DATABASE_URL)
    app.state.engine = engine
    app.state.sessionmaker = create_sessionmaker(engine)
    # Startup: create tables (schema is fixed, no migrations)
    await init_models(engine)
    logger.info("%s %s started", settings.SERVICE_NAME, settings.SERVICE_VERSION)
    yield
    # Shutdown
    await engine.dispose()


# ── Error rendering ───────────────────────────────────────────────────────────

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "request"
    return JSONResponse(
        status_code=400,
        content={"message": f"Invalid {field}: {first.get('msg', 'validation error')}"},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Server error"})


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    app = FastAPI(
        title="Field Reports API",
        description="Field-activity reports with role-gated administration and exports.",
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url=None,
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Auth ──────────────────────────────────────────────────────────────────
    app.add_middleware(JWTAuthMiddleware)

    # ── CORS ──────────────────────────────────────────────────────────────────
    # Added last so it wraps the auth middleware and decorates 401 responses too
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # ── Prometheus Metrics ────────────────────────────────────────────────────
    if settings.METRICS_ENABLED:
        Instrumentator().instrument(app).expose(app, endpoint="/metrics")

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(reports.router)
    app.include_router(admin.router)
    app.include_router(health.router)

    # ── Uploaded attachments ──────────────────────────────────────────────────
    upload_root = ensure_upload_dirs(settings.UPLOAD_DIR)
    app.mount("/uploads", StaticFiles(directory=upload_root), name="uploads")

    @app.get("/")
    async def root():
        return {"service": settings.SERVICE_NAME, "version": settings.SERVICE_VERSION}

    return app


app = create_app()
