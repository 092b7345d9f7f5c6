"""FastAPI application factory.

Wires settings, the pooled Database, services and routers into one app:
- RSVP routes under /api/rsvp (errors as {"ok": false, "message"})
- visitor logging under /api/logs, auth under /api/auth, to-do under /api/todo
- /api/health, JSON 404 for unknown /api paths
- optional static frontend from PUBLIC_DIR at /
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from unifiedapi.api.auth import TokenService
from unifiedapi.api.routes import login, logs, rsvp, todo
from unifiedapi.config import Settings, load_settings
from unifiedapi.domain.errors import InternalError, RsvpError
from unifiedapi.infra.db import Database, database_from_settings
from unifiedapi.infra.repositories.guests_repository import GuestDirectoryStore
from unifiedapi.observability.correlation import CORRELATION_ID_HEADER, correlation_scope
from unifiedapi.observability.logging import configure_logging, get_logger
from unifiedapi.services.geo import GeoLocator
from unifiedapi.services.rsvp_gate import RsvpGateService
from unifiedapi.services.visitor_log import VisitorLogService

logger = get_logger(__name__)

_RSVP_PREFIX = "/api/rsvp"


def _install_cors(app: FastAPI, settings: Settings) -> None:
    """Open in development; allow-list only in production."""
    common = {
        "allow_credentials": True,
        "allow_methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        "allow_headers": ["Content-Type", "Authorization"],
    }
    if settings.is_production:
        app.add_middleware(CORSMiddleware, allow_origins=settings.cors_origins, **common)
    else:
        app.add_middleware(CORSMiddleware, allow_origin_regex=".*", **common)


def _install_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(RsvpError)
    async def rsvp_error_handler(request: Request, exc: RsvpError) -> JSONResponse:
        body: dict = {"ok": False, "message": exc.message}
        if isinstance(exc, InternalError):
            logger.error("rsvp internal error", extra={"extra_fields": {"path": request.url.path}})
            if exc.debug and not settings.is_production:
                body["debug"] = exc.debug
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
        if request.url.path.startswith(_RSVP_PREFIX):
            return JSONResponse(status_code=400, content={"ok": False, "message": "Invalid request body."})
        return await request_validation_exception_handler(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        if settings.is_production:
            logger.error("unhandled error: %s", exc)
        else:
            logger.exception("unhandled error")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    settings: Settings | None = None,
    *,
    db: Database | None = None,
    geo: GeoLocator | None = None,
    gate_service: RsvpGateService | None = None,
) -> FastAPI:
    """Create the FastAPI app.

    Args:
        settings: Explicit settings. If None, reads from the environment.
        db: Database override (tests). Built from settings when None.
        geo: GeoLocator override (tests).
        gate_service: RsvpGateService override (tests).

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = load_settings()
    configure_logging(settings.log_level, settings.app_env)

    if db is None:
        db = database_from_settings(settings)
    if geo is None:
        geo = GeoLocator(settings.geo_lookup_url, timeout=settings.geo_lookup_timeout)
    if gate_service is None:
        gate_service = RsvpGateService(
            GuestDirectoryStore(db),
            expose_debug=not settings.is_production,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            database = await run_in_threadpool(db.ping)
            logger.info("db connected", extra={"extra_fields": {"database": database}})
        except Exception as exc:
            logger.error("db connection failed: %s", exc)
        yield
        await run_in_threadpool(db.close)
        logger.info("db pool closed")

    app = FastAPI(
        title="Unified API",
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.db = db
    app.state.gate_service = gate_service
    app.state.visitor_log_service = VisitorLogService(db, geo)
    app.state.token_service = TokenService(settings.jwt_secret, settings.jwt_expires_seconds)

    # Correlation ID middleware
    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next) -> Response:
        with correlation_scope(request.headers.get(CORRELATION_ID_HEADER)) as cid:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = cid
            return response

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    _install_cors(app, settings)
    _install_error_handlers(app, settings)

    @app.get("/api/health")
    def health() -> dict:
        """Health check endpoint."""
        return {
            "status": "ok",
            "env": settings.app_env,
            "time": datetime.now(timezone.utc).isoformat(),
        }

    app.include_router(rsvp.router)
    app.include_router(logs.router)
    app.include_router(login.router)
    app.include_router(todo.router)

    @app.api_route(
        "/api/{path:path}",
        methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        include_in_schema=False,
    )
    def api_not_found(path: str) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": "Not found"})

    public_dir = Path(settings.public_dir)
    if public_dir.is_dir():
        app.mount("/", StaticFiles(directory=public_dir, html=True), name="public")

    return app
