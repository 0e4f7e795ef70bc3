"""FastAPI application entry point."""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from peridot.auth import AccessGate
from peridot.auth.errors import AuthError
from peridot.config import Settings
from peridot.db.engine import build_engine, build_session_factory, create_tables
from peridot.integrations.github import GitHubOAuth
from peridot.services import admin_service
from peridot.utils.logger import ctx_request_id, setup_logger

# Routers
from peridot.api.admin import router as admin_router
from peridot.api.agents import router as agents_router
from peridot.api.auth import router as auth_router
from peridot.api.hello import router as hello_router
from peridot.api.jobs import router as jobs_router
from peridot.api.projects import router as projects_router
from peridot.api.repopulls import router as repopulls_router
from peridot.api.repos import router as repos_router
from peridot.api.subprojects import router as subprojects_router
from peridot.api.users import router as users_router

logger = logging.getLogger("peridot")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logger(log_format=settings.LOG_FORMAT, log_level="DEBUG" if settings.DEBUG else settings.LOG_LEVEL)
    await create_tables(app.state.engine)
    async with app.state.session_factory() as db:
        if await admin_service.seed_initial_admin(db, settings.INITIAL_ADMIN_GITHUB):
            await db.commit()
    logger.info("peridot API ready on %s:%d", settings.HOST, settings.PORT)
    yield
    await app.state.engine.dispose()
    logger.info("peridot API shutdown complete")


# ── Error rendering ─────────────────────────────────────────────
# Every error body is {"error": "<message>"}.


async def _auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    return JSONResponse({"error": exc.message}, status_code=exc.status_code, headers=exc.headers)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        {"error": str(exc.detail)},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid JSON request"
    err = errors[0]
    loc = tuple(err.get("loc", ()))
    kind = err.get("type", "")
    if kind == "json_invalid" or loc in (("body",), ()):
        return "Invalid JSON request"
    if loc[0] == "path":
        return "Missing or invalid ID"
    field = str(loc[-1])
    if kind == "missing":
        return f"Missing required value for '{field}'"
    if kind == "extra_forbidden":
        return f"Unknown field '{field}'"
    return f"Invalid value for '{field}'"


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse({"error": _validation_message(exc)}, status_code=400)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


# ── Factory ─────────────────────────────────────────────────────


def create_app(settings: Settings | None = None) -> FastAPI:
    if settings is None:
        settings = Settings()
    if not settings.JWT_SECRET_KEY:
        raise RuntimeError("JWT_SECRET_KEY must be set to sign and verify login tokens")

    app = FastAPI(
        title="peridot",
        description="Software provenance tracking API",
        version="0.1.0",
        lifespan=lifespan,
    )

    engine = build_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.github = GitHubOAuth(settings.GITHUB_CLIENT_ID, settings.GITHUB_CLIENT_SECRET)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "HEAD", "OPTIONS"],
        allow_headers=["X-Requested-With", "Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def _request_id(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        ctx_request_id.set(request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    app.add_exception_handler(AuthError, _auth_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    # Public routes
    app.include_router(hello_router, tags=["hello"])
    app.include_router(auth_router, prefix="/auth", tags=["auth"])

    # Everything else sits behind the access gate
    gated = [Depends(AccessGate(settings.JWT_SECRET_KEY))]
    app.include_router(admin_router, prefix="/admin", tags=["admin"], dependencies=gated)
    app.include_router(users_router, prefix="/users", dependencies=gated)
    app.include_router(projects_router, prefix="/projects", tags=["projects"], dependencies=gated)
    app.include_router(subprojects_router, prefix="/subprojects", tags=["subprojects"], dependencies=gated)
    app.include_router(repos_router, prefix="/repos", tags=["repos"], dependencies=gated)
    app.include_router(repopulls_router, prefix="/repopulls", tags=["repopulls"], dependencies=gated)
    app.include_router(jobs_router, prefix="/jobs", tags=["jobs"], dependencies=gated)
    app.include_router(agents_router, prefix="/agents", tags=["agents"], dependencies=gated)

    return app
