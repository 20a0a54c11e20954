"""FastAPI application factory. No business logic; only wiring, middleware and error rendering."""

from dotenv import load_dotenv

load_dotenv()

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker

from app.api.v1 import router as v1_router
from app.auth.guard import AuthGuard
from app.auth.tokens import TokenService
from app.core.config import Settings, get_settings
from app.core.database import SessionLocal
from app.core.errors import ApiError
from app.middleware.audit import AuditMiddleware
from app.services.audit import AuditDispatcher, AuditSink, sql_audit_sink

logger = logging.getLogger(__name__)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    if exc.status_code >= 500:
        logger.error("API error %s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(content=exc.to_dict(), status_code=exc.status_code, headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        content={"error": {"message": "Validation failed", "code": "VALIDATION_ERROR", "details": details}},
        status_code=400,
    )


def create_app(
    settings: Settings | None = None,
    session_factory: sessionmaker[Session] | None = None,
    audit_sink: AuditSink | None = None,
) -> FastAPI:
    """
    Build the application with explicitly constructed auth services.

    The settings, token service, auth guard and audit dispatcher live on app.state and
    are reached by request dependencies; nothing auth-related is a module global.
    """
    settings = settings or get_settings()
    token_service = TokenService(settings)
    audit = AuditDispatcher(
        audit_sink or sql_audit_sink(session_factory or SessionLocal),
        enabled=settings.AUDIT_LOG_ENABLED,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await audit.start()
        try:
            yield
        finally:
            await audit.stop()

    app = FastAPI(
        title="Hotspot Admin API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.token_service = token_service
    app.state.auth_guard = AuthGuard(token_service)
    app.state.audit = audit

    app.add_middleware(AuditMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(v1_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Hotspot Admin API"}

    return app


app = create_app()
