from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from contacts_api.core.config import Settings, get_settings
from contacts_api.core.logging import configure_logging, get_logger
from contacts_api.db.create_tables import create_all
from contacts_api.db.session import build_engine, session_factory_for
from contacts_api.routers import contacts as contacts_router
from contacts_api.routers import responses
from contacts_api.routers import users as users_router
from contacts_api.services import Services, build_services

logger = get_logger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers for a JSON-only API."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("Content-Security-Policy", "default-src 'none'; frame-ancestors 'none'")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Cache-Control", "no-store")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return responses.failure(str(exc.detail), exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _body_error(request: Request, exc: RequestValidationError):
        return responses.validation_failure(["Corpo da requisição inválido"])

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        logger.exception("unhandled_error", path=request.url.path, error_type=type(exc).__name__)
        return responses.failure(responses.INTERNAL_ERROR, 500)


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    """Factory compatível com uvicorn/gunicorn (``--factory``)."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_json)

    if services is None:
        engine = build_engine(settings.database_url)
        if not settings.is_prod:
            create_all(engine)
        services = build_services(settings, session_factory=session_factory_for(engine))

    app = FastAPI(title="Contacts API")
    app.state.settings = settings
    app.state.services = services

    allowed_cors = set(settings.cors_origins)
    if not settings.is_prod:
        allowed_cors.update({"http://localhost:3000", "http://127.0.0.1:3000"})
    if allowed_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(allowed_cors),
            allow_credentials=False,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.is_prod)
    _install_error_handlers(app)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(users_router.router)
    app.include_router(contacts_router.router)
    logger.info("app_created", app_env=settings.app_env, ledger="redis" if settings.redis_url else "sql")
    return app
