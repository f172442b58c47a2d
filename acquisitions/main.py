"""
Acquisitions API - user registration, login sessions and user management
"""
from contextlib import asynccontextmanager
from typing import Optional
import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import PasswordHasher, TokenIssuer
from .config import Settings, get_settings
from .db import create_db_engine, create_session_factory, init_db
from .errors import FieldError, InternalError, ServiceError
from .limiter import configure_limiter
from .middleware import Gate, SecurityGateMiddleware, SecurityHeadersMiddleware, ShieldGate, register_request_logging
from .routes import auth, health, users
from .utils.cookie import SessionCarrier
from .utils.logging_config import configure_logging
from .utils.responses import error_response

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup, release the connection pool on shutdown"""
    init_db(app.state.engine)
    logger.info("%s started (environment=%s)", app.title, app.state.settings.ENVIRONMENT)
    yield
    app.state.engine.dispose()
    logger.info("%s stopped", app.title)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        if isinstance(exc, InternalError):
            logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc.message, exc_info=exc)
        return error_response(exc.status_code, exc.message, exc.errors)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            FieldError(field=", ".join(str(p) for p in e.get("loc", ())) or "body", message=e.get("msg", "Invalid value"))
            for e in exc.errors()
        ]
        return error_response(400, "Validation failed", errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(RateLimitExceeded)
    def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        logger.warning(
            "Rate limit exceeded: %s %s ip=%s",
            request.method, request.url.path, request.client.host if request.client else "unknown",
        )
        return error_response(429, "Too many requests")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return error_response(500, "Internal server error")


def create_app(settings: Optional[Settings] = None, gate: Optional[Gate] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        description="User registration, login sessions and user management",
        version="1.0.0",
        lifespan=lifespan,
    )

    engine = create_db_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.hasher = PasswordHasher()
    app.state.issuer = TokenIssuer(settings)
    app.state.carrier = SessionCarrier(settings)
    app.state.limiter = configure_limiter(settings)

    register_exception_handlers(app)

    # Innermost first: the last middleware added runs first
    app.add_middleware(SlowAPIMiddleware)
    if settings.SECURITY_GATE_ENABLED:
        app.add_middleware(SecurityGateMiddleware, gate=gate or ShieldGate(settings.BLOCKED_USER_AGENTS))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.is_production)
    register_request_logging(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(users.router)

    return app


app = create_app()


def serve() -> None:
    settings = get_settings()
    uvicorn.run(
        "acquisitions.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    serve()
