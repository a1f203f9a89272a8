"""
Manager Performance Dashboard API

Backend-for-frontend over Supabase: every resource route validates input,
forwards to the platform's table, auth or storage API, and answers with the
uniform ``{success, data, message, error, errors}`` envelope.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from teamdash.core.config import Config, load_settings
from teamdash.core.exceptions import AppException, FieldValidationError
from teamdash.core.logging import setup_logging
from teamdash.core.middleware import CorrelationIdMiddleware, LoggingMiddleware
from teamdash.core.schemas import ApiResponse
from teamdash.gateways import AuthGateway, StorageGateway, TableGateway
from teamdash.routers.api_router import api_router

# ============================================================================
# LOGGING SETUP
# ============================================================================
setup_logging()
logger = logging.getLogger(__name__)


# ============================================================================
# LIFESPAN MANAGEMENT
# ============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Config = app.state.settings
    logger.info(f"Starting {settings.app_name} v{settings.version} ({settings.environment})")
    yield
    logger.info("Gracefully shutting down...")


def _field_errors(exc: RequestValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        # loc is usually ('body', 'field_name') or ('query', 'field_name')
        loc = [str(part) for part in error.get("loc", ())]
        field = ".".join(loc[1:]) if len(loc) > 1 else (loc[0] if loc else "unknown")
        errors.setdefault(field, []).append(error["msg"])
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors (422) as a field -> messages map."""
        errors = _field_errors(exc)
        logger.warning(f"Validation Error: {errors}")
        return ApiResponse.fail(errors=errors).to_response(422)

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        """Handle domain-specific application exceptions."""
        logger.warning(f"AppException: {exc.message}", extra={"code": exc.error_code})
        if isinstance(exc, FieldValidationError):
            return ApiResponse.fail(errors=exc.errors).to_response(exc.status_code)
        return ApiResponse.fail(message=exc.message, error=exc.details).to_response(exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: Union[HTTPException, StarletteHTTPException]):
        """Handle standard HTTP exceptions."""
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return ApiResponse.fail(message=message).to_response(exc.status_code)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Fallback handler for unhandled server errors."""
        logger.exception("Unhandled server error", extra={"path": request.url.path})
        return ApiResponse.fail(message="An unexpected server error occurred.").to_response(500)


def create_app(settings: Optional[Config] = None) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Team performance metrics, documents and activity over Supabase",
        lifespan=lifespan,
    )

    # Built once; handlers get them through teamdash.dependencies.
    app.state.settings = settings
    app.state.tables = TableGateway(settings.supabase.rest_url, settings.supabase.key)
    app.state.auth = AuthGateway(settings.supabase.auth_url, settings.supabase.key)
    app.state.storage = StorageGateway(settings.supabase.storage_url, settings.supabase.service_role_key)

    # ========================================================================
    # MIDDLEWARE STACK (last added runs first)
    # ========================================================================
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Process-Time"],
    )

    register_exception_handlers(app)

    # API prefix applied ONLY to routers
    app.include_router(api_router, prefix=settings.api_prefix)

    # ========================================================================
    # OPERATIONAL ENDPOINTS (at root level)
    # ========================================================================
    @app.get("/", tags=["Health"])
    def root():
        """API root endpoint."""
        return {
            "message": settings.app_name,
            "version": settings.version,
            "docs": "/docs",
        }

    @app.get("/health", tags=["Health"])
    def health_check():
        """Liveness probe for load balancers and orchestrators."""
        return {
            "status": "ok",
            "service": settings.app_name,
            "version": settings.version,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


app = create_app()
