"""
FastAPI application factory and main app configuration.
"""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .api.errors import APIError
from .api.routers import health, interchange
from .api.schemas.common import ErrorResponse
from .core.config import get_settings
from .core.exceptions import AuthenticationError, ConfigurationError, DatabaseError
from .core.structured_logger import configure_logging
from .domain.errors import (
    AuthError,
    DomainError,
    EmptyExportError,
    FileParseError,
    StoreWriteError,
)

logger = logging.getLogger("vitalscribe")

# HTTP status per domain error; anything else derived from DomainError is a 400
DOMAIN_ERROR_STATUS = {
    FileParseError: 400,
    AuthError: 401,
    EmptyExportError: 404,
    StoreWriteError: 503,
}


def _status_for(exc: DomainError) -> int:
    for error_type, http_status in DOMAIN_ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return http_status
    return 400


async def init_database(settings) -> object:
    """Connect Motor and register the Beanie document models."""
    from beanie import init_beanie
    from motor.motor_asyncio import AsyncIOMotorClient

    from .adapters.db.mongo.models.patient_m import ConsultationMongo, PatientMongo

    mongo_uri = settings.database.uri
    # Enable TLS only for Atlas SRV URIs
    if mongo_uri.startswith("mongodb+srv://"):
        import certifi

        client = AsyncIOMotorClient(
            mongo_uri,
            serverSelectionTimeoutMS=settings.database.server_selection_timeout_ms,
            tls=True,
            tlsCAFile=certifi.where(),
        )
    else:
        client = AsyncIOMotorClient(
            mongo_uri,
            serverSelectionTimeoutMS=settings.database.server_selection_timeout_ms,
        )

    await init_beanie(
        database=client[settings.database.db_name],
        document_models=[PatientMongo, ConsultationMongo],
    )
    return client


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    configure_logging(settings.logging.level, settings.logging.format)
    logger.info(f"Starting {settings.app_name} v{settings.app_version} ({settings.app_env})")

    client = None
    if settings.database.uri:
        try:
            client = await init_database(settings)
            logger.info("Database connection established")
        except Exception as e:
            logger.error(f"Database connection failed: {e}", exc_info=True)
            raise DatabaseError(f"Database connection failed: {e}") from e
    elif settings.is_production:
        raise ConfigurationError("MONGO_URI is required in production")
    else:
        logger.warning("MONGO_URI not set; database-backed endpoints are unavailable")

    yield

    if client is not None:
        client.close()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Spreadsheet import and CSV backup export of patient records",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request.state.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        response = await call_next(request)
        response.headers["X-Request-ID"] = request.state.request_id
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} -> {response.status_code}")
        return response

    app.include_router(health.router)
    app.include_router(interchange.router)

    def _error_response(request: Request, status_code: int, error: str, message: str, details=None):
        req_id = getattr(request.state, "request_id", None)
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=error,
                message=message,
                request_id=req_id or "",
                details=details or {},
            ).model_dump(),
        )

    # Global exception handler for domain errors
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        status_code = _status_for(exc)
        log = logger.error if status_code >= 500 else logger.warning
        log(f"DomainError: {exc.error_code} ({status_code}) {exc.message}")
        return _error_response(
            request, status_code, exc.error_code or "DOMAIN_ERROR", exc.message, exc.details
        )

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(request: Request, exc: AuthenticationError):
        return _error_response(request, 401, exc.error_code or "AUTH_ERROR", exc.message)

    @app.exception_handler(DatabaseError)
    async def database_error_handler(request: Request, exc: DatabaseError):
        logger.error(f"DatabaseError: {exc.message}")
        return _error_response(request, 503, exc.error_code or "DATABASE_ERROR", exc.message)

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        logger.warning(f"APIError: {exc.code} ({exc.http_status}) {exc.message}")
        return _error_response(request, exc.http_status, exc.code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def pydantic_error_handler(request: Request, exc: RequestValidationError):
        error_details = exc.errors()
        error_messages = []
        for error in error_details:
            loc = " -> ".join(str(x) for x in error.get("loc", []))
            msg = error.get("msg", "Validation error")
            error_messages.append(f"{loc}: {msg}")
        logger.warning(f"ValidationError on {request.method} {request.url.path}: {error_messages}")
        return _error_response(
            request,
            422,
            "INVALID_INPUT",
            f"Input validation failed: {'; '.join(error_messages)}",
            {"errors": error_messages, "path": request.url.path},
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error: {type(exc).__name__}: {exc}", exc_info=exc)
        return _error_response(
            request, 500, "INTERNAL_ERROR", "An unexpected error has occurred. Please try again later."
        )

    @app.get("/", tags=["health"])
    async def root():
        """Root endpoint with API information."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.app_env,
            "status": "running",
        }

    return app


# Create the app instance
app = create_app()
