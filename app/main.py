# 📄 File: app/main.py
#
# 🧭 Purpose (Layman Explanation):
# The main control center that starts the Plant Sightings service, connects the
# database, photo storage and plant identification services, and makes sure
# everything is ready to handle requests from the mobile app.
#
# 🧪 Purpose (Technical Summary):
# FastAPI application factory and entry point: lifespan wiring for the database,
# session manager, circuit breakers, provider registry and Supabase storage;
# middleware (CORS, GZip, request id); slowapi rate limiting; and exception
# handlers that render every error in one JSON envelope.
#
# 🔗 Dependencies:
# - FastAPI framework, uvicorn, slowapi
# - app.shared.config.settings
# - app.shared.infrastructure.database.connection / session
# - app.shared.infrastructure.external_apis.api_client
# - app.shared.infrastructure.storage.supabase_storage
# - app.modules.plant_identification.infrastructure.external.provider_registry
#
# 🔄 Connected Modules / Calls From:
# - uvicorn server startup
# - Docker container entry point
# - tests (httpx ASGITransport)

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from slowapi.errors import RateLimitExceeded

from app.api.v1.router import api_v1_router
from app.modules.plant_identification.infrastructure.external.provider_registry import (
    build_provider_registry,
)
from app.modules.plant_identification.presentation.dependencies import limiter
from app.shared.config.settings import get_settings
from app.shared.core.exceptions import PlantSightingsException
from app.shared.infrastructure.database.connection import close_database, initialize_database
from app.shared.infrastructure.database.session import initialize_sessions
from app.shared.infrastructure.external_apis.api_client import init_api_clients
from app.shared.infrastructure.storage.supabase_storage import (
    cleanup_storage_client,
    init_storage_client,
)
from app.shared.utils.logging import get_logger, log_context, setup_logging

# Get application settings
settings = get_settings()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Startup brings up the database, the circuit breakers, photo storage and
    the identification providers; shutdown releases them in reverse order.
    Missing provider credentials are not a startup failure.
    """
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    logger.info("🌱 Plant Sightings API starting up...")

    try:
        await initialize_database(settings)
        initialize_sessions()
        logger.info("✅ Session manager initialized")

        init_api_clients(
            failure_threshold=settings.CIRCUIT_BREAKER_FAILURE_THRESHOLD,
            recovery_timeout=settings.CIRCUIT_BREAKER_RECOVERY_TIMEOUT,
        )

        storage_client = init_storage_client(settings)
        app.state.providers = build_provider_registry(settings, storage_client)

        logger.info("✅ Plant Sightings API startup complete")
    except Exception as e:
        logger.error(f"❌ Startup failed: {e}", exc_info=True)
        raise

    try:
        yield  # Application is running
    finally:
        logger.info("🔄 Plant Sightings API shutting down...")

        providers = getattr(app.state, "providers", None)
        if providers is not None:
            await providers.close()
        cleanup_storage_client()
        await close_database()

        logger.info("✅ Plant Sightings API shutdown complete")


def _error_response(request: Request, status_code: int, payload: dict) -> JSONResponse:
    payload["error"]["request_id"] = getattr(request.state, "request_id", None)
    payload["error"]["timestamp"] = datetime.now(timezone.utc).isoformat()
    return JSONResponse(status_code=status_code, content=payload)


def create_application() -> FastAPI:
    """
    Application factory function.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
        debug=settings.DEBUG,
    )

    # =========================================================================
    # MIDDLEWARE CONFIGURATION
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        request.state.request_id = request_id

        user_id = request.headers.get("X-User-ID")
        started = time.perf_counter()

        with log_context(request_id=request_id, user_id=user_id):
            response: Response = await call_next(request)
            logger.performance.log_request(
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
                user_id=user_id,
            )

        response.headers["X-Request-ID"] = request_id
        return response

    # =========================================================================
    # RATE LIMITING
    # =========================================================================

    limiter.enabled = settings.RATE_LIMIT_ENABLED
    app.state.limiter = limiter

    # =========================================================================
    # ROUTER REGISTRATION
    # =========================================================================

    app.include_router(api_v1_router, prefix="/api/v1")

    # =========================================================================
    # EXCEPTION HANDLERS
    # =========================================================================

    @app.exception_handler(PlantSightingsException)
    async def plant_sightings_exception_handler(
        request: Request,
        exc: PlantSightingsException
    ) -> JSONResponse:
        """Handle application exceptions in the common error envelope."""
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code}: {exc.message}", details=exc.details)
        return _error_response(request, exc.status_code, exc.to_dict())

    @app.exception_handler(PydanticValidationError)
    async def command_validation_handler(
        request: Request,
        exc: PydanticValidationError
    ) -> JSONResponse:
        """Commands built inside endpoints fail validation here rather than at the request layer."""
        errors = exc.errors(include_url=False, include_context=False, include_input=False)
        return _error_response(request, 422, {
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": {"errors": jsonable_encoder(errors)},
                "status_code": 422,
            }
        })

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        logger.warning(f"Rate limit exceeded on {request.url.path}: {exc.detail}")
        return _error_response(request, 429, {
            "error": {
                "code": "RATE_LIMIT_EXCEEDED",
                "message": f"Rate limit exceeded: {exc.detail}",
                "details": {},
                "status_code": 429,
            }
        })

    @app.exception_handler(Exception)
    async def internal_server_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle 500 Internal Server Error."""
        logger.error(f"Internal server error: {exc}", exc_info=True)
        return _error_response(request, 500, {
            "error": {
                "code": "INTERNAL_SERVER_ERROR",
                "message": "An internal server error occurred",
                "details": {"error_type": type(exc).__name__} if settings.DEBUG else {},
                "status_code": 500,
            }
        })

    # =========================================================================
    # ROOT ENDPOINTS
    # =========================================================================

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "description": settings.APP_DESCRIPTION,
            "docs_url": "/docs" if settings.DEBUG else None,
            "health_check": "/api/v1/health",
            "api_base": "/api/v1",
        }

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        """Favicon endpoint to prevent 404 errors."""
        return Response(status_code=204)

    return app


# Create the FastAPI application
app = create_application()


def main():
    """
    Run the application with uvicorn in development.

    Used when running ``python -m app.main`` or the ``plant-sightings`` script.
    """
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD and settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
