"""
User Directory API

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.api.deps import get_token_issuer
from src.api.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware
from src.api.v1 import router as api_v1_router
from src.config import get_settings
from src.database import close_db, engine, init_db
from src.kernel.cache.redis import RedisCache, get_cache_backend, set_cache_backend
from src.kernel.errors import DomainError
from src.logging_config import configure_logging, get_logger
from src.schemas.common import ErrorResponse, FieldError, HealthResponse

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown tasks.
    """
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    # Fail fast on a bad signing key rather than on the first login
    get_token_issuer()

    await init_db()
    logger.info("Database initialized")

    cache = RedisCache(
        settings.redis_url,
        enabled=settings.redis_enabled,
        pool_size=settings.redis_pool_size,
        socket_timeout=settings.redis_socket_timeout_seconds,
    )
    await cache.connect()
    set_cache_backend(cache)

    yield

    logger.info("Shutting down...")
    await cache.close()
    set_cache_backend(None)
    await close_db()
    logger.info("Connections closed")


app = FastAPI(
    title=settings.project_name,
    description="""
    User Directory API

    Password-based authentication issuing signed access tokens, and a user
    directory with a cache-aside read path.

    ## Features

    - **Auth**: register and log in; both return a 24h bearer token
    - **Users**: list/filter, read (direct or cached), update, delete
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# add_middleware stacks innermost-first: CORS is added last so it wraps everything
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
)


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def _error_response(
    request: Request,
    status_code: int,
    body: ErrorResponse,
    headers: Optional[dict] = None,
) -> JSONResponse:
    headers = dict(headers or {})
    req_id = _request_id(request)
    if req_id:
        headers[REQUEST_ID_HEADER] = req_id
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    """Turn kernel errors into the standard failure envelope."""
    if not exc.expose:
        logger.error(
            "Infrastructure failure: %s",
            exc.message,
            exc_info=exc,
            extra={"error_code": exc.error_code},
        )
    return _error_response(
        request,
        exc.status_code,
        ErrorResponse(
            message=exc.public_message,
            error_code=exc.error_code,
            request_id=_request_id(request) if not exc.expose else None,
        ),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Wrap 401/404 etc. in the standard failure envelope."""
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _error_response(
        request,
        exc.status_code,
        ErrorResponse(message=message),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
):
    """Handle request validation errors."""
    errors = [
        FieldError(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            type=error["type"],
        )
        for error in exc.errors()
    ]
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorResponse(message="Validation error", error_code="validation_error", errors=errors),
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
):
    """Handle unexpected exceptions. Details stay in the server log."""
    logger.exception("Unhandled exception: %s", exc)
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(message="Internal server error", request_id=_request_id(request)),
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check application health."""
    database = "connected"
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        database = "unavailable"

    backend = get_cache_backend()
    cache = "connected" if isinstance(backend, RedisCache) and await backend.ping() else "unavailable"

    return HealthResponse(
        status="ok" if database == "connected" else "degraded",
        version=settings.version,
        database=database,
        cache=cache,
    )


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.project_name,
        "version": settings.version,
        "docs": "/docs" if settings.debug else "disabled",
        "api": {
            "v1": settings.api_v1_prefix,
        },
    }


app.include_router(
    api_v1_router,
    prefix=settings.api_v1_prefix,
)


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
