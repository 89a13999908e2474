"""Maplepress API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.admin.router import router as admin_router
from src.admin.service import StatsService
from src.auth.router import router as auth_router
from src.blog.posts import PostRepository
from src.blog.router import router as blog_router
from src.comments.router import router as comments_router
from src.comments.service import CommentService
from src.config import get_settings
from src.core.context import get_request_id
from src.core.leancloud import LeanCloudClient, LeanCloudError
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware
from src.core.redis import init_redis, shutdown_redis
from src.health.router import router as health_router
from src.likes.router import router as likes_router
from src.likes.service import PostLikeService
from src.shortlink.service import SinkClient
from src.telegram.client import TelegramClient
from src.telegram.router import router as telegram_router
from src.telegram.service import TelegramService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


# Application state for dependency injection
class AppState:
    """Application state container.

    Clients are built once at start-up and handed to the services; routes
    reach them through ``request.app.state``.
    """

    leancloud: LeanCloudClient | None = None
    redis: Any = None
    sink_client: SinkClient | None = None
    telegram_client: TelegramClient | None = None
    comment_service: CommentService | None = None
    post_like_service: PostLikeService | None = None
    stats_service: StatsService | None = None
    telegram_service: TelegramService | None = None
    post_repository: PostRepository | None = None

    def publish(self, app: FastAPI) -> None:
        """Expose every component on ``app.state``."""
        for name in AppState.__annotations__:
            setattr(app.state, name, getattr(self, name))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    state = AppState()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    # Initialize Redis (non-critical - app works without it)
    try:
        state.redis = await init_redis(settings)
    except Exception as e:
        logger.warning(
            "redis_init_skipped",
            error=str(e),
            message="Running without Redis - rate limiting and shared cache disabled",
        )

    # External HTTP clients
    state.sink_client = SinkClient.from_settings(settings)
    state.telegram_client = TelegramClient.from_settings(settings, redis=state.redis)
    state.telegram_service = TelegramService(state.telegram_client)
    state.post_repository = PostRepository(
        settings.content_dir, settings.site_url, sink=state.sink_client
    )

    # LeanCloud-backed services
    if settings.leancloud_configured:
        state.leancloud = LeanCloudClient.from_settings(settings)
        state.comment_service = CommentService(state.leancloud, redis=state.redis)
        state.post_like_service = PostLikeService(state.leancloud)
        state.stats_service = StatsService(
            state.leancloud, state.post_like_service, state.sink_client
        )
        logger.info("leancloud_services_initialized")
    else:
        logger.warning(
            "leancloud_not_configured",
            message="Comment, like and admin endpoints will answer 500",
        )

    state.publish(app)

    yield

    # Shutdown
    logger.info("shutting_down_application")
    if state.leancloud:
        await state.leancloud.aclose()
    await state.sink_client.aclose()
    await state.telegram_client.aclose()
    await shutdown_redis(state.redis)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # Stack traces are never exposed; exception handlers below log details
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Blog backend: comments, likes, channel mirror and analytics",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (must be added first - outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        """Get request_id from request state or context."""
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id()

    def _error_response(
        request: Request, status_code: int, message: str, **extra: Any
    ) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=status_code,
            content={
                "error": True,
                "message": message,
                "status_code": status_code,
                "request_id": _get_request_id_safe(request),
                **extra,
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions with safe error messages."""
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )
        message = (
            str(exc.detail)
            if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
            else "Internal server error"
        )
        return _error_response(request, exc.status_code, message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Handle validation errors with safe error messages."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )
        return _error_response(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Validation error",
            details=[
                {
                    "field": ".".join(str(loc) for loc in err.get("loc", [])),
                    "message": err.get("msg", "Invalid value"),
                }
                for err in exc.errors()
            ],
        )

    @app.exception_handler(LeanCloudError)
    async def leancloud_exception_handler(
        request: Request, exc: LeanCloudError
    ) -> ORJSONResponse:
        """Storage backend failures surface as a generic 500."""
        logger.error(
            "leancloud_error",
            error=exc.message,
            upstream_status=exc.status_code,
            code=exc.code,
            path=request.url.path,
            method=request.method,
        )
        return _error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Storage backend error",
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler for unhandled exceptions.

        Stack traces are logged, never returned.
        """
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )
        return _error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred. Please try again later.",
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(comments_router)
    app.include_router(likes_router)
    app.include_router(admin_router)
    app.include_router(telegram_router)
    app.include_router(blog_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "Maplepress API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    uvicorn.run(
        "src.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )
