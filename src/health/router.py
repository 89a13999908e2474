"""Health check endpoints."""

from fastapi import APIRouter, Request

from src.config import get_settings


router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - checks if the application is running."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request) -> dict[str, str | bool | dict[str, bool]]:
    """Readiness probe - reports which backends are wired up.

    Missing optional backends (Redis, Sink, Telegram) do not make the
    service unready; LeanCloud does.
    """
    settings = get_settings()
    state = request.app.state
    components = {
        "leancloud": getattr(state, "leancloud", None) is not None,
        "redis": getattr(state, "redis", None) is not None,
        "sink": settings.sink_configured,
        "telegram": settings.telegram_configured,
    }
    return {
        "status": "ready" if components["leancloud"] else "degraded",
        "environment": settings.environment,
        "components": components,
    }


@router.get("")
async def health() -> dict[str, str]:
    """General health check endpoint."""
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
