"""FastAPI dependencies for admin endpoints."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.shortlink.service import SinkClient, SinkError

from .service import StatsService


async def get_stats_service(request: Request) -> StatsService:
    service = getattr(request.app.state, "stats_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="LeanCloud is not configured",
        )
    return service


async def get_sink_client(request: Request) -> SinkClient:
    client = getattr(request.app.state, "sink_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Sink client not initialized",
        )
    return client


StatsServiceDep = Annotated[StatsService, Depends(get_stats_service)]
SinkClientDep = Annotated[SinkClient, Depends(get_sink_client)]


def handle_sink_error(error: SinkError) -> HTTPException:
    """Convert Sink errors to HTTP exceptions, relaying upstream status."""
    status_map = {
        "invalid_report": status.HTTP_400_BAD_REQUEST,
        "sink_not_configured": status.HTTP_500_INTERNAL_SERVER_ERROR,
    }
    status_code = status_map.get(error.code) or getattr(error, "status_code", None)

    return HTTPException(
        status_code=status_code or status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=error.message,
    )
