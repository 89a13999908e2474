"""Sink short links and analytics."""

from .service import (
    InvalidReportError,
    SinkApiError,
    SinkClient,
    SinkError,
    SinkNotConfiguredError,
    normalize_slug,
)


__all__ = [
    "InvalidReportError",
    "SinkApiError",
    "SinkClient",
    "SinkError",
    "SinkNotConfiguredError",
    "normalize_slug",
]
