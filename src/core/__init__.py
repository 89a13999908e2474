# Core infrastructure
from src.core.context import (
    clear_context,
    get_context,
    get_correlation_id,
    get_device_id,
    get_request_id,
    set_correlation_id,
    set_device_id,
    set_request_id,
)
from src.core.leancloud import LeanCloudClient, LeanCloudError
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware
from src.core.redis import init_redis, shutdown_redis


__all__ = [
    "LeanCloudClient",
    "LeanCloudError",
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_correlation_id",
    "get_device_id",
    "get_logger",
    "get_request_id",
    "init_redis",
    "set_correlation_id",
    "set_device_id",
    "set_request_id",
    "shutdown_redis",
]
