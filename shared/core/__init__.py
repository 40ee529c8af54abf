"""Shared core utilities for services.

Provides common health check and logging functionality.
"""

from .health import ServiceHealth, HealthStatus
from .logging_config import (
    setup_logging,
    get_logger,
    get_trace_context,
    RequestLoggingMiddleware,
    generate_request_id,
    LoggerAdapter,
)

__all__ = [
    # Health checks
    "ServiceHealth",
    "HealthStatus",
    # Logging
    "setup_logging",
    "get_logger",
    "get_trace_context",
    "RequestLoggingMiddleware",
    "generate_request_id",
    "LoggerAdapter",
]
