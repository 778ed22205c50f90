"""Structured logging infrastructure.

Public API:
    - configure_logging(): Initialize logging for the application
    - get_logger(): Get a logger instance with a specific name
    - get_module_logger(): Get a logger for the calling module
    - bind_request_context(): Context manager for request-scoped logging
    - bind_user_context(): Attach the acting user to the request context
    - get_correlation_id(): Get current correlation ID from context
    - clear_request_context(): Clear all request context
"""

from infrastructure.logging.setup import (
    configure_logging,
    get_logger,
    get_module_logger,
    logger,
)

from infrastructure.logging.context import (
    bind_request_context,
    bind_user_context,
    get_correlation_id,
    clear_request_context,
)

from infrastructure.logging.formatters import (
    add_app_info,
    mask_sensitive_data,
    truncate_large_values,
    SENSITIVE_PATTERNS,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "get_module_logger",
    "logger",
    "bind_request_context",
    "bind_user_context",
    "get_correlation_id",
    "clear_request_context",
    "add_app_info",
    "mask_sensitive_data",
    "truncate_large_values",
    "SENSITIVE_PATTERNS",
]
