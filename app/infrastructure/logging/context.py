"""Request context binding for structured logging.

Binds request-scoped values (correlation id, acting user, path) to
structlog's context variables so every log line emitted while serving a
request carries them.
"""

import uuid
from contextlib import contextmanager
from typing import Any, Generator, Optional

import structlog


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    user_email: Optional[str] = None,
    user_id: Optional[str] = None,
    request_path: Optional[str] = None,
    request_method: Optional[str] = None,
    **extra_context: Any,
) -> Generator[None, None, None]:
    """Bind request-scoped context to all logs within the block.

    Args:
        correlation_id: Unique request identifier. Generated when missing.
        user_email: Email of the authenticated user, if known.
        user_id: ID of the authenticated user, if known.
        request_path: HTTP request path.
        request_method: HTTP method.
        **extra_context: Additional key-value pairs to include in logs.

    Example:
        with bind_request_context(
            correlation_id=request.headers.get("X-Correlation-ID"),
            request_path=request.url.path,
            request_method=request.method,
        ):
            response = await call_next(request)
    """
    context: dict[str, Any] = {"correlation_id": correlation_id or str(uuid.uuid4())}

    optional = {
        "user_email": user_email,
        "user_id": user_id,
        "request_path": request_path,
        "request_method": request_method,
    }
    context.update({key: value for key, value in optional.items() if value is not None})
    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from the logging context."""
    return structlog.contextvars.get_contextvars().get("correlation_id")


def bind_user_context(user_id: str, user_email: Optional[str] = None) -> None:
    """Attach the resolved acting user to the current request context."""
    values = {"user_id": user_id}
    if user_email:
        values["user_email"] = user_email
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    """Clear all request-scoped context from the logging context."""
    structlog.contextvars.clear_contextvars()
