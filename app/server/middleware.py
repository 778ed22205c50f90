from starlette.middleware.base import BaseHTTPMiddleware

from infrastructure.logging import bind_request_context, get_correlation_id

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Bind a correlation id to every log line of a request and echo it back."""

    async def dispatch(self, request, call_next):
        with bind_request_context(
            correlation_id=request.headers.get(CORRELATION_HEADER),
            request_path=request.url.path,
            request_method=request.method,
        ):
            correlation_id = get_correlation_id()
            response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
