"""Error classifiers for backend HTTP traffic.

Converts ``requests`` responses and exceptions into standardized
OperationResult objects so every caller of the backend sees the same
status vocabulary.

Status Code Mapping:
- 2xx: SUCCESS (handled by the caller)
- 401/403: UNAUTHORIZED
- 404: NOT_FOUND
- 409: PERMANENT_ERROR with error_code CONFLICT
- 429: TRANSIENT_ERROR with retry_after
- other 4xx: PERMANENT_ERROR
- 5xx: TRANSIENT_ERROR

Usage:
    from infrastructure.operations.classifiers import (
        classify_http_response,
        classify_request_exception,
    )

    try:
        response = session.get(url, timeout=30)
    except requests.RequestException as exc:
        return classify_request_exception(exc)
    if not response.ok:
        return classify_http_response(response)
"""

from typing import Optional

import requests

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

DEFAULT_RETRY_AFTER = 60


def extract_error_message(response: requests.Response) -> str:
    """Extract a human readable message from an error response body.

    The backend answers with JSON bodies shaped like ``{"message": ...}``
    (tables and functions) or ``{"error_description": ...}`` / ``{"msg": ...}``
    (auth). Falls back to the raw text.
    """
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    if isinstance(body, dict):
        for key in ("message", "error_description", "msg", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return response.text or f"HTTP {response.status_code}"


def _retry_after(response: requests.Response) -> int:
    header_value: Optional[str] = response.headers.get("Retry-After")
    if header_value:
        try:
            return int(header_value)
        except (TypeError, ValueError):
            pass
    return DEFAULT_RETRY_AFTER


def classify_http_response(response: requests.Response) -> OperationResult:
    """Classify a non-2xx response into an OperationResult.

    Args:
        response: The ``requests`` response returned by the backend.

    Returns:
        OperationResult with an error status and ``HTTP_<code>`` style
        error code (or a named code for well-known cases).
    """
    status_code = response.status_code
    message = extract_error_message(response)

    if status_code in (401, 403):
        return OperationResult.error(
            OperationStatus.UNAUTHORIZED,
            message,
            error_code="UNAUTHORIZED" if status_code == 401 else "FORBIDDEN",
        )

    if status_code == 404:
        return OperationResult.error(
            OperationStatus.NOT_FOUND, message, error_code="NOT_FOUND"
        )

    if status_code == 409:
        return OperationResult.permanent_error(message, error_code="CONFLICT")

    if status_code == 429:
        return OperationResult.transient_error(
            message,
            error_code="RATE_LIMITED",
            retry_after=_retry_after(response),
        )

    if 500 <= status_code < 600:
        retry_after = None
        if "Retry-After" in response.headers:
            retry_after = _retry_after(response)
        return OperationResult.transient_error(
            message, error_code=f"HTTP_{status_code}", retry_after=retry_after
        )

    return OperationResult.permanent_error(message, error_code=f"HTTP_{status_code}")


def classify_request_exception(exc: Exception) -> OperationResult:
    """Classify a transport level failure (timeout, connection reset...).

    These never reached the backend or never came back, so they are always
    reported as transient.
    """
    if isinstance(exc, requests.Timeout):
        return OperationResult.transient_error(
            f"Request timed out: {exc}", error_code="TIMEOUT"
        )
    if isinstance(exc, requests.ConnectionError):
        return OperationResult.transient_error(
            f"Connection error: {exc}", error_code="CONNECTION_ERROR"
        )
    return OperationResult.transient_error(
        f"Request failed: {type(exc).__name__}: {exc}", error_code="REQUEST_ERROR"
    )
