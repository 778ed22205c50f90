"""Translate OperationResult failures into HTTP errors for routes."""

from fastapi import HTTPException

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus


def http_status_for(result: OperationResult) -> int:
    """HTTP status code for a failed result."""
    if result.status == OperationStatus.NOT_FOUND:
        return 404
    if result.status == OperationStatus.UNAUTHORIZED:
        return 401
    if result.status == OperationStatus.PERMANENT_ERROR:
        return 409 if result.error_code == "CONFLICT" else 400
    return 502


def raise_for_result(result: OperationResult) -> None:
    """Raise HTTPException unless ``result`` succeeded.

    Conflicts carry their resolution payload in the response detail.
    """
    if result.is_success:
        return

    status_code = http_status_for(result)
    detail = {"message": result.message, "error_code": result.error_code}
    if status_code == 409 and result.data is not None:
        detail["conflict"] = result.data

    headers = None
    if result.retry_after:
        headers = {"Retry-After": str(result.retry_after)}
    raise HTTPException(status_code=status_code, detail=detail, headers=headers)
