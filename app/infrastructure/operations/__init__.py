"""Operation result types and status enums.

Standardized result types for operations across the application, including
status enums, the result dataclass, and classifiers for backend HTTP errors.
"""

from infrastructure.operations.classifiers import (
    classify_http_response,
    classify_request_exception,
    extract_error_message,
)
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    "OperationResult",
    "OperationStatus",
    "classify_http_response",
    "classify_request_exception",
    "extract_error_message",
]
