"""Operation result dataclass.

Every service operation in the console returns an OperationResult instead
of raising, so routes can translate outcomes into HTTP responses in one
place.
"""

from dataclasses import dataclass
from typing import Any, Optional

from infrastructure.operations.status import OperationStatus


@dataclass
class OperationResult:
    """Uniform result returned from operations.

    Attributes:
        status: OperationStatus -- high-level outcome
        message: str -- human-friendly message for logs/troubleshooting
        data: Optional[Any] -- optional payload
        error_code: Optional[str] -- optional machine error code
        retry_after: Optional[int] -- seconds until retry when rate-limited
    """

    status: OperationStatus
    message: str
    data: Optional[Any] = None
    error_code: Optional[str] = None
    retry_after: Optional[int] = None

    @property
    def is_success(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    @classmethod
    def success(
        cls, data: Optional[Any] = None, message: str = "ok"
    ) -> "OperationResult":
        return cls(status=OperationStatus.SUCCESS, message=message, data=data)

    @classmethod
    def error(
        cls,
        status: OperationStatus,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
        data: Optional[Any] = None,
    ) -> "OperationResult":
        return cls(
            status=status,
            message=message,
            error_code=error_code,
            retry_after=retry_after,
            data=data,
        )

    @classmethod
    def transient_error(
        cls,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
    ) -> "OperationResult":
        """Retryable failure: timeouts, rate limits, backend 5xx."""
        return cls.error(
            OperationStatus.TRANSIENT_ERROR, message, error_code, retry_after
        )

    @classmethod
    def permanent_error(
        cls, message: str, error_code: Optional[str] = None
    ) -> "OperationResult":
        """Non-retryable failure: validation errors, rejected writes."""
        return cls.error(OperationStatus.PERMANENT_ERROR, message, error_code)

    @classmethod
    def not_found(cls, message: str) -> "OperationResult":
        return cls.error(OperationStatus.NOT_FOUND, message, error_code="NOT_FOUND")

    @classmethod
    def unauthorized(cls, message: str) -> "OperationResult":
        return cls.error(
            OperationStatus.UNAUTHORIZED, message, error_code="UNAUTHORIZED"
        )

    @classmethod
    def conflict(cls, message: str, data: Optional[Any] = None) -> "OperationResult":
        """Write rejected because it clashes with existing data.

        ``data`` carries whatever the caller needs to resolve the clash,
        e.g. a suggested alternative slug.
        """
        return cls.error(
            OperationStatus.PERMANENT_ERROR, message, error_code="CONFLICT", data=data
        )
