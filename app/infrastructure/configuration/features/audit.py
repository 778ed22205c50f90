"""Audit review feature settings."""

from pydantic import Field

from infrastructure.configuration.base import FeatureSettings


class AuditFeatureSettings(FeatureSettings):
    """Audit log review configuration.

    Environment Variables:
        AUDIT_TABLE: Table holding administrative audit entries
        AUDIT_PAGE_SIZE: Default number of entries returned by a listing
        AUDIT_EXPORT_MAX_ROWS: Upper bound for listings, exports and reports
        AUDIT_RETENTION_DAYS: Default retention used by the cleanup job
        AUDIT_CLEANUP_FUNCTION: Remote function that purges old entries

    Example:
        ```python
        from infrastructure.services import get_settings

        table = get_settings().audit.AUDIT_TABLE
        ```
    """

    AUDIT_TABLE: str = Field(default="admin_audit_logs", alias="AUDIT_TABLE")
    AUDIT_PAGE_SIZE: int = Field(default=100, alias="AUDIT_PAGE_SIZE")
    AUDIT_EXPORT_MAX_ROWS: int = Field(default=5000, alias="AUDIT_EXPORT_MAX_ROWS")
    AUDIT_RETENTION_DAYS: int = Field(default=90, alias="AUDIT_RETENTION_DAYS")
    AUDIT_CLEANUP_FUNCTION: str = Field(
        default="cleanup-audit-logs", alias="AUDIT_CLEANUP_FUNCTION"
    )
