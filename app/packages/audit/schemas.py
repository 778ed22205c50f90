"""Pydantic schemas for the audit review package."""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Select placeholders the console sends for "any value"
FILTER_SENTINELS = frozenset({"all", "all-types", "all-resources", "all-levels", "all-fields"})

MAX_LIMIT = 5000


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and (not value.strip() or value in FILTER_SENTINELS):
        return None
    return value


class AuditLogEntry(BaseModel):
    """One row of the audit log table."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    admin_user_id: Optional[str] = None
    action_type: str
    resource_type: str
    resource_id: Optional[str] = None
    severity_level: Optional[str] = "info"
    details: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    timestamp: Optional[str] = None
    created_at: Optional[str] = None

    @field_validator("resource_id", "id", "admin_user_id", mode="before")
    @classmethod
    def coerce_str(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)


class AuditFilters(BaseModel):
    """Filters for listing and exporting audit logs.

    Empty strings and the console's "all-*" placeholders mean no filter.
    """

    action_type: Optional[str] = None
    resource_type: Optional[str] = None
    severity_level: Optional[str] = None
    admin_user_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    search: Optional[str] = None
    limit: int = Field(default=100, ge=1, le=MAX_LIMIT)
    offset: int = Field(default=0, ge=0)

    @field_validator(
        "action_type",
        "resource_type",
        "severity_level",
        "admin_user_id",
        "search",
        "start_date",
        "end_date",
        mode="before",
    )
    @classmethod
    def drop_sentinels(cls, v: Any) -> Any:
        return _blank_to_none(v)


class TimeRange(str, Enum):
    ONE_DAY = "1d"
    SEVEN_DAYS = "7d"
    THIRTY_DAYS = "30d"
    NINETY_DAYS = "90d"

    @property
    def days(self) -> int:
        return int(self.value[:-1])

    def bounds(self, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
        """Return ``(now - N days, now)``."""
        end = now or datetime.now(timezone.utc)
        return end - timedelta(days=self.days), end


class CountItem(BaseModel):
    key: str
    count: int


class SeverityCounts(BaseModel):
    info: int = 0
    warning: int = 0
    critical: int = 0


class AuditAnalytics(BaseModel):
    """Aggregated view of a set of audit log entries."""

    total_actions: int
    action_types: List[CountItem]
    severity_levels: SeverityCounts
    resource_types: List[CountItem]
    admin_users: List[CountItem]
    daily_activity: List[CountItem]
    avg_daily_actions: float


class AnalyticsResponse(BaseModel):
    time_range: TimeRange
    start_date: datetime
    end_date: datetime
    analytics: Optional[AuditAnalytics] = Field(
        None, description="None when the period holds no audit data"
    )


class DashboardOverview(BaseModel):
    today_count: int
    action_types_today: List[CountItem]
    severity_today: SeverityCounts
    recent: List[AuditLogEntry]
    recent_critical: List[AuditLogEntry]
    sensitive_today: List[AuditLogEntry]
    delete_count_today: int
    deactivate_count_today: int
    login_count_today: int


class ReportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


class ReportSchedule(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ReportConfig(BaseModel):
    """A named, reusable audit export."""

    name: str
    description: str = ""
    filters: AuditFilters = Field(default_factory=AuditFilters)
    format: ReportFormat = ReportFormat.CSV
    schedule: Optional[ReportSchedule] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Report name is required")
        return v.strip()


class CleanupRequest(BaseModel):
    retention_days: Optional[int] = Field(
        default=None, description="Defaults to the configured retention period"
    )
