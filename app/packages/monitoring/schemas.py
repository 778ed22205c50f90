"""Pydantic schemas for the monitoring package."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from infrastructure.notifications import ChannelType


class MonitorType(str, Enum):
    HTTP = "http"
    INFRASTRUCTURE = "infrastructure"
    BUSINESS_METRIC = "business_metric"
    SEO_RANK = "seo_rank"
    CLIENT_SATISFACTION = "client_satisfaction"
    SSL = "ssl"


# Types that check a remote endpoint and therefore need a URL
URL_MONITOR_TYPES = frozenset({MonitorType.HTTP, MonitorType.SSL})


class HttpMethod(str, Enum):
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"


class MonitorCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: MonitorType
    url: Optional[str] = None
    method: HttpMethod = HttpMethod.GET
    timeout_seconds: Optional[int] = Field(default=None, ge=1, le=300)
    check_interval_minutes: Optional[int] = Field(default=None, ge=1, le=1440)
    is_active: bool = True
    settings: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Monitor name is required")
        return v.strip()

    @field_validator("url", mode="before")
    @classmethod
    def blank_url(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def url_required_for_endpoint_checks(self) -> "MonitorCreate":
        if self.type in URL_MONITOR_TYPES:
            if not self.url:
                raise ValueError(f"A URL is required for {self.type.value} monitors")
            if not self.url.startswith(("http://", "https://")):
                raise ValueError("URL must start with http:// or https://")
        return self


class Monitor(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    repairer_id: Optional[str] = None
    name: str
    type: str
    url: Optional[str] = None
    method: str = "GET"
    timeout_seconds: int = 30
    check_interval_minutes: int = 5
    is_active: bool = True
    settings: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)


class MonitorFilters(BaseModel):
    search: Optional[str] = None
    type: Optional[str] = None


class IncidentStatus(str, Enum):
    OPEN = "open"
    INVESTIGATING = "investigating"
    IDENTIFIED = "identified"
    MONITORING = "monitoring"
    RESOLVED = "resolved"


class IncidentSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Incident(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    monitor_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    status: str = IncidentStatus.OPEN.value
    severity: str = IncidentSeverity.MEDIUM.value
    started_at: Optional[str] = None
    resolved_at: Optional[str] = None
    monitor_name: Optional[str] = None
    monitor_type: Optional[str] = None
    duration_minutes: Optional[int] = None

    @field_validator("id", "monitor_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)


class IncidentFilters(BaseModel):
    status: Optional[str] = None
    severity: Optional[str] = None


class IncidentStatusUpdate(BaseModel):
    status: IncidentStatus


class ChannelCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: ChannelType
    config: Dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True


class NotificationChannelRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: Optional[str] = None
    type: str
    config: Dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True
    created_at: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)


class StatusPageCreate(BaseModel):
    name: str = Field(..., min_length=1)
    slug: Optional[str] = None
    description: Optional[str] = None
    is_public: bool = True


class StatusPage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    slug: str
    description: Optional[str] = None
    is_public: bool = True
    url: Optional[str] = None
    created_at: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)


class MetricStatus(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class BusinessMetricCreate(BaseModel):
    metric_name: str = Field(..., min_length=1)
    metric_type: str = "general"
    current_value: float = 0
    target_value: float = 100
    threshold_warning: float = 50
    threshold_critical: float = 25
    unit: str = ""


class BusinessMetricView(BaseModel):
    """Business metric as displayed, defaults applied."""

    id: str
    metric_name: str
    metric_type: str = "general"
    current_value: float = 0
    target_value: float = 100
    threshold_warning: float = 50
    threshold_critical: float = 25
    unit: str = ""
    progress: float = 0
    status: MetricStatus = MetricStatus.HEALTHY
    trend: str = "down"
    placeholder: bool = False


class BusinessMetricList(BaseModel):
    metrics: List[BusinessMetricView]
