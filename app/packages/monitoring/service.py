"""
Business logic for uptime and business monitoring.

Monitors, incidents, notification channels, status pages and business
metrics are tenant-owned rows; the backend client passed in is always
scoped to the acting user so row-level security applies.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from infrastructure.audit import audit_action
from infrastructure.clients.backend import BackendClient, TableQuery
from infrastructure.configuration import Settings
from infrastructure.identity import User
from infrastructure.notifications import (
    build_channel,
    build_test_message,
    validate_channel_config,
)
from infrastructure.operations import OperationResult
from packages.monitoring.schemas import (
    BusinessMetricCreate,
    BusinessMetricView,
    ChannelCreate,
    Incident,
    IncidentFilters,
    IncidentStatus,
    MetricStatus,
    Monitor,
    MonitorCreate,
    MonitorFilters,
    NotificationChannelRecord,
    StatusPage,
    StatusPageCreate,
)
from utils.slugs import slugify

logger = structlog.get_logger()

MONITORS_TABLE = "monitors"
INCIDENTS_TABLE = "monitor_incidents"
CHANNELS_TABLE = "notification_channels"
STATUS_PAGES_TABLE = "status_pages"
METRICS_TABLE = "business_metrics"

ANY = "all"


def _audit(backend, user, settings, action, resource_type, resource_id, **details):
    audit_action(
        backend,
        user,
        action,
        resource_type,
        resource_id,
        details=details or None,
        table=settings.audit.AUDIT_TABLE,
    )


def _by_id(row_id: str) -> TableQuery:
    return TableQuery().eq("id", row_id)


def _first_row(result: OperationResult, what: str) -> OperationResult:
    """Unwrap the single row returned by a mutation."""
    if not result.is_success:
        return result
    rows = result.data or []
    if not rows:
        return OperationResult.not_found(f"{what} not found")
    return OperationResult.success(data=rows[0])


# Monitors


def create_monitor(
    backend: BackendClient, user: User, settings: Settings, request: MonitorCreate
) -> OperationResult:
    row = request.model_dump(mode="json")
    if row["timeout_seconds"] is None:
        row["timeout_seconds"] = settings.monitoring.MONITOR_DEFAULT_TIMEOUT_SECONDS
    if row["check_interval_minutes"] is None:
        row["check_interval_minutes"] = settings.monitoring.MONITOR_DEFAULT_INTERVAL_MINUTES
    row["repairer_id"] = user.id

    log = logger.bind(operation="create_monitor", monitor_type=row["type"])
    result = _first_row(backend.insert(MONITORS_TABLE, row), "Monitor")
    if not result.is_success:
        log.warning("monitor_create_failed", error=result.message)
        return result

    monitor = Monitor.model_validate(result.data)
    log.info("monitor_created", monitor_id=monitor.id)
    _audit(backend, user, settings, "create", "monitor", monitor.id, name=monitor.name)
    return OperationResult.success(data=monitor, message="Monitor créé avec succès")


def list_monitors(backend: BackendClient, user: User) -> OperationResult:
    query = TableQuery().eq("repairer_id", user.id).order("created_at", ascending=False)
    result = backend.select(MONITORS_TABLE, query)
    if not result.is_success:
        return result
    return OperationResult.success(data=[Monitor.model_validate(row) for row in result.data])


def filter_monitors(monitors: List[Monitor], filters: MonitorFilters) -> List[Monitor]:
    """Narrow by search term (name or URL, case-insensitive) and type."""
    term = (filters.search or "").strip().lower()
    kind = filters.type if filters.type and filters.type != ANY else None

    def matches(monitor: Monitor) -> bool:
        if kind and monitor.type != kind:
            return False
        if term:
            haystacks = (monitor.name or "", monitor.url or "")
            return any(term in value.lower() for value in haystacks)
        return True

    return [monitor for monitor in monitors if matches(monitor)]


def set_monitor_active(
    backend: BackendClient,
    user: User,
    settings: Settings,
    monitor_id: str,
    is_active: bool,
) -> OperationResult:
    result = _first_row(
        backend.update(MONITORS_TABLE, {"is_active": is_active}, _by_id(monitor_id)),
        "Monitor",
    )
    if not result.is_success:
        return result

    action = "activate" if is_active else "deactivate"
    _audit(backend, user, settings, action, "monitor", monitor_id)
    message = "Monitor activé" if is_active else "Monitor désactivé"
    return OperationResult.success(data=Monitor.model_validate(result.data), message=message)


def delete_monitor(
    backend: BackendClient, user: User, settings: Settings, monitor_id: str
) -> OperationResult:
    result = _first_row(backend.delete(MONITORS_TABLE, _by_id(monitor_id)), "Monitor")
    if not result.is_success:
        return result
    _audit(backend, user, settings, "delete", "monitor", monitor_id)
    return OperationResult.success(message="Monitor supprimé")


# Incidents


def _incident_from_row(row: Dict[str, Any]) -> Incident:
    monitor = row.get("monitors") or {}
    incident = Incident.model_validate(
        {**row, "monitor_name": monitor.get("name"), "monitor_type": monitor.get("type")}
    )
    if incident.started_at and incident.resolved_at:
        started = datetime.fromisoformat(incident.started_at.replace("Z", "+00:00"))
        resolved = datetime.fromisoformat(incident.resolved_at.replace("Z", "+00:00"))
        incident.duration_minutes = round((resolved - started).total_seconds() / 60)
    return incident


def list_incidents(
    backend: BackendClient, user: User, filters: Optional[IncidentFilters] = None
) -> OperationResult:
    """Incidents of the tenant's monitors, newest first."""
    filters = filters or IncidentFilters()
    query = (
        TableQuery()
        .select("*, monitors!inner(name, type, repairer_id)")
        .eq("monitors.repairer_id", user.id)
    )
    if filters.status and filters.status != ANY:
        query.eq("status", filters.status)
    if filters.severity and filters.severity != ANY:
        query.eq("severity", filters.severity)
    query.order("started_at", ascending=False)

    result = backend.select(INCIDENTS_TABLE, query)
    if not result.is_success:
        return result
    return OperationResult.success(data=[_incident_from_row(row) for row in result.data])


def update_incident_status(
    backend: BackendClient,
    user: User,
    settings: Settings,
    incident_id: str,
    status: IncidentStatus,
    now: Optional[datetime] = None,
) -> OperationResult:
    """Change an incident's status; resolving it stamps ``resolved_at``."""
    values: Dict[str, Any] = {"status": status.value}
    if status == IncidentStatus.RESOLVED:
        values["resolved_at"] = (now or datetime.now(timezone.utc)).isoformat()

    result = _first_row(
        backend.update(INCIDENTS_TABLE, values, _by_id(incident_id)), "Incident"
    )
    if not result.is_success:
        return result

    _audit(
        backend, user, settings, "update", "incident", incident_id, status=status.value
    )
    return OperationResult.success(data=_incident_from_row(result.data))


# Notification channels


def list_channels(backend: BackendClient, user: User) -> OperationResult:
    query = TableQuery().eq("repairer_id", user.id).order("created_at", ascending=False)
    result = backend.select(CHANNELS_TABLE, query)
    if not result.is_success:
        return result
    return OperationResult.success(
        data=[NotificationChannelRecord.model_validate(row) for row in result.data]
    )


def create_channel(
    backend: BackendClient, user: User, settings: Settings, request: ChannelCreate
) -> OperationResult:
    validated = validate_channel_config(request.type, request.config)
    if not validated.is_success:
        return validated

    row = {
        "repairer_id": user.id,
        "name": request.name,
        "type": request.type.value,
        "config": validated.data,
        "is_active": request.is_active,
    }
    result = _first_row(backend.insert(CHANNELS_TABLE, row), "Channel")
    if not result.is_success:
        return result

    channel = NotificationChannelRecord.model_validate(result.data)
    _audit(backend, user, settings, "create", "notification_channel", channel.id, type=channel.type)
    return OperationResult.success(data=channel, message="Canal de notification créé")


def set_channel_active(
    backend: BackendClient,
    user: User,
    settings: Settings,
    channel_id: str,
    is_active: bool,
) -> OperationResult:
    result = _first_row(
        backend.update(CHANNELS_TABLE, {"is_active": is_active}, _by_id(channel_id)),
        "Channel",
    )
    if not result.is_success:
        return result
    action = "activate" if is_active else "deactivate"
    _audit(backend, user, settings, action, "notification_channel", channel_id)
    return OperationResult.success(
        data=NotificationChannelRecord.model_validate(result.data),
        message=f"Canal {'activé' if is_active else 'désactivé'}",
    )


def delete_channel(
    backend: BackendClient, user: User, settings: Settings, channel_id: str
) -> OperationResult:
    result = _first_row(backend.delete(CHANNELS_TABLE, _by_id(channel_id)), "Channel")
    if not result.is_success:
        return result
    _audit(backend, user, settings, "delete", "notification_channel", channel_id)
    return OperationResult.success(message="Canal de notification supprimé")


def test_channel(
    backend: BackendClient, user: User, settings: Settings, channel_id: str
) -> OperationResult:
    """Deliver a test message through a stored channel."""
    log = logger.bind(operation="test_channel", channel_id=channel_id)
    found = backend.select_one(CHANNELS_TABLE, _by_id(channel_id))
    if not found.is_success:
        return found

    record = NotificationChannelRecord.model_validate(found.data)
    built = build_channel(
        record.type,
        record.config,
        backend,
        function_name=settings.monitoring.NOTIFICATION_FUNCTION,
        user_id=user.id,
    )
    if not built.is_success:
        log.warning("channel_config_invalid", error=built.message)
        return built

    sent = built.data.send(build_test_message(record.name or record.type))
    if not sent.is_success:
        log.warning("channel_test_failed", error=sent.message, error_code=sent.error_code)
        return sent

    log.info("channel_test_sent", channel_type=record.type)
    return OperationResult.success(message="Test de notification envoyé !")


# Status pages


def status_page_url(settings: Settings, slug: str) -> str:
    return f"{settings.monitoring.STATUS_PAGE_BASE_URL.rstrip('/')}/{slug}"


def _status_page(settings: Settings, row: Dict[str, Any]) -> StatusPage:
    page = StatusPage.model_validate(row)
    page.url = status_page_url(settings, page.slug)
    return page


def list_status_pages(backend: BackendClient, user: User, settings: Settings) -> OperationResult:
    query = TableQuery().eq("repairer_id", user.id).order("created_at", ascending=False)
    result = backend.select(STATUS_PAGES_TABLE, query)
    if not result.is_success:
        return result
    return OperationResult.success(data=[_status_page(settings, row) for row in result.data])


def create_status_page(
    backend: BackendClient, user: User, settings: Settings, request: StatusPageCreate
) -> OperationResult:
    slug = slugify(request.slug or request.name)
    if not slug:
        return OperationResult.permanent_error(
            "A status page needs a name or slug with letters or digits",
            error_code="INVALID_SLUG",
        )

    existing = backend.select(STATUS_PAGES_TABLE, TableQuery().select("id").eq("slug", slug).limit(1))
    if not existing.is_success:
        return existing
    if existing.data:
        return OperationResult.conflict(
            f"The status page URL '{slug}' is already taken", data={"slug": slug}
        )

    row = {
        "repairer_id": user.id,
        "name": request.name,
        "slug": slug,
        "description": request.description,
        "is_public": request.is_public,
    }
    result = _first_row(backend.insert(STATUS_PAGES_TABLE, row), "Status page")
    if not result.is_success:
        return result

    page = _status_page(settings, result.data)
    _audit(backend, user, settings, "create", "status_page", page.id, slug=slug)
    return OperationResult.success(data=page, message="Page de statut créée")


def set_status_page_public(
    backend: BackendClient,
    user: User,
    settings: Settings,
    page_id: str,
    is_public: bool,
) -> OperationResult:
    result = _first_row(
        backend.update(STATUS_PAGES_TABLE, {"is_public": is_public}, _by_id(page_id)),
        "Status page",
    )
    if not result.is_success:
        return result
    _audit(backend, user, settings, "update", "status_page", page_id, is_public=is_public)
    return OperationResult.success(data=_status_page(settings, result.data))


def delete_status_page(
    backend: BackendClient, user: User, settings: Settings, page_id: str
) -> OperationResult:
    result = _first_row(backend.delete(STATUS_PAGES_TABLE, _by_id(page_id)), "Status page")
    if not result.is_success:
        return result
    _audit(backend, user, settings, "delete", "status_page", page_id)
    return OperationResult.success(message="Page de statut supprimée")


# Business metrics


def metric_progress(current: float, target: float) -> float:
    """Percentage of target reached, capped at 100."""
    if not target:
        return 0.0
    return min(current / target * 100, 100.0)


def metric_status(current: float, warning: float, critical: float) -> MetricStatus:
    if current <= critical:
        return MetricStatus.CRITICAL
    if current <= warning:
        return MetricStatus.WARNING
    return MetricStatus.HEALTHY


def metric_trend(current: Optional[float], target: Optional[float]) -> str:
    if current and target and current > target * 0.9:
        return "up"
    return "down"


def to_metric_view(row: Dict[str, Any]) -> BusinessMetricView:
    """Apply display defaults; zero or missing values fall back to them."""
    current = row.get("current_value") or 0
    target = row.get("target_value") or 100
    warning = row.get("threshold_warning") or 50
    critical = row.get("threshold_critical") or 25
    return BusinessMetricView(
        id=str(row.get("id")),
        metric_name=row.get("metric_name") or "",
        metric_type=row.get("metric_type") or "general",
        current_value=current,
        target_value=target,
        threshold_warning=warning,
        threshold_critical=critical,
        unit=row.get("unit") or "",
        progress=metric_progress(current, target),
        status=metric_status(current, warning, critical),
        trend=metric_trend(row.get("current_value"), row.get("target_value")),
    )


def placeholder_metric() -> BusinessMetricView:
    """Shown while a tenant has not configured any metric."""
    return BusinessMetricView(
        id="setup",
        metric_name="Métriques en cours de configuration",
        metric_type="setup",
        current_value=0,
        target_value=100,
        threshold_warning=50,
        threshold_critical=25,
        unit="%",
        progress=0,
        status=MetricStatus.CRITICAL,
        trend="up",
        placeholder=True,
    )


def list_business_metrics(backend: BackendClient, user: User) -> OperationResult:
    query = TableQuery().eq("repairer_id", user.id).order("created_at", ascending=False)
    result = backend.select(METRICS_TABLE, query)
    if not result.is_success:
        return result
    views = [to_metric_view(row) for row in result.data] or [placeholder_metric()]
    return OperationResult.success(data=views)


def create_business_metric(
    backend: BackendClient,
    user: User,
    settings: Settings,
    request: BusinessMetricCreate,
) -> OperationResult:
    row = {**request.model_dump(), "repairer_id": user.id}
    result = _first_row(backend.insert(METRICS_TABLE, row), "Metric")
    if not result.is_success:
        return result
    view = to_metric_view(result.data)
    _audit(backend, user, settings, "create", "business_metric", view.id, name=view.metric_name)
    return OperationResult.success(data=view)
