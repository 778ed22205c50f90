"""
Business logic for reviewing the administrative audit trail.

Filtering is delegated to the backend query layer; aggregation for the
analytics and dashboard views happens here over the returned rows.
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
import structlog

from infrastructure.clients.backend import BackendClient, TableQuery, quote_value
from infrastructure.configuration import Settings
from infrastructure.operations import OperationResult
from packages.audit.schemas import (
    AuditAnalytics,
    AuditFilters,
    AuditLogEntry,
    CountItem,
    DashboardOverview,
    ReportConfig,
    ReportFormat,
    ReportSchedule,
    SeverityCounts,
    TimeRange,
)

logger = structlog.get_logger()

SEVERITY_LEVELS = ("info", "warning", "critical")
SENSITIVE_ACTIONS = ("delete", "deactivate", "configuration_change")
ANALYTICS_LIMIT = 1000
DASHBOARD_TODAY_LIMIT = 100

EXPORT_COLUMNS = [
    "id",
    "timestamp",
    "admin_user_id",
    "action_type",
    "resource_type",
    "resource_id",
    "severity_level",
    "ip_address",
    "user_agent",
    "details",
]


def build_query(filters: AuditFilters) -> TableQuery:
    """Translate AuditFilters into a backend query, newest first."""
    query = TableQuery().select("*")
    if filters.action_type:
        query.eq("action_type", filters.action_type)
    if filters.resource_type:
        query.eq("resource_type", filters.resource_type)
    if filters.severity_level:
        query.eq("severity_level", filters.severity_level)
    if filters.admin_user_id:
        query.eq("admin_user_id", filters.admin_user_id)
    if filters.start_date:
        query.gte("timestamp", filters.start_date)
    if filters.end_date:
        query.lte("timestamp", filters.end_date)
    if filters.search:
        pattern = quote_value(f"*{filters.search.strip()}*")
        query.or_(
            f"action_type.ilike.{pattern},"
            f"resource_type.ilike.{pattern},"
            f"resource_id.ilike.{pattern}"
        )
    return query.order("timestamp", ascending=False).limit(filters.limit).offset(filters.offset)


def list_logs(
    backend: BackendClient, settings: Settings, filters: AuditFilters
) -> OperationResult:
    """Fetch audit entries matching ``filters``.

    Returns:
        OperationResult with a list of AuditLogEntry
    """
    log = logger.bind(operation="list_audit_logs", limit=filters.limit)
    result = backend.select(settings.audit.AUDIT_TABLE, build_query(filters))
    if not result.is_success:
        log.warning("audit_logs_fetch_failed", error=result.message)
        return result

    entries = [AuditLogEntry.model_validate(row) for row in result.data]
    log.info("audit_logs_fetched", count=len(entries))
    return OperationResult.success(data=entries)


def _counts(frame: pd.DataFrame, column: str) -> List[CountItem]:
    """Counts per value, most frequent first, ties in order of appearance."""
    counts = (
        frame.groupby(column, sort=False, dropna=False)
        .size()
        .sort_values(ascending=False, kind="stable")
    )
    return [CountItem(key=str(key), count=int(count)) for key, count in counts.items()]


def _severity_counts(frame: pd.DataFrame) -> SeverityCounts:
    levels = frame["severity_level"].fillna("info").replace("", "info")
    counts = levels.value_counts()
    return SeverityCounts(**{level: int(counts.get(level, 0)) for level in SEVERITY_LEVELS})


def _frame(entries: Iterable[AuditLogEntry]) -> pd.DataFrame:
    return pd.DataFrame(
        [entry.model_dump() for entry in entries],
        columns=list(AuditLogEntry.model_fields),
    )


def compute_analytics(entries: List[AuditLogEntry]) -> Optional[AuditAnalytics]:
    """Aggregate entries by action, resource, admin, severity and day.

    Returns:
        AuditAnalytics, or None when there are no entries.
    """
    if not entries:
        return None

    frame = _frame(entries)

    occurred = frame["timestamp"].where(frame["timestamp"].notna(), frame["created_at"])
    days = pd.to_datetime(occurred, utc=True, format="ISO8601", errors="coerce").dropna()
    daily = days.dt.strftime("%Y-%m-%d").value_counts().sort_index()
    daily_activity = [CountItem(key=day, count=int(count)) for day, count in daily.items()]
    avg_daily = float(daily.sum()) / len(daily) if len(daily) else 0.0

    return AuditAnalytics(
        total_actions=len(frame),
        action_types=_counts(frame, "action_type"),
        severity_levels=_severity_counts(frame),
        resource_types=_counts(frame, "resource_type"),
        admin_users=_counts(frame.fillna({"admin_user_id": "unknown"}), "admin_user_id"),
        daily_activity=daily_activity,
        avg_daily_actions=avg_daily,
    )


def get_analytics(
    backend: BackendClient,
    settings: Settings,
    time_range: TimeRange,
    now: Optional[datetime] = None,
) -> OperationResult:
    """Fetch the entries of a time range and aggregate them."""
    start, end = time_range.bounds(now)
    filters = AuditFilters(start_date=start, end_date=end, limit=ANALYTICS_LIMIT)
    result = list_logs(backend, settings, filters)
    if not result.is_success:
        return result

    analytics = compute_analytics(result.data)
    if analytics is None:
        logger.info("audit_analytics_empty", time_range=time_range.value)
    return OperationResult.success(
        data={
            "time_range": time_range,
            "start_date": start,
            "end_date": end,
            "analytics": analytics,
        }
    )


def dashboard_overview(
    backend: BackendClient, settings: Settings, now: Optional[datetime] = None
) -> OperationResult:
    """Today's activity, latest entries and latest critical entries."""
    now = now or datetime.now(timezone.utc)
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)

    recent = list_logs(backend, settings, AuditFilters(limit=10))
    if not recent.is_success:
        return recent
    critical = list_logs(backend, settings, AuditFilters(severity_level="critical", limit=5))
    if not critical.is_success:
        return critical
    today = list_logs(
        backend,
        settings,
        AuditFilters(start_date=start_of_day, limit=DASHBOARD_TODAY_LIMIT),
    )
    if not today.is_success:
        return today

    today_entries: List[AuditLogEntry] = today.data
    frame = _frame(today_entries)

    def action_count(action: str) -> int:
        return sum(1 for entry in today_entries if entry.action_type == action)

    overview = DashboardOverview(
        today_count=len(today_entries),
        action_types_today=_counts(frame, "action_type") if today_entries else [],
        severity_today=_severity_counts(frame) if today_entries else SeverityCounts(),
        recent=recent.data,
        recent_critical=critical.data,
        sensitive_today=[e for e in today_entries if e.action_type in SENSITIVE_ACTIONS],
        delete_count_today=action_count("delete"),
        deactivate_count_today=action_count("deactivate"),
        login_count_today=action_count("login"),
    )
    return OperationResult.success(data=overview)


def _export_value(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, sort_keys=True)
    return value


def entries_to_csv(entries: List[AuditLogEntry]) -> str:
    """Render entries as CSV with a fixed column order.

    ``timestamp`` falls back to ``created_at``; ``details`` is JSON encoded.
    An empty list yields the header line only.
    """
    rows = []
    for entry in entries:
        row = entry.model_dump()
        row["timestamp"] = row.get("timestamp") or row.get("created_at")
        rows.append({column: _export_value(row.get(column)) for column in EXPORT_COLUMNS})

    frame = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
    return frame.to_csv(index=False, lineterminator="\n")


def export_csv(
    backend: BackendClient, settings: Settings, filters: AuditFilters
) -> OperationResult:
    """Export exactly the rows ``filters`` selects as CSV."""
    capped = filters.model_copy(
        update={"limit": min(filters.limit, settings.audit.AUDIT_EXPORT_MAX_ROWS)}
    )
    result = list_logs(backend, settings, capped)
    if not result.is_success:
        return result

    csv_text = entries_to_csv(result.data)
    logger.info("audit_logs_exported", rows=len(result.data))
    return OperationResult.success(data=csv_text, message=f"{len(result.data)} rows exported")


def predefined_reports(now: Optional[datetime] = None) -> List[ReportConfig]:
    """Built-in reports, date windows anchored on ``now``."""
    now = now or datetime.now(timezone.utc)
    return [
        ReportConfig(
            name="Rapport de sécurité quotidien",
            description="Actions critiques et suppressions des dernières 24h",
            filters=AuditFilters(
                severity_level="critical",
                start_date=now - timedelta(hours=24),
                limit=1000,
            ),
            format=ReportFormat.CSV,
            schedule=ReportSchedule.DAILY,
        ),
        ReportConfig(
            name="Analyse hebdomadaire des administrateurs",
            description="Activité de tous les administrateurs sur 7 jours",
            filters=AuditFilters(start_date=now - timedelta(days=7), limit=5000),
            format=ReportFormat.CSV,
            schedule=ReportSchedule.WEEKLY,
        ),
    ]


def generate_report(
    backend: BackendClient, settings: Settings, config: ReportConfig
) -> OperationResult:
    """Run a report and render it in its configured format.

    Returns:
        OperationResult with ``{"name", "format", "content", "rows"}``
    """
    log = logger.bind(report=config.name, format=config.format.value)
    result = list_logs(backend, settings, config.filters)
    if not result.is_success:
        log.warning("audit_report_failed", error=result.message)
        return result

    entries: List[AuditLogEntry] = result.data
    if config.format == ReportFormat.JSON:
        content = json.dumps(
            [entry.model_dump() for entry in entries], ensure_ascii=False, indent=2
        )
    else:
        content = entries_to_csv(entries)

    log.info("audit_report_generated", rows=len(entries))
    report: Dict[str, Any] = {
        "name": config.name,
        "format": config.format.value,
        "content": content,
        "rows": len(entries),
    }
    return OperationResult.success(data=report)


def cleanup_logs(
    backend: BackendClient, settings: Settings, retention_days: Optional[int] = None
) -> OperationResult:
    """Ask the backend to purge audit entries older than the retention period."""
    days = retention_days if retention_days is not None else settings.audit.AUDIT_RETENTION_DAYS
    if days < 1:
        return OperationResult.permanent_error(
            "retention_days must be at least 1", error_code="INVALID_RETENTION"
        )

    log = logger.bind(operation="cleanup_audit_logs", retention_days=days)
    result = backend.invoke_function(
        settings.audit.AUDIT_CLEANUP_FUNCTION, {"retention_days": days}
    )
    if not result.is_success:
        log.error("audit_cleanup_failed", error=result.message)
        return result

    log.info("audit_cleanup_completed", response=result.data)
    return OperationResult.success(data=result.data, message="Audit log cleanup completed")
