"""FastAPI routes for the audit review package (administrators only)."""

from datetime import datetime, timezone
from typing import List

import structlog
from fastapi import APIRouter, Depends, Response

from infrastructure.operations.http import raise_for_result
from infrastructure.services import AdminUserDep, SettingsDep, TenantBackendDep
from packages.audit import service
from packages.audit.schemas import (
    AnalyticsResponse,
    AuditFilters,
    AuditLogEntry,
    CleanupRequest,
    DashboardOverview,
    ReportConfig,
    TimeRange,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/audit", tags=["audit"])


def _csv_response(content: str, name: str) -> Response:
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{name}-{stamp}.csv"'},
    )


@router.get("/logs", response_model=List[AuditLogEntry], summary="List audit logs")
def get_logs(
    admin: AdminUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
    filters: AuditFilters = Depends(),
) -> List[AuditLogEntry]:
    result = service.list_logs(backend, settings, filters)
    raise_for_result(result)
    return result.data


@router.get("/logs/export", summary="Export audit logs as CSV")
def export_logs(
    admin: AdminUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
    filters: AuditFilters = Depends(),
) -> Response:
    """Download exactly the rows the given filters select."""
    logger.info("audit_export_requested", admin_user_id=admin.id)
    result = service.export_csv(backend, settings, filters)
    raise_for_result(result)
    return _csv_response(result.data, "audit-logs")


@router.get("/analytics", response_model=AnalyticsResponse, summary="Audit analytics")
def get_analytics(
    admin: AdminUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
    time_range: TimeRange = TimeRange.SEVEN_DAYS,
) -> AnalyticsResponse:
    result = service.get_analytics(backend, settings, time_range)
    raise_for_result(result)
    return AnalyticsResponse(**result.data)


@router.get("/dashboard", response_model=DashboardOverview, summary="Audit dashboard")
def get_dashboard(
    admin: AdminUserDep, backend: TenantBackendDep, settings: SettingsDep
) -> DashboardOverview:
    result = service.dashboard_overview(backend, settings)
    raise_for_result(result)
    return result.data


@router.get("/reports", response_model=List[ReportConfig], summary="Predefined reports")
def get_reports(admin: AdminUserDep) -> List[ReportConfig]:
    return service.predefined_reports()


@router.post("/reports/generate", summary="Generate a report")
def generate_report(
    config: ReportConfig,
    admin: AdminUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> Response:
    """Run a predefined or custom report and return it as a download."""
    result = service.generate_report(backend, settings, config)
    raise_for_result(result)
    report = result.data
    if report["format"] == "json":
        return Response(content=report["content"], media_type="application/json")
    return _csv_response(report["content"], "audit-report")


@router.post("/cleanup", summary="Purge old audit logs")
def cleanup(
    request: CleanupRequest,
    admin: AdminUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> dict:
    logger.warning(
        "audit_cleanup_requested",
        admin_user_id=admin.id,
        retention_days=request.retention_days,
    )
    result = service.cleanup_logs(backend, settings, request.retention_days)
    raise_for_result(result)
    return {"message": result.message, "result": result.data}
