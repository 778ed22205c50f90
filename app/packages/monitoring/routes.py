"""FastAPI routes for the monitoring package."""

from typing import List

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from infrastructure.operations.http import raise_for_result
from infrastructure.services import CurrentUserDep, SettingsDep, TenantBackendDep
from packages.monitoring import service
from packages.monitoring.schemas import (
    BusinessMetricCreate,
    BusinessMetricView,
    ChannelCreate,
    Incident,
    IncidentFilters,
    IncidentStatusUpdate,
    Monitor,
    MonitorCreate,
    MonitorFilters,
    NotificationChannelRecord,
    StatusPage,
    StatusPageCreate,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/monitoring", tags=["monitoring"])


class ActiveToggle(BaseModel):
    is_active: bool


class PublicToggle(BaseModel):
    is_public: bool


class MessageResponse(BaseModel):
    message: str


@router.get("/monitors", response_model=List[Monitor])
def get_monitors(
    user: CurrentUserDep,
    backend: TenantBackendDep,
    filters: MonitorFilters = Depends(),
) -> List[Monitor]:
    result = service.list_monitors(backend, user)
    raise_for_result(result)
    return service.filter_monitors(result.data, filters)


@router.post("/monitors", response_model=Monitor, status_code=201)
def post_monitor(
    request: MonitorCreate,
    user: CurrentUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> Monitor:
    result = service.create_monitor(backend, user, settings, request)
    raise_for_result(result)
    return result.data


@router.patch("/monitors/{monitor_id}/active", response_model=Monitor)
def patch_monitor_active(
    monitor_id: str,
    toggle: ActiveToggle,
    user: CurrentUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> Monitor:
    result = service.set_monitor_active(backend, user, settings, monitor_id, toggle.is_active)
    raise_for_result(result)
    return result.data


@router.delete("/monitors/{monitor_id}", response_model=MessageResponse)
def delete_monitor(
    monitor_id: str, user: CurrentUserDep, backend: TenantBackendDep, settings: SettingsDep
) -> MessageResponse:
    result = service.delete_monitor(backend, user, settings, monitor_id)
    raise_for_result(result)
    return MessageResponse(message=result.message)


@router.get("/incidents", response_model=List[Incident])
def get_incidents(
    user: CurrentUserDep,
    backend: TenantBackendDep,
    filters: IncidentFilters = Depends(),
) -> List[Incident]:
    result = service.list_incidents(backend, user, filters)
    raise_for_result(result)
    return result.data


@router.patch("/incidents/{incident_id}/status", response_model=Incident)
def patch_incident_status(
    incident_id: str,
    update: IncidentStatusUpdate,
    user: CurrentUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> Incident:
    result = service.update_incident_status(backend, user, settings, incident_id, update.status)
    raise_for_result(result)
    return result.data


@router.get("/channels", response_model=List[NotificationChannelRecord])
def get_channels(user: CurrentUserDep, backend: TenantBackendDep) -> List[NotificationChannelRecord]:
    result = service.list_channels(backend, user)
    raise_for_result(result)
    return result.data


@router.post("/channels", response_model=NotificationChannelRecord, status_code=201)
def post_channel(
    request: ChannelCreate,
    user: CurrentUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> NotificationChannelRecord:
    result = service.create_channel(backend, user, settings, request)
    raise_for_result(result)
    return result.data


@router.patch("/channels/{channel_id}/active", response_model=NotificationChannelRecord)
def patch_channel_active(
    channel_id: str,
    toggle: ActiveToggle,
    user: CurrentUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> NotificationChannelRecord:
    result = service.set_channel_active(backend, user, settings, channel_id, toggle.is_active)
    raise_for_result(result)
    return result.data


@router.delete("/channels/{channel_id}", response_model=MessageResponse)
def delete_channel(
    channel_id: str, user: CurrentUserDep, backend: TenantBackendDep, settings: SettingsDep
) -> MessageResponse:
    result = service.delete_channel(backend, user, settings, channel_id)
    raise_for_result(result)
    return MessageResponse(message=result.message)


@router.post("/channels/{channel_id}/test", response_model=MessageResponse)
def post_channel_test(
    channel_id: str, user: CurrentUserDep, backend: TenantBackendDep, settings: SettingsDep
) -> MessageResponse:
    result = service.test_channel(backend, user, settings, channel_id)
    raise_for_result(result)
    return MessageResponse(message=result.message)


@router.get("/status-pages", response_model=List[StatusPage])
def get_status_pages(
    user: CurrentUserDep, backend: TenantBackendDep, settings: SettingsDep
) -> List[StatusPage]:
    result = service.list_status_pages(backend, user, settings)
    raise_for_result(result)
    return result.data


@router.post("/status-pages", response_model=StatusPage, status_code=201)
def post_status_page(
    request: StatusPageCreate,
    user: CurrentUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> StatusPage:
    result = service.create_status_page(backend, user, settings, request)
    raise_for_result(result)
    return result.data


@router.patch("/status-pages/{page_id}/public", response_model=StatusPage)
def patch_status_page_public(
    page_id: str,
    toggle: PublicToggle,
    user: CurrentUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> StatusPage:
    result = service.set_status_page_public(backend, user, settings, page_id, toggle.is_public)
    raise_for_result(result)
    return result.data


@router.delete("/status-pages/{page_id}", response_model=MessageResponse)
def delete_status_page(
    page_id: str, user: CurrentUserDep, backend: TenantBackendDep, settings: SettingsDep
) -> MessageResponse:
    result = service.delete_status_page(backend, user, settings, page_id)
    raise_for_result(result)
    return MessageResponse(message=result.message)


@router.get("/metrics", response_model=List[BusinessMetricView])
def get_metrics(user: CurrentUserDep, backend: TenantBackendDep) -> List[BusinessMetricView]:
    result = service.list_business_metrics(backend, user)
    raise_for_result(result)
    return result.data


@router.post("/metrics", response_model=BusinessMetricView, status_code=201)
def post_metric(
    request: BusinessMetricCreate,
    user: CurrentUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> BusinessMetricView:
    result = service.create_business_metric(backend, user, settings, request)
    raise_for_result(result)
    return result.data
