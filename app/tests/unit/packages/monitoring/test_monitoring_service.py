"""Unit tests for the monitoring service."""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from infrastructure.operations import OperationResult, OperationStatus
from packages.monitoring import service
from packages.monitoring.schemas import (
    BusinessMetricCreate,
    ChannelCreate,
    IncidentFilters,
    IncidentStatus,
    MetricStatus,
    Monitor,
    MonitorCreate,
    MonitorFilters,
    StatusPageCreate,
)


@pytest.fixture(autouse=True)
def audit():
    with patch("packages.monitoring.service.audit_action") as mock_audit:
        yield mock_audit


MONITOR_ROW = {
    "id": 1,
    "repairer_id": "user-1",
    "name": "Site vitrine",
    "type": "http",
    "url": "https://example.com",
    "timeout_seconds": 30,
    "check_interval_minutes": 5,
}


@pytest.mark.unit
class TestMonitorCreate:
    def test_http_requires_url(self):
        with pytest.raises(ValidationError):
            MonitorCreate(name="API", type="http")

    def test_url_scheme_checked(self):
        with pytest.raises(ValidationError):
            MonitorCreate(name="API", type="ssl", url="example.com")

    def test_business_metric_needs_no_url(self):
        assert MonitorCreate(name=" Ventes ", type="business_metric", url="").url is None

    def test_blank_name(self):
        with pytest.raises(ValidationError):
            MonitorCreate(name="   ", type="infrastructure")


@pytest.mark.unit
class TestMonitors:
    def test_create_applies_defaults_and_tenant(self, mock_backend, user, settings, audit):
        mock_backend.insert.return_value = OperationResult.success(data=[MONITOR_ROW])
        request = MonitorCreate(name="Site vitrine", type="http", url="https://example.com")

        result = service.create_monitor(mock_backend, user, settings, request)

        assert result.data.id == "1"
        table, row = mock_backend.insert.call_args.args
        assert table == service.MONITORS_TABLE
        assert row["repairer_id"] == "user-1"
        assert row["timeout_seconds"] == settings.monitoring.MONITOR_DEFAULT_TIMEOUT_SECONDS
        assert row["check_interval_minutes"] == settings.monitoring.MONITOR_DEFAULT_INTERVAL_MINUTES
        assert audit.call_args.args[2:5] == ("create", "monitor", "1")

    def test_create_failure_is_not_audited(self, mock_backend, user, settings, audit):
        mock_backend.insert.return_value = OperationResult.permanent_error("rls")
        request = MonitorCreate(name="x", type="infrastructure")

        assert not service.create_monitor(mock_backend, user, settings, request).is_success
        audit.assert_not_called()

    def test_list_is_scoped_to_user(self, mock_backend, user):
        mock_backend.select.return_value = OperationResult.success(data=[MONITOR_ROW])

        result = service.list_monitors(mock_backend, user)

        assert [m.name for m in result.data] == ["Site vitrine"]
        params = mock_backend.select.call_args.args[1].params()
        assert ("repairer_id", "eq.user-1") in params

    def test_filter(self):
        monitors = [
            Monitor.model_validate(MONITOR_ROW),
            Monitor.model_validate({**MONITOR_ROW, "id": 2, "name": "Serveur", "type": "infrastructure", "url": None}),
        ]

        assert len(service.filter_monitors(monitors, MonitorFilters(type="all"))) == 2
        assert [m.id for m in service.filter_monitors(monitors, MonitorFilters(search="EXAMPLE"))] == ["1"]
        assert [m.id for m in service.filter_monitors(monitors, MonitorFilters(type="infrastructure"))] == ["2"]

    def test_deactivate(self, mock_backend, user, settings, audit):
        mock_backend.update.return_value = OperationResult.success(
            data=[{**MONITOR_ROW, "is_active": False}]
        )

        result = service.set_monitor_active(mock_backend, user, settings, "1", False)

        assert result.data.is_active is False
        assert mock_backend.update.call_args.args[1] == {"is_active": False}
        assert audit.call_args.args[2] == "deactivate"

    def test_delete_missing_row(self, mock_backend, user, settings, audit):
        result = service.delete_monitor(mock_backend, user, settings, "404")

        assert result.status == OperationStatus.NOT_FOUND
        audit.assert_not_called()


@pytest.mark.unit
class TestIncidents:
    def test_list_flattens_monitor_and_computes_duration(self, mock_backend, user):
        mock_backend.select.return_value = OperationResult.success(
            data=[
                {
                    "id": 9,
                    "monitor_id": 1,
                    "status": "resolved",
                    "started_at": "2025-03-01T10:00:00Z",
                    "resolved_at": "2025-03-01T11:30:00Z",
                    "monitors": {"name": "API", "type": "http"},
                }
            ]
        )

        incident = service.list_incidents(
            mock_backend, user, IncidentFilters(status="resolved", severity="all")
        ).data[0]

        assert incident.monitor_name == "API"
        assert incident.duration_minutes == 90
        params = mock_backend.select.call_args.args[1].params()
        assert ("monitors.repairer_id", "eq.user-1") in params
        assert ("status", "eq.resolved") in params
        assert not any(column == "severity" for column, _ in params)

    def test_resolve_stamps_resolved_at(self, mock_backend, user, settings):
        now = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
        mock_backend.update.return_value = OperationResult.success(
            data=[{"id": 9, "status": "resolved"}]
        )

        service.update_incident_status(
            mock_backend, user, settings, "9", IncidentStatus.RESOLVED, now=now
        )

        assert mock_backend.update.call_args.args[1] == {
            "status": "resolved",
            "resolved_at": "2025-03-01T12:00:00+00:00",
        }

    def test_other_status_keeps_resolved_at(self, mock_backend, user, settings):
        mock_backend.update.return_value = OperationResult.success(data=[{"id": 9}])

        service.update_incident_status(mock_backend, user, settings, "9", IncidentStatus.INVESTIGATING)

        assert mock_backend.update.call_args.args[1] == {"status": "investigating"}


@pytest.mark.unit
class TestChannels:
    def test_create_validates_config(self, mock_backend, user, settings):
        request = ChannelCreate(name="Ops", type="sms", config={"phone": "0612"})

        result = service.create_channel(mock_backend, user, settings, request)

        assert result.error_code == "INVALID_CHANNEL_CONFIG"
        mock_backend.insert.assert_not_called()

    def test_create_stores_normalized_config(self, mock_backend, user, settings):
        mock_backend.insert.return_value = OperationResult.success(
            data=[{"id": 3, "name": "Ops", "type": "sms", "config": {"phone": "+33612345678"}}]
        )
        request = ChannelCreate(name="Ops", type="sms", config={"phone": "+33 6 12 34 56 78"})

        result = service.create_channel(mock_backend, user, settings, request)

        assert result.data.id == "3"
        assert mock_backend.insert.call_args.args[1]["config"] == {"phone": "+33612345678"}

    def test_send_test_message(self, mock_backend, user, settings):
        mock_backend.select_one.return_value = OperationResult.success(
            data={"id": 3, "name": "Ops", "type": "email", "config": {"email": "ops@example.com"}}
        )

        result = service.test_channel(mock_backend, user, settings, "3")

        assert result.is_success
        name, body = mock_backend.invoke_function.call_args.args
        assert name == settings.monitoring.NOTIFICATION_FUNCTION
        assert body["userId"] == "user-1"
        assert body["title"] == "Test de notification"
        assert body["channels"] == {"browser": False, "email": True, "sms": False}
        assert body["data"]["recipient"] == "ops@example.com"
        assert "Ops" in body["message"]

    def test_send_with_broken_config(self, mock_backend, user, settings):
        mock_backend.select_one.return_value = OperationResult.success(
            data={"id": 3, "type": "slack", "config": {"webhook_url": "https://example.com"}}
        )

        result = service.test_channel(mock_backend, user, settings, "3")

        assert result.error_code == "INVALID_CHANNEL_CONFIG"
        mock_backend.invoke_function.assert_not_called()


@pytest.mark.unit
class TestStatusPages:
    def test_create(self, mock_backend, user, settings):
        mock_backend.insert.return_value = OperationResult.success(
            data=[{"id": 5, "name": "Mon Atelier", "slug": "mon-atelier"}]
        )

        page = service.create_status_page(
            mock_backend, user, settings, StatusPageCreate(name="Mon Atelier")
        ).data

        assert page.url == "https://topreparateurs.fr/status/mon-atelier"
        assert mock_backend.insert.call_args.args[1]["slug"] == "mon-atelier"

    def test_taken_slug_conflicts(self, mock_backend, user, settings):
        mock_backend.select.return_value = OperationResult.success(data=[{"id": 1}])

        result = service.create_status_page(
            mock_backend, user, settings, StatusPageCreate(name="x", slug="Mon Atelier")
        )

        assert result.error_code == "CONFLICT"
        assert result.data == {"slug": "mon-atelier"}
        mock_backend.insert.assert_not_called()

    def test_unusable_slug(self, mock_backend, user, settings):
        result = service.create_status_page(mock_backend, user, settings, StatusPageCreate(name="!!!"))
        assert result.error_code == "INVALID_SLUG"


@pytest.mark.unit
class TestBusinessMetrics:
    @pytest.mark.parametrize(
        "current,status",
        [(80, MetricStatus.HEALTHY), (50, MetricStatus.WARNING), (25, MetricStatus.CRITICAL)],
    )
    def test_status_thresholds(self, current, status):
        assert service.metric_status(current, 50, 25) == status

    def test_progress_is_capped(self):
        assert service.metric_progress(150, 100) == 100.0
        assert service.metric_progress(10, 0) == 0.0

    def test_view_defaults(self):
        view = service.to_metric_view({"id": 1, "metric_name": "CA", "current_value": 95})

        assert view.target_value == 100
        assert view.progress == 95
        assert view.status == MetricStatus.HEALTHY
        assert view.trend == "down"

    def test_trend_up_near_target(self):
        view = service.to_metric_view(
            {"id": 1, "metric_name": "CA", "current_value": 95, "target_value": 100}
        )
        assert view.trend == "up"

    def test_placeholder_when_empty(self, mock_backend, user):
        views = service.list_business_metrics(mock_backend, user).data

        assert len(views) == 1
        assert views[0].placeholder is True

    def test_create(self, mock_backend, user, settings):
        mock_backend.insert.return_value = OperationResult.success(
            data=[{"id": 2, "metric_name": "Avis", "current_value": 10}]
        )

        view = service.create_business_metric(
            mock_backend, user, settings, BusinessMetricCreate(metric_name="Avis", current_value=10)
        ).data

        assert view.status == MetricStatus.CRITICAL
        assert mock_backend.insert.call_args.args[1]["repairer_id"] == "user-1"
