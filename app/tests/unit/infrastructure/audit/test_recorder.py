"""Unit tests for audit event creation and recording."""

from unittest.mock import MagicMock

import pytest

from infrastructure.audit import (
    SeverityLevel,
    audit_action,
    create_audit_event,
    default_severity,
    record_audit_event,
)
from infrastructure.identity import User
from infrastructure.logging import bind_request_context
from infrastructure.operations import OperationResult


@pytest.fixture
def backend():
    mock = MagicMock()
    mock.insert.return_value = OperationResult.success(data=[{"id": "log-1"}])
    return mock


@pytest.mark.unit
class TestCreateAuditEvent:
    @pytest.mark.parametrize(
        "action,expected",
        [
            ("delete", SeverityLevel.WARNING),
            ("deactivate", SeverityLevel.WARNING),
            ("create", SeverityLevel.INFO),
            ("publish", SeverityLevel.INFO),
        ],
    )
    def test_default_severity(self, action, expected):
        assert default_severity(action) == expected

    def test_explicit_severity_wins(self):
        event = create_audit_event("u1", "delete", "monitor", severity_level="critical")
        assert event.severity_level == "critical"

    def test_invalid_severity_raises(self):
        with pytest.raises(ValueError):
            create_audit_event("u1", "delete", "monitor", severity_level="urgent")

    def test_resource_id_is_stringified(self):
        assert create_audit_event("u1", "create", "monitor", resource_id=42).resource_id == "42"

    def test_row_omits_empty_fields(self):
        row = create_audit_event("u1", "create", "monitor").to_row()
        assert row["admin_user_id"] == "u1"
        assert row["severity_level"] == "info"
        assert "old_values" not in row
        assert "resource_id" not in row


@pytest.mark.unit
class TestRecordAuditEvent:
    def test_inserts_row(self, backend):
        event = create_audit_event("u1", "create", "monitor", resource_id="m1")

        assert record_audit_event(backend, event, table="audit_table") is True

        table, row = backend.insert.call_args.args
        assert table == "audit_table"
        assert row["resource_id"] == "m1"

    def test_adds_correlation_id(self, backend):
        event = create_audit_event("u1", "create", "monitor")

        with bind_request_context(correlation_id="req-123"):
            record_audit_event(backend, event)

        row = backend.insert.call_args.args[1]
        assert row["details"]["correlation_id"] == "req-123"

    def test_failure_returns_false(self, backend):
        backend.insert.return_value = OperationResult.permanent_error("rls")
        event = create_audit_event("u1", "create", "monitor")

        assert record_audit_event(backend, event) is False

    def test_audit_action_uses_user_id(self, backend):
        user = User(id="admin-1", role="admin")

        audit_action(backend, user, "delete", "blog_post", "p1", details={"slug": "a"})

        table, row = backend.insert.call_args.args
        assert table == "admin_audit_logs"
        assert row["admin_user_id"] == "admin-1"
        assert row["severity_level"] == "warning"
        assert row["details"] == {"slug": "a"}
