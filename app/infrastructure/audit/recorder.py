"""Persist audit events to the backend audit table."""

from typing import TYPE_CHECKING, Any, Dict, Optional

from infrastructure.audit.models import create_audit_event
from infrastructure.logging import get_correlation_id, get_module_logger

if TYPE_CHECKING:
    from infrastructure.audit.models import AuditEvent
    from infrastructure.clients.backend import BackendClient
    from infrastructure.identity import User

logger = get_module_logger()

DEFAULT_AUDIT_TABLE = "admin_audit_logs"


def record_audit_event(
    backend: "BackendClient",
    event: "AuditEvent",
    table: str = DEFAULT_AUDIT_TABLE,
) -> bool:
    """Insert ``event`` into the audit table.

    A failed write is logged and reported as False; it never fails the
    operation being audited.
    """
    correlation_id = get_correlation_id()
    if correlation_id and "correlation_id" not in event.details:
        event.details["correlation_id"] = correlation_id

    log = logger.bind(
        action_type=event.action_type,
        resource_type=event.resource_type,
        resource_id=event.resource_id,
    )
    result = backend.insert(table, event.to_row())
    if not result.is_success:
        log.warning(
            "audit_event_not_recorded",
            error=result.message,
            error_code=result.error_code,
        )
        return False

    log.info("audit_event_recorded", severity_level=event.severity_level)
    return True


def audit_action(
    backend: "BackendClient",
    user: "User",
    action_type: str,
    resource_type: str,
    resource_id: Optional[Any] = None,
    details: Optional[Dict[str, Any]] = None,
    severity_level: Optional[str] = None,
    table: str = DEFAULT_AUDIT_TABLE,
) -> bool:
    """Shortcut used by feature services after a successful mutation."""
    event = create_audit_event(
        admin_user_id=user.id,
        action_type=action_type,
        resource_type=resource_type,
        resource_id=resource_id,
        severity_level=severity_level,
        details=details,
    )
    return record_audit_event(backend, event, table=table)
