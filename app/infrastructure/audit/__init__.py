"""Audit trail for console-originated actions.

This package provides:
- AuditEvent: Pydantic model mirroring the audit log table
- create_audit_event: Factory deriving severity from the action
- record_audit_event / audit_action: Best-effort persistence
"""

from infrastructure.audit.models import (
    AuditEvent,
    SeverityLevel,
    create_audit_event,
    default_severity,
)
from infrastructure.audit.recorder import audit_action, record_audit_event

__all__ = [
    "AuditEvent",
    "SeverityLevel",
    "create_audit_event",
    "default_severity",
    "audit_action",
    "record_audit_event",
]
