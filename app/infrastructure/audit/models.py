"""Audit events for console-originated actions.

Events are stored as rows of the audit log table, the same table the audit
review package reads back, so field names follow that table's columns.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class SeverityLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


# Actions recorded as warnings unless the caller says otherwise
WARNING_ACTIONS = frozenset({"delete", "deactivate"})


def default_severity(action_type: str) -> SeverityLevel:
    """Severity for an action when the caller gives none."""
    if action_type in WARNING_ACTIONS:
        return SeverityLevel.WARNING
    return SeverityLevel.INFO


class AuditEvent(BaseModel):
    """One administrative action.

    Attributes:
        admin_user_id: Backend user id of the acting user.
        action_type: Verb such as 'create', 'update', 'delete', 'publish'.
        resource_type: Kind of resource affected ('monitor', 'blog_post', ...).
        resource_id: Identifier of the affected row, when there is one.
        severity_level: info, warning or critical.
        details: Free-form context (counts, names, correlation id).
        old_values: Relevant values before the change.
        new_values: Relevant values after the change.
        timestamp: ISO 8601 UTC time of the action.
    """

    admin_user_id: str
    action_type: str
    resource_type: str
    resource_id: Optional[str] = None
    severity_level: SeverityLevel = SeverityLevel.INFO
    details: Dict[str, Any] = Field(default_factory=dict)
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    model_config = ConfigDict(use_enum_values=True)

    def to_row(self) -> Dict[str, Any]:
        """Row payload for the audit log table."""
        return self.model_dump(mode="json", exclude_none=True)


def create_audit_event(
    admin_user_id: str,
    action_type: str,
    resource_type: str,
    resource_id: Optional[str] = None,
    severity_level: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    old_values: Optional[Dict[str, Any]] = None,
    new_values: Optional[Dict[str, Any]] = None,
) -> AuditEvent:
    """Build an AuditEvent, deriving severity from the action when absent.

    Raises:
        ValueError: If severity_level is not info, warning or critical.
    """
    severity = (
        SeverityLevel(severity_level)
        if severity_level is not None
        else default_severity(action_type)
    )
    return AuditEvent(
        admin_user_id=admin_user_id,
        action_type=action_type,
        resource_type=resource_type,
        resource_id=str(resource_id) if resource_id is not None else None,
        severity_level=severity,
        details=details or {},
        old_values=old_values,
        new_values=new_values,
    )
