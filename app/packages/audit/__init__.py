"""Audit package - review, analytics, export and cleanup of the audit trail."""

from packages.audit.routes import router as audit_router

__all__ = ["audit_router"]
