"""Monitoring package - monitors, incidents, channels, status pages and business metrics."""

from packages.monitoring.routes import router as monitoring_router

__all__ = ["monitoring_router"]
