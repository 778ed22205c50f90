"""Integration settings __init__ - exports all integration settings."""

from infrastructure.configuration.integrations.backend import BackendSettings

__all__ = [
    "BackendSettings",
]
