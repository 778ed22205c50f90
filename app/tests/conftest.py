"""Shared fixtures for the unit test suite."""

from unittest.mock import MagicMock

import pytest

from api.dependencies.rate_limits import get_limiter
from infrastructure.clients.backend import BackendClient
from infrastructure.configuration import Settings
from infrastructure.configuration.integrations import BackendSettings
from infrastructure.identity import User
from infrastructure.operations import OperationResult
from infrastructure.resilience import reset_circuit_breakers


@pytest.fixture(autouse=True)
def _reset_process_state():
    """Circuit breakers and rate limit counters are process-wide."""
    reset_circuit_breakers()
    get_limiter().reset()
    yield
    reset_circuit_breakers()


@pytest.fixture
def settings():
    """Settings with a fixed backend configuration."""
    return Settings(
        backend=BackendSettings(
            BACKEND_URL="https://project.backend.test/",
            BACKEND_ANON_KEY="anon-key",
            BACKEND_SERVICE_ROLE_KEY="service-key",
        ),
        PREFIX="test",
    )


@pytest.fixture
def user():
    return User(id="user-1", email="repairer@example.com", role="user")


@pytest.fixture
def admin_user():
    return User(id="admin-1", email="admin@example.com", role="admin")


@pytest.fixture
def mock_backend():
    """BackendClient double; every call succeeds with an empty payload by default."""
    backend = MagicMock(spec=BackendClient)
    backend.select.return_value = OperationResult.success(data=[])
    backend.insert.return_value = OperationResult.success(data=[])
    backend.update.return_value = OperationResult.success(data=[])
    backend.delete.return_value = OperationResult.success(data=[])
    backend.invoke_function.return_value = OperationResult.success(data={})
    return backend
