"""Unit tests for identity resolution."""

from unittest.mock import MagicMock

import pytest

from infrastructure.identity import IdentityResolver, User
from infrastructure.operations import OperationResult, OperationStatus


@pytest.fixture
def backend():
    return MagicMock()


@pytest.mark.unit
class TestUser:
    def test_role_comes_from_app_metadata(self):
        user = User.from_auth_payload(
            {
                "id": "u1",
                "email": "a@example.com",
                "app_metadata": {"role": "admin"},
                "user_metadata": {"first_name": "Ana"},
            }
        )
        assert user.is_admin
        assert user.metadata == {"first_name": "Ana"}

    def test_default_role(self):
        user = User.from_auth_payload({"id": "u1"})
        assert user.role == "user"
        assert not user.is_admin


@pytest.mark.unit
class TestIdentityResolver:
    def test_resolves_user(self, backend):
        backend.get_user.return_value = OperationResult.success(
            data={"id": "u1", "email": "a@example.com"}
        )

        result = IdentityResolver(backend).resolve_user("token")

        assert result.is_success
        assert result.data.id == "u1"
        backend.get_user.assert_called_once_with("token")

    def test_missing_token(self, backend):
        result = IdentityResolver(backend).resolve_user("")
        assert result.status == OperationStatus.UNAUTHORIZED
        backend.get_user.assert_not_called()

    @pytest.mark.parametrize(
        "backend_result",
        [
            OperationResult.unauthorized("bad jwt"),
            OperationResult.not_found("no user"),
            OperationResult.success(data={"email": "no-id@example.com"}),
        ],
    )
    def test_rejected_tokens_are_unauthorized(self, backend, backend_result):
        backend.get_user.return_value = backend_result

        result = IdentityResolver(backend).resolve_user("token")

        assert result.status == OperationStatus.UNAUTHORIZED

    def test_transient_failure_is_passed_through(self, backend):
        backend.get_user.return_value = OperationResult.transient_error("down")

        result = IdentityResolver(backend).resolve_user("token")

        assert result.status == OperationStatus.TRANSIENT_ERROR
