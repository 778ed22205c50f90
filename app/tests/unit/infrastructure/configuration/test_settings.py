"""Unit tests for settings."""

import pytest

from infrastructure.configuration import Settings
from infrastructure.configuration.infrastructure import ServerSettings
from infrastructure.configuration.integrations import BackendSettings


@pytest.mark.unit
class TestSettings:
    def test_production_when_prefix_empty(self):
        assert Settings(PREFIX="").is_production
        assert not Settings(PREFIX="dev").is_production

    def test_backend_url_trailing_slash_removed(self):
        backend = BackendSettings(BACKEND_URL="https://project.backend.test/")
        assert backend.BACKEND_URL == "https://project.backend.test"

    def test_cors_origins_from_comma_string(self):
        server = ServerSettings(CORS_ALLOWED_ORIGINS="https://a.test, https://b.test,")
        assert server.CORS_ALLOWED_ORIGINS == ["https://a.test", "https://b.test"]

    def test_cors_origins_from_env(self, monkeypatch):
        monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "https://a.test,https://b.test")
        assert ServerSettings().CORS_ALLOWED_ORIGINS == ["https://a.test", "https://b.test"]

    def test_subsettings_are_built(self):
        settings = Settings()
        assert settings.audit.AUDIT_TABLE
        assert settings.imports.IMPORT_SIMILARITY_THRESHOLD == 0.7
