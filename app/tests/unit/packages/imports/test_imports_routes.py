"""Route tests for CSV imports."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from infrastructure.services import get_settings, get_tenant_backend, require_admin
from packages.imports import imports_router
from utils.tests import create_test_app


@pytest.fixture(autouse=True)
def audit():
    with patch("packages.imports.service.audit_action") as mock_audit:
        yield mock_audit


@pytest.fixture
def client(mock_backend, settings, admin_user):
    app = create_test_app(
        imports_router,
        dependency_overrides={
            require_admin: lambda: admin_user,
            get_tenant_backend: lambda: mock_backend,
            get_settings: lambda: settings,
        },
    )
    return TestClient(app)


@pytest.mark.unit
class TestImportRoutes:
    def test_target_columns(self, client):
        response = client.get("/imports/targets/products/columns")

        assert response.status_code == 200
        assert response.json()[0]["key"] == "name"

    def test_unknown_target(self, client):
        assert client.get("/imports/targets/orders/columns").status_code == 422

    def test_preview(self, client):
        content = "Nom;Adresse;Ville\nAtelier A;1 rue Haute;Paris\n".encode("utf-8")

        response = client.post(
            "/imports/preview", files={"file": ("ateliers.csv", content, "text/csv")}
        )

        body = response.json()
        assert response.status_code == 200
        assert body["parsed"]["separator"] == ";"
        assert body["missing_required"] == []
        mapped = {m["db_column"]: m["csv_column"] for m in body["mappings"]}
        assert mapped["name"] == "Nom"
        assert mapped["city"] == "Ville"

    def test_preview_empty_file(self, client):
        response = client.post(
            "/imports/preview", files={"file": ("empty.csv", b"", "text/csv")}
        )

        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "EMPTY_FILE"

    def test_run(self, client, mock_backend):
        response = client.post(
            "/imports/run",
            json={
                "target": "products",
                "rows": [{"Nom": "Coque", "Prix": "10"}],
                "mappings": [
                    {"csv_column": "Nom", "db_column": "name", "required": True},
                    {"csv_column": "Prix", "db_column": "price"},
                ],
            },
        )

        assert response.status_code == 200
        assert response.json()["imported"] == 1
        assert mock_backend.insert.call_args.args[0] == "products"
