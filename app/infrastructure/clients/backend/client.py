"""Backend-as-a-service client.

One pooled ``requests`` session covers the four surfaces the console
uses: REST tables (``/rest/v1``), serverless functions (``/functions/v1``),
file storage (``/storage/v1``) and auth (``/auth/v1``). Every call returns
an OperationResult; nothing raises past this module.
"""

import json
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union
from urllib.parse import quote

import requests
import structlog

from infrastructure.clients.backend.query import TableQuery
from infrastructure.operations import (
    OperationResult,
    classify_http_response,
    classify_request_exception,
)

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

logger = structlog.get_logger()

Rows = Union[Dict[str, Any], List[Dict[str, Any]]]


class BackendClient:
    """Client for the managed backend.

    The process-wide instance authenticates with the service role key (or
    the anon key when none is configured). Tenant-facing operations must use
    ``with_access_token()`` so the end user's token reaches the backend and
    row-level security scopes every read and write.

    Args:
        settings: Settings instance with the ``backend`` section
        session: Optional shared session (connection pool)
        access_token: Optional end-user bearer token
    """

    def __init__(
        self,
        settings: "Settings",
        session: Optional[requests.Session] = None,
        access_token: Optional[str] = None,
    ) -> None:
        self._settings = settings
        self._base_url = settings.backend.BACKEND_URL
        self._anon_key = settings.backend.BACKEND_ANON_KEY
        self._service_key = settings.backend.BACKEND_SERVICE_ROLE_KEY
        self._timeout = settings.backend.BACKEND_TIMEOUT_SECONDS
        self._access_token = access_token
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        self._logger = logger.bind(
            component="backend_client", user_scoped=access_token is not None
        )

    @property
    def default_bucket(self) -> str:
        return self._settings.backend.BACKEND_STORAGE_BUCKET

    @property
    def is_user_scoped(self) -> bool:
        return self._access_token is not None

    def with_access_token(self, access_token: str) -> "BackendClient":
        """Return a client sharing this session but acting as the given user."""
        return BackendClient(
            self._settings, session=self._session, access_token=access_token
        )

    def _auth_headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        bearer = access_token or self._access_token or self._service_key or self._anon_key
        return {
            "apikey": self._anon_key or bearer,
            "Authorization": f"Bearer {bearer}",
        }

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Any] = None,
        json_data: Optional[Any] = None,
        data: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        access_token: Optional[str] = None,
    ) -> OperationResult:
        url = f"{self._base_url}{path}"
        log = self._logger.bind(method=method, path=path)
        log.debug("backend_request")

        request_headers = self._auth_headers(access_token)
        if headers:
            request_headers.update(headers)

        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                data=data,
                headers=request_headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            log.error("backend_request_failed", error=str(e))
            return classify_request_exception(e)

        log = log.bind(status_code=response.status_code)

        if not 200 <= response.status_code < 300:
            result = classify_http_response(response)
            log.warning(
                "backend_request_error",
                error=result.message,
                error_code=result.error_code,
            )
            return result

        body: Any = None
        if response.content:
            try:
                body = response.json()
            except json.JSONDecodeError:
                log.warning("non_json_response", content=response.text[:200])
                body = response.text

        log.debug("backend_request_success")
        return OperationResult.success(data=body, message=f"{method} {path} succeeded")

    # Tables

    def select(self, table: str, query: Optional[TableQuery] = None) -> OperationResult:
        """Read rows. ``data`` is always a list."""
        query = query or TableQuery()
        result = self._request("GET", f"/rest/v1/{table}", params=query.params())
        if result.is_success and result.data is None:
            result.data = []
        return result

    def select_one(self, table: str, query: TableQuery) -> OperationResult:
        """Read the first matching row, NOT_FOUND when nothing matches."""
        result = self.select(table, query.limit(1))
        if not result.is_success:
            return result
        if not result.data:
            return OperationResult.not_found(f"No matching row in {table}")
        return OperationResult.success(data=result.data[0])

    def insert(self, table: str, rows: Rows) -> OperationResult:
        """Insert one row or many. ``data`` holds the stored rows."""
        return self._request(
            "POST",
            f"/rest/v1/{table}",
            json_data=rows,
            headers={"Prefer": "return=representation"},
        )

    def upsert(
        self, table: str, rows: Rows, on_conflict: Optional[str] = None
    ) -> OperationResult:
        params = [("on_conflict", on_conflict)] if on_conflict else None
        return self._request(
            "POST",
            f"/rest/v1/{table}",
            params=params,
            json_data=rows,
            headers={"Prefer": "resolution=merge-duplicates,return=representation"},
        )

    def update(
        self, table: str, values: Dict[str, Any], query: TableQuery
    ) -> OperationResult:
        if not query.has_filters:
            return OperationResult.permanent_error(
                f"Refusing to update every row of {table}", error_code="MISSING_FILTER"
            )
        return self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=query.params(include_select=False),
            json_data=values,
            headers={"Prefer": "return=representation"},
        )

    def delete(self, table: str, query: TableQuery) -> OperationResult:
        if not query.has_filters:
            return OperationResult.permanent_error(
                f"Refusing to delete every row of {table}", error_code="MISSING_FILTER"
            )
        return self._request(
            "DELETE",
            f"/rest/v1/{table}",
            params=query.params(include_select=False),
            headers={"Prefer": "return=representation"},
        )

    # Functions

    def invoke_function(
        self, name: str, body: Optional[Dict[str, Any]] = None
    ) -> OperationResult:
        """Invoke a named serverless function.

        Functions report handled failures with a 200 and an ``error`` key;
        those come back as PERMANENT_ERROR with code FUNCTION_ERROR.
        """
        result = self._request("POST", f"/functions/v1/{name}", json_data=body or {})
        if not result.is_success:
            return result

        payload = result.data
        if isinstance(payload, dict) and payload.get("error"):
            error = payload["error"]
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            self._logger.warning("function_reported_error", function=name, error=message)
            return OperationResult.permanent_error(message, error_code="FUNCTION_ERROR")
        return OperationResult.success(data=payload, message=f"{name} invoked")

    # Storage

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{bucket}/{quote(path)}"

    def upload_file(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        upsert: bool = False,
    ) -> OperationResult:
        """Upload an object and return its public URL.

        Returns:
            OperationResult with ``{"path": ..., "public_url": ...}``
        """
        result = self._request(
            "POST",
            f"/storage/v1/object/{bucket}/{quote(path)}",
            data=content,
            headers={
                "Content-Type": content_type,
                "x-upsert": "true" if upsert else "false",
            },
        )
        if not result.is_success:
            return result
        return OperationResult.success(
            data={"path": path, "public_url": self.public_url(bucket, path)},
            message="File uploaded",
        )

    # Auth

    def get_user(self, access_token: str) -> OperationResult:
        """Resolve the user behind a bearer token."""
        if not access_token:
            return OperationResult.unauthorized("Missing access token")
        return self._request("GET", "/auth/v1/user", access_token=access_token)
