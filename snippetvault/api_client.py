"""
HTTP client for the SnippetVault REST API.
One configured requests.Session: bearer credential from local storage, envelope normalization,
request logging, and a redirect to the login view on 401.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, List, Optional

import requests

from snippetvault.core.settings import Settings, get_settings
from snippetvault.repositories.protocols import LocalStorage
from snippetvault.utils.request_logger import log_request

if TYPE_CHECKING:
    from snippetvault.services.protocols import Navigator

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "sv_access_token"

# Failures on these must reach the login/register form instead of redirecting.
AUTH_REQUEST_PATHS = ("/auth/login", "/auth/register")

_ENVELOPE_KEYS = {"data", "message", "success", "statusCode"}


class ApiError(Exception):
    """Raised for non-2xx responses (status_code set) and transport failures (status_code None)."""

    def __init__(self, message: str, status_code: Optional[int] = None, server_message: Optional[str] = None, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.server_message = server_message
        self.body = body

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    def user_message(self, fallback: str) -> str:
        """Server-provided message verbatim, else the caller's fallback."""
        return self.server_message or fallback


def unwrap_envelope(body: Any) -> Any:
    """
    Normalize `{data: payload}` and the older `{data: {data: payload}}` shape to payload.
    Bodies without an envelope are returned as-is.
    """
    if not isinstance(body, dict) or "data" not in body:
        return body
    data = body["data"]
    if isinstance(data, dict) and "data" in data and set(data) <= _ENVELOPE_KEYS:
        data = data["data"]
    return data


@dataclass
class ApiResponse:
    status_code: int
    body: Any
    data: Any = field(init=False)

    def __post_init__(self) -> None:
        self.data = unwrap_envelope(self.body)

    @property
    def success(self) -> bool:
        """Explicit `success` flag when the server sends one, else any 2xx."""
        if isinstance(self.body, dict) and "success" in self.body:
            return bool(self.body["success"])
        return 200 <= self.status_code < 300


def _server_message(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    detail = body.get("message") or body.get("detail")
    if isinstance(detail, list) and detail:
        first = detail[0]
        detail = first.get("msg") if isinstance(first, dict) else str(first)
    return detail if isinstance(detail, str) and detail else None


def _json_or_none(resp: requests.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return None


class ApiClient:
    """Single request transport shared by all stores."""

    def __init__(
        self,
        storage: LocalStorage,
        navigator: Optional[Navigator] = None,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._storage = storage
        self._navigator = navigator
        self._session = session or requests.Session()
        self._unauthorized_listeners: List[Callable[[], None]] = []

    @property
    def base_url(self) -> str:
        return self._settings.api_base_url

    def add_unauthorized_listener(self, callback: Callable[[], None]) -> None:
        """Register a callback run on every redirecting 401 (e.g. clear the local session)."""
        self._unauthorized_listeners.append(callback)

    def _auth_headers(self) -> dict:
        token = self._storage.get_item(ACCESS_TOKEN_KEY)
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Any = None,
        data: Optional[dict] = None,
        files: Optional[dict] = None,
    ) -> ApiResponse:
        url = f"{self.base_url}/{path.lstrip('/')}"
        started = time.perf_counter()
        try:
            resp = self._session.request(
                method,
                url,
                params=params,
                json=json,
                data=data,
                files=files,
                headers=self._auth_headers(),
                timeout=self._settings.request_timeout_seconds,
            )
        except requests.RequestException as e:
            log_request(method, path, None, (time.perf_counter() - started) * 1000, error=type(e).__name__)
            raise ApiError(f"{method} {path} failed: {e}") from e
        log_request(method, path, resp.status_code, (time.perf_counter() - started) * 1000)
        body = _json_or_none(resp)
        if resp.ok:
            return ApiResponse(resp.status_code, body)
        if resp.status_code == 401:
            self._handle_unauthorized(path)
        server_message = _server_message(body)
        raise ApiError(
            f"{method} {path} returned {resp.status_code}",
            status_code=resp.status_code,
            server_message=server_message,
            body=body,
        )

    def _handle_unauthorized(self, path: str) -> None:
        path = "/" + path.lstrip("/")
        if any(path.startswith(p) for p in AUTH_REQUEST_PATHS):
            return
        logger.info("Unauthorized response for %s; ending session", path)
        for callback in list(self._unauthorized_listeners):
            callback()
        if self._navigator is None:
            return
        login_path = self._settings.login_path
        if self._navigator.current_path() != login_path:
            self._navigator.navigate(login_path)

    def get(self, path: str, **kwargs) -> ApiResponse:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> ApiResponse:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> ApiResponse:
        return self.request("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs) -> ApiResponse:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs) -> ApiResponse:
        return self.request("DELETE", path, **kwargs)

    def close(self) -> None:
        self._session.close()
