"""
Pytest fixtures: in-memory storage, recording navigator, and a fake REST API mounted
as a requests transport adapter so ApiClient runs its real request pipeline.
"""
import json
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from urllib.parse import parse_qs, urlsplit

# Request log to stderr instead of logs/ while testing
os.environ.setdefault("LOG_FILE", "")

import pytest
import requests
from requests.adapters import BaseAdapter

from snippetvault.api_client import ApiClient
from snippetvault.core.settings import Settings
from snippetvault.services.session_service import SessionStore
from snippetvault.services.snippet_service import SnippetStore

BASE_URL = "http://testserver/api/v1"

Reply = Tuple[int, Any]
Route = Union[Reply, Callable[["RecordedCall"], Reply], Exception]


class InMemoryLocalStorage:
    """Dict-backed LocalStorage for tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove_item(self, key: str) -> None:
        self.data.pop(key, None)


class RecordingNavigator:
    def __init__(self, path: str = "/dashboard") -> None:
        self.path = path
        self.visited: List[str] = []

    def current_path(self) -> str:
        return self.path

    def navigate(self, path: str) -> None:
        self.visited.append(path)
        self.path = path


@dataclass
class RecordedCall:
    method: str
    path: str
    query: Dict[str, List[str]]
    headers: Dict[str, str]
    body: Optional[bytes] = None

    def json(self) -> Any:
        return json.loads(self.body) if self.body else None

    def param(self, name: str) -> Optional[str]:
        values = self.query.get(name)
        return values[0] if values else None


class FakeApi(BaseAdapter):
    """Route table keyed by (METHOD, path below /api/v1). Unknown routes answer 404."""

    def __init__(self) -> None:
        super().__init__()
        self.routes: Dict[Tuple[str, str], Route] = {}
        self.calls: List[RecordedCall] = []

    def add(self, method: str, path: str, status: int = 200, body: Any = None) -> None:
        self.routes[(method.upper(), path)] = (status, body)

    def on(self, method: str, path: str, route: Route) -> None:
        self.routes[(method.upper(), path)] = route

    def last(self, method: Optional[str] = None, path: Optional[str] = None) -> RecordedCall:
        for call in reversed(self.calls):
            if (method is None or call.method == method) and (path is None or call.path == path):
                return call
        raise AssertionError(f"no call recorded for {method} {path}")

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        parts = urlsplit(request.url)
        path = parts.path
        if path.startswith("/api/v1"):
            path = path[len("/api/v1"):]
        body = request.body
        if isinstance(body, str):
            body = body.encode("utf-8")
        call = RecordedCall(
            method=request.method,
            path=path,
            query=parse_qs(parts.query, keep_blank_values=True),
            headers=dict(request.headers),
            body=body,
        )
        self.calls.append(call)
        route = self.routes.get((request.method, path), (404, {"success": False, "message": "Not found"}))
        if isinstance(route, Exception):
            raise route
        status, payload = route(call) if callable(route) else route

        resp = requests.Response()
        resp.status_code = status
        resp.url = request.url
        resp.request = request
        resp.encoding = "utf-8"
        if payload is not None:
            resp._content = json.dumps(payload).encode("utf-8")
            resp.headers["Content-Type"] = "application/json"
        else:
            resp._content = b""
        return resp

    def close(self) -> None:
        pass


def envelope(data: Any, message: str = "ok") -> dict:
    return {"statusCode": 200, "data": data, "message": message, "success": True}


def make_snippet(snippet_id: str, **overrides) -> dict:
    record = {
        "_id": snippet_id,
        "title": f"Snippet {snippet_id}",
        "code": "print('hi')",
        "codeLanguage": "python",
        "description": "",
        "tags": ["demo"],
        "isPublic": False,
        "isFavorited": False,
        "favoriteCount": 0,
        "createdAt": "2024-05-01T10:00:00.000Z",
        "owner": "u1",
    }
    record.update(overrides)
    return record


USER = {
    "_id": "u1",
    "username": "ada",
    "email": "ada@example.com",
    "fullName": "Ada Lovelace",
    "avatar": "https://img.example.com/ada.png",
    "createdAt": "2024-01-01T00:00:00.000Z",
}


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, api_base_url=BASE_URL, log_file="", search_debounce_ms=20)


@pytest.fixture
def storage() -> InMemoryLocalStorage:
    return InMemoryLocalStorage()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def http_session(fake_api: FakeApi) -> requests.Session:
    s = requests.Session()
    s.mount("http://testserver", fake_api)
    return s


@pytest.fixture
def client(settings, storage, navigator, http_session) -> ApiClient:
    return ApiClient(storage, navigator=navigator, settings=settings, session=http_session)


@pytest.fixture
def session_store(client, storage) -> SessionStore:
    store = SessionStore(client, storage)
    store.rehydrate()
    return store


@pytest.fixture
def snippet_store(client) -> SnippetStore:
    return SnippetStore(client)
