"""Integration tests: services wired by build_services over file storage and the fake API."""
import json
import time

import pytest

from snippetvault.deps import build_services
from snippetvault.repositories.storage_repository import FileLocalStorage
from snippetvault.services.navigation import HistoryNavigator
from tests.conftest import USER, envelope, make_snippet


@pytest.fixture
def storage_path(tmp_path):
    return tmp_path / "local_storage.json"


@pytest.fixture
def make_services(settings, http_session, storage_path):
    created = []

    def _make(start_path="/dashboard"):
        services = build_services(
            settings=settings,
            storage=FileLocalStorage(storage_path),
            navigator=HistoryNavigator(start_path),
            http_session=http_session,
        )
        created.append(services)
        return services

    yield _make
    for services in created:
        services.search.cancel()


def test_register_browse_and_logout_flow(make_services, fake_api, storage_path):
    fake_api.add("POST", "/auth/register", body=envelope({"user": USER, "accessToken": "tok-42"}))
    fake_api.add("POST", "/snippets/create", body=envelope(make_snippet("s-new", tags=["react", "node"])))
    fake_api.add(
        "GET",
        "/snippets",
        body=envelope(
            {
                "snippets": [make_snippet("s1", title="JWT auth"), make_snippet("s2", title="OAuth flow")],
                "pagination": {"total": 2, "page": 1, "limit": 6, "totalPages": 1},
            }
        ),
    )
    fake_api.add("POST", "/snippets/s2/favorite", body=envelope({"snippetID": "s2", "isFavorited": True, "favoriteCount": 1}))
    fake_api.add("DELETE", "/snippets/s1", body={"success": True})
    fake_api.add("POST", "/auth/logout", body={"success": True})

    app = make_services()
    assert app.session.is_verified is False

    app.session.register({"username": "ada", "email": "ada@example.com", "password": "pw", "full_name": "Ada"})
    assert app.session.is_verified is True

    app.snippets.create_snippet({"title": "Hooks", "code": "useState()", "tags": ["  React ", "REACT", "node"]})
    assert fake_api.last("POST", "/snippets/create").headers["Authorization"] == "Bearer tok-42"
    assert [s.id for s in app.snippets.snippets] == ["s-new"]

    app.snippets.get_snippets(page=1, limit=6, search="auth")
    assert [s.id for s in app.snippets.snippets] == ["s1", "s2"]
    assert app.snippets.pagination.model_dump() == {"total": 2, "page": 1, "limit": 6, "total_pages": 1}

    app.snippets.toggle_favorite("s2")
    app.snippets.delete_snippet("s1")
    assert [(s.id, s.is_favorited) for s in app.snippets.snippets] == [("s2", True)]

    app.session.logout()
    assert app.session.user is None
    stored = json.loads(storage_path.read_text(encoding="utf-8"))
    assert "sv_user" not in stored and "sv_access_token" not in stored


def test_session_survives_restart(make_services, fake_api):
    fake_api.add("POST", "/auth/login", body=envelope({"user": USER, "accessToken": "tok-1"}))
    first = make_services()
    first.session.login("ada@example.com", "pw")
    first.preferences.set_mode("dark")

    second = make_services()
    assert second.session.is_verified is True
    assert second.session.user.username == "ada"
    assert second.preferences.mode == "dark"


def test_expired_token_redirects_to_login_and_ends_session(make_services, fake_api):
    fake_api.add("POST", "/auth/login", body=envelope({"user": USER, "accessToken": "tok-1"}))
    fake_api.add("GET", "/snippets/favorites", status=401, body={"message": "jwt expired"})
    app = make_services()
    app.session.login("ada", "pw")

    app.snippets.get_favorite_snippets()

    assert app.navigator.current_path() == "/login"
    assert app.session.is_verified is False
    assert app.snippets.error == "jwt expired"


def test_failed_login_stays_on_login_view(make_services, fake_api):
    fake_api.add("POST", "/auth/login", status=401, body={"message": "Invalid credentials"})
    app = make_services(start_path="/login")
    app.session.login("ada", "bad")
    assert app.session.error == "Invalid credentials"
    assert app.navigator.history == ["/login"]


def test_debounced_search_fetches_once_and_records_history(make_services, fake_api):
    fake_api.add("GET", "/snippets", body=envelope({"snippets": [make_snippet("hit")]}))
    app = make_services()
    for partial in ("a", "au", "aut", "auth"):
        app.search.search(partial)

    deadline = time.monotonic() + 3
    while time.monotonic() < deadline and not app.snippets.snippets:
        time.sleep(0.01)

    searches = [c.param("search") for c in fake_api.calls if c.path == "/snippets"]
    assert searches == ["auth"]
    assert app.search_history.items() == ["auth"]
    assert [s.id for s in app.snippets.snippets] == ["hit"]
