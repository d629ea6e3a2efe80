"""
Session store: current user, verified flag, loading/error state.
Identity is persisted to LocalStorage (sv_user, sv_access_token) and rehydrated at startup.
No method raises for API or validation failures; they are written to `error`.
"""
import json
import logging
import mimetypes
import threading
from contextlib import ExitStack
from typing import Mapping, Optional, Union

from pydantic import ValidationError

from snippetvault.api_client import ACCESS_TOKEN_KEY, ApiClient, ApiError
from snippetvault.models import RegisterForm, SessionState, UserProfile
from snippetvault.repositories.protocols import LocalStorage

logger = logging.getLogger(__name__)

USER_KEY = "sv_user"


def _first_validation_message(e: ValidationError) -> str:
    err = e.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    return f"{loc}: {err.get('msg')}" if loc else str(err.get("msg"))


class SessionStore:
    """Authentication state shared by every view; construct once and pass it around."""

    def __init__(self, client: ApiClient, storage: LocalStorage) -> None:
        self._client = client
        self._storage = storage
        self._lock = threading.Lock()
        self._user: Optional[UserProfile] = None
        self._is_verified = False
        self._is_loading = True  # until rehydrate() runs
        self._error: Optional[str] = None
        client.add_unauthorized_listener(self._clear_local_session)

    # ----- state -----

    @property
    def user(self) -> Optional[UserProfile]:
        return self._user

    @property
    def is_verified(self) -> bool:
        return self._is_verified

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def state(self) -> SessionState:
        with self._lock:
            return SessionState(
                user=self._user,
                is_verified=self._is_verified,
                is_loading=self._is_loading,
                error=self._error,
            )

    def _set_user(self, user: Optional[UserProfile]) -> None:
        with self._lock:
            self._user = user
            self._is_verified = user is not None

    def _begin(self) -> None:
        with self._lock:
            self._is_loading = True
            self._error = None

    def _finish(self, error: Optional[str] = None) -> None:
        with self._lock:
            self._is_loading = False
            if error is not None:
                self._error = error

    # ----- persistence -----

    def _persist(self, user: UserProfile, access_token: Optional[str]) -> None:
        self._storage.set_item(USER_KEY, json.dumps(user.to_wire()))
        if access_token:
            self._storage.set_item(ACCESS_TOKEN_KEY, access_token)

    def _clear_local_session(self) -> None:
        self._set_user(None)
        self._storage.remove_item(USER_KEY)
        self._storage.remove_item(ACCESS_TOKEN_KEY)

    def _load_cached_user(self) -> Optional[UserProfile]:
        raw = self._storage.get_item(USER_KEY)
        if not raw:
            return None
        try:
            return UserProfile.model_validate(json.loads(raw))
        except (ValueError, TypeError) as e:
            # json.JSONDecodeError and pydantic ValidationError are both ValueErrors
            logger.warning("Discarding corrupt %s record: %s", USER_KEY, e)
            self._storage.remove_item(USER_KEY)
            return None

    def rehydrate(self) -> SessionState:
        """
        Restore the session from durable storage. A cached profile is enough on its own.
        A token without a profile is checked against /auth/profile; if that fails the
        session stays unauthenticated so `is_verified` never holds without a user.
        """
        user = self._load_cached_user()
        if user is None and self._storage.get_item(ACCESS_TOKEN_KEY):
            try:
                resp = self._client.get("/auth/profile")
                user = UserProfile.model_validate(resp.data)
                self._persist(user, None)
            except (ApiError, ValidationError) as e:
                logger.warning("Stored access token could not be used to restore the session: %s", e)
                user = None
        self._set_user(user)
        self._finish()
        return self.state

    # ----- operations -----

    def _accept_auth_response(self, data: object, allow_bare_user: bool) -> bool:
        if not isinstance(data, dict):
            return False
        raw_user = data.get("user")
        if raw_user is None and allow_bare_user:
            raw_user = data
        if not raw_user:
            return False
        user = UserProfile.model_validate(raw_user)
        self._set_user(user)
        self._persist(user, data.get("accessToken"))
        return True

    def register(self, form: Union[RegisterForm, Mapping]) -> None:
        """Register a new account (multipart, optional avatar image) and sign in on success."""
        self._begin()
        error: Optional[str] = None
        try:
            if not isinstance(form, RegisterForm):
                form = RegisterForm.model_validate(form)
            with ExitStack() as stack:
                # Always multipart, text fields as filename-less parts
                files = [(name, (None, value)) for name, value in form.form_fields().items()]
                if form.avatar is not None:
                    fh = stack.enter_context(open(form.avatar, "rb"))
                    mime = mimetypes.guess_type(form.avatar.name)[0] or "application/octet-stream"
                    files.append(("avatar", (form.avatar.name, fh, mime)))
                resp = self._client.post("/auth/register", files=files)
            # Older servers return the user itself as data
            if not self._accept_auth_response(resp.data, allow_bare_user=True):
                error = "Registration failed"
        except ApiError as e:
            logger.warning("Registration failed: %s", e)
            error = e.user_message("Registration failed")
        except ValidationError as e:
            error = _first_validation_message(e)
        except OSError as e:
            logger.warning("Avatar file unreadable: %s", e)
            error = "Avatar image could not be read"
        if error is not None:
            with self._lock:
                self._is_verified = False
        self._finish(error)

    def login(self, identifier: str, password: str) -> None:
        """Sign in with a username or email plus password."""
        self._begin()
        error: Optional[str] = None
        try:
            resp = self._client.post("/auth/login", json={"identifier": identifier, "password": password})
            if not self._accept_auth_response(resp.data, allow_bare_user=False):
                error = "Login failed"
        except ApiError as e:
            logger.warning("Login failed: %s", e)
            error = e.user_message("Login failed")
        except ValidationError as e:
            error = _first_validation_message(e)
        if error is not None:
            with self._lock:
                self._is_verified = False
        self._finish(error)

    def logout(self) -> None:
        """Tell the server (best-effort), then always drop the local session."""
        self._begin()
        try:
            self._client.post("/auth/logout")
        except ApiError as e:
            logger.warning("Server logout failed, clearing local session anyway: %s", e)
        finally:
            self._clear_local_session()
            self._finish()

    def replace_user(self, user: UserProfile) -> None:
        """Swap in an updated profile for the signed-in user (after profile edits)."""
        if self._user is None:
            return
        self._set_user(user)
        self._persist(user, None)
