"""
Profile management: load profile, update name/email, change password, replace avatar.
Outcome is reported through `error` (failure) and `message` (success text), never raised.
"""
import logging
import mimetypes
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from snippetvault.api_client import ApiClient, ApiError
from snippetvault.models import UserProfile
from snippetvault.services.session_service import SessionStore

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, client: ApiClient, session: Optional[SessionStore] = None) -> None:
        self._client = client
        self._session = session
        self.profile: Optional[UserProfile] = None
        self.is_loading = False
        self.error: Optional[str] = None
        self.message: Optional[str] = None

    def _start(self) -> None:
        self.is_loading = True
        self.error = None
        self.message = None

    def _accept(self, data: object, message: Optional[str] = None) -> None:
        self.profile = UserProfile.model_validate(data)
        if self._session is not None:
            self._session.replace_user(self.profile)
        self.message = message

    def load_profile(self) -> Optional[UserProfile]:
        self._start()
        try:
            self._accept(self._client.get("/auth/profile").data)
        except ApiError as e:
            self.error = e.user_message("Failed to load profile")
        except ValidationError as e:
            logger.warning("Unexpected profile payload: %s", e)
            self.error = "Failed to load profile"
        finally:
            self.is_loading = False
        return self.profile

    def update_profile(self, full_name: str = "", email: str = "") -> bool:
        """PATCH name and/or email. At least one must be non-blank."""
        if not full_name.strip() and not email.strip():
            self.error = "Please provide at least one field to update"
            self.message = None
            return False
        self._start()
        try:
            resp = self._client.patch("/auth/update-profile", json={"fullName": full_name, "email": email})
            self._accept(resp.data, "Profile updated successfully!")
            return True
        except ApiError as e:
            self.error = e.user_message("Failed to update profile")
        except ValidationError as e:
            logger.warning("Unexpected profile payload: %s", e)
            self.error = "Failed to update profile"
        finally:
            self.is_loading = False
        return False

    def update_password(self, old_password: str, new_password: str, confirm_password: str) -> bool:
        if not old_password or not new_password or not confirm_password:
            self.error = "All password fields are required"
            self.message = None
            return False
        if new_password != confirm_password:
            self.error = "New passwords do not match"
            self.message = None
            return False
        self._start()
        try:
            self._client.patch(
                "/auth/update-password",
                json={"oldPass": old_password, "newPass": new_password, "confirmPassword": confirm_password},
            )
            self.message = "Password changed successfully!"
            return True
        except ApiError as e:
            self.error = e.user_message("Failed to change password")
        finally:
            self.is_loading = False
        return False

    def update_avatar(self, avatar: Union[str, Path, None]) -> bool:
        """Upload a new avatar image as multipart field `avatar`."""
        if not avatar:
            self.error = "Please select an avatar image"
            self.message = None
            return False
        path = Path(avatar)
        self._start()
        try:
            mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
            with open(path, "rb") as fh:
                resp = self._client.patch("/auth/update-avatar", files={"avatar": (path.name, fh, mime)})
            self._accept(resp.data, "Avatar updated successfully!")
            return True
        except ApiError as e:
            self.error = e.user_message("Failed to update avatar")
        except ValidationError as e:
            logger.warning("Unexpected profile payload: %s", e)
            self.error = "Failed to update avatar"
        except OSError as e:
            logger.warning("Avatar file unreadable: %s", e)
            self.error = "Avatar image could not be read"
        finally:
            self.is_loading = False
        return False
