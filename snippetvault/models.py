"""
Pydantic data models for API payloads and client state.
Wire names are camelCase; Python attributes are snake_case.
"""
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from snippetvault.utils.tags import MAX_TAGS, normalize_tags


class WireModel(BaseModel):
    """Base for server records: camelCase aliases, unknown fields kept."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class UserProfile(WireModel):
    """Current user as returned by /auth/*. Opaque beyond display."""

    id: str = Field(..., validation_alias=AliasChoices("_id", "id"))
    username: str = ""
    email: str = ""
    full_name: str = ""
    avatar_url: Optional[str] = Field(None, validation_alias=AliasChoices("avatarUrl", "avatar"))
    created_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class Snippet(WireModel):
    id: str = Field(..., validation_alias=AliasChoices("_id", "id"))
    title: str = ""
    code: str = ""
    code_language: str = ""
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    is_public: bool = False
    is_favorited: bool = False
    favorite_count: int = 0
    created_at: Optional[datetime] = None
    owner_ref: Optional[Any] = Field(None, validation_alias=AliasChoices("ownerRef", "owner", "user"))

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class Pagination(WireModel):
    total: int = Field(0, ge=0)
    page: int = Field(1, ge=1)
    limit: int = Field(6, ge=1)
    total_pages: int = Field(1, ge=0)


class SnippetPage(WireModel):
    """One page of a list endpoint."""

    snippets: List[Snippet] = Field(default_factory=list)
    pagination: Optional[Pagination] = None


class FavoriteStatus(WireModel):
    snippet_id: str = Field(..., validation_alias=AliasChoices("snippetID", "snippetId"), serialization_alias="snippetID")
    is_favorited: bool
    favorite_count: int = 0

    @field_validator("snippet_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


# ----- Requests -----


class SnippetPayload(BaseModel):
    """Editable snippet fields submitted on create/update. Tags normalized, at most MAX_TAGS."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)
    code_language: str = "javascript"
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    is_public: bool = False

    @field_validator("title", "code", mode="after")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("tags", mode="after")
    @classmethod
    def normalize(cls, v: List[str]) -> List[str]:
        tags = normalize_tags(v)
        if len(tags) > MAX_TAGS:
            raise ValueError(f"at most {MAX_TAGS} tags allowed")
        return tags

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class RegisterForm(BaseModel):
    """Registration form. All text fields required; avatar optional image path."""

    username: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=1)
    avatar: Optional[Path] = None

    @field_validator("username", "email", "full_name", mode="after")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field is required")
        return v

    def form_fields(self) -> dict:
        return {
            "username": self.username,
            "email": self.email,
            "password": self.password,
            "fullName": self.full_name,
        }


# ----- Client state -----


class SessionState(BaseModel):
    """Snapshot of the session store."""

    user: Optional[UserProfile] = None
    is_verified: bool = False
    is_loading: bool = False
    error: Optional[str] = None

    @model_validator(mode="after")
    def verified_requires_user(self) -> "SessionState":
        if self.is_verified and self.user is None:
            raise ValueError("is_verified cannot be true without a user")
        return self
