"""
Client settings loaded from environment (.env).
Single source of truth with validation at first access.
"""
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Validated configuration from env and .env file."""

    model_config = SettingsConfigDict(
        env_file=_project_root() / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Paths
    base_dir: Path = Path(__file__).resolve().parent.parent.parent

    # REST API
    api_base_url: str = Field(default="http://localhost:8000/api/v1", validation_alias="SNIPPETVAULT_API_URL")
    request_timeout_seconds: float = Field(default=10.0, gt=0, validation_alias="SNIPPETVAULT_TIMEOUT")

    # Durable local storage (sv_user, sv_access_token, theme, search history)
    storage_file: str = Field(default="database/local_storage.json", validation_alias="SNIPPETVAULT_STORAGE_FILE")

    # Ops
    log_file: str = Field(default="logs/snippetvault.log", validation_alias="LOG_FILE")

    # Views
    login_path: str = Field(default="/login", validation_alias="SNIPPETVAULT_LOGIN_PATH")

    # Search-as-you-type
    search_debounce_ms: int = Field(default=250, ge=0, validation_alias="SEARCH_DEBOUNCE_MS")
    search_history_limit: int = Field(default=8, ge=1, validation_alias="SEARCH_HISTORY_LIMIT")

    @field_validator("api_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def _resolve(self, value: str) -> Path:
        p = Path(value)
        if not p.is_absolute():
            p = self.base_dir / p
        return p

    @property
    def storage_path(self) -> Path:
        return self._resolve(self.storage_file)

    @property
    def log_path(self) -> Path | None:
        if not self.log_file.strip():
            return None
        return self._resolve(self.log_file)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return singleton settings instance. Validates and creates dirs on first access."""
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.storage_path.parent.mkdir(parents=True, exist_ok=True)
    return _settings
