from __future__ import annotations

from typing import Optional

from pydantic import AnyUrl, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.app.domain.errors import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=False,
        extra="ignore",
    )

    SUPABASE_URL: AnyUrl
    SUPABASE_SERVICE_ROLE_KEY: str
    GEMINI_API_KEY: SecretStr
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_TIMEOUT_SECONDS: Optional[float] = None
    RECIPE_DAILY_LIMIT: int = Field(default=3, ge=1)
    APP_ENV: str = "local"
    FRONTEND_CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["*"])

    @field_validator("SUPABASE_SERVICE_ROLE_KEY", "GEMINI_API_KEY")
    @classmethod
    def _reject_blank(cls, value: str | SecretStr) -> str | SecretStr:
        raw = value.get_secret_value() if isinstance(value, SecretStr) else value
        if not raw.strip():
            raise ValueError("must not be empty")
        return value


def load_settings() -> Settings:
    """Build settings from the environment, failing fast on missing values."""
    try:
        return Settings()
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        ]
        raise ConfigurationError(errors) from exc


settings = load_settings()
