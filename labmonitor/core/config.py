from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Iterable

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "LabMonitor"
    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parent.parent)
    DATA_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parent.parent.parent / "data")
    TZ: str = "UTC"

    API_KEY: str = Field(default="", validation_alias=AliasChoices("API_KEY", "API_TOKEN"))
    JWT_SECRET: str = "change-me"
    JWT_ACCESS_TTL_MIN: int = 15
    JWT_REFRESH_TTL_DAYS: int = 7
    ALLOWED_ORIGINS: Annotated[list[str], NoDecode] = Field(default_factory=list)

    APP_SECRET: str = "dev-insecure-secret-change-me"
    SESSION_COOKIE_NAME: str = "labmonitor_session"
    SESSION_MAX_AGE: int = 60 * 60 * 24 * 30

    DB_URL: str = Field(default="", validation_alias=AliasChoices("DATABASE_URL", "DB_URL"))
    SEED_DEMO_DATA: bool = True

    HOST: str = "0.0.0.0"
    PORT: int = 8089

    # Alerting
    ADMIN_EMAIL: str = "lab.admin@example.com"
    NOTIFICATION_SENDER: str = "LabMonitor <noreply@labmonitor.app>"
    MAINTENANCE_DUE_SOON_DAYS: int = 14

    # Identity
    MIN_PASSWORD_LENGTH: int = 6
    FEDERATED_PROVIDERS: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["google", "github"])
    DEFAULT_FEDERATED_ROLE: str = "Researcher"

    # Troubleshooting assistant
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    ASSISTANT_TIMEOUT_SECONDS: float = 30.0

    @property
    def database_url(self) -> str:
        return self.DB_URL or f"sqlite:///{self.DATA_DIR / 'labmonitor.db'}"

    @field_validator("ALLOWED_ORIGINS", "FEDERATED_PROVIDERS", mode="before")
    @classmethod
    def parse_csv_list(cls, value: Any) -> list[str]:
        if value in (None, "", []):
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, Iterable):
            return [str(item).strip() for item in value if str(item).strip()]
        raise TypeError("expected a comma separated string or list")


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    return settings


settings = get_settings()
