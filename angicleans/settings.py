from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BUSINESS_EMAIL = "info@angicleans.co.za"


class Settings(BaseSettings):
    """Read from `ANGICLEANS_*` environment variables (or a local `.env`)."""

    model_config = SettingsConfigDict(
        env_prefix="ANGICLEANS_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    environment: str = "production"

    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_timeout: float = 10.0

    business_email: str = DEFAULT_BUSINESS_EMAIL
    logo_path: Path = Path("public/images/logo.png")

    rate_limit_sweep_minutes: int = 60
    reject_unknown_catalog_keys: bool = False

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()
