# backend/app/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import BRAND_NAME


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


_BACKEND_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CATALOG_DIR = _BACKEND_ROOT / "data"

logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = _BACKEND_ROOT / ".env"  # Goes up to backend/.env
    logger.info(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)

_DEFAULT_SECRET_KEY = SecretStr("dev-secret-key-change-me-in-production")


class Settings(BaseSettings):
    # Use a default secret key for local/testing environments
    secret_key: SecretStr = Field(
        default=_DEFAULT_SECRET_KEY,
        description="Secret key for JWT tokens",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 720  # 12 hours

    environment: Literal["development", "production", "test"] = Field(
        default="development",
        alias="ENVIRONMENT",
        description="Deployment environment; dev-only routes are enabled in development",
    )

    database_url: str = Field(
        default="sqlite:///./festival_archive.db",
        alias="DATABASE_URL",
        description="SQLAlchemy database URL (Postgres in production, SQLite locally)",
    )
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    # Static festival catalog
    catalog_data_dir: str = Field(
        default=str(DEFAULT_CATALOG_DIR),
        alias="CATALOG_DATA_DIR",
        description="Directory holding films.json, entries.json, screenings.json, editions.json",
    )
    default_edition_id: str = Field(
        default="edition_jiff_2025",
        alias="DEFAULT_EDITION_ID",
        description="Edition selected when a browse request does not name one",
    )

    # Login lockout
    login_max_failures: int = Field(
        default=5, description="Failed logins before the account is locked"
    )
    login_lockout_minutes: int = Field(
        default=15, description="Minutes an account stays locked after too many failures"
    )

    # AI screening planner
    openai_api_key: Optional[SecretStr] = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o", alias="OPENAI_PLANNER_MODEL")
    openai_timeout_s: float = Field(default=30.0, alias="OPENAI_TIMEOUT_S")
    openai_max_retries: int = Field(default=2, alias="OPENAI_MAX_RETRIES")
    planner_max_steps: int = Field(
        default=5,
        alias="PLANNER_MAX_STEPS",
        description="Maximum model round-trips per planner chat request",
    )

    cors_origins_raw: str = Field(
        default="http://localhost:3000",
        alias="CORS_ORIGINS",
        description="Comma separated list of allowed CORS origins",
    )

    app_name: str = f"{BRAND_NAME.lower()}-api"

    # Legacy flag, set to True when running tests
    is_testing: bool = False

    # Use ConfigDict instead of Config class (Pydantic V2 style)
    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,  # allows SECRET_KEY to match secret_key
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("environment", mode="before")
    @classmethod
    def _normalize_environment(cls, value: object) -> object:
        if isinstance(value, str):
            normalized = value.strip().lower()
            aliases = {"dev": "development", "local": "development", "prod": "production"}
            return aliases.get(normalized, normalized)
        return value

    @field_validator("planner_max_steps")
    @classmethod
    def _clamp_planner_steps(cls, value: int) -> int:
        return max(1, min(10, value))

    @model_validator(mode="after")
    def _require_secret_in_production(self) -> "Settings":
        if (
            self.environment == "production"
            and self.secret_key.get_secret_value() == _DEFAULT_SECRET_KEY.get_secret_value()
        ):
            raise ValueError("SECRET_KEY must be set in production environments.")
        return self

    @property
    def cors_origins(self) -> list[str]:
        return [item.strip() for item in self.cors_origins_raw.split(",") if item.strip()]

    @property
    def catalog_path(self) -> Path:
        return Path(self.catalog_data_dir)


settings = Settings()
