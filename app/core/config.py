"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
# SQLite is the desktop default; PostgreSQL is supported for shared deployments.
VALID_DATABASE_URL_PREFIXES = (
    "sqlite://",
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
    "postgres+psycopg2://",
)

# Placeholder secrets; refused when APP_ENV=prod.
DEFAULT_JWT_SECRET = "change-me-in-production"
DEFAULT_JWT_REFRESH_SECRET = "change-me-refresh-in-production"


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    DEBUG: bool = False
    API_PREFIX: str = "/api"

    DATABASE_URL: str = "sqlite:///./hotspot_admin.db"

    # JWT authentication (access and refresh tokens use separate secrets)
    JWT_SECRET: SecretStr = SecretStr(DEFAULT_JWT_SECRET)
    JWT_REFRESH_SECRET: SecretStr = SecretStr(DEFAULT_JWT_REFRESH_SECRET)
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "mikrotik-hotspot-platform"
    JWT_AUDIENCE: str = "mikrotik-hotspot-platform-users"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    # When True, a refresh token is single-use: refreshing revokes the presented token.
    REFRESH_TOKEN_ROTATION: bool = True

    # Bcrypt cost (rounds); 12 is a good default for security vs speed.
    BCRYPT_ROUNDS: int = 12

    # Admin action audit trail (admin_logs table)
    AUDIT_LOG_ENABLED: bool = True
    # Retention job (python -m app.retention); 0 keeps admin_logs forever.
    ADMIN_LOG_RETENTION_DAYS: int = 0

    # Client idle-session watchdog defaults (served to clients, used by app.client)
    SESSION_TIMEOUT_SECONDS: int = 15 * 60
    SESSION_WARNING_SECONDS: int = 5 * 60
    SESSION_COUNTDOWN_SECONDS: int = 60

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("DATABASE_URL must be set and non-empty")
        if not any(v.startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a SQLite or PostgreSQL URL (e.g. sqlite:///./hotspot_admin.db)"
            )
        return v

    @field_validator("API_PREFIX")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            raise ValueError("API_PREFIX must start with '/' (e.g. /api)")
        return v

    @field_validator("JWT_SECRET", "JWT_REFRESH_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value() or not v.get_secret_value().strip():
            raise ValueError("JWT secrets must be set and non-empty")
        return v

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_ALGORITHM must be set and non-empty")
        return v.strip()

    @field_validator("ACCESS_TOKEN_EXPIRE_MINUTES")
    @classmethod
    def validate_access_token_expire_minutes(cls, v: int) -> int:
        if v < 1 or v > 1440:
            raise ValueError(
                "ACCESS_TOKEN_EXPIRE_MINUTES must be between 1 and 1440 (1 min to 1 day)"
            )
        return v

    @field_validator("REFRESH_TOKEN_EXPIRE_DAYS")
    @classmethod
    def validate_refresh_token_expire_days(cls, v: int) -> int:
        if v < 1 or v > 90:
            raise ValueError("REFRESH_TOKEN_EXPIRE_DAYS must be between 1 and 90")
        return v

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        if v < 4 or v > 16:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 16")
        return v

    @field_validator("ADMIN_LOG_RETENTION_DAYS")
    @classmethod
    def validate_admin_log_retention_days(cls, v: int) -> int:
        if v < 0:
            raise ValueError("ADMIN_LOG_RETENTION_DAYS must be >= 0 (0 disables pruning)")
        return v

    @field_validator(
        "SESSION_TIMEOUT_SECONDS", "SESSION_WARNING_SECONDS", "SESSION_COUNTDOWN_SECONDS"
    )
    @classmethod
    def validate_session_seconds(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Session timeout values must be positive")
        return v

    @model_validator(mode="after")
    def validate_cross_fields(self) -> "Settings":
        if self.SESSION_WARNING_SECONDS >= self.SESSION_TIMEOUT_SECONDS:
            raise ValueError(
                "SESSION_WARNING_SECONDS must be less than SESSION_TIMEOUT_SECONDS"
            )
        if self.APP_ENV == "prod" and (
            self.JWT_SECRET.get_secret_value() == DEFAULT_JWT_SECRET
            or self.JWT_REFRESH_SECRET.get_secret_value() == DEFAULT_JWT_REFRESH_SECRET
        ):
            raise ValueError(
                "JWT_SECRET and JWT_REFRESH_SECRET must be changed from their defaults in prod"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
