"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

WEAK_SECRET_KEYS = ("123", "change-me-in-production", "secret", "password", "changeme")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App settings
    app_name: str = "Chirper API"
    debug: bool = False
    secret_key: str  # Required, no default
    port: int = 8888
    public_url: str = ""

    # Database
    database_url: str = "sqlite+aiosqlite:///./chirper.db"

    # JWT Authentication
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_days: int = 30

    # Outgoing mail
    mail_from: str = "admin@chirper.local"
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = False
    smtp_start_tls: bool = True
    smtp_timeout: float = 30.0

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str, info) -> str:
        """Validate that secret_key is secure."""
        if not v:
            raise ValueError("SECRET_KEY is required")

        # In production mode, ensure secret key is strong
        debug = info.data.get("debug", False)
        if not debug:
            if len(v) < 32:
                raise ValueError("SECRET_KEY must be at least 32 characters in production mode")
            if v in WEAK_SECRET_KEYS:
                raise ValueError("SECRET_KEY must not be a common weak value")

        return v

    @property
    def base_url(self) -> str:
        """Public base URL used in links sent to users."""
        if self.public_url:
            return self.public_url.rstrip("/")
        return f"http://localhost:{self.port}"

    def validate_runtime_config(self) -> list[str]:
        """Validate runtime configuration and return warnings."""
        warnings = []

        if not self.smtp_host:
            warnings.append("SMTP_HOST is not set - verification emails will only be logged")

        if not self.public_url:
            warnings.append(f"PUBLIC_URL is not set - verification links point to {self.base_url}")

        # Warn about debug mode in production
        if self.debug:
            warnings.append("DEBUG mode is enabled - should be disabled in production")

        return warnings


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
