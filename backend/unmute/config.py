"""
unMute Backend: Application Configuration
==========================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; checked again during startup.

Database connection:
    DATABASE_URL wins when set (tests point it at SQLite). Otherwise the URL
    is assembled from DB_HOST / DB_PORT / DB_USER / DB_PASS / DB_NAME, the
    same variables the deployment .env files already carry.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL

DEFAULT_JWT_SECRET = "unmute-dev-secret-change-me"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development.
    Production deployments MUST override JWT_SECRET and the database
    credentials.
    """

    # ── Database ──────────────────────────────────────────────────────────
    database_url: str = Field(
        default="",
        description="Full async SQLAlchemy URL; overrides the DB_* parts when set",
    )
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432, ge=1, le=65535)
    db_user: str = Field(default="unmute")
    db_pass: str = Field(default="")
    db_name: str = Field(default="unmute")

    # Persistent connections for normal load, plus headroom for spikes
    db_pool_size: int = Field(default=10, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    # ── Auth ──────────────────────────────────────────────────────────────
    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET)
    jwt_algorithm: str = Field(default="HS256")
    jwt_expire_minutes: int = Field(default=60, ge=1, le=60 * 24 * 30)

    # Cost factor for bcrypt; 10 matches hashes created by the old Node backend
    bcrypt_rounds: int = Field(default=10, ge=4, le=15)

    # ── File Storage (profile pictures) ───────────────────────────────────
    storage_root: str = Field(default="./storage")
    max_file_size: int = Field(default=5_242_880, ge=1_048_576, le=52_428_800)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Vite dev server runs on 5173
    cors_origins: str = Field(default="http://localhost:5173")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=5000, ge=1024, le=65535)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Rate Limiting ─────────────────────────────────────────────────────
    # Per-IP sliding window
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_requests: int = Field(default=300, ge=10, le=100_000)
    rate_limit_window: int = Field(default=3600, ge=60, le=86400)  # seconds

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # DB_HOST and db_host both work
        "extra": "ignore",
    }

    @property
    def sqlalchemy_url(self) -> str:
        """
        The URL handed to the async engine and to Alembic.

        Assembled with SQLAlchemy's URL builder so passwords containing
        '@' or '/' are escaped correctly.
        """
        if self.database_url:
            return self.database_url
        url = URL.create(
            "postgresql+asyncpg",
            username=self.db_user,
            password=self.db_pass or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
        return url.render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return self.sqlalchemy_url.startswith("sqlite")

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises one ValueError listing them.
        """
        errors = []
        if not self.jwt_secret or self.jwt_secret == DEFAULT_JWT_SECRET:
            errors.append(
                "JWT_SECRET is not set. Tokens are being signed with the "
                "development placeholder."
            )
        if not self.database_url and not self.db_pass:
            errors.append("DB_PASS is empty and no DATABASE_URL was provided.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
