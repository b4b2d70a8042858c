"""
Configuration for the Fruit Spinner backend.
Loads variables from the .env file.
"""

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Telegram (only the welcome sender needs it)
    BOT_TOKEN: SecretStr | None = None

    # Database URL (Railway/Render format)
    # If set, overrides PostgreSQL individual vars
    DATABASE_URL: str | None = None

    # PostgreSQL (individual vars, fallback if DATABASE_URL not set)
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "fruit_spinner"
    POSTGRES_USER: str = "fruit_spinner"
    POSTGRES_PASSWORD: SecretStr | None = None

    # Environment (development | production)
    ENVIRONMENT: str = "development"

    # Mini App frontend origin for CORS
    TMA_URL: str | None = None

    # Points award retry policy
    AWARD_MAX_ATTEMPTS: int = 3
    AWARD_RETRY_BASE_DELAY_MS: int = 100

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("AWARD_MAX_ATTEMPTS")
    @classmethod
    def check_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("AWARD_MAX_ATTEMPTS must be at least 1")
        return v

    @field_validator("AWARD_RETRY_BASE_DELAY_MS")
    @classmethod
    def check_delay(cls, v: int) -> int:
        if v < 0:
            raise ValueError("AWARD_RETRY_BASE_DELAY_MS must not be negative")
        return v

    @property
    def database_url(self) -> str:
        """
        Get database URL based on environment.

        Priority:
        1. DATABASE_URL env var (Railway/Render format)
        2. PostgreSQL individual vars (production)
        3. SQLite (development)
        """
        if self.DATABASE_URL:
            url = self.DATABASE_URL
            if url.startswith("postgres://"):
                url = url.replace("postgres://", "postgresql://", 1)
            return url

        if self.ENVIRONMENT == "production":
            if not self.POSTGRES_PASSWORD:
                raise ValueError("POSTGRES_PASSWORD required for production")
            return (
                f"postgresql://{self.POSTGRES_USER}:"
                f"{self.POSTGRES_PASSWORD.get_secret_value()}"
                f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )

        return "sqlite://db.sqlite3"

    @property
    def award_base_delay(self) -> float:
        """Backoff base delay in seconds."""
        return self.AWARD_RETRY_BASE_DELAY_MS / 1000


config = Settings()
