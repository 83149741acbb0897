"""Configuration management with pydantic-settings and validation."""

from pydantic_settings import BaseSettings
from pydantic import field_validator


# Fields that have defaults (app works without them)
OPTIONAL_FIELDS = {
    "debounce_seconds",
    "log_level",
    "sql_echo",
    "seed_chores",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration
    database_url: str
    sql_echo: bool = False

    # Name field settles after this many seconds without a keystroke
    debounce_seconds: float = 0.5

    # Comma-separated chore names inserted at startup if missing
    seed_chores: str = ""

    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @field_validator("database_url", mode="before")
    @classmethod
    def fix_database_url(cls, v):
        """Hosted Postgres often uses postgres:// but SQLAlchemy requires postgresql://."""
        if isinstance(v, str) and v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @field_validator("*", mode="before")
    @classmethod
    def check_not_empty(cls, v, info):
        """Validate that required environment variables are not empty."""
        if info.field_name in OPTIONAL_FIELDS:
            return v
        if v is None:
            raise ValueError("Required environment variable is not set")
        if isinstance(v, str) and v.strip() == "":
            raise ValueError("Required environment variable is empty")
        return v

    @field_validator("debounce_seconds")
    @classmethod
    def check_debounce(cls, v: float) -> float:
        if v < 0:
            raise ValueError("debounce_seconds must not be negative")
        return v

    @property
    def seed_chore_names(self) -> list[str]:
        """Return the configured seed chore names, blanks dropped."""
        return [name.strip() for name in self.seed_chores.split(",") if name.strip()]


def get_settings() -> Settings:
    """Load and validate settings from environment.

    Raises:
        ValidationError: If required environment variables are missing or invalid.
    """
    return Settings()
