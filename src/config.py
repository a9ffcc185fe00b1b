"""Application configuration."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
CONNECTIONS_FILE = DATA_DIR / "connections.csv"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Settings read from environment variables (or a .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    CONNECTIONS_FILE: Path = CONNECTIONS_FILE

    # Route search
    ROUTE_K: int = 3  # Routes returned per search
    ROUTE_MAX_DEPTH: int = 50  # Max stations in a candidate route
    SEARCH_TIMEOUT_SECONDS: float = 5.0
    MAX_CONCURRENT_SEARCHES: int = 4  # Includes searches still running after a timeout

    LOG_LEVEL: str = "INFO"

    @field_validator(
        "ROUTE_MAX_DEPTH", "SEARCH_TIMEOUT_SECONDS", "MAX_CONCURRENT_SEARCHES", mode="after"
    )
    @classmethod
    def must_be_positive(cls, v: float) -> float:
        """Reject zero or negative search bounds."""
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("LOG_LEVEL", mode="after")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Uppercase the log level and check it is a known one."""
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level: {v}")
        return level


settings = Settings()
