from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from beacon.exceptions import ConfigError


class AppConfig(BaseModel):
    """Application-specific configuration values."""

    name: str = "Beacon"
    log_level: str = "INFO"
    # Transport settings for FastMCP: "stdio" (default), "http", or "sse"
    transport: Literal["stdio", "http", "sse"] = "stdio"
    host: str = "127.0.0.1"
    port: int = 8000


class SearchConfig(BaseModel):
    """Searcher tuning values."""

    # Candidates are kept when they score at least half of this value
    min_similarity: float = 0.3
    debug: bool = False
    default_top_n: int = 1


class DatasetConfig(BaseModel):
    """Dataset location for the MCP server."""

    path: Optional[str] = None  # JSON list of {"id", "text", "fields"} objects


class Settings(BaseSettings):
    """Top-level settings loaded from environment variables and .env only."""

    model_config = SettingsConfigDict(
        env_prefix="BEACON_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    app: AppConfig = AppConfig()
    search: SearchConfig = SearchConfig()
    dataset: DatasetConfig = DatasetConfig()


def load_settings() -> Settings:
    """Load settings from environment variables and .env only."""
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as e:
        raise ConfigError(f"Invalid Beacon settings: {e}") from e
