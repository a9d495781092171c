"""Configuration management for feedsync.

All configuration comes from environment variables. Uses pydantic-settings
for validation so malformed values produce clear errors at startup. The
loaded Config is passed explicitly to whichever component needs it.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Sync configuration loaded from environment variables."""

    database_path: str = Field(default="feedsync.db", alias="FEEDSYNC_DB_PATH")
    default_refresh_interval: int = Field(default=3600, gt=0, alias="FEEDSYNC_REFRESH_INTERVAL")
    sync_paused: bool = Field(default=False, alias="FEEDSYNC_PAUSED")

    request_timeout: float = Field(default=20.0, gt=0, alias="FEEDSYNC_REQUEST_TIMEOUT")
    resource_timeout: float = Field(default=30.0, gt=0, alias="FEEDSYNC_RESOURCE_TIMEOUT")
    connect_retries: int = Field(default=2, ge=0, alias="FEEDSYNC_CONNECT_RETRIES")
    max_concurrent_fetches: int = Field(default=6, gt=0, alias="FEEDSYNC_MAX_CONCURRENT_FETCHES")
    user_agent: str = Field(default="feedsync/0.1 (+rss sync)", alias="FEEDSYNC_USER_AGENT")

    merge_prefix: int = Field(default=50, gt=0, alias="FEEDSYNC_MERGE_PREFIX")
    retention_cap: int = Field(default=100, gt=0, alias="FEEDSYNC_RETENTION_CAP")
    preview_limit: int = Field(default=10, gt=0, alias="FEEDSYNC_PREVIEW_LIMIT")

    server_host: str = Field(default="127.0.0.1", alias="MCP_SERVER_HOST")
    server_port: int = Field(default=8000, alias="MCP_SERVER_PORT")

    model_config = SettingsConfigDict(
        populate_by_name=True,
        extra="ignore",
    )


def load_config() -> Config:
    """Load and validate config from environment. Raises on invalid values."""
    return Config()
