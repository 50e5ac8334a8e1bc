"""Configuration schema using Pydantic."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings

from boardwatch import __version__
from boardwatch.identify.remote import DEFAULT_LOOKUP_URL


class LookupConfig(BaseModel):
    """Remote VID/PID lookup service."""
    base_url: str = DEFAULT_LOOKUP_URL
    timeout_seconds: float = 10.0
    user_agent: str = f"boardwatch/{__version__}"


class DiscoveryConfig(BaseModel):
    """Discovery backends to run."""
    backends: list[str] = Field(default_factory=lambda: ["serial"])  # serial | mock
    serial_poll_interval_ms: int = 1000


class BoardListConfig(BaseModel):
    """Snapshot listing and live watch behavior."""
    default_timeout_ms: int = 1000  # grace period between discovery start and snapshot
    watch_queue_size: int = 1  # bound of the watch output channel


class PlatformsConfig(BaseModel):
    """Installed platform signature database."""
    database_path: str = "~/.boardwatch/platforms.json"


class Config(BaseSettings):
    """Root configuration for boardwatch."""
    lookup: LookupConfig = Field(default_factory=LookupConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    board_list: BoardListConfig = Field(default_factory=BoardListConfig)
    platforms: PlatformsConfig = Field(default_factory=PlatformsConfig)

    model_config = ConfigDict(
        env_prefix="BOARDWATCH_",
        env_nested_delimiter="__"
    )
