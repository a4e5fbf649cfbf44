"""Configuration management for deploymark."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from deploymark.constants import (
    DEFAULT_REMOTE,
    DEFAULT_TAG,
    GIT_COMMAND_TIMEOUT,
    SUGGESTION_MAX_DISTANCE,
)


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Markers
    deploymark_tag: str = Field(default=DEFAULT_TAG, description="Default marker tag name")
    deploymark_remote: str = Field(
        default=DEFAULT_REMOTE, description="Remote the marker is published to"
    )
    initial_as_changes: bool = Field(
        default=True, description="Report changes when the marker does not exist yet"
    )

    # Git
    repo_path: str = Field(default=".", description="Path of the git working tree")
    git_binary: str = Field(default="git", description="git executable")
    git_timeout: int = Field(
        default=GIT_COMMAND_TIMEOUT, gt=0, description="Timeout per git command in seconds"
    )

    # Diagnostics
    suggestion_max_distance: int = Field(
        default=SUGGESTION_MAX_DISTANCE,
        ge=0,
        description="Maximum edit distance for similar marker name suggestions",
    )

    # CI runner integration
    github_output: str | None = Field(
        default=None, description="File that receives named step outputs"
    )
    github_ref_name: str | None = Field(
        default=None, description="Ref name reported when HEAD is detached"
    )

    # Application
    environment: str = Field(default="production", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
