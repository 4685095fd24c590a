# reqdeco/core/config.py
"""
Central configuration for reqdeco.

Environment variables (prefixed ``REQDECO_``) override defaults.
"""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings with sensible defaults."""

    model_config = SettingsConfigDict(
        env_prefix="REQDECO_", env_file=".env", extra="ignore"
    )

    app_env: str = Field(
        default="production",
        description="Mock injection is active only when this is 'development'",
    )
    log_level: str = "INFO"

    strict_merge: bool = Field(
        default=False,
        description="Reject methods with several sub-requests and no merge reducer",
    )
    default_signature: str = "position"

    # Glob patterns for YAML mock tables used by a bare @mock()
    mock_data_paths: list[str] = Field(
        default_factory=lambda: ["config/mocks.yaml"]
    )

    @property
    def development(self) -> bool:
        return self.app_env.lower() == "development"


settings = Settings()
