"""Application configuration loaded from environment variables and .env file."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Global mode
    crashstats_mode: str = Field(default="live", description="Global mode: 'mock' or 'live'")

    # Mock settings
    mock_scenario: str = Field(default="fenix_audio_crash")
    mock_delay_enabled: bool = Field(default=False)

    # Socorro crash-stats API
    socorro_mode: str = Field(default="")
    socorro_api_url: str = Field(default="https://crash-stats.mozilla.org/api")
    # Tokens must carry no permissions; they only raise rate limits.
    socorro_api_token: str = Field(default="")
    socorro_api_token_path: str = Field(default="")

    # Correlations CDN
    correlations_mode: str = Field(default="")
    correlations_url: str = Field(
        default="https://analysis-output.telemetry.mozilla.org/top-signatures-correlations/data"
    )

    # Crash ping telemetry
    crash_pings_mode: str = Field(default="")
    crash_pings_url: str = Field(default="https://crash-pings.mozilla.org")

    # HTTP
    request_timeout: float = Field(default=30.0, gt=0)

    # Output shaping defaults
    default_depth: int = Field(default=10, ge=0)
    default_facets_size: int = Field(default=50, ge=0)

    def get_integration_mode(self, integration: str) -> str:
        """Return the effective mode for a given integration.

        Per-integration overrides take precedence over the global crashstats_mode.
        """
        override = getattr(self, f"{integration}_mode", "")
        return override if override else self.crashstats_mode

    def resolve_token(self) -> str | None:
        """Return the API token from settings, else from the token file, else None."""
        if self.socorro_api_token.strip():
            return self.socorro_api_token.strip()
        if not self.socorro_api_token_path:
            return None
        path = Path(self.socorro_api_token_path).expanduser()
        try:
            token = path.read_text(encoding="utf-8").strip()
        except OSError as e:
            logger.warning("Could not read API token file %s: %s", path, e)
            return None
        return token or None

    @property
    def available_scenarios(self) -> list[str]:
        return [
            "fenix_audio_crash",
            "top_crashers",
        ]


def get_settings() -> Settings:
    """Create and return the application settings singleton."""
    return Settings()
