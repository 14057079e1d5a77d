"""Configuration helpers for the scoring client."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    api_base: str = Field(
        default="http://localhost/slp/sggolfjson.php", alias="SLP_API_BASE"
    )
    app_version: str = Field(default="1.1.0 (0.0.0)", alias="SLP_APP_VERSION")
    device_id: str = Field(default="web", alias="SLP_DEVICE_ID")
    source: str = Field(default="SLPWeb", alias="SLP_SOURCE")
    # None means no local timeout; a hung request only blocks its own cell.
    request_timeout_s: float | None = Field(default=None, alias="SLP_REQUEST_TIMEOUT")
    not_found_code: int = Field(default=404, alias="SLP_NOT_FOUND_CODE")
    preferences_path: str = Field(
        default="~/.slpscoring/preferences.json", alias="SLP_PREFERENCES_PATH"
    )
    api_key: str | None = Field(default=None, alias="API_KEY")

    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", populate_by_name=True
    )

    def identity(self) -> dict[str, str]:
        """Caller identity metadata forwarded with every backend request."""

        return {
            "source": self.source,
            "appVersion": self.app_version,
            "deviceID": self.device_id,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[call-arg]


def reset_settings_cache() -> None:
    """Clear cached settings (primarily for tests)."""

    get_settings.cache_clear()
