#capacity_engine\infrastructure\panel\config.py

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class PanelSettings(BaseSettings):
    """Panel API configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Panel connection (NO DEFAULTS)
    panel_url: str
    panel_api_key: str

    # Requests
    request_timeout: int = 30
    per_page: int = 100

    @property
    def base_url(self) -> str:
        return self.panel_url.rstrip("/")


@lru_cache
def get_panel_settings() -> PanelSettings:
    return PanelSettings()
