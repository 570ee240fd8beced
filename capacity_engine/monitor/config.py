#capacity_engine\monitor\config.py
from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class MonitorConfig:
    cache_ttl_seconds: float = 120.0
    full_update_interval_seconds: float = 300.0

    # Density heuristic used by the load score
    memory_per_workload_mb: int = 1024

    max_recommendations: int = 5
    max_alternatives: int = 3

    fetch_workers: int = 4


class MonitorSettings(BaseSettings):
    """Monitor tunables from environment variables (CAPACITY_*)."""

    model_config = SettingsConfigDict(
        env_prefix="CAPACITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    cache_ttl_seconds: float = 120.0
    full_update_interval_seconds: float = 300.0
    memory_per_workload_mb: int = 1024
    max_recommendations: int = 5
    max_alternatives: int = 3
    fetch_workers: int = 4

    def to_config(self) -> MonitorConfig:
        return MonitorConfig(
            cache_ttl_seconds=self.cache_ttl_seconds,
            full_update_interval_seconds=self.full_update_interval_seconds,
            memory_per_workload_mb=self.memory_per_workload_mb,
            max_recommendations=self.max_recommendations,
            max_alternatives=self.max_alternatives,
            fetch_workers=self.fetch_workers,
        )
