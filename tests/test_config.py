#tests\test_config.py

"""Test environment-driven configuration."""

import pytest
from pydantic import ValidationError

from capacity_engine.infrastructure.panel.config import PanelSettings
from capacity_engine.monitor.config import MonitorConfig, MonitorSettings


class TestMonitorSettings:
    """Test monitor tunables."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("CAPACITY_CACHE_TTL_SECONDS", raising=False)

        config = MonitorSettings().to_config()

        assert config == MonitorConfig()
        assert config.cache_ttl_seconds == 120.0
        assert config.full_update_interval_seconds == 300.0
        assert config.memory_per_workload_mb == 1024

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CAPACITY_CACHE_TTL_SECONDS", "30")
        monkeypatch.setenv("CAPACITY_MEMORY_PER_WORKLOAD_MB", "2048")

        config = MonitorSettings().to_config()

        assert config.cache_ttl_seconds == 30.0
        assert config.memory_per_workload_mb == 2048


class TestPanelSettings:
    """Test panel connection settings."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("PANEL_URL", "https://panel.example.com/")
        monkeypatch.setenv("PANEL_API_KEY", "ptla_abc")

        settings = PanelSettings()

        assert settings.base_url == "https://panel.example.com"
        assert settings.request_timeout == 30

    def test_url_required(self, monkeypatch):
        monkeypatch.delenv("PANEL_URL", raising=False)
        monkeypatch.setenv("PANEL_API_KEY", "ptla_abc")

        with pytest.raises(ValidationError):
            PanelSettings()
