"""Tests for settings and logging configuration."""

import structlog

from py_climate.config import Settings
from py_climate.core.orchestrator import OrchestratorOptions
from py_climate.core.season import SeasonOptions
from py_climate.utils.log import configure_logging


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("CLIMATE_SEASONS_PER_YEAR", raising=False)
        settings = Settings()

        assert settings.seasons_per_year == 12
        assert settings.max_advection_visits == 5
        assert settings.log_format == "json"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("CLIMATE_SEASONS_PER_YEAR", "4")
        monkeypatch.setenv("CLIMATE_ADVECTION_TOLERANCE", "0.01")

        settings = Settings()

        assert settings.seasons_per_year == 4
        assert settings.advection_tolerance == 0.01

    def test_options_from_settings(self, monkeypatch):
        monkeypatch.setenv("CLIMATE_SEASONS_PER_YEAR", "6")
        monkeypatch.setenv("CLIMATE_MAX_AIR_LAYERS", "8")

        options = OrchestratorOptions.from_settings(Settings())

        assert options.seasons_per_year == 6
        assert isinstance(options.season, SeasonOptions)
        assert options.season.max_air_layers == 8


def test_configure_logging():
    configure_logging(Settings(log_level="DEBUG", log_format="console"))
    try:
        structlog.get_logger().info("Logging configured", check=True)
    finally:
        structlog.reset_defaults()
