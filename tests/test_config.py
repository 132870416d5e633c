"""Tests for settings and logging configuration."""

import logging

import pytest
from pydantic import ValidationError

from crag_conditions.config import Settings, get_settings, get_settings_uncached
from crag_conditions.logging_config import configure_logging
from crag_conditions.models.conditions import RatingCategory


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        for name in ("FORECAST_DAYS", "DEFAULT_MIN_RATING", "INCLUDE_NIGHT_HOURS"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.app_name == "Crag Conditions"
        assert settings.forecast_days == 14
        assert settings.conditions_cache_ttl_seconds == 3600
        assert settings.conditions_cache_max_entries == 1024
        assert settings.default_min_rating == RatingCategory.GOOD
        assert settings.default_max_windows == 5
        assert settings.include_night_hours is True
        assert settings.open_meteo_base_url.startswith("https://api.open-meteo.com")

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("FORECAST_DAYS", "7")
        monkeypatch.setenv("DEFAULT_MIN_RATING", "Great")
        monkeypatch.setenv("INCLUDE_NIGHT_HOURS", "false")
        settings = get_settings_uncached()
        assert settings.forecast_days == 7
        assert settings.default_min_rating == RatingCategory.GREAT
        assert settings.include_night_hours is False

    def test_allowed_origins_json(self, monkeypatch):
        monkeypatch.setenv("ALLOWED_ORIGINS", '["https://crags.example.com"]')
        assert get_settings_uncached().allowed_origins == ["https://crags.example.com"]

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("log_level", "loud"),
            ("forecast_days", 0),
            ("forecast_days", 17),
            ("default_min_rating", "stellar"),
            ("default_max_windows", 0),
            ("request_timeout_seconds", 0),
            ("environment", "testing"),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(**{field: value})

    def test_is_production(self):
        assert Settings(environment="production").is_production is True
        assert Settings(environment="development").is_production is False

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()

    def test_cache_clear_reloads(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("FORECAST_DAYS", "2")
        get_settings.cache_clear()
        second = get_settings()
        assert second is not first
        assert second.forecast_days == 2


class TestLogging:
    """Tests for configure_logging."""

    def test_sets_root_level(self):
        root = logging.getLogger()
        previous = root.level
        try:
            configure_logging("debug")
            assert root.level == logging.DEBUG
            configure_logging(logging.ERROR)
            assert root.level == logging.ERROR
        finally:
            root.setLevel(previous)

    def test_quiets_http_client(self):
        configure_logging("DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING
