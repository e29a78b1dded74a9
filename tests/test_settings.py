import pytest
from pydantic import ValidationError

from trip_tracking.settings import (
    APISettings,
    LoggingSettings,
    Settings,
    TrackingSettings,
    get_settings,
)


@pytest.mark.unit
class TestTrackingSettings:
    def test_defaults(self):
        settings = TrackingSettings()
        assert settings.location_timeout_seconds == 15.0
        assert settings.location_maximum_age_seconds == 60.0
        assert settings.enable_high_accuracy is True
        assert settings.open_navigation_on_start is True

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("TRACKING_LOCATION_TIMEOUT_SECONDS", "30")
        monkeypatch.setenv("TRACKING_OPEN_NAVIGATION_ON_START", "false")

        settings = TrackingSettings()
        assert settings.location_timeout_seconds == 30.0
        assert settings.open_navigation_on_start is False

    def test_validation(self):
        with pytest.raises(ValidationError):
            TrackingSettings(location_timeout_seconds=0)

        with pytest.raises(ValidationError):
            TrackingSettings(location_maximum_age_seconds=-1)


@pytest.mark.unit
class TestAPISettings:
    def test_defaults(self):
        settings = APISettings()
        assert settings.base_url == "http://localhost:8081"
        assert settings.token == ""
        assert settings.timeout_seconds is None

    def test_strips_trailing_slash(self):
        assert APISettings(base_url="https://api.example.com/").base_url == "https://api.example.com"

    def test_rejects_non_http_url(self):
        with pytest.raises(ValidationError):
            APISettings(base_url="ftp://api.example.com")


@pytest.mark.unit
class TestLoggingSettings:
    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("LOG_FORMAT", "json")

        settings = LoggingSettings()
        assert settings.level == "DEBUG"
        assert settings.format == "json"

    def test_rejects_unknown_level(self):
        with pytest.raises(ValidationError):
            LoggingSettings(level="TRACE")


@pytest.mark.unit
def test_get_settings_builds_all_groups(monkeypatch):
    monkeypatch.setenv("API_TOKEN", "from-env")

    settings = get_settings()

    assert isinstance(settings, Settings)
    assert settings.api.token == "from-env"
    assert settings.tracking.location_timeout_seconds == 15.0
