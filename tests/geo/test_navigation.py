"""Tests for the navigation launcher."""

from unittest.mock import Mock

import pytest

from trip_tracking.geo.navigation import (
    AndroidMapsLauncher,
    AppleMapsLauncher,
    NavigationLauncher,
    WebMapsLauncher,
    launcher_for_user_agent,
)

IPHONE_UA = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15"
ANDROID_UA = "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36"
DESKTOP_UA = "Mozilla/5.0 (X11; Linux x86_64) Gecko/20100101 Firefox/121.0"


@pytest.mark.unit
class TestLauncherSelection:
    @pytest.mark.parametrize(
        ("user_agent", "expected"),
        [
            (IPHONE_UA, AppleMapsLauncher),
            ("Mozilla/5.0 (iPad; CPU OS 16_0 like Mac OS X)", AppleMapsLauncher),
            (ANDROID_UA, AndroidMapsLauncher),
            (DESKTOP_UA, WebMapsLauncher),
            ("", WebMapsLauncher),
            (None, WebMapsLauncher),
        ],
    )
    def test_platform_family(self, user_agent, expected):
        assert isinstance(launcher_for_user_agent(user_agent), expected)


@pytest.mark.unit
class TestMapUrls:
    def test_apple_maps_url(self):
        assert AppleMapsLauncher().build_url("1 Infinite Loop") == "maps://?daddr=1%20Infinite%20Loop"

    def test_android_geo_url(self):
        assert AndroidMapsLauncher().build_url("5th & Main") == "geo:0,0?q=5th%20%26%20Main"

    def test_web_fallback_url(self):
        url = WebMapsLauncher().build_url("123 Main St, Springfield")
        assert url == "https://maps.google.com/maps?daddr=123%20Main%20St%2C%20Springfield"


@pytest.mark.unit
class TestNavigationLauncher:
    def test_opens_url_from_strategy(self):
        opener = Mock()
        launcher = NavigationLauncher.for_user_agent(ANDROID_UA, opener=opener)

        url = launcher.open_navigation("123 Main St")

        opener.assert_called_once_with("geo:0,0?q=123%20Main%20St")
        assert url == "geo:0,0?q=123%20Main%20St"

    def test_blank_address_is_skipped(self):
        opener = Mock()
        launcher = NavigationLauncher(opener=opener)

        assert launcher.open_navigation("   ") is None
        opener.assert_not_called()

    def test_fake_strategy_can_be_injected(self):
        class RecordingLauncher:
            name = "recording"

            def build_url(self, destination_address: str) -> str:
                return f"test://{destination_address}"

        opener = Mock()
        NavigationLauncher(RecordingLauncher(), opener=opener).open_navigation("Depot")

        opener.assert_called_once_with("test://Depot")
