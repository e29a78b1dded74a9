"""Hand-off to a map application for turn-by-turn navigation.

Opening is best effort: whether a handler exists for the URL is not
detected or reported.
"""

from __future__ import annotations

import logging
import re
import webbrowser
from collections.abc import Callable
from typing import Protocol
from urllib.parse import quote

logger = logging.getLogger(__name__)

UrlOpener = Callable[[str], object]

_APPLE_USER_AGENT = re.compile(r"iPad|iPhone|iPod")
_ANDROID_USER_AGENT = re.compile(r"Android")


def _encode(address: str) -> str:
    # Match encodeURIComponent: only unreserved marks stay literal.
    return quote(address, safe="-_.!~*'()")


class MapLauncherStrategy(Protocol):
    name: str

    def build_url(self, destination_address: str) -> str: ...


class AppleMapsLauncher:
    name = "apple_maps"

    def build_url(self, destination_address: str) -> str:
        return f"maps://?daddr={_encode(destination_address)}"


class AndroidMapsLauncher:
    name = "android_geo"

    def build_url(self, destination_address: str) -> str:
        return f"geo:0,0?q={_encode(destination_address)}"


class WebMapsLauncher:
    name = "web"

    def build_url(self, destination_address: str) -> str:
        return f"https://maps.google.com/maps?daddr={_encode(destination_address)}"


def launcher_for_user_agent(user_agent: str | None) -> MapLauncherStrategy:
    """Pick the map launcher for the platform family a user agent names."""
    ua = user_agent or ""
    if _APPLE_USER_AGENT.search(ua):
        return AppleMapsLauncher()
    if _ANDROID_USER_AGENT.search(ua):
        return AndroidMapsLauncher()
    return WebMapsLauncher()


class NavigationLauncher:
    def __init__(
        self,
        strategy: MapLauncherStrategy | None = None,
        opener: UrlOpener = webbrowser.open,
    ):
        self.strategy = strategy or WebMapsLauncher()
        self._opener = opener

    @classmethod
    def for_user_agent(
        cls, user_agent: str | None, opener: UrlOpener = webbrowser.open
    ) -> NavigationLauncher:
        return cls(launcher_for_user_agent(user_agent), opener)

    def open_navigation(self, destination_address: str) -> str | None:
        """Open the map application toward ``destination_address``.

        Returns the URL handed to the opener, or None for a blank address.
        """
        if not destination_address or not destination_address.strip():
            logger.debug("Skipping navigation: no destination address")
            return None

        url = self.strategy.build_url(destination_address.strip())
        logger.info(f"Opening navigation via {self.strategy.name}")
        self._opener(url)
        return url
