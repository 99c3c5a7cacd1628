"""Client platform detection for open-in-app attempts."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

from linkgate.domain import PlatformClass

_IOS_PATTERN: Final[re.Pattern[str]] = re.compile(r"iPad|iPhone|iPod")
_ANDROID_PATTERN: Final[re.Pattern[str]] = re.compile(r"Android")
_OTHER_MOBILE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"BlackBerry|BB10|IEMobile|Windows Phone|Opera Mini|KaiOS|Mobile Safari|Mobi",
    re.IGNORECASE,
)
# In-app webviews that refuse custom-scheme navigation.
_SCHEME_BLOCKING_WEBVIEW_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"FBAN|FBAV|Instagram|LinkedInApp|Snapchat|musical_ly|BytedanceWebview",
)


@dataclass(frozen=True)
class ClientEnvironment:
    """Browsing-context facts the resolver needs.

    Attributes:
        user_agent: Raw user-agent string.
        navigator_platform: `navigator.platform` when the client reports it.
        max_touch_points: `navigator.maxTouchPoints` when reported.
        scheme_blocked: True when custom-scheme navigation is known to be blocked.
    """

    user_agent: str = ""
    navigator_platform: str = ""
    max_touch_points: int = 0
    scheme_blocked: bool = False


def deeplink_detect_platform(environment: ClientEnvironment) -> PlatformClass:
    """Classify the client platform.

    iPadOS desktop-mode Safari reports `MacIntel` with touch support and is
    treated as iOS.

    Args:
        environment: Client environment.

    Returns:
        PlatformClass: Platform class, desktop when nothing mobile matches.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    user_agent = environment.user_agent or ""
    if _IOS_PATTERN.search(user_agent):
        return PlatformClass.IOS
    if environment.navigator_platform == "MacIntel" and environment.max_touch_points > 1:
        return PlatformClass.IOS
    if _ANDROID_PATTERN.search(user_agent):
        return PlatformClass.ANDROID
    if _OTHER_MOBILE_PATTERN.search(user_agent):
        return PlatformClass.OTHER_MOBILE
    return PlatformClass.DESKTOP


def deeplink_is_supported_platform(platform: PlatformClass) -> bool:
    """Return whether the platform can hand navigation to the host app.

    Args:
        platform: Platform class.

    Returns:
        bool: False for desktop.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return platform != PlatformClass.DESKTOP


def deeplink_environment_from_headers(
    headers: Mapping[str, str],
    navigator_platform: str = "",
    max_touch_points: int = 0,
) -> ClientEnvironment:
    """Build a client environment from request headers.

    Args:
        headers: Request headers.
        navigator_platform: Optional client-reported platform.
        max_touch_points: Optional client-reported touch points.

    Returns:
        ClientEnvironment: Environment with scheme blocking inferred from in-app webviews.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    user_agent = str(headers.get("user-agent") or headers.get("User-Agent") or "")
    return ClientEnvironment(
        user_agent=user_agent,
        navigator_platform=navigator_platform,
        max_touch_points=max_touch_points,
        scheme_blocked=bool(_SCHEME_BLOCKING_WEBVIEW_PATTERN.search(user_agent)),
    )
