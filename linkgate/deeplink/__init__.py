"""Deep-link candidate construction and the open-in-app navigation race."""

from .interfaces import NavigatorPort, RaceSchedulerPort, TimerHandlePort, VisibilityPort
from .platform import (
    ClientEnvironment,
    deeplink_detect_platform,
    deeplink_environment_from_headers,
    deeplink_is_supported_platform,
)
from .race import NavigationRace, RaceState
from .resolver import DeepLinkCandidates, DeepLinkResolver, deeplink_build_candidates
from .runtime import AsyncioRaceScheduler, ManualVisibilitySource, RecordingNavigator
from .uris import DeepLinkUriBuilder, FallbackTarget, deeplink_build_query

__all__ = [
    "AsyncioRaceScheduler",
    "ClientEnvironment",
    "DeepLinkCandidates",
    "DeepLinkResolver",
    "DeepLinkUriBuilder",
    "FallbackTarget",
    "ManualVisibilitySource",
    "NavigationRace",
    "NavigatorPort",
    "RaceSchedulerPort",
    "RaceState",
    "RecordingNavigator",
    "TimerHandlePort",
    "VisibilityPort",
    "deeplink_build_candidates",
    "deeplink_build_query",
    "deeplink_detect_platform",
    "deeplink_environment_from_headers",
    "deeplink_is_supported_platform",
]
