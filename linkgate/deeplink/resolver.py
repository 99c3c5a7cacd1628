"""Deep-link resolution: registry check, platform gate and navigation race."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from linkgate.adapters import AppRegistryGateway
from linkgate.domain import (
    AppNotFoundError,
    DeepLinkRequest,
    NavigationOutcome,
    PlatformClass,
    RegistryUnavailableError,
    UnsupportedPlatformError,
)

from .interfaces import NavigatorPort, RaceSchedulerPort, VisibilityPort
from .platform import ClientEnvironment, deeplink_detect_platform, deeplink_is_supported_platform
from .race import NavigationRace
from .uris import DeepLinkUriBuilder, FallbackTarget


@dataclass(frozen=True)
class DeepLinkCandidates:
    """Navigation candidates for one request and client.

    Attributes:
        platform: Detected platform class.
        scheme_uri: Custom-scheme candidate.
        universal_link: HTTPS universal/app link candidate.
        primary_uri: Candidate tried first, None on desktop.
        fallback: Store or web fallback, None on desktop.
        share_url: Canonical share URL for the same payload.
    """

    platform: PlatformClass
    scheme_uri: str
    universal_link: str
    primary_uri: str | None
    fallback: FallbackTarget | None
    share_url: str


class DeepLinkResolver:
    """Resolve deep-link requests into settled or pending navigation races.

    One resolver serves one browsing context; starting a new resolution
    abandons the previous race if it is still pending.
    """

    def __init__(
        self,
        gateway: AppRegistryGateway,
        uri_builder: DeepLinkUriBuilder,
        navigator: NavigatorPort,
        scheduler: RaceSchedulerPort,
        visibility: VisibilityPort,
        timeout_seconds: float = 0.6,
    ):
        """Initialize the resolver.

        Args:
            gateway: Request-scoped registry gateway.
            uri_builder: Candidate URI builder.
            navigator: Browsing-context navigation port.
            scheduler: Race timer port.
            visibility: Page visibility port.
            timeout_seconds: Bounded wait before falling back.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if gateway is None:
            raise ValueError("gateway must not be None")
        if uri_builder is None:
            raise ValueError("uri_builder must not be None")
        if navigator is None or scheduler is None or visibility is None:
            raise ValueError("navigator, scheduler and visibility ports must not be None")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

        self._gateway = gateway
        self._uri_builder = uri_builder
        self._navigator = navigator
        self._scheduler = scheduler
        self._visibility = visibility
        self._timeout_seconds = timeout_seconds
        self._active_race: NavigationRace | None = None

    @property
    def active_race(self) -> NavigationRace | None:
        return self._active_race

    def deeplink_resolve(
        self,
        request: DeepLinkRequest,
        environment: ClientEnvironment,
        listener: Callable[[NavigationRace], object] | None = None,
    ) -> NavigationRace:
        """Resolve one request into a navigation race.

        Unknown, non-approved and unreachable apps settle before any
        navigation, as do desktop clients. Otherwise the race is started and
        settles on visibility loss or timeout.

        Args:
            request: Deep-link request.
            environment: Client environment facts.
            listener: Optional settlement listener.

        Returns:
            NavigationRace: Settled race for terminal outcomes, pending race otherwise.

        Raises:
            RuntimeError: This method reports failures as race outcomes.
        """

        if self._active_race is not None and not self._active_race.is_settled:
            self._active_race.race_abandon()

        platform = deeplink_detect_platform(environment)
        race = NavigationRace(request=request, platform=platform)
        self._active_race = race
        if listener is not None:
            race.race_add_listener(listener)

        try:
            self._gateway.registry_require_approved_app(request.app_id)
        except AppNotFoundError as error:
            logger.info("Deep link rejected: app_id={}, reason={}", request.app_id, error)
            race.race_fail(NavigationOutcome.APP_NOT_FOUND, error=error)
            return race
        except RegistryUnavailableError as error:
            logger.warning("Registry unavailable during deep link: app_id={}, error={}", request.app_id, error)
            race.race_fail(NavigationOutcome.REGISTRY_UNAVAILABLE, error=error)
            return race

        if not deeplink_is_supported_platform(platform):
            race.race_fail(
                NavigationOutcome.UNSUPPORTED_PLATFORM,
                error=UnsupportedPlatformError(platform=platform.value),
            )
            return race

        race.race_start(
            primary_uri=self.deeplink_primary_uri(request, environment),
            fallback_factory=lambda: self._uri_builder.deeplink_build_fallback(request, platform),
            navigator=self._navigator,
            scheduler=self._scheduler,
            visibility=self._visibility,
            timeout_seconds=self._timeout_seconds,
        )
        return race

    def deeplink_primary_uri(self, request: DeepLinkRequest, environment: ClientEnvironment) -> str:
        """Pick the first candidate: universal link where schemes are blocked, scheme URI otherwise.

        Args:
            request: Deep-link request.
            environment: Client environment facts.

        Returns:
            str: Primary navigation candidate.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        if environment.scheme_blocked:
            return self._uri_builder.deeplink_build_universal_link(request)
        return self._uri_builder.deeplink_build_scheme_uri(request)


def deeplink_build_candidates(
    uri_builder: DeepLinkUriBuilder,
    request: DeepLinkRequest,
    environment: ClientEnvironment,
) -> DeepLinkCandidates:
    """Build every candidate for a request without navigating.

    Used by server-rendered pages and the JSON endpoint, which hand the
    candidates to the client-side race.

    Args:
        uri_builder: Candidate URI builder.
        request: Deep-link request.
        environment: Client environment facts.

    Returns:
        DeepLinkCandidates: Candidates; primary and fallback are None on desktop.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    platform = deeplink_detect_platform(environment)
    scheme_uri = uri_builder.deeplink_build_scheme_uri(request)
    universal_link = uri_builder.deeplink_build_universal_link(request)
    share_url = uri_builder.deeplink_build_share_url(request)
    if not deeplink_is_supported_platform(platform):
        return DeepLinkCandidates(
            platform=platform,
            scheme_uri=scheme_uri,
            universal_link=universal_link,
            primary_uri=None,
            fallback=None,
            share_url=share_url,
        )

    return DeepLinkCandidates(
        platform=platform,
        scheme_uri=scheme_uri,
        universal_link=universal_link,
        primary_uri=universal_link if environment.scheme_blocked else scheme_uri,
        fallback=uri_builder.deeplink_build_fallback(request, platform),
        share_url=share_url,
    )
