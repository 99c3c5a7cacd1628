"""Single-shot race between page visibility loss and a fallback timer.

The race is a two-state machine, `pending -> settled(outcome)`. Its triggers
(visibility change, timeout, abandon, terminal failure) each try that one
transition; whichever arrives first decides the outcome and every later
trigger is a no-op. Settling always cancels the timer and drops the
visibility observer.

Inferring "the host app took over" from visibility loss is best-effort: an OS
install prompt that does not background the page reads as "not installed".
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from loguru import logger

from linkgate.domain import (
    DeepLinkRequest,
    LinkGateError,
    NavigationOutcome,
    NavigationRaceAbandonedError,
    PlatformClass,
)

from .interfaces import NavigatorPort, RaceSchedulerPort, TimerHandlePort, VisibilityPort
from .uris import FallbackTarget


class RaceState(str, Enum):
    """Navigation race lifecycle state."""

    PENDING = "pending"
    SETTLED = "settled"


class NavigationRace:
    """One open-in-app attempt and its idempotent settlement."""

    def __init__(self, request: DeepLinkRequest, platform: PlatformClass | None = None):
        """Initialize a pending race; nothing happens until `race_start` or `race_fail`.

        Args:
            request: Deep-link request being resolved.
            platform: Detected platform class when known.

        Returns:
            None: Initializer does not return a value.

        Raises:
            RuntimeError: This initializer does not raise runtime errors.
        """

        self.request = request
        self.platform = platform
        self._state = RaceState.PENDING
        self._outcome: NavigationOutcome | None = None
        self._error: LinkGateError | None = None
        self._started = False
        self._attempted_uris: list[str] = []
        self._fallback_factory: Callable[[], FallbackTarget] | None = None
        self._navigator: NavigatorPort | None = None
        self._timer: TimerHandlePort | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._listeners: list[Callable[[NavigationRace], object]] = []

    @property
    def state(self) -> RaceState:
        return self._state

    @property
    def outcome(self) -> NavigationOutcome | None:
        return self._outcome

    @property
    def error(self) -> LinkGateError | None:
        return self._error

    @property
    def is_settled(self) -> bool:
        return self._state == RaceState.SETTLED

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def attempted_uris(self) -> tuple[str, ...]:
        return tuple(self._attempted_uris)

    def race_add_listener(self, listener: Callable[[NavigationRace], object]) -> None:
        """Register a settlement listener; settled races call it immediately.

        Args:
            listener: Receives the race once it settles.

        Returns:
            None: Registers as side effect.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if self.is_settled:
            listener(self)
            return
        self._listeners.append(listener)

    def race_start(
        self,
        primary_uri: str,
        fallback_factory: Callable[[], FallbackTarget],
        navigator: NavigatorPort,
        scheduler: RaceSchedulerPort,
        visibility: VisibilityPort,
        timeout_seconds: float,
    ) -> None:
        """Observe visibility, arm the timer, then navigate to the primary candidate.

        Args:
            primary_uri: First navigation candidate.
            fallback_factory: Builds the fallback target once the timer elapses.
            navigator: Browsing-context navigation port.
            scheduler: Event-loop timer port.
            visibility: Page visibility port.
            timeout_seconds: Bounded wait before falling back.

        Returns:
            None: Starts the race as side effect.

        Raises:
            ValueError: Raised when timeout_seconds is not positive or primary_uri is blank.
            RuntimeError: Raised when the race was already started or settled.
        """

        if self._started or self.is_settled:
            raise RuntimeError("navigation race can only be started once while pending")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if not primary_uri.strip():
            raise ValueError("primary_uri must not be blank")

        self._started = True
        self._fallback_factory = fallback_factory
        self._navigator = navigator
        self._unsubscribe = visibility.visibility_subscribe(self.race_on_visibility_change)
        self._timer = scheduler.scheduler_call_later(timeout_seconds, self.race_on_timeout)
        self._attempted_uris.append(primary_uri)
        logger.debug("Navigation race started: app_id={}, uri={}", self.request.app_id, primary_uri)
        navigator.navigator_assign(primary_uri)

    def race_on_visibility_change(self, hidden: bool) -> bool:
        """Handle a visibility change; losing visibility means the app took over.

        Args:
            hidden: True when the page became hidden.

        Returns:
            bool: True when this call settled the race.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if not hidden or not self._started:
            return False
        return self._race_settle(NavigationOutcome.OPENED_IN_APP)

    def race_on_timeout(self) -> bool:
        """Handle timer expiry; a still-visible page falls back to store or web.

        Returns:
            bool: True when this call settled the race.

        Raises:
            UnsupportedPlatformError: Raised when the fallback factory rejects the platform.
        """

        if self.is_settled or self._fallback_factory is None:
            return False
        fallback_target = self._fallback_factory()
        return self._race_settle(fallback_target.outcome, navigate_uri=fallback_target.uri)

    def race_abandon(self) -> bool:
        """Abandon a pending race, releasing its timer and observer.

        Returns:
            bool: True when this call settled the race.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        return self._race_settle(
            NavigationOutcome.ABANDONED,
            error=NavigationRaceAbandonedError(f"navigation race abandoned: app_id={self.request.app_id}"),
        )

    def race_fail(self, outcome: NavigationOutcome, error: LinkGateError | None = None) -> bool:
        """Settle before any navigation, e.g. for unknown apps or desktop clients.

        Args:
            outcome: Terminal outcome.
            error: Typed error explaining the outcome.

        Returns:
            bool: True when this call settled the race.

        Raises:
            RuntimeError: Raised when the race already started navigating.
        """

        if self._started and not self.is_settled:
            raise RuntimeError("race_fail cannot settle a race that already navigated")
        return self._race_settle(outcome, error=error)

    def _race_settle(
        self,
        outcome: NavigationOutcome,
        navigate_uri: str | None = None,
        error: LinkGateError | None = None,
    ) -> bool:
        if self.is_settled:
            return False

        self._state = RaceState.SETTLED
        self._outcome = outcome
        self._error = error
        self._race_teardown()
        if navigate_uri is not None and self._navigator is not None:
            self._attempted_uris.append(navigate_uri)
            self._navigator.navigator_assign(navigate_uri)

        logger.info("Navigation race settled: app_id={}, outcome={}", self.request.app_id, outcome.value)
        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            listener(self)
        return True

    def _race_teardown(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._fallback_factory = None
