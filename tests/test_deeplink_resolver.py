"""Scenario tests for deep-link resolution end to end."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from linkgate.adapters import AppRegistryGateway
from linkgate.deeplink import (
    AsyncioRaceScheduler,
    ClientEnvironment,
    DeepLinkResolver,
    DeepLinkUriBuilder,
    FallbackTarget,
    ManualVisibilitySource,
    RecordingNavigator,
)
from linkgate.domain import (
    AppCategory,
    AppMetadata,
    AppNotApprovedError,
    AppNotFoundError,
    ApprovalStatus,
    DeepLinkRequest,
    NavigationOutcome,
    PlatformClass,
    RegistryUnavailableError,
    UnsupportedPlatformError,
    domain_build_deeplink_request,
)

_IPHONE_UA = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 Mobile/15E148"
_DESKTOP_UA = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 Chrome/120.0 Safari/537.36"


class _FakeTimerHandle:
    """Timer handle recording cancellation."""

    def __init__(self, due_at: float, callback: Callable[[], object]):
        self.due_at = due_at
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class _FakeClockScheduler:
    """Deterministic scheduler driven by `advance`."""

    def __init__(self) -> None:
        self.now = 0.0
        self.handles: list[_FakeTimerHandle] = []

    def scheduler_call_later(self, delay_seconds: float, callback: Callable[[], object]) -> _FakeTimerHandle:
        handle = _FakeTimerHandle(self.now + delay_seconds, callback)
        self.handles.append(handle)
        return handle

    def advance(self, seconds: float) -> None:
        target_time = self.now + seconds
        while True:
            due_handles = [handle for handle in self.handles if not handle.cancelled and handle.due_at <= target_time]
            if not due_handles:
                break
            next_handle = min(due_handles, key=lambda handle: handle.due_at)
            self.handles.remove(next_handle)
            self.now = next_handle.due_at
            next_handle.callback()
        self.now = target_time


class _CountingUriBuilder(DeepLinkUriBuilder):
    """URI builder counting fallback constructions."""

    def __init__(self) -> None:
        super().__init__(
            product_scheme="moveeverything",
            host_domain="share.example.test",
            app_store_url="https://apps.example.test/move-everything",
            play_store_url="https://play.example.test/move-everything",
        )
        self.fallback_calls = 0

    def deeplink_build_fallback(self, request: DeepLinkRequest, platform: PlatformClass) -> FallbackTarget:
        self.fallback_calls += 1
        return super().deeplink_build_fallback(request, platform)


class _RegistryStub:
    """Registry stub serving a fixed app table."""

    def __init__(self, apps: list[AppMetadata]):
        self._apps = {app.app_id: app for app in apps}

    def registry_source_name(self) -> str:
        return "stub"

    def registry_get_app(self, app_id: str) -> AppMetadata | None:
        return self._apps.get(app_id)

    def registry_list_apps(self) -> list[AppMetadata]:
        return list(self._apps.values())


class _UnavailableRegistryStub(_RegistryStub):
    """Registry stub that cannot be reached."""

    def __init__(self) -> None:
        super().__init__([])

    def registry_get_app(self, app_id: str) -> AppMetadata | None:
        raise RegistryUnavailableError(f"registry request timed out: app_id={app_id}")


def _build_app(app_id: str, approval_status: ApprovalStatus = ApprovalStatus.APPROVED) -> AppMetadata:
    return AppMetadata(
        app_id=app_id,
        name="Social App",
        description="Chat with friends",
        icon="https://cdn.example.test/social.png",
        developer_name="Social Labs",
        category=AppCategory.SOCIAL,
        approval_status=approval_status,
    )


def _build_resolver(
    registry: _RegistryStub,
    uri_builder: _CountingUriBuilder,
    navigator: RecordingNavigator,
    scheduler: object,
    visibility: ManualVisibilitySource,
) -> DeepLinkResolver:
    """Create resolver over test doubles with a 600 ms timer.

    Args:
        registry: Registry stub.
        uri_builder: Counting URI builder.
        navigator: Recording navigator.
        scheduler: Scheduler double.
        visibility: Manual visibility source.

    Returns:
        DeepLinkResolver: Resolver under test.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    return DeepLinkResolver(
        gateway=AppRegistryGateway(registry=registry, base_url="https://share.example.test"),
        uri_builder=uri_builder,
        navigator=navigator,
        scheduler=scheduler,
        visibility=visibility,
        timeout_seconds=0.6,
    )


def test_deeplink_resolver_ios_visibility_loss_at_150ms_opens_in_app() -> None:
    """Open `social-app` on iOS when the page hides 150 ms into a 600 ms race.

    Returns:
        None: Assertions validate the opened-in-app scenario.

    Raises:
        AssertionError: Raised when the scenario settles incorrectly.
    """

    uri_builder = _CountingUriBuilder()
    navigator = RecordingNavigator()
    scheduler = _FakeClockScheduler()
    visibility = ManualVisibilitySource()
    resolver = _build_resolver(_RegistryStub([_build_app("social-app")]), uri_builder, navigator, scheduler, visibility)

    race = resolver.deeplink_resolve(
        domain_build_deeplink_request("social-app"),
        ClientEnvironment(user_agent=_IPHONE_UA),
    )
    scheduler.scheduler_call_later(0.15, lambda: visibility.visibility_emit(True))
    scheduler.advance(1.0)

    assert race.outcome == NavigationOutcome.OPENED_IN_APP
    assert navigator.assigned_uris == ["moveeverything://app/social-app"]
    assert uri_builder.fallback_calls == 0


def test_deeplink_resolver_desktop_is_unsupported_without_navigation_or_timers() -> None:
    """Settle desktop clients immediately with zero navigation and zero timers.

    Returns:
        None: Assertions validate the desktop scenario.

    Raises:
        AssertionError: Raised when desktop clients navigate.
    """

    uri_builder = _CountingUriBuilder()
    navigator = RecordingNavigator()
    scheduler = _FakeClockScheduler()
    visibility = ManualVisibilitySource()
    resolver = _build_resolver(_RegistryStub([_build_app("social-app")]), uri_builder, navigator, scheduler, visibility)

    race = resolver.deeplink_resolve(
        domain_build_deeplink_request("social-app"),
        ClientEnvironment(user_agent=_DESKTOP_UA),
    )

    assert race.outcome == NavigationOutcome.UNSUPPORTED_PLATFORM
    assert isinstance(race.error, UnsupportedPlatformError)
    assert navigator.assigned_uris == []
    assert scheduler.handles == []
    assert visibility.subscriber_count == 0


def test_deeplink_resolver_android_timeout_carries_ordered_params_to_store_fallback() -> None:
    """Carry `ref=twitter&tab=2` in order and fall back to the Play Store on timeout.

    Returns:
        None: Assertions validate the ordered params scenario.

    Raises:
        AssertionError: Raised when ordering or fallback is incorrect.
    """

    uri_builder = _CountingUriBuilder()
    navigator = RecordingNavigator()
    scheduler = _FakeClockScheduler()
    resolver = _build_resolver(
        _RegistryStub([_build_app("social-app")]),
        uri_builder,
        navigator,
        scheduler,
        ManualVisibilitySource(),
    )

    race = resolver.deeplink_resolve(
        domain_build_deeplink_request("social-app", params=[("ref", "twitter"), ("tab", "2")]),
        ClientEnvironment(user_agent="Mozilla/5.0 (Linux; Android 14) Chrome/120.0 Mobile"),
    )
    scheduler.advance(0.6)

    assert race.outcome == NavigationOutcome.FELL_BACK_TO_STORE
    assert navigator.assigned_uris == [
        "moveeverything://app/social-app?ref=twitter&tab=2",
        "https://play.example.test/move-everything",
    ]
    assert uri_builder.fallback_calls == 1


def test_deeplink_resolver_unknown_and_pending_apps_never_navigate() -> None:
    """Report app-not-found for unknown and non-approved ids before navigating.

    Returns:
        None: Assertions validate not-found outcomes.

    Raises:
        AssertionError: Raised when unresolvable apps navigate.
    """

    navigator = RecordingNavigator()
    scheduler = _FakeClockScheduler()
    resolver = _build_resolver(
        _RegistryStub([_build_app("pending-app", ApprovalStatus.PENDING)]),
        _CountingUriBuilder(),
        navigator,
        scheduler,
        ManualVisibilitySource(),
    )
    environment = ClientEnvironment(user_agent=_IPHONE_UA)

    unknown_race = resolver.deeplink_resolve(domain_build_deeplink_request("unknown-xyz"), environment)
    pending_race = resolver.deeplink_resolve(domain_build_deeplink_request("pending-app"), environment)

    assert unknown_race.outcome == NavigationOutcome.APP_NOT_FOUND
    assert type(unknown_race.error) is AppNotFoundError
    assert pending_race.outcome == NavigationOutcome.APP_NOT_FOUND
    assert isinstance(pending_race.error, AppNotApprovedError)
    assert navigator.assigned_uris == []
    assert scheduler.handles == []


def test_deeplink_resolver_registry_unavailable_is_an_outcome() -> None:
    """Surface registry failures as an outcome instead of raising.

    Returns:
        None: Assertions validate the unavailable outcome.

    Raises:
        AssertionError: Raised when the failure escapes.
    """

    navigator = RecordingNavigator()
    resolver = _build_resolver(
        _UnavailableRegistryStub(),
        _CountingUriBuilder(),
        navigator,
        _FakeClockScheduler(),
        ManualVisibilitySource(),
    )

    race = resolver.deeplink_resolve(
        domain_build_deeplink_request("social-app"),
        ClientEnvironment(user_agent=_IPHONE_UA),
    )

    assert race.outcome == NavigationOutcome.REGISTRY_UNAVAILABLE
    assert isinstance(race.error, RegistryUnavailableError)
    assert navigator.assigned_uris == []


def test_deeplink_resolver_new_resolution_abandons_pending_race() -> None:
    """Abandon the previous pending race when a new resolution starts.

    Returns:
        None: Assertions validate abandonment.

    Raises:
        AssertionError: Raised when the previous race stays pending.
    """

    uri_builder = _CountingUriBuilder()
    navigator = RecordingNavigator()
    scheduler = _FakeClockScheduler()
    visibility = ManualVisibilitySource()
    resolver = _build_resolver(
        _RegistryStub([_build_app("social-app"), _build_app("swap-app")]),
        uri_builder,
        navigator,
        scheduler,
        visibility,
    )
    environment = ClientEnvironment(user_agent=f"{_IPHONE_UA} Instagram 300.0")

    first_race = resolver.deeplink_resolve(domain_build_deeplink_request("social-app"), environment)
    second_race = resolver.deeplink_resolve(domain_build_deeplink_request("swap-app"), environment)
    scheduler.advance(1.0)

    assert first_race.outcome == NavigationOutcome.ABANDONED
    assert second_race.outcome == NavigationOutcome.FELL_BACK_TO_STORE
    assert resolver.active_race is second_race
    assert uri_builder.fallback_calls == 1
    assert visibility.subscriber_count == 0


def test_deeplink_resolver_runs_on_asyncio_event_loop() -> None:
    """Settle through the asyncio scheduler when the page hides before the timer.

    Returns:
        None: Assertions validate the shipped asyncio scheduler.

    Raises:
        AssertionError: Raised when the race does not settle on the loop.
    """

    async def _run() -> NavigationOutcome | None:
        loop = asyncio.get_running_loop()
        settled: asyncio.Future[None] = loop.create_future()
        visibility = ManualVisibilitySource()
        resolver = _build_resolver(
            _RegistryStub([_build_app("social-app")]),
            _CountingUriBuilder(),
            RecordingNavigator(),
            AsyncioRaceScheduler(),
            visibility,
        )
        race = resolver.deeplink_resolve(
            domain_build_deeplink_request("social-app"),
            ClientEnvironment(user_agent=_IPHONE_UA),
            listener=lambda _race: settled.set_result(None),
        )
        loop.call_later(0.01, visibility.visibility_emit, True)
        await asyncio.wait_for(settled, timeout=2)
        return race.outcome

    assert asyncio.run(_run()) == NavigationOutcome.OPENED_IN_APP
