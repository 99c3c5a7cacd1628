"""Tests for the request-scoped registry gateway and presentation helpers."""

from __future__ import annotations

import pytest

from linkgate.adapters import (
    AppRegistryGateway,
    registry_app_status_label,
    registry_build_canonical_url,
    registry_format_app_rating,
    registry_is_app_approved,
)
from linkgate.domain import AppCategory, AppMetadata, AppNotApprovedError, AppNotFoundError, ApprovalStatus


def _build_app(app_id: str, **overrides: object) -> AppMetadata:
    """Build a registry record for tests.

    Args:
        app_id: App id.
        overrides: Field overrides.

    Returns:
        AppMetadata: Registry record.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    fields: dict[str, object] = {
        "app_id": app_id,
        "name": app_id.replace("-", " ").title(),
        "description": f"{app_id} description",
        "icon": f"https://cdn.example.test/{app_id}.png",
        "developer_name": "Example Labs",
        "category": AppCategory.SOCIAL,
        "approval_status": ApprovalStatus.APPROVED,
        "rating": 4.5,
    }
    fields.update(overrides)
    return AppMetadata(**fields)


class _CountingRegistryStub:
    """Registry stub counting upstream lookups."""

    def __init__(self, apps: list[AppMetadata]):
        self._apps = {app.app_id: app for app in apps}
        self.get_calls: list[str] = []
        self.list_calls = 0

    def registry_source_name(self) -> str:
        return "stub"

    def registry_get_app(self, app_id: str) -> AppMetadata | None:
        self.get_calls.append(app_id)
        return self._apps.get(app_id)

    def registry_list_apps(self) -> list[AppMetadata]:
        self.list_calls += 1
        return list(self._apps.values())


def test_adapters_gateway_memoizes_lookups_including_not_found() -> None:
    """Hit the upstream registry once per id for one gateway instance.

    Returns:
        None: Assertions validate per-request caching.

    Raises:
        AssertionError: Raised when caching is incorrect.
    """

    registry = _CountingRegistryStub([_build_app("social-app")])
    gateway = AppRegistryGateway(registry=registry, base_url="https://share.example.test")

    assert gateway.registry_get_app("social-app") is not None
    assert gateway.registry_get_app("social-app") is not None
    assert gateway.registry_get_app("unknown-xyz") is None
    assert gateway.registry_get_app("unknown-xyz") is None
    assert registry.get_calls == ["social-app", "unknown-xyz"]

    AppRegistryGateway(registry=registry, base_url="https://share.example.test").registry_get_app("social-app")
    assert registry.get_calls == ["social-app", "unknown-xyz", "social-app"]


def test_adapters_gateway_require_approved_app_raises_typed_errors() -> None:
    """Raise not-found for unknown ids and not-approved for pending apps.

    Returns:
        None: Assertions validate resolution errors.

    Raises:
        AssertionError: Raised when error mapping is incorrect.
    """

    registry = _CountingRegistryStub(
        [_build_app("social-app"), _build_app("pending-app", approval_status=ApprovalStatus.PENDING)]
    )
    gateway = AppRegistryGateway(registry=registry, base_url="https://share.example.test")

    assert gateway.registry_require_approved_app("social-app").app_id == "social-app"
    with pytest.raises(AppNotApprovedError):
        gateway.registry_require_approved_app("pending-app")
    with pytest.raises(AppNotFoundError):
        gateway.registry_require_approved_app("unknown-xyz")


def test_adapters_gateway_list_filters_share_one_upstream_call() -> None:
    """Filter by category alias, verification and search over one cached list.

    Returns:
        None: Assertions validate listing helpers.

    Raises:
        AssertionError: Raised when filtering is incorrect.
    """

    registry = _CountingRegistryStub(
        [
            _build_app("social-app", verified=True),
            _build_app("swap-app", category=AppCategory.EARN, developer_name="Swap Labs"),
            _build_app("arcade", category=AppCategory.GAMES, description="Retro GAMES"),
        ]
    )
    gateway = AppRegistryGateway(registry=registry, base_url="https://share.example.test")

    assert [app.app_id for app in gateway.registry_list_apps_by_category("defi")] == ["swap-app"]
    assert [app.app_id for app in gateway.registry_list_verified_apps()] == ["social-app"]
    assert [app.app_id for app in gateway.registry_search_apps("swap labs")] == ["swap-app"]
    assert [app.app_id for app in gateway.registry_search_apps("retro")] == ["arcade"]
    assert len(gateway.registry_search_apps("  ")) == 3
    assert registry.list_calls == 1


def test_adapters_gateway_share_url_and_presentation_helpers() -> None:
    """Build ordered canonical URLs and display labels.

    Returns:
        None: Assertions validate helper output.

    Raises:
        AssertionError: Raised when helper output is incorrect.
    """

    gateway = AppRegistryGateway(registry=_CountingRegistryStub([]), base_url="https://share.example.test/")

    assert gateway.registry_build_share_url("social-app") == "https://share.example.test/app/social-app"
    assert (
        registry_build_canonical_url(
            "https://share.example.test",
            "social app",
            path="chat/room 1",
            params=(("ref", "twitter"), ("tab", "2")),
        )
        == "https://share.example.test/app/social%20app?path=chat%2Froom+1&ref=twitter&tab=2"
    )
    assert registry_format_app_rating(_build_app("new-app", rating=None)) == "New"
    assert registry_format_app_rating(_build_app("rated-app", rating=4.0)) == "4.0"
    assert registry_app_status_label(_build_app("rejected-app", approval_status=ApprovalStatus.REJECTED)) == "Rejected"


@pytest.mark.parametrize(
    ("approval_status", "expected"),
    [(ApprovalStatus.APPROVED, True), (ApprovalStatus.PENDING, False), (ApprovalStatus.REJECTED, False)],
)
def test_adapters_registry_only_approved_apps_are_resolvable(approval_status: ApprovalStatus, expected: bool) -> None:
    """Treat pending and rejected apps as not publicly resolvable.

    Args:
        approval_status: Registry approval status.
        expected: Expected approval verdict.

    Returns:
        None: Assertions validate approval check.

    Raises:
        AssertionError: Raised when approval is misreported.
    """

    assert registry_is_app_approved(_build_app("social-app", approval_status=approval_status)) is expected
