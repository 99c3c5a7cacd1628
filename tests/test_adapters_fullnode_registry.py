"""Tests for the fullnode registry adapter request mapping and error handling."""

from __future__ import annotations

import json

import httpx
import pytest

from linkgate.adapters import FullnodeAppRegistryAdapter, registry_decode_app_struct, registry_decode_rating
from linkgate.domain import AppCategory, ApprovalStatus, RegistryUnavailableError

_CONTRACT = "0xabc"


def _named_struct(**overrides: object) -> dict[str, object]:
    """Build a named registry struct payload.

    Args:
        overrides: Field overrides.

    Returns:
        dict[str, object]: Struct as returned by the view endpoint.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    struct_data: dict[str, object] = {
        "name": "Social App",
        "description": "Chat with friends",
        "icon": "https://cdn.example.test/social.png",
        "url": "https://social.example.test",
        "slug": "social-app",
        "developer_address": "0xdev",
        "developer_name": "Social Labs",
        "category": "social",
        "status": 1,
        "submitted_at": "1700000000",
        "updated_at": "1700000100",
        "approved_at": "1700000200",
        "downloads": "42",
        "rating": "45",
        "permissions": ["wallet:read"],
        "verified": True,
    }
    struct_data.update(overrides)
    return struct_data


def _build_adapter(handler) -> FullnodeAppRegistryAdapter:
    """Create adapter over a mock transport.

    Args:
        handler: Mock transport request handler.

    Returns:
        FullnodeAppRegistryAdapter: Adapter under test.

    Raises:
        ValueError: Raised when adapter config is invalid.
    """

    return FullnodeAppRegistryAdapter(
        fullnode_url="https://fullnode.example.test/v1/",
        contract_address=_CONTRACT,
        transport=httpx.MockTransport(handler),
    )


def test_adapters_fullnode_get_app_posts_view_payload_and_decodes_struct() -> None:
    """Call `get_app_by_slug` with the slug argument and decode the named struct.

    Returns:
        None: Assertions validate request shape and decoding.

    Raises:
        AssertionError: Raised when mapping is incorrect.
    """

    captured_requests: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        captured_requests.append(request)
        return httpx.Response(200, json=[_named_struct()])

    app = _build_adapter(_handler).registry_get_app(" social-app ")

    assert captured_requests[0].url == "https://fullnode.example.test/v1/view"
    assert json.loads(captured_requests[0].content) == {
        "function": f"{_CONTRACT}::app_registry::get_app_by_slug",
        "type_arguments": [],
        "arguments": ["social-app"],
    }
    assert app is not None
    assert app.app_id == "social-app"
    assert app.category == AppCategory.SOCIAL
    assert app.approval_status == ApprovalStatus.APPROVED
    assert app.rating == 4.5
    assert app.downloads == 42
    assert app.verified is True
    assert app.permissions == ("wallet:read",)


@pytest.mark.parametrize(
    "message",
    [
        "Move abort in 0xabc::app_registry: E_APP_NOT_FOUND(0x4)",
        "Execution failed: status ABORTED of type Execution with sub_status: Some(4)",
    ],
)
def test_adapters_fullnode_get_app_maps_move_abort_to_none(message: str) -> None:
    """Return None when the view function aborts with the not-found code.

    Args:
        message: Upstream abort message.

    Returns:
        None: Assertions validate not-found mapping.

    Raises:
        AssertionError: Raised when abort mapping is incorrect.
    """

    def _handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={"message": message, "vm_error_code": 4016},
        )

    assert _build_adapter(_handler).registry_get_app("unknown-xyz") is None


def test_adapters_fullnode_other_move_aborts_raise_registry_unavailable() -> None:
    """Keep aborts other than the not-found code distinct from a missing app.

    Returns:
        None: Assertions validate abort classification.

    Raises:
        AssertionError: Raised when a paused registry reads as not-found.
    """

    def _handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={
                "message": "Execution failed: status ABORTED with sub_status: Some(9) E_REGISTRY_PAUSED",
                "vm_error_code": 4016,
            },
        )

    with pytest.raises(RegistryUnavailableError):
        _build_adapter(_handler).registry_get_app("social-app")


@pytest.mark.parametrize("status_code", [429, 500, 503])
def test_adapters_fullnode_error_status_raises_registry_unavailable(status_code: int) -> None:
    """Raise RegistryUnavailableError for throttling and upstream failures.

    Args:
        status_code: Upstream HTTP status.

    Returns:
        None: Assertions validate failure mapping.

    Raises:
        AssertionError: Raised when failure mapping is incorrect.
    """

    def _handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"message": "upstream failure"})

    with pytest.raises(RegistryUnavailableError) as error_info:
        _build_adapter(_handler).registry_get_app("social-app")

    assert error_info.value.status_code == status_code


def test_adapters_fullnode_timeout_raises_registry_unavailable() -> None:
    """Map transport timeouts to RegistryUnavailableError without retrying.

    Returns:
        None: Assertions validate timeout mapping.

    Raises:
        AssertionError: Raised when timeout mapping is incorrect.
    """

    call_count = 0

    def _handler(request: httpx.Request) -> httpx.Response:
        nonlocal call_count
        call_count += 1
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(RegistryUnavailableError, match="timed out"):
        _build_adapter(_handler).registry_get_app("social-app")
    assert call_count == 1


def test_adapters_fullnode_list_apps_decodes_positional_structs() -> None:
    """Decode `get_all_active_apps` vectors whose structs arrive as arrays.

    Returns:
        None: Assertions validate positional decoding.

    Raises:
        AssertionError: Raised when positional decoding is incorrect.
    """

    positional_struct = [
        "Swap App",
        "Swap tokens",
        "https://cdn.example.test/swap.png",
        "https://swap.example.test",
        "swap-app",
        "0xdev",
        "Swap Labs",
        "defi",
        "1",
        "0",
        "0",
        "0",
        "7",
        "0",
        [],
        False,
    ]

    def _handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[[positional_struct, _named_struct(slug="")]])

    apps = _build_adapter(_handler).registry_list_apps()

    assert [app.app_id for app in apps] == ["swap-app"]
    assert apps[0].category == AppCategory.EARN
    assert apps[0].rating is None
    assert apps[0].downloads == 7


def test_adapters_fullnode_check_health_reports_ledger_version() -> None:
    """Read ledger info for health and map failures to RegistryUnavailableError.

    Returns:
        None: Assertions validate health mapping.

    Raises:
        AssertionError: Raised when health mapping is incorrect.
    """

    def _healthy(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"chain_id": 250, "ledger_version": "123"})

    def _failing(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    health = _build_adapter(_healthy).registry_check_health()

    assert health.status == "ok"
    assert "ledger_version=123" in health.detail
    with pytest.raises(RegistryUnavailableError):
        _build_adapter(_failing).registry_check_health()


def test_adapters_fullnode_decoders_clamp_rating_and_default_status() -> None:
    """Clamp scaled ratings to five and decode unknown statuses as pending.

    Returns:
        None: Assertions validate decoder edge cases.

    Raises:
        AssertionError: Raised when decoding is incorrect.
    """

    assert registry_decode_rating("0") is None
    assert registry_decode_rating(None) is None
    assert registry_decode_rating(38) == 3.8
    assert registry_decode_rating("80") == 5.0

    app = registry_decode_app_struct(_named_struct(status=9, slug=None), fallback_app_id="fallback-id")

    assert app.app_id == "fallback-id"
    assert app.approval_status == ApprovalStatus.PENDING
