"""Registry adapter over the fullnode REST view-function API."""

from __future__ import annotations

from typing import Any, Final

import httpx
from loguru import logger

from linkgate.domain import (
    AppMetadata,
    ApprovalStatus,
    HealthStatus,
    RegistryUnavailableError,
    domain_parse_category,
)

from .interfaces import AppRegistryPort, RegistryHealthPort

# Positional order of the on-chain `AppMetadata` struct fields.
_REGISTRY_STRUCT_FIELDS: Final[tuple[str, ...]] = (
    "name",
    "description",
    "icon",
    "url",
    "slug",
    "developer_address",
    "developer_name",
    "category",
    "status",
    "submitted_at",
    "updated_at",
    "approved_at",
    "downloads",
    "rating",
    "permissions",
    "verified",
)

_REGISTRY_STATUS_CODES: Final[dict[int, ApprovalStatus]] = {
    0: ApprovalStatus.PENDING,
    1: ApprovalStatus.APPROVED,
    2: ApprovalStatus.REJECTED,
}

# Abort markers for E_APP_NOT_FOUND (4) only; other aborts mean the registry cannot answer.
_NOT_FOUND_ABORT_MARKERS: Final[tuple[str, ...]] = (
    "sub_status: some(4)",
    "e_app_not_found",
)


class FullnodeAppRegistryAdapter(AppRegistryPort, RegistryHealthPort):
    """Adapter implementation for the on-chain app registry view functions."""

    _USER_AGENT: Final[str] = "mini-app-linkgate/0.1 (Python/httpx)"

    def __init__(
        self,
        fullnode_url: str,
        contract_address: str,
        module_name: str = "app_registry",
        request_timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the registry adapter.

        Args:
            fullnode_url: Fullnode REST base URL, e.g. `https://host/v1`.
            contract_address: Account address publishing the registry module.
            module_name: Registry module name.
            request_timeout_seconds: HTTP request timeout in seconds.
            transport: Optional httpx transport override.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        normalized_fullnode_url = fullnode_url.strip()
        normalized_contract_address = contract_address.strip()
        normalized_module_name = module_name.strip()

        if not normalized_fullnode_url:
            raise ValueError("fullnode_url must not be blank")
        if not normalized_contract_address:
            raise ValueError("contract_address must not be blank")
        if not normalized_module_name:
            raise ValueError("module_name must not be blank")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._fullnode_url = normalized_fullnode_url.rstrip("/")
        self._contract_address = normalized_contract_address
        self._module_name = normalized_module_name
        self._http_client = httpx.Client(
            timeout=request_timeout_seconds,
            headers={"User-Agent": self._USER_AGENT, "Accept": "application/json"},
            transport=transport,
        )

    def registry_source_name(self) -> str:
        """Return stable adapter source label.

        Returns:
            str: Source identifier.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return "fullnode_app_registry"

    def registry_connection_label(self) -> str:
        """Return the registry target without credentials or query strings.

        Returns:
            str: Fullnode URL and module path.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return f"{self._fullnode_url}#{self._module_name}"

    def registry_get_app(self, app_id: str) -> AppMetadata | None:
        """Resolve one app id through the `get_app_by_slug` view function.

        Args:
            app_id: Registry slug.

        Returns:
            AppMetadata | None: Decoded record, or None when the registry aborts with not-found.

        Raises:
            ValueError: Raised when app_id is blank.
            RegistryUnavailableError: Raised for transport failures or unexpected upstream errors.
        """

        normalized_app_id = app_id.strip()
        if not normalized_app_id:
            raise ValueError("app_id must not be blank")

        logger.debug("Fetching app from registry: app_id={}", normalized_app_id)
        result = self._adapter_call_view(function_name="get_app_by_slug", arguments=[normalized_app_id])
        if result is None:
            logger.info("Registry reports app not found or not approved: app_id={}", normalized_app_id)
            return None

        struct_data = result[0] if isinstance(result, list) and result else result
        if not struct_data:
            return None
        return registry_decode_app_struct(struct_data=struct_data, fallback_app_id=normalized_app_id)

    def registry_list_apps(self) -> list[AppMetadata]:
        """Return every active app through the `get_all_active_apps` view function.

        Returns:
            list[AppMetadata]: Decoded records, skipping entries without an id.

        Raises:
            RegistryUnavailableError: Raised for transport failures or unexpected upstream errors.
        """

        result = self._adapter_call_view(function_name="get_all_active_apps", arguments=[])
        if result is None:
            return []

        apps_payload = result[0] if isinstance(result, list) and result else result
        if not isinstance(apps_payload, list):
            logger.warning("Registry list payload is not a vector, returning no apps")
            return []

        decoded_apps: list[AppMetadata] = []
        for struct_data in apps_payload:
            app = registry_decode_app_struct(struct_data=struct_data, fallback_app_id="")
            if app.app_id:
                decoded_apps.append(app)
        return decoded_apps

    def registry_check_health(self) -> HealthStatus:
        """Read fullnode ledger info to verify registry connectivity.

        Returns:
            HealthStatus: Healthy status with ledger version detail.

        Raises:
            RegistryUnavailableError: Raised when the fullnode cannot be reached.
        """

        try:
            response = self._http_client.get(f"{self._fullnode_url}/")
            response.raise_for_status()
            ledger_info = response.json()
        except httpx.HTTPError as error:
            raise RegistryUnavailableError(f"registry health check failed: {error}") from error
        except ValueError as error:
            raise RegistryUnavailableError("registry health check returned invalid JSON") from error

        ledger_version = ledger_info.get("ledger_version", "unknown") if isinstance(ledger_info, dict) else "unknown"
        return HealthStatus(status="ok", detail=f"registry reachable at ledger_version={ledger_version}")

    def registry_close(self) -> None:
        """Close the pooled HTTP client.

        Returns:
            None: Releases transport resources as side effect.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        self._http_client.close()

    def _adapter_call_view(self, function_name: str, arguments: list[Any]) -> Any | None:
        """Execute one view function call.

        Args:
            function_name: Registry module function name.
            arguments: Positional view arguments.

        Returns:
            Any | None: Decoded JSON result, or None when the call aborted with not-found.

        Raises:
            RegistryUnavailableError: Raised for transport failures and non-abort error statuses.
        """

        payload = {
            "function": f"{self._contract_address}::{self._module_name}::{function_name}",
            "type_arguments": [],
            "arguments": arguments,
        }
        try:
            response = self._http_client.post(f"{self._fullnode_url}/view", json=payload)
        except httpx.TimeoutException as error:
            logger.warning("Registry view call timed out: function={}", function_name)
            raise RegistryUnavailableError(f"registry request timed out: function={function_name}") from error
        except httpx.HTTPError as error:
            logger.warning("Registry view call failed: function={}, error={}", function_name, error)
            raise RegistryUnavailableError(f"registry request failed: function={function_name}") from error

        if response.status_code >= 400:
            error_message = _adapter_extract_error_message(response)
            if response.status_code < 500 and _adapter_is_not_found_abort(error_message):
                return None
            logger.warning(
                "Registry view call returned HTTP {}: function={}, message={}",
                response.status_code,
                function_name,
                error_message,
            )
            raise RegistryUnavailableError(
                f"registry returned HTTP {response.status_code}: {error_message}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as error:
            raise RegistryUnavailableError(f"registry returned invalid JSON: function={function_name}") from error


def registry_decode_app_struct(struct_data: Any, fallback_app_id: str) -> AppMetadata:
    """Decode one registry struct, given as a named object or positional array.

    Args:
        struct_data: View-function struct payload.
        fallback_app_id: Id used when the struct carries no slug.

    Returns:
        AppMetadata: Decoded registry record.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if isinstance(struct_data, dict):
        fields = struct_data
    else:
        values = struct_data if isinstance(struct_data, list) else [struct_data]
        fields = dict(zip(_REGISTRY_STRUCT_FIELDS, values))

    raw_permissions = fields.get("permissions")
    permissions = tuple(str(value) for value in raw_permissions) if isinstance(raw_permissions, list) else ()
    return AppMetadata(
        app_id=str(fields.get("slug") or fallback_app_id),
        name=str(fields.get("name") or ""),
        description=str(fields.get("description") or ""),
        icon=str(fields.get("icon") or ""),
        developer_name=str(fields.get("developer_name") or ""),
        category=domain_parse_category(str(fields.get("category") or "")),
        approval_status=_REGISTRY_STATUS_CODES.get(_adapter_to_int(fields.get("status")), ApprovalStatus.PENDING),
        rating=registry_decode_rating(fields.get("rating")),
        url=str(fields.get("url") or ""),
        developer_address=str(fields.get("developer_address") or ""),
        downloads=_adapter_to_int(fields.get("downloads")),
        verified=_adapter_to_bool(fields.get("verified")),
        permissions=permissions,
        submitted_at=_adapter_to_int(fields.get("submitted_at")),
        updated_at=_adapter_to_int(fields.get("updated_at")),
        approved_at=_adapter_to_int(fields.get("approved_at")),
    )


def registry_decode_rating(raw_rating: Any) -> float | None:
    """Decode the registry's `rating * 10` integer into a 0..5 rating.

    Args:
        raw_rating: Raw rating value.

    Returns:
        float | None: Rating, or None when no reviews exist yet.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    scaled_rating = _adapter_to_int(raw_rating)
    if scaled_rating <= 0:
        return None
    return min(scaled_rating / 10, 5.0)


def _adapter_to_int(value: Any) -> int:
    # u64 values arrive as JSON strings
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _adapter_to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _adapter_extract_error_message(response: httpx.Response) -> str:
    try:
        error_payload = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(error_payload, dict):
        return str(error_payload.get("message") or error_payload)
    return str(error_payload)


def _adapter_is_not_found_abort(error_message: str) -> bool:
    normalized_message = error_message.lower()
    return any(marker in normalized_message for marker in _NOT_FOUND_ABORT_MARKERS)
