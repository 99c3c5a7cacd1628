"""Request-scoped registry gateway and pure presentation helpers.

The gateway memoizes lookups for the lifetime of one instance. Routers build
one instance per inbound request, so metadata is cached per request and never
kept across requests.
"""

from __future__ import annotations

from urllib.parse import quote, urlencode

from loguru import logger

from linkgate.domain import (
    AppCategory,
    AppMetadata,
    AppNotApprovedError,
    AppNotFoundError,
    ApprovalStatus,
    domain_parse_category,
)

from .interfaces import AppRegistryPort

_MISSING = object()


class AppRegistryGateway:
    """Read-only view over an `AppRegistryPort` with per-instance caching."""

    def __init__(self, registry: AppRegistryPort, base_url: str):
        """Initialize the gateway.

        Args:
            registry: Upstream registry port.
            base_url: Public base URL used by share URL helpers.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if registry is None:
            raise ValueError("registry must not be None")
        if not base_url.strip():
            raise ValueError("base_url must not be blank")

        self._registry = registry
        self._base_url = base_url.strip().rstrip("/")
        self._app_cache: dict[str, AppMetadata | None] = {}
        self._app_list_cache: list[AppMetadata] | None = None

    def registry_get_app(self, app_id: str) -> AppMetadata | None:
        """Resolve an app id, memoizing the answer including not-found.

        Args:
            app_id: Opaque app id.

        Returns:
            AppMetadata | None: Registry record, or None when not found.

        Raises:
            RegistryUnavailableError: Raised when the registry cannot answer.
        """

        normalized_app_id = app_id.strip()
        if not normalized_app_id:
            return None

        cached_app = self._app_cache.get(normalized_app_id, _MISSING)
        if cached_app is not _MISSING:
            return cached_app

        app = self._registry.registry_get_app(normalized_app_id)
        self._app_cache[normalized_app_id] = app
        return app

    def registry_require_approved_app(self, app_id: str) -> AppMetadata:
        """Resolve an app id that must be publicly resolvable.

        Args:
            app_id: Opaque app id.

        Returns:
            AppMetadata: Approved registry record.

        Raises:
            AppNotFoundError: Raised when the registry has no such app.
            AppNotApprovedError: Raised when the app exists but is not approved.
            RegistryUnavailableError: Raised when the registry cannot answer.
        """

        app = self.registry_get_app(app_id)
        if app is None:
            raise AppNotFoundError(app_id=app_id)
        if not registry_is_app_approved(app):
            logger.info("Refusing to resolve non-approved app: app_id={}", app_id)
            raise AppNotApprovedError(app_id=app_id)
        return app

    def registry_list_apps(self) -> list[AppMetadata]:
        """Return every active app, memoized for this gateway instance.

        Returns:
            list[AppMetadata]: Active registry records.

        Raises:
            RegistryUnavailableError: Raised when the registry cannot answer.
        """

        if self._app_list_cache is None:
            self._app_list_cache = list(self._registry.registry_list_apps())
        return list(self._app_list_cache)

    def registry_list_apps_by_category(self, category: AppCategory | str) -> list[AppMetadata]:
        """Return active apps in one category; legacy aliases are accepted.

        Args:
            category: Category enum or raw category string.

        Returns:
            list[AppMetadata]: Matching records.

        Raises:
            RegistryUnavailableError: Raised when the registry cannot answer.
        """

        target_category = category if isinstance(category, AppCategory) else domain_parse_category(category)
        return [app for app in self.registry_list_apps() if app.category == target_category]

    def registry_list_verified_apps(self) -> list[AppMetadata]:
        """Return active apps carrying the verification badge.

        Returns:
            list[AppMetadata]: Verified records.

        Raises:
            RegistryUnavailableError: Raised when the registry cannot answer.
        """

        return [app for app in self.registry_list_apps() if app.verified]

    def registry_search_apps(self, query: str) -> list[AppMetadata]:
        """Case-insensitive search over name, description and developer name.

        Args:
            query: Free-text query; blank returns every active app.

        Returns:
            list[AppMetadata]: Matching records.

        Raises:
            RegistryUnavailableError: Raised when the registry cannot answer.
        """

        lowercase_query = query.strip().lower()
        if not lowercase_query:
            return self.registry_list_apps()
        return [
            app
            for app in self.registry_list_apps()
            if lowercase_query in app.name.lower()
            or lowercase_query in app.description.lower()
            or lowercase_query in app.developer_name.lower()
        ]

    def registry_build_share_url(
        self,
        app_id: str,
        path: str | None = None,
        params: tuple[tuple[str, str], ...] = (),
    ) -> str:
        """Build the canonical share URL for an app.

        Args:
            app_id: Opaque app id.
            path: Optional in-app route, carried as `path` query parameter.
            params: Ordered extra query parameters.

        Returns:
            str: `{base_url}/app/{app_id}` with optional query string.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return registry_build_canonical_url(self._base_url, app_id, path=path, params=params)


def registry_build_canonical_url(
    base_url: str,
    app_id: str,
    path: str | None = None,
    params: tuple[tuple[str, str], ...] = (),
) -> str:
    """Build `{base_url}/app/{app_id}` with an optional ordered query string.

    Args:
        base_url: Public base URL without trailing slash.
        app_id: Opaque app id.
        path: Optional in-app route.
        params: Ordered extra query parameters.

    Returns:
        str: Canonical share URL.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    canonical_url = f"{base_url.rstrip('/')}/app/{quote(app_id, safe='')}"
    query_pairs = ([("path", path)] if path else []) + list(params)
    if query_pairs:
        canonical_url += f"?{urlencode(query_pairs)}"
    return canonical_url


def registry_is_app_approved(app: AppMetadata) -> bool:
    """Return whether the app is publicly resolvable.

    Args:
        app: Registry record.

    Returns:
        bool: True for approved apps.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return app.approval_status == ApprovalStatus.APPROVED


def registry_format_app_rating(app: AppMetadata) -> str:
    """Format the app rating for display.

    Args:
        app: Registry record.

    Returns:
        str: `New` without reviews, else one-decimal rating such as `4.5`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if app.rating is None:
        return "New"
    return f"{app.rating:.1f}"


def registry_app_status_label(app: AppMetadata) -> str:
    """Return a human-readable moderation label.

    Args:
        app: Registry record.

    Returns:
        str: `Pending`, `Approved` or `Rejected`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return app.approval_status.value.capitalize()
