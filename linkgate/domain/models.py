"""Typed domain models shared across gateway layers.

These contracts are read-only views: app metadata comes from the external
registry and is never persisted here, and deep-link requests live only for
one open-in-app attempt.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Final


class AppCategory(str, Enum):
    """Mini-app categories understood by the share surfaces."""

    GAMES = "games"
    EARN = "earn"
    SOCIAL = "social"
    COLLECT = "collect"
    SWAP = "swap"
    UTILITY = "utility"
    OTHER = "other"


CATEGORY_LEGACY_ALIASES: Final[dict[str, AppCategory]] = {
    "game": AppCategory.GAMES,
    "defi": AppCategory.EARN,
    "nft": AppCategory.COLLECT,
}


class ApprovalStatus(str, Enum):
    """Registry moderation state, opaque to this service."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NavigationOutcome(str, Enum):
    """Terminal result of one open-in-app resolution."""

    OPENED_IN_APP = "opened-in-app"
    FELL_BACK_TO_STORE = "fell-back-to-store"
    FELL_BACK_TO_WEB = "fell-back-to-web"
    UNSUPPORTED_PLATFORM = "unsupported-platform"
    APP_NOT_FOUND = "app-not-found"
    REGISTRY_UNAVAILABLE = "registry-unavailable"
    ABANDONED = "abandoned"


class PlatformClass(str, Enum):
    """Coarse client platform used to pick deep-link candidates."""

    IOS = "ios"
    ANDROID = "android"
    DESKTOP = "desktop"
    OTHER_MOBILE = "other-mobile"


def domain_parse_category(raw_category: str | None) -> AppCategory:
    """Decode a registry category string, honoring legacy aliases.

    Args:
        raw_category: Category value as stored by the registry.

    Returns:
        AppCategory: Canonical category, `OTHER` for unknown values.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    normalized_category = (raw_category or "").strip().lower()
    if normalized_category in CATEGORY_LEGACY_ALIASES:
        return CATEGORY_LEGACY_ALIASES[normalized_category]
    try:
        return AppCategory(normalized_category)
    except ValueError:
        return AppCategory.OTHER


@dataclass(frozen=True)
class AppMetadata:
    """Registry record for one mini-app.

    Attributes:
        app_id: Opaque stable id (registry slug) used in share URLs.
        name: Display name.
        description: Short description.
        icon: Icon URL, also used as preview image.
        developer_name: Publisher display name.
        category: Canonical category.
        approval_status: Registry moderation state.
        rating: Average rating in 0..5, None until reviews exist.
        url: Mini-app web entry URL.
        developer_address: Publisher account address.
        downloads: Install counter reported by the registry.
        verified: Registry verification badge.
        permissions: Requested permission identifiers.
        submitted_at: Submission timestamp (registry units).
        updated_at: Last update timestamp (registry units).
        approved_at: Approval timestamp (registry units).
    """

    app_id: str
    name: str
    description: str
    icon: str
    developer_name: str
    category: AppCategory
    approval_status: ApprovalStatus
    rating: float | None = None
    url: str = ""
    developer_address: str = ""
    downloads: int = 0
    verified: bool = False
    permissions: tuple[str, ...] = ()
    submitted_at: int = 0
    updated_at: int = 0
    approved_at: int = 0


@dataclass(frozen=True)
class DeepLinkRequest:
    """One open-in-app attempt.

    Attributes:
        app_id: Target mini-app id.
        path: Optional in-app route.
        params: Ordered query parameters, kept in supplied order.
        origin_timestamp: UTC creation time of the attempt.
    """

    app_id: str
    path: str | None = None
    params: tuple[tuple[str, str], ...] = ()
    origin_timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.app_id or not self.app_id.strip():
            raise ValueError("app_id must not be blank")
        if self.path is not None and not self.path.strip():
            object.__setattr__(self, "path", None)


def domain_build_deeplink_request(
    app_id: str,
    path: str | None = None,
    params: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
) -> DeepLinkRequest:
    """Build a deep-link request, freezing params in their iteration order.

    Args:
        app_id: Target mini-app id.
        path: Optional in-app route.
        params: Mapping or pair sequence of query parameters.

    Returns:
        DeepLinkRequest: Immutable request value.

    Raises:
        ValueError: Raised when app_id is blank.
    """

    if params is None:
        ordered_params: tuple[tuple[str, str], ...] = ()
    elif isinstance(params, Mapping):
        ordered_params = tuple((str(key), str(value)) for key, value in params.items())
    else:
        ordered_params = tuple((str(key), str(value)) for key, value in params)
    return DeepLinkRequest(app_id=app_id.strip(), path=path, params=ordered_params)


@dataclass(frozen=True)
class ClassificationVerdict:
    """Crawler verdict for one inbound request.

    Attributes:
        is_crawler: True when the user agent matched a known preview fetcher.
        crawler_family: Matched fetcher family, e.g. `twitter`.
        in_scope: False when the path is outside the share route family.
    """

    is_crawler: bool
    crawler_family: str | None = None
    in_scope: bool = True


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str
