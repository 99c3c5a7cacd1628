"""Domain models and error taxonomy used across gateway layers."""

from .errors import (
    AppNotApprovedError,
    AppNotFoundError,
    LinkGateError,
    NavigationRaceAbandonedError,
    RegistryUnavailableError,
    UnsupportedPlatformError,
)
from .models import (
    AppCategory,
    AppMetadata,
    ApprovalStatus,
    ClassificationVerdict,
    DeepLinkRequest,
    HealthStatus,
    NavigationOutcome,
    PlatformClass,
    domain_build_deeplink_request,
    domain_parse_category,
)

__all__ = [
    "AppCategory",
    "AppMetadata",
    "AppNotApprovedError",
    "AppNotFoundError",
    "ApprovalStatus",
    "ClassificationVerdict",
    "DeepLinkRequest",
    "HealthStatus",
    "LinkGateError",
    "NavigationOutcome",
    "NavigationRaceAbandonedError",
    "PlatformClass",
    "RegistryUnavailableError",
    "UnsupportedPlatformError",
    "domain_build_deeplink_request",
    "domain_parse_category",
]
