"""Project-native typed exceptions for link resolution failures."""

from __future__ import annotations


class LinkGateError(Exception):
    """Base exception for gateway-level failures."""


class AppNotFoundError(LinkGateError, LookupError):
    """Registry has no app for the requested id.

    Attributes:
        app_id: Requested app id.
    """

    def __init__(self, app_id: str, message: str | None = None):
        super().__init__(message or f"app not found: app_id={app_id}")
        self.app_id = app_id


class AppNotApprovedError(AppNotFoundError):
    """App exists in the registry but is not publicly resolvable.

    Subclasses `AppNotFoundError` so callers that only care about public
    resolvability treat both identically.
    """

    def __init__(self, app_id: str):
        super().__init__(app_id=app_id, message=f"app not approved: app_id={app_id}")


class UnsupportedPlatformError(LinkGateError):
    """Client platform cannot hand navigation off to the host app.

    Attributes:
        platform: Detected platform class label.
    """

    def __init__(self, platform: str):
        super().__init__(f"deep linking is not supported on platform={platform}")
        self.platform = platform


class NavigationRaceAbandonedError(LinkGateError):
    """Caller abandoned a pending navigation race before it settled."""


class RegistryUnavailableError(LinkGateError, ConnectionError):
    """The external app registry could not be reached or answered with an error.

    Attributes:
        status_code: Upstream HTTP status when one was received.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
