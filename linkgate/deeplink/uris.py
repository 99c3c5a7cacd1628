"""Candidate URI construction and parsing for open-in-app attempts."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import parse_qsl, quote, urlencode, urlsplit

from linkgate.adapters import registry_build_canonical_url
from linkgate.domain import (
    DeepLinkRequest,
    NavigationOutcome,
    PlatformClass,
    UnsupportedPlatformError,
    domain_build_deeplink_request,
)


@dataclass(frozen=True)
class FallbackTarget:
    """Fallback navigation target and the outcome it reports.

    Attributes:
        uri: Store page or web landing URL.
        outcome: `FELL_BACK_TO_STORE` or `FELL_BACK_TO_WEB`.
    """

    uri: str
    outcome: NavigationOutcome


class DeepLinkUriBuilder:
    """Build the custom-scheme, universal-link and fallback candidates."""

    def __init__(
        self,
        product_scheme: str,
        host_domain: str,
        app_store_url: str,
        play_store_url: str,
        base_url: str | None = None,
    ):
        """Initialize the builder.

        Args:
            product_scheme: Custom URI scheme without `://`.
            host_domain: Domain serving universal links and the web fallback.
            app_store_url: iOS store page.
            play_store_url: Android store page.
            base_url: Public base URL for share URLs, defaults to `https://{host_domain}`.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required values are blank.
        """

        normalized_scheme = product_scheme.strip().removesuffix("://")
        normalized_host_domain = host_domain.strip().rstrip("/")
        if not normalized_scheme:
            raise ValueError("product_scheme must not be blank")
        if not normalized_host_domain:
            raise ValueError("host_domain must not be blank")
        if not app_store_url.strip() or not play_store_url.strip():
            raise ValueError("store URLs must not be blank")

        self._scheme = normalized_scheme
        self._host_domain = normalized_host_domain
        self._app_store_url = app_store_url.strip()
        self._play_store_url = play_store_url.strip()
        self._base_url = (base_url or f"https://{normalized_host_domain}").strip().rstrip("/")

    @property
    def scheme(self) -> str:
        return self._scheme

    def deeplink_build_scheme_uri(self, request: DeepLinkRequest) -> str:
        """Build `{scheme}://app/{app_id}?path=...&{k}={v}...`.

        Args:
            request: Deep-link request.

        Returns:
            str: Custom-scheme URI with deterministic query order.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return f"{self._scheme}://app/{quote(request.app_id, safe='')}{deeplink_build_query(request)}"

    def deeplink_build_universal_link(self, request: DeepLinkRequest) -> str:
        """Build `https://{host_domain}/open/{app_id}?path=...&...`.

        Args:
            request: Deep-link request.

        Returns:
            str: Universal/app link carrying the same payload.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return f"https://{self._host_domain}/open/{quote(request.app_id, safe='')}{deeplink_build_query(request)}"

    def deeplink_build_fallback(self, request: DeepLinkRequest, platform: PlatformClass) -> FallbackTarget:
        """Build the store or web fallback for a platform.

        Args:
            request: Deep-link request.
            platform: Detected platform class.

        Returns:
            FallbackTarget: Store page on iOS/Android, canonical share page elsewhere on mobile.

        Raises:
            UnsupportedPlatformError: Raised for desktop clients.
        """

        if platform == PlatformClass.IOS:
            return FallbackTarget(uri=self._app_store_url, outcome=NavigationOutcome.FELL_BACK_TO_STORE)
        if platform == PlatformClass.ANDROID:
            return FallbackTarget(uri=self._play_store_url, outcome=NavigationOutcome.FELL_BACK_TO_STORE)
        if platform == PlatformClass.OTHER_MOBILE:
            return FallbackTarget(
                uri=registry_build_canonical_url(f"https://{self._host_domain}", request.app_id),
                outcome=NavigationOutcome.FELL_BACK_TO_WEB,
            )
        raise UnsupportedPlatformError(platform=platform.value)

    def deeplink_build_share_url(self, request: DeepLinkRequest) -> str:
        """Build the canonical share URL carrying the request payload.

        Args:
            request: Deep-link request.

        Returns:
            str: `{base_url}/app/{app_id}` with path and params as query.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return registry_build_canonical_url(self._base_url, request.app_id, path=request.path, params=request.params)

    def deeplink_parse_scheme_uri(self, uri: str) -> DeepLinkRequest | None:
        """Parse a custom-scheme URI back into a request.

        Args:
            uri: Candidate URI.

        Returns:
            DeepLinkRequest | None: Parsed request, None for foreign or malformed URIs.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        try:
            parsed_uri = urlsplit(uri.strip())
        except ValueError:
            return None
        if parsed_uri.scheme.lower() != self._scheme or parsed_uri.netloc != "app":
            return None

        path_parts = [part for part in parsed_uri.path.split("/") if part]
        if not path_parts:
            return None

        in_app_path: str | None = "/".join(path_parts[1:]) or None
        params: list[tuple[str, str]] = []
        for key, value in parse_qsl(parsed_uri.query, keep_blank_values=True):
            if key == "path" and in_app_path is None:
                in_app_path = value or None
                continue
            params.append((key, value))
        return domain_build_deeplink_request(app_id=path_parts[0], path=in_app_path, params=params)


def deeplink_build_query(request: DeepLinkRequest) -> str:
    """Encode `path` then params, in supplied order, as a query string.

    Args:
        request: Deep-link request.

    Returns:
        str: `?...` query string, or empty when there is nothing to carry.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    query_pairs = ([("path", request.path)] if request.path else []) + list(request.params)
    if not query_pairs:
        return ""
    return f"?{urlencode(query_pairs)}"
