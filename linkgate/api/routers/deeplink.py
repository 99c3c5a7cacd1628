"""Deep-link candidate API for clients that run the navigation race themselves."""

from __future__ import annotations

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from linkgate.adapters import AppRegistryGateway, AppRegistryPort
from linkgate.config import AppSettings
from linkgate.deeplink import (
    DeepLinkCandidates,
    DeepLinkUriBuilder,
    deeplink_build_candidates,
    deeplink_environment_from_headers,
)
from linkgate.domain import AppNotFoundError, RegistryUnavailableError

from .share import api_build_deeplink_request


def api_create_deeplink_router(
    settings: AppSettings,
    registry: AppRegistryPort,
    uri_builder: DeepLinkUriBuilder,
) -> APIRouter:
    """Create router exposing deep-link candidates for one app.

    Args:
        settings: Runtime settings.
        registry: Upstream registry port, wrapped in a gateway per request.
        uri_builder: Deep-link candidate builder.

    Returns:
        APIRouter: Router exposing `/api/deeplink/{app_id}`.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if registry is None:
        raise ValueError("registry must not be None")
    if uri_builder is None:
        raise ValueError("uri_builder must not be None")

    router = APIRouter(prefix="/api/deeplink", tags=["deeplink"])

    @router.get("/{app_id}")
    def api_deeplink_candidates(app_id: str, request: Request) -> JSONResponse:
        """Return candidates and the detected platform for the requesting client.

        Args:
            app_id: App id from the path.
            request: Inbound request; `path` carries the in-app route and other query pairs
                are forwarded as params in order.

        Returns:
            JSONResponse: Candidate payload, 404 for unknown apps, 503 when the registry is down.

        Raises:
            RuntimeError: Registry failures are reported in the payload.
        """

        gateway = AppRegistryGateway(registry=registry, base_url=settings.base_url)
        try:
            gateway.registry_require_approved_app(app_id)
        except AppNotFoundError as error:
            payload = {"status": "error", "code": "APP_NOT_FOUND", "message": str(error)}
            return JSONResponse(content=payload, status_code=status.HTTP_404_NOT_FOUND)
        except RegistryUnavailableError as error:
            payload = {"status": "error", "code": "REGISTRY_UNAVAILABLE", "message": str(error)}
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

        deeplink_request = api_build_deeplink_request(app_id, request)
        candidates = deeplink_build_candidates(
            uri_builder,
            deeplink_request,
            deeplink_environment_from_headers(request.headers),
        )
        payload = api_serialize_candidates(candidates)
        payload["app_id"] = deeplink_request.app_id
        payload["timeout_ms"] = settings.deeplink_visibility_timeout_ms
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router


def api_serialize_candidates(candidates: DeepLinkCandidates) -> dict[str, object]:
    """Serialize deep-link candidates to JSON payload.

    Args:
        candidates: Candidates for one request and client.

    Returns:
        dict[str, object]: JSON-ready payload; `supported` is False on desktop.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    fallback_payload = None
    if candidates.fallback is not None:
        fallback_payload = {"uri": candidates.fallback.uri, "outcome": candidates.fallback.outcome.value}
    return {
        "platform": candidates.platform.value,
        "supported": candidates.primary_uri is not None,
        "primary_uri": candidates.primary_uri,
        "scheme_uri": candidates.scheme_uri,
        "universal_link": candidates.universal_link,
        "fallback": fallback_payload,
        "share_url": candidates.share_url,
    }
