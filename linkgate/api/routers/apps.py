"""Registry listing API for approved mini-apps."""

from __future__ import annotations

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from linkgate.adapters import (
    AppRegistryGateway,
    AppRegistryPort,
    registry_format_app_rating,
    registry_is_app_approved,
)
from linkgate.config import AppSettings
from linkgate.domain import AppMetadata, RegistryUnavailableError


def api_create_apps_router(settings: AppSettings, registry: AppRegistryPort) -> APIRouter:
    """Create router listing approved registry apps.

    Args:
        settings: Runtime settings used for share URLs.
        registry: Upstream registry port, wrapped in a gateway per request.

    Returns:
        APIRouter: Router exposing `/api/apps`.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if registry is None:
        raise ValueError("registry must not be None")

    router = APIRouter(prefix="/api/apps", tags=["apps"])

    @router.get("")
    def api_apps_list(
        category: str | None = Query(default=None),
        q: str | None = Query(default=None),
        verified: bool = Query(default=False),
    ) -> JSONResponse:
        """List approved apps, optionally filtered.

        Args:
            category: Optional category; legacy aliases are accepted.
            q: Optional case-insensitive search text.
            verified: Only verified apps when True.

        Returns:
            JSONResponse: App list envelope, 503 when the registry is down.

        Raises:
            RuntimeError: Registry failures are reported in the payload.
        """

        gateway = AppRegistryGateway(registry=registry, base_url=settings.base_url)
        try:
            if q is not None and q.strip():
                apps = gateway.registry_search_apps(q)
            else:
                apps = gateway.registry_list_apps()
            if category is not None and category.strip():
                category_ids = {app.app_id for app in gateway.registry_list_apps_by_category(category)}
                apps = [app for app in apps if app.app_id in category_ids]
        except RegistryUnavailableError as error:
            payload = {"status": "error", "code": "REGISTRY_UNAVAILABLE", "message": str(error)}
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

        visible_apps = [app for app in apps if registry_is_app_approved(app) and (app.verified or not verified)]

        payload = {
            "items": [api_serialize_app(app, gateway) for app in visible_apps],
            "returned": len(visible_apps),
            "filters": {"category": category, "q": q, "verified": verified},
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router


def api_serialize_app(app: AppMetadata, gateway: AppRegistryGateway) -> dict[str, object]:
    """Serialize one registry record to JSON payload.

    Args:
        app: Approved registry record.
        gateway: Gateway used to build the share URL.

    Returns:
        dict[str, object]: JSON-ready app payload.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return {
        "app_id": app.app_id,
        "name": app.name,
        "description": app.description,
        "icon": app.icon,
        "developer_name": app.developer_name,
        "category": app.category.value,
        "rating": app.rating,
        "rating_label": registry_format_app_rating(app),
        "verified": app.verified,
        "downloads": app.downloads,
        "share_url": gateway.registry_build_share_url(app.app_id),
    }
