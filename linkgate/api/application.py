"""FastAPI application factory for the link gateway.

This module composes the classifier, preview responder and deep-link URI
builder from settings and mounts every router behind the robots middleware.
"""

from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, Response

from linkgate.adapters import AppRegistryPort, RegistryHealthPort
from linkgate.classification import (
    ROBOTS_HEADER_NAME,
    SHARE_ROUTE_PREFIXES,
    IndexingPolicy,
    RequestClassifier,
    indexing_build_policy,
)
from linkgate.config import AppSettings
from linkgate.deeplink import DeepLinkUriBuilder
from linkgate.preview import SocialPreviewResponder

from .routers import (
    api_create_apps_router,
    api_create_deeplink_router,
    api_create_health_router,
    api_create_share_router,
    api_create_well_known_router,
)


def create_api_application(
    settings: AppSettings,
    registry: AppRegistryPort,
    registry_health: RegistryHealthPort,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings.
        registry: Upstream app registry port; routers wrap it per request.
        registry_health: Registry health service used by health endpoints.

    Returns:
        FastAPI: Framework application instance with all gateway routes.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    application = FastAPI(title="Mini-App Link Gateway")
    indexing_policy = indexing_build_policy(
        share_prefixes=SHARE_ROUTE_PREFIXES,
        share_directive=settings.share_robots_directive,
        default_directive=settings.default_robots_directive,
    )
    classifier = RequestClassifier(extra_user_agents=settings.extra_crawler_user_agents)
    responder = SocialPreviewResponder(
        base_url=settings.base_url,
        product_name=settings.product_name,
        indexing_policy=indexing_policy,
        twitter_handle=settings.twitter_handle,
    )
    uri_builder = DeepLinkUriBuilder(
        product_scheme=settings.product_scheme,
        host_domain=settings.host_domain,
        app_store_url=settings.app_store_url,
        play_store_url=settings.play_store_url,
        base_url=settings.base_url,
    )

    application.middleware("http")(api_create_robots_middleware(indexing_policy))

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return a minimal service index.

        Returns:
            dict[str, str]: Service name, status and environment.

        Raises:
            RuntimeError: Raised if route handler cannot produce a response.
        """

        return {
            "service": "mini-app-linkgate",
            "status": "ready",
            "environment": settings.environment_name,
            "product": settings.product_name,
        }

    application.include_router(api_create_health_router(registry_health=registry_health))
    application.include_router(
        api_create_share_router(
            settings=settings,
            registry=registry,
            classifier=classifier,
            responder=responder,
            uri_builder=uri_builder,
        )
    )
    application.include_router(
        api_create_deeplink_router(settings=settings, registry=registry, uri_builder=uri_builder)
    )
    application.include_router(api_create_apps_router(settings=settings, registry=registry))
    application.include_router(api_create_well_known_router(settings=settings))

    return application


def api_create_robots_middleware(
    indexing_policy: IndexingPolicy,
) -> Callable[[Request, Callable[[Request], Awaitable[Response]]], Awaitable[Response]]:
    """Create middleware stamping `X-Robots-Tag` from the ordered indexing policy.

    Args:
        indexing_policy: Ordered robots policy; first matching prefix wins.

    Returns:
        Callable: HTTP middleware function.

    Raises:
        ValueError: Raised when indexing_policy is None.
    """

    if indexing_policy is None:
        raise ValueError("indexing_policy must not be None")

    async def api_robots_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        response = await call_next(request)
        response.headers[ROBOTS_HEADER_NAME] = indexing_policy.indexing_resolve_directive(request.url.path)
        return response

    return api_robots_middleware
