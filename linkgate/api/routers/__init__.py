"""API router package for endpoint composition."""

from .apps import api_create_apps_router
from .deeplink import api_create_deeplink_router
from .health import api_create_health_router
from .share import api_create_share_router
from .well_known import api_create_well_known_router

__all__ = [
    "api_create_apps_router",
    "api_create_deeplink_router",
    "api_create_health_router",
    "api_create_share_router",
    "api_create_well_known_router",
]
