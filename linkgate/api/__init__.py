"""API layer package for FastAPI application and route composition."""

from .application import api_create_robots_middleware, create_api_application

__all__ = ["api_create_robots_middleware", "create_api_application"]
