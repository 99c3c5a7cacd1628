"""Health endpoint router composition for app and registry checks."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from linkgate.adapters import RegistryHealthPort


def api_create_health_router(registry_health: RegistryHealthPort) -> APIRouter:
    """Create health-check router with app and registry connectivity status.

    Args:
        registry_health: Registry health service interface.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when registry_health is invalid.
    """

    if registry_health is None:
        raise ValueError("registry_health must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return application and registry health state.

        Returns:
            JSONResponse: 200 when the registry answers, 503 otherwise.

        Raises:
            RuntimeError: Registry failures are reported in the payload.
        """

        target = registry_health.registry_connection_label()
        try:
            registry_status = registry_health.registry_check_health()
        except ConnectionError as error:
            payload = {
                "status": "degraded",
                "app": "up",
                "registry": "down",
                "detail": str(error),
                "target": target,
            }
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

        payload = {
            "status": "ok",
            "app": "up",
            "registry": registry_status.status,
            "detail": registry_status.detail,
            "target": target,
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
