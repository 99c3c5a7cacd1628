"""Association files routing universal/app links for `/open/*` into the host app."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from linkgate.config import AppSettings

UNIVERSAL_LINK_PATHS = ["/open/*"]


def api_create_well_known_router(settings: AppSettings) -> APIRouter:
    """Create router serving the Apple and Android association files.

    Args:
        settings: Runtime settings carrying app identifiers.

    Returns:
        APIRouter: Router exposing `/.well-known/*` association files.

    Raises:
        ValueError: Raised when settings is invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")

    router = APIRouter(prefix="/.well-known", tags=["well-known"])

    @router.get("/apple-app-site-association")
    def api_apple_app_site_association() -> JSONResponse:
        """Return the app-site-association file.

        Returns:
            JSONResponse: Applinks details, empty when no team id is configured.

        Raises:
            RuntimeError: This handler does not raise runtime errors.
        """

        details = []
        if settings.ios_team_id.strip():
            details.append(
                {
                    "appID": f"{settings.ios_team_id.strip()}.{settings.ios_bundle_id}",
                    "paths": UNIVERSAL_LINK_PATHS,
                }
            )
        payload = {"applinks": {"apps": [], "details": details}}
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/assetlinks.json")
    def api_android_asset_links() -> JSONResponse:
        """Return the Digital Asset Links statement list.

        Returns:
            JSONResponse: One `handle_all_urls` statement, empty without fingerprints.

        Raises:
            RuntimeError: This handler does not raise runtime errors.
        """

        fingerprints = [
            fingerprint.strip() for fingerprint in settings.android_sha256_fingerprints if fingerprint.strip()
        ]
        if not fingerprints:
            return JSONResponse(content=[], status_code=status.HTTP_200_OK)
        payload = [
            {
                "relation": ["delegate_permission/common.handle_all_urls"],
                "target": {
                    "namespace": "android_app",
                    "package_name": settings.android_package_name,
                    "sha256_cert_fingerprints": fingerprints,
                },
            }
        ]
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
