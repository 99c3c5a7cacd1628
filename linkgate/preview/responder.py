"""Server-rendered social preview responses for crawler requests."""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger

from linkgate.adapters import AppRegistryGateway, registry_is_app_approved
from linkgate.classification import ROBOTS_HEADER_NAME, IndexingPolicy
from linkgate.domain import AppMetadata, RegistryUnavailableError

from .content import preview_decode_shared_content
from .metadata import PreviewMetadata, preview_build_content_metadata, preview_build_metadata, preview_render_head


@dataclass(frozen=True)
class PreviewResponse:
    """Response contract for one crawler preview.

    Attributes:
        status_code: HTTP status, always 200 for previews.
        headers: Response headers including the indexing directive.
        html: Full HTML document.
        metadata: Resolved preview fields.
        app: Approved record the preview was built from, None for the not-found set.
    """

    status_code: int
    headers: dict[str, str]
    html: str
    metadata: PreviewMetadata
    app: AppMetadata | None = field(default=None, compare=False)


class SocialPreviewResponder:
    """Build static Open Graph documents; never redirects and never raises for lookups."""

    def __init__(
        self,
        base_url: str,
        product_name: str,
        indexing_policy: IndexingPolicy,
        twitter_handle: str = "",
    ):
        """Initialize the responder.

        Args:
            base_url: Public base URL for canonical URLs.
            product_name: Host app product name used in titles.
            indexing_policy: Ordered robots policy.
            twitter_handle: Optional `twitter:site` handle.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required values are blank.
        """

        if not base_url.strip():
            raise ValueError("base_url must not be blank")
        if not product_name.strip():
            raise ValueError("product_name must not be blank")
        if indexing_policy is None:
            raise ValueError("indexing_policy must not be None")

        self._base_url = base_url.strip().rstrip("/")
        self._product_name = product_name.strip()
        self._indexing_policy = indexing_policy
        self._twitter_handle = twitter_handle.strip()

    @property
    def product_name(self) -> str:
        return self._product_name

    def responder_resolve_app(self, app_id: str, gateway: AppRegistryGateway) -> AppMetadata | None:
        """Resolve the publicly showable app for a preview.

        Args:
            app_id: App id embedded in the requested path.
            gateway: Request-scoped registry gateway.

        Returns:
            AppMetadata | None: Approved record, or None for missing, non-approved or unreachable.

        Raises:
            RuntimeError: This method degrades registry failures instead of raising.
        """

        try:
            app = gateway.registry_get_app(app_id)
        except RegistryUnavailableError as error:
            logger.warning("Registry unavailable while building preview: app_id={}, error={}", app_id, error)
            return None
        if app is None or not registry_is_app_approved(app):
            return None
        return app

    def responder_build_metadata(self, app_id: str, app: AppMetadata | None) -> PreviewMetadata:
        """Resolve preview fields for an already looked-up app.

        Args:
            app_id: App id embedded in the requested path.
            app: Approved record or None.

        Returns:
            PreviewMetadata: Resolved fields, the not-found set when app is None.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return preview_build_metadata(
            app_id=app_id,
            app=app,
            base_url=self._base_url,
            product_name=self._product_name,
            twitter_handle=self._twitter_handle,
        )

    def responder_build_share_response(
        self,
        path: str,
        app_id: str,
        gateway: AppRegistryGateway,
    ) -> PreviewResponse:
        """Build the crawler response for a share route.

        Args:
            path: Requested path, used to pick the indexing directive.
            app_id: App id embedded in the path.
            gateway: Request-scoped registry gateway.

        Returns:
            PreviewResponse: HTTP 200 preview document.

        Raises:
            RuntimeError: This method degrades registry failures instead of raising.
        """

        app = self.responder_resolve_app(app_id, gateway)
        metadata = self.responder_build_metadata(app_id, app)
        return PreviewResponse(
            status_code=200,
            headers=self.responder_build_headers(path),
            html=self.responder_render_document(metadata),
            metadata=metadata,
            app=app,
        )

    def responder_build_content_response(self, path: str, app_id: str, data: str | None) -> PreviewResponse:
        """Build the crawler response for content shared from an app.

        The preview is built from the `data` payload alone; malformed payloads
        get the generic share set, still with HTTP 200.

        Args:
            path: Requested path, used to pick the indexing directive.
            app_id: App id the content was shared from.
            data: Raw `data` query value.

        Returns:
            PreviewResponse: HTTP 200 preview document.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        metadata = self.responder_build_content_metadata(app_id, data)
        return PreviewResponse(
            status_code=200,
            headers=self.responder_build_headers(path),
            html=self.responder_render_document(metadata),
            metadata=metadata,
        )

    def responder_build_content_metadata(self, app_id: str, data: str | None) -> PreviewMetadata:
        """Decode a `data` payload and resolve its preview fields."""

        return preview_build_content_metadata(
            app_id=app_id,
            data=data,
            shared=preview_decode_shared_content(data),
            base_url=self._base_url,
            product_name=self._product_name,
            twitter_handle=self._twitter_handle,
        )

    def responder_build_headers(self, path: str) -> dict[str, str]:
        """Return preview response headers for a path.

        Args:
            path: Requested path.

        Returns:
            dict[str, str]: Robots directive and cache headers.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return {
            ROBOTS_HEADER_NAME: self._indexing_policy.indexing_resolve_directive(path),
            "Cache-Control": "public, max-age=300",
        }

    def responder_render_document(self, metadata: PreviewMetadata, body_html: str = "") -> str:
        """Render a complete HTML document around preview metadata.

        Args:
            metadata: Resolved preview fields.
            body_html: Optional pre-escaped body markup.

        Returns:
            str: HTML document without any script or refresh redirect unless supplied in body_html.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return f"""<!DOCTYPE html>
<html lang="en">
  <head>
    {preview_render_head(metadata)}
  </head>
  <body>
{body_html}
  </body>
</html>
"""
