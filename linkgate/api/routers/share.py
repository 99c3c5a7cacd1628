"""Share route family: share pages, universal-link landing and preview images."""

from __future__ import annotations

import dataclasses
import html
import json
from typing import Final
from urllib.parse import quote

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import HTMLResponse, RedirectResponse
from loguru import logger

from linkgate.adapters import (
    AppRegistryGateway,
    AppRegistryPort,
    registry_format_app_rating,
)
from linkgate.classification import RequestClassifier
from linkgate.config import AppSettings
from linkgate.deeplink import (
    ClientEnvironment,
    DeepLinkCandidates,
    DeepLinkUriBuilder,
    deeplink_build_candidates,
    deeplink_environment_from_headers,
)
from linkgate.domain import (
    AppMetadata,
    AppNotFoundError,
    DeepLinkRequest,
    PlatformClass,
    RegistryUnavailableError,
    domain_build_deeplink_request,
)
from linkgate.preview import (
    SharedContent,
    SocialPreviewResponder,
    preview_build_content_image_url,
    preview_decode_shared_content,
    preview_render_content_image,
    preview_render_image,
    preview_shorten_address,
)

PREVIEW_IMAGE_CACHE_CONTROL: Final[str] = "public, max-age=3600"
SHARE_PAGE_CACHE_CONTROL: Final[str] = "no-cache"

# Mirrors NavigationRace: hidden page settles as opened, timer navigates to the fallback.
_OPEN_IN_APP_SCRIPT: Final[str] = """
(function () {
  var config = JSON.parse(document.getElementById("linkgate-deeplink").textContent);
  var button = document.getElementById("open-in-app");
  if (!button) { return; }
  if (config.requires_touch_check) {
    if (!(navigator.platform === "MacIntel" && navigator.maxTouchPoints > 1)) { return; }
    button.hidden = false;
    var desktopNote = document.getElementById("desktop-note");
    if (desktopNote) { desktopNote.hidden = true; }
  }
  var timer = null;
  function onVisibilityChange() {
    if (document.hidden) { settle(); }
  }
  function settle() {
    if (timer !== null) { clearTimeout(timer); timer = null; }
    document.removeEventListener("visibilitychange", onVisibilityChange);
  }
  button.addEventListener("click", function (event) {
    event.preventDefault();
    settle();
    document.addEventListener("visibilitychange", onVisibilityChange);
    timer = setTimeout(function () {
      settle();
      window.location.href = config.fallback;
    }, config.timeout_ms);
    window.location.href = config.primary;
  });
})();
"""


def api_create_share_router(
    settings: AppSettings,
    registry: AppRegistryPort,
    classifier: RequestClassifier,
    responder: SocialPreviewResponder,
    uri_builder: DeepLinkUriBuilder,
) -> APIRouter:
    """Create router serving the share route family.

    Args:
        settings: Runtime settings.
        registry: Upstream registry port, wrapped in a gateway per request.
        classifier: Crawler vs. human classifier.
        responder: Social preview responder.
        uri_builder: Deep-link candidate builder.

    Returns:
        APIRouter: Router exposing `/app/{app_id}[/share]`, `/open/{app_id}` and `/api/og/share...`.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if registry is None:
        raise ValueError("registry must not be None")
    if classifier is None:
        raise ValueError("classifier must not be None")
    if responder is None:
        raise ValueError("responder must not be None")
    if uri_builder is None:
        raise ValueError("uri_builder must not be None")

    router = APIRouter(tags=["share"])

    @router.get("/app/{app_id}", response_class=HTMLResponse)
    def api_share_page(app_id: str, request: Request) -> HTMLResponse:
        """Serve the canonical share page.

        Crawlers always receive the static preview document with HTTP 200.
        Humans receive the same head plus an open-in-app body, a 404 page for
        unknown or non-approved apps, or a 503 page when the registry is down.

        Args:
            app_id: App id from the path.
            request: Inbound request.

        Returns:
            HTMLResponse: Preview or share page.

        Raises:
            RuntimeError: Registry failures are rendered, not raised.
        """

        path = request.url.path
        gateway = AppRegistryGateway(registry=registry, base_url=settings.base_url)
        if api_is_crawler_request(request):
            preview = responder.responder_build_share_response(path=path, app_id=app_id, gateway=gateway)
            return HTMLResponse(content=preview.html, status_code=preview.status_code, headers=preview.headers)

        try:
            app = gateway.registry_require_approved_app(app_id)
        except (AppNotFoundError, RegistryUnavailableError) as error:
            return api_build_registry_error_page(app_id, error)

        document = responder.responder_render_document(
            responder.responder_build_metadata(app_id, app),
            body_html=api_render_app_card(app)
            + api_build_open_in_app_action(app, api_build_deeplink_request(app_id, request), request),
        )
        return HTMLResponse(
            content=document,
            status_code=status.HTTP_200_OK,
            headers={"Cache-Control": SHARE_PAGE_CACHE_CONTROL},
        )

    @router.get("/app/{app_id}/share", response_class=HTMLResponse)
    def api_content_share_page(app_id: str, request: Request, data: str | None = None) -> HTMLResponse:
        """Serve a page for content shared from inside an app.

        Crawlers receive a preview built from the `data` payload with HTTP 200,
        the generic share set when it does not decode. Humans receive the
        content with an open-in-app action carrying the post `owner`/`index`,
        or a 404 page for malformed payloads and unresolvable apps.

        Args:
            app_id: App id the content was shared from.
            request: Inbound request.
            data: Base64 JSON share payload.

        Returns:
            HTMLResponse: Preview or content share page.

        Raises:
            RuntimeError: Registry failures are rendered, not raised.
        """

        if api_is_crawler_request(request):
            preview = responder.responder_build_content_response(path=request.url.path, app_id=app_id, data=data)
            return HTMLResponse(content=preview.html, status_code=preview.status_code, headers=preview.headers)

        headers = {"Cache-Control": SHARE_PAGE_CACHE_CONTROL}
        metadata = responder.responder_build_content_metadata(app_id, data)
        shared = preview_decode_shared_content(data)
        if shared is None:
            document = responder.responder_render_document(
                metadata,
                body_html=api_render_message_body(
                    heading="Content Not Found",
                    message="This shared link is missing its content or could not be read.",
                ),
            )
            return HTMLResponse(content=document, status_code=status.HTTP_404_NOT_FOUND, headers=headers)

        gateway = AppRegistryGateway(registry=registry, base_url=settings.base_url)
        try:
            app = gateway.registry_require_approved_app(app_id)
        except (AppNotFoundError, RegistryUnavailableError) as error:
            return api_build_registry_error_page(app_id, error)

        deeplink_request = domain_build_deeplink_request(app_id=app_id, params=shared.content_deeplink_params())
        document = responder.responder_render_document(
            metadata,
            body_html=api_render_content_card(
                shared,
                preview_image_url=preview_build_content_image_url(settings.base_url, data),
                product_name=settings.product_name,
            )
            + api_build_open_in_app_action(app, deeplink_request, request),
        )
        return HTMLResponse(content=document, status_code=status.HTTP_200_OK, headers=headers)

    def api_is_crawler_request(request: Request) -> bool:
        path = request.url.path
        verdict = classifier.classifier_classify(path, request.headers)
        logger.debug(
            "Share request classified: path={}, is_crawler={}, family={}",
            path,
            verdict.is_crawler,
            verdict.crawler_family,
        )
        return verdict.is_crawler

    def api_build_registry_error_page(
        app_id: str,
        error: AppNotFoundError | RegistryUnavailableError,
    ) -> HTMLResponse:
        headers = {"Cache-Control": SHARE_PAGE_CACHE_CONTROL}
        if isinstance(error, AppNotFoundError):
            metadata = responder.responder_build_metadata(app_id, None)
            document = responder.responder_render_document(
                metadata,
                body_html=api_render_message_body(heading="App Not Found", message=metadata.description),
            )
            return HTMLResponse(content=document, status_code=status.HTTP_404_NOT_FOUND, headers=headers)

        logger.warning("Registry unavailable for share page: app_id={}, error={}", app_id, error)
        metadata = dataclasses.replace(
            responder.responder_build_metadata(app_id, None),
            title=f"Temporarily Unavailable - {responder.product_name}",
            description="The app directory could not be reached. Please try again in a moment.",
        )
        document = responder.responder_render_document(
            metadata,
            body_html=api_render_message_body(heading="Please try again", message=metadata.description),
        )
        return HTMLResponse(
            content=document,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            headers={**headers, "Retry-After": "30"},
        )

    def api_build_open_in_app_action(app: AppMetadata, deeplink_request: DeepLinkRequest, request: Request) -> str:
        environment = deeplink_environment_from_headers(request.headers)
        candidates = deeplink_build_candidates(uri_builder, deeplink_request, environment)
        return api_render_open_in_app_action(
            app=app,
            candidates=candidates,
            touch_candidates=api_build_touch_candidates(uri_builder, deeplink_request, environment, candidates),
            product_name=settings.product_name,
            timeout_ms=settings.deeplink_visibility_timeout_ms,
        )

    @router.get("/open/{app_id}")
    def api_open_landing(app_id: str, request: Request) -> RedirectResponse:
        """Land a universal link the OS did not intercept on the share page.

        Args:
            app_id: App id from the path.
            request: Inbound request.

        Returns:
            RedirectResponse: 307 to `/app/{app_id}` with the query preserved.

        Raises:
            RuntimeError: This handler does not raise runtime errors.
        """

        target_url = f"/app/{quote(app_id, safe='')}"
        if request.url.query:
            target_url += f"?{request.url.query}"
        return RedirectResponse(url=target_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    @router.get("/api/og/share")
    @router.get("/api/og/share.png")
    def api_content_share_image(data: str | None = None) -> Response:
        """Render the shared-content image; `.png` serves unfurlers that need an extension.

        Args:
            data: Base64 JSON share payload.

        Returns:
            Response: PNG image, generic card when the payload is absent or malformed.

        Raises:
            OSError: Raised when Pillow cannot encode the image.
        """

        image_bytes = preview_render_content_image(
            shared=preview_decode_shared_content(data),
            product_name=settings.product_name,
        )
        return Response(
            content=image_bytes,
            media_type="image/png",
            headers={"Cache-Control": PREVIEW_IMAGE_CACHE_CONTROL},
        )

    @router.get("/api/og/share/{app_id}")
    def api_share_image(app_id: str) -> Response:
        """Render the default landscape preview image.

        Args:
            app_id: App id from the path.

        Returns:
            Response: PNG image, generic card for unresolved apps.

        Raises:
            RuntimeError: Registry failures render the generic card.
        """

        return api_build_image_response(app_id=app_id, variant=None)

    @router.get("/api/og/share/{app_id}/{variant}")
    def api_share_image_variant(app_id: str, variant: str) -> Response:
        """Render a preview image variant such as `square`.

        Args:
            app_id: App id from the path.
            variant: Image variant; unknown values render landscape.

        Returns:
            Response: PNG image.

        Raises:
            RuntimeError: Registry failures render the generic card.
        """

        return api_build_image_response(app_id=app_id, variant=variant)

    def api_build_image_response(app_id: str, variant: str | None) -> Response:
        gateway = AppRegistryGateway(registry=registry, base_url=settings.base_url)
        app = responder.responder_resolve_app(app_id, gateway)
        image_bytes = preview_render_image(app=app, product_name=settings.product_name, variant=variant)
        return Response(
            content=image_bytes,
            media_type="image/png",
            headers={"Cache-Control": PREVIEW_IMAGE_CACHE_CONTROL},
        )

    return router


def api_build_deeplink_request(app_id: str, request: Request) -> DeepLinkRequest:
    """Build a deep-link request from the path id and query string.

    `path` carries the in-app route; every other query pair is forwarded in
    its original order.

    Args:
        app_id: App id from the path.
        request: Inbound request.

    Returns:
        DeepLinkRequest: Parsed request.

    Raises:
        ValueError: Raised when app_id is blank.
    """

    path: str | None = None
    params: list[tuple[str, str]] = []
    for key, value in request.query_params.multi_items():
        if key == "path" and path is None:
            path = value
            continue
        params.append((key, value))
    return domain_build_deeplink_request(app_id=app_id, path=path, params=params)


def api_build_touch_candidates(
    uri_builder: DeepLinkUriBuilder,
    deeplink_request: DeepLinkRequest,
    environment: ClientEnvironment,
    candidates: DeepLinkCandidates,
) -> DeepLinkCandidates | None:
    """Build iOS candidates for desktop-looking clients that may be iPadOS.

    iPadOS Safari sends a desktop user agent; only the client can confirm
    `MacIntel` with touch support, so the page carries the iOS candidates
    behind a client-side check.

    Args:
        uri_builder: Deep-link candidate builder.
        deeplink_request: Parsed request.
        environment: Header-derived environment.
        candidates: Candidates for the header-derived environment.

    Returns:
        DeepLinkCandidates | None: iOS candidates for desktop clients, None otherwise.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if candidates.platform != PlatformClass.DESKTOP:
        return None
    touch_environment = dataclasses.replace(environment, navigator_platform="MacIntel", max_touch_points=5)
    return deeplink_build_candidates(uri_builder, deeplink_request, touch_environment)


def api_render_app_card(app: AppMetadata) -> str:
    """Render the opening of the app card; the action renderer closes it.

    Args:
        app: Approved registry record.

    Returns:
        str: Escaped card markup without the closing `</main>`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    escaped_name = html.escape(app.name)
    details = " | ".join(
        part
        for part in (
            f"Rating {registry_format_app_rating(app)}",
            app.category.value.capitalize(),
            "Verified" if app.verified else "",
        )
        if part
    )
    return f"""    <main class="app-card">
      <img src="{html.escape(app.icon, quote=True)}" alt="{escaped_name} icon" width="96" height="96">
      <h1>{escaped_name}</h1>
      <p class="developer">by {html.escape(app.developer_name)}</p>
      <p class="details">{html.escape(details)}</p>
      <p class="description">{html.escape(app.description)}</p>
"""


def api_render_content_card(shared: SharedContent, preview_image_url: str, product_name: str) -> str:
    """Render the opening of a shared-content card; the action renderer closes it.

    Args:
        shared: Decoded share payload.
        preview_image_url: Generated content image shown when the payload has no image.
        product_name: Host app product name.

    Returns:
        str: Escaped card markup without the closing `</main>`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    lines = [
        '    <main class="share-card">',
        f"      <h1>{'Social Post' if shared.is_post else 'Shared Content'}</h1>",
    ]
    if shared.is_post and not shared.image_url:
        escaped_preview_url = html.escape(preview_image_url, quote=True)
        lines.append(f'      <img class="share-preview" src="{escaped_preview_url}" alt="Share preview">')
    content = shared.content or f"Shared post from {product_name}"
    lines.append(f'      <p class="content">{html.escape(content)}</p>')
    if shared.image_url:
        escaped_image_url = html.escape(shared.image_url, quote=True)
        lines.append(f'      <img class="share-image" src="{escaped_image_url}" alt="Shared image">')

    details: list[str] = []
    if shared.author:
        details.append(f"Author: {preview_shorten_address(shared.author)}")
    if shared.reactions is not None:
        details.append(f"{shared.reactions} reactions")
    if details:
        lines.append(f'      <p class="details">{html.escape(" | ".join(details))}</p>')
    return "\n".join(lines) + "\n"


def api_render_open_in_app_action(
    app: AppMetadata,
    candidates: DeepLinkCandidates,
    touch_candidates: DeepLinkCandidates | None,
    product_name: str,
    timeout_ms: int,
) -> str:
    """Render the open-in-app action and close the card.

    Args:
        app: Approved registry record.
        candidates: Candidates for the requesting client.
        touch_candidates: iOS candidates offered to iPadOS clients, if any.
        product_name: Host app product name.
        timeout_ms: Fallback timer in milliseconds.

    Returns:
        str: Escaped markup including the inline race script when actionable.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    action_candidates = candidates if candidates.primary_uri is not None else touch_candidates
    if action_candidates is None or action_candidates.primary_uri is None or action_candidates.fallback is None:
        return "    </main>"

    escaped_name = html.escape(app.name)
    escaped_product = html.escape(product_name)
    requires_touch_check = candidates.primary_uri is None
    config = {
        "app_id": app.app_id,
        "platform": action_candidates.platform.value,
        "primary": action_candidates.primary_uri,
        "fallback": action_candidates.fallback.uri,
        "fallback_outcome": action_candidates.fallback.outcome.value,
        "scheme_uri": action_candidates.scheme_uri,
        "universal_link": action_candidates.universal_link,
        "timeout_ms": timeout_ms,
        "requires_touch_check": requires_touch_check,
    }
    embedded_config = json.dumps(config).replace("</", "<\\/")
    hidden_attribute = " hidden" if requires_touch_check else ""
    desktop_note = ""
    if requires_touch_check:
        desktop_note = (
            f'      <p id="desktop-note">Open this link on your phone to launch {escaped_name} '
            f"in {escaped_product}. Deep links are not supported on desktop browsers.</p>\n"
        )

    return (
        desktop_note
        + f'      <a id="open-in-app" class="button" href="{html.escape(action_candidates.primary_uri, quote=True)}"'
        + f"{hidden_attribute}>Open in {escaped_product}</a>\n"
        + "    </main>\n"
        + f'    <script type="application/json" id="linkgate-deeplink">{embedded_config}</script>\n'
        + f"    <script>{_OPEN_IN_APP_SCRIPT}</script>"
    )


def api_render_message_body(heading: str, message: str) -> str:
    """Render a short message body for not-found and unavailable pages.

    Args:
        heading: Page heading.
        message: Explanatory copy.

    Returns:
        str: Escaped body markup.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return f"""    <main class="message">
      <h1>{html.escape(heading)}</h1>
      <p>{html.escape(message)}</p>
    </main>"""
