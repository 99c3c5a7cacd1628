"""Tests for Open Graph metadata resolution and crawler preview responses."""

from __future__ import annotations

from linkgate.adapters import AppRegistryGateway
from linkgate.classification import SHARE_ROUTE_PREFIXES, indexing_build_policy
from linkgate.domain import AppCategory, AppMetadata, ApprovalStatus, RegistryUnavailableError
from linkgate.preview import NOT_FOUND_DESCRIPTION, SocialPreviewResponder, preview_build_metadata, preview_render_head

_BASE_URL = "https://share.example.test"


def _build_app(app_id: str, **overrides: object) -> AppMetadata:
    """Build a registry record for tests.

    Args:
        app_id: App id.
        overrides: Field overrides.

    Returns:
        AppMetadata: Registry record.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    fields: dict[str, object] = {
        "app_id": app_id,
        "name": "Social App",
        "description": "Chat with friends",
        "icon": "https://cdn.example.test/social.png",
        "developer_name": "Social Labs",
        "category": AppCategory.SOCIAL,
        "approval_status": ApprovalStatus.APPROVED,
    }
    fields.update(overrides)
    return AppMetadata(**fields)


class _RegistryStub:
    """Registry stub serving a fixed app table."""

    def __init__(self, apps: list[AppMetadata]):
        self._apps = {app.app_id: app for app in apps}

    def registry_source_name(self) -> str:
        return "stub"

    def registry_get_app(self, app_id: str) -> AppMetadata | None:
        return self._apps.get(app_id)

    def registry_list_apps(self) -> list[AppMetadata]:
        return list(self._apps.values())


class _UnavailableRegistryStub(_RegistryStub):
    """Registry stub that cannot be reached."""

    def __init__(self) -> None:
        super().__init__([])

    def registry_get_app(self, app_id: str) -> AppMetadata | None:
        raise RegistryUnavailableError(f"registry request timed out: app_id={app_id}")


def _build_responder() -> SocialPreviewResponder:
    """Create responder with the share-route indexing policy.

    Returns:
        SocialPreviewResponder: Responder under test.

    Raises:
        ValueError: Raised when responder config is invalid.
    """

    return SocialPreviewResponder(
        base_url=_BASE_URL,
        product_name="Move Everything",
        indexing_policy=indexing_build_policy(share_prefixes=SHARE_ROUTE_PREFIXES),
        twitter_handle="@moveeverything",
    )


def _gateway(registry: _RegistryStub) -> AppRegistryGateway:
    return AppRegistryGateway(registry=registry, base_url=_BASE_URL)


def test_preview_metadata_for_found_app_uses_icon_and_canonical_url() -> None:
    """Resolve title, description, icon image and canonical URL for an approved app.

    Returns:
        None: Assertions validate metadata fields.

    Raises:
        AssertionError: Raised when metadata is incorrect.
    """

    metadata = preview_build_metadata("social-app", _build_app("social-app"), _BASE_URL, "Move Everything")

    assert metadata.title == "Social App - Move Everything Mini-App"
    assert metadata.description == "Chat with friends"
    assert metadata.image == "https://cdn.example.test/social.png"
    assert metadata.url == "https://share.example.test/app/social-app"
    assert metadata.found is True


def test_preview_responder_unknown_app_renders_not_found_tags_with_200() -> None:
    """Serve the fixed not-found set with HTTP 200 and the indexing override.

    Returns:
        None: Assertions validate not-found preview response.

    Raises:
        AssertionError: Raised when the response is incorrect.
    """

    response = _build_responder().responder_build_share_response(
        path="/app/unknown-xyz",
        app_id="unknown-xyz",
        gateway=_gateway(_RegistryStub([])),
    )

    assert response.status_code == 200
    assert response.headers["X-Robots-Tag"] == "index, follow"
    assert response.metadata.title == "App Not Found - Move Everything"
    assert response.metadata.description == NOT_FOUND_DESCRIPTION
    assert response.metadata.image == "https://share.example.test/api/og/share/unknown-xyz"
    assert '<meta property="og:title" content="App Not Found - Move Everything" />' in response.html
    assert '<link rel="canonical" href="https://share.example.test/app/unknown-xyz" />' in response.html
    assert "<script" not in response.html
    assert "http-equiv" not in response.html


def test_preview_responder_hides_non_approved_and_unreachable_apps() -> None:
    """Degrade pending apps and registry failures to the not-found set.

    Returns:
        None: Assertions validate degradation.

    Raises:
        AssertionError: Raised when non-public data leaks or errors escape.
    """

    responder = _build_responder()
    pending_registry = _RegistryStub([_build_app("pending-app", approval_status=ApprovalStatus.PENDING)])

    pending_response = responder.responder_build_share_response(
        "/app/pending-app",
        "pending-app",
        _gateway(pending_registry),
    )
    unavailable_response = responder.responder_build_share_response(
        "/app/social-app",
        "social-app",
        _gateway(_UnavailableRegistryStub()),
    )

    assert pending_response.metadata.found is False
    assert pending_response.app is None
    assert "Social App" not in pending_response.html
    assert unavailable_response.status_code == 200
    assert unavailable_response.metadata.found is False


def test_preview_responder_found_app_carries_the_record_it_was_built_from() -> None:
    """Expose the approved record alongside the resolved preview.

    Returns:
        None: Assertions validate the preview response contract.

    Raises:
        AssertionError: Raised when the record is missing from the response.
    """

    app = _build_app("social-app")

    response = _build_responder().responder_build_share_response(
        "/app/social-app",
        "social-app",
        _gateway(_RegistryStub([app])),
    )

    assert response.app == app
    assert response.metadata.found is True
    assert response.headers["Cache-Control"] == "public, max-age=300"


def test_preview_render_head_escapes_every_value() -> None:
    """Escape markup in registry-provided fields.

    Returns:
        None: Assertions validate escaping.

    Raises:
        AssertionError: Raised when raw markup is emitted.
    """

    app = _build_app("xss-app", name='<script>alert("x")</script>', description='Say "hi" & <b>bye</b>')
    head = preview_render_head(preview_build_metadata("xss-app", app, _BASE_URL, "Move Everything"))

    assert "<script>" not in head
    assert "&lt;script&gt;alert(&quot;x&quot;)&lt;/script&gt; - Move Everything Mini-App" in head
    assert 'content="Say &quot;hi&quot; &amp; &lt;b&gt;bye&lt;/b&gt;"' in head
    assert '<meta name="twitter:card" content="summary_large_image" />' in head
    assert '<meta name="twitter:site" content="@moveeverything" />' not in head
