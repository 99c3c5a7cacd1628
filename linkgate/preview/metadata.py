"""Open Graph and Twitter-card metadata resolved from registry records and shared content."""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Final
from urllib.parse import quote, urlencode

from linkgate.adapters import registry_build_canonical_url
from linkgate.domain import AppMetadata

from .content import SharedContent

NOT_FOUND_DESCRIPTION: Final[str] = "The requested mini-app could not be found."
CONTENT_PREVIEW_LENGTH: Final[int] = 60


@dataclass(frozen=True)
class PreviewMetadata:
    """Fully resolved preview field set; every field is always populated.

    Attributes:
        title: `og:title` / `twitter:title`.
        description: `og:description` / `twitter:description`.
        image: `og:image` / `twitter:image`.
        url: `og:url` and canonical link.
        site_name: `og:site_name`.
        twitter_site: `twitter:site` handle, may be blank.
        og_type: `og:type`.
        twitter_card: `twitter:card`.
        found: False for the fixed not-found set.
    """

    title: str
    description: str
    image: str
    url: str
    site_name: str
    twitter_site: str = ""
    og_type: str = "website"
    twitter_card: str = "summary_large_image"
    found: bool = True


def preview_build_metadata(
    app_id: str,
    app: AppMetadata | None,
    base_url: str,
    product_name: str,
    twitter_handle: str = "",
) -> PreviewMetadata:
    """Resolve preview fields for an app, or the fixed not-found set.

    Args:
        app_id: App id embedded in the requested path.
        app: Approved registry record, or None when it must not be shown.
        base_url: Public base URL.
        product_name: Host app product name.
        twitter_handle: Optional `twitter:site` handle.

    Returns:
        PreviewMetadata: Resolved field set.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    canonical_url = registry_build_canonical_url(base_url, app_id)
    if app is None:
        return PreviewMetadata(
            title=f"App Not Found - {product_name}",
            description=NOT_FOUND_DESCRIPTION,
            image=preview_build_image_url(base_url, app_id),
            url=canonical_url,
            site_name=product_name,
            twitter_site=twitter_handle,
            found=False,
        )

    return PreviewMetadata(
        title=f"{app.name} - {product_name} Mini-App",
        description=app.description,
        image=app.icon or preview_build_image_url(base_url, app_id),
        url=canonical_url,
        site_name=product_name,
        twitter_site=twitter_handle,
    )


def preview_build_image_url(base_url: str, app_id: str) -> str:
    """Return the generated preview-image route for an app id.

    Args:
        base_url: Public base URL.
        app_id: App id.

    Returns:
        str: `{base_url}/api/og/share/{app_id}`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return f"{base_url.rstrip('/')}/api/og/share/{quote(app_id, safe='')}"


def preview_meta_tags(metadata: PreviewMetadata) -> list[tuple[str, str, str]]:
    """List `(attribute, key, content)` triples for every emitted meta tag.

    Args:
        metadata: Resolved preview fields.

    Returns:
        list[tuple[str, str, str]]: Ordered meta tag triples.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    tags = [
        ("name", "description", metadata.description),
        ("property", "og:title", metadata.title),
        ("property", "og:description", metadata.description),
        ("property", "og:image", metadata.image),
        ("property", "og:url", metadata.url),
        ("property", "og:type", metadata.og_type),
        ("property", "og:site_name", metadata.site_name),
        ("name", "twitter:card", metadata.twitter_card),
        ("name", "twitter:title", metadata.title),
        ("name", "twitter:description", metadata.description),
        ("name", "twitter:image", metadata.image),
    ]
    if metadata.twitter_site:
        tags.append(("name", "twitter:site", metadata.twitter_site))
    return tags


def preview_render_head(metadata: PreviewMetadata) -> str:
    """Render the escaped `<head>` inner HTML for a preview.

    Args:
        metadata: Resolved preview fields.

    Returns:
        str: Head markup with title, meta tags and canonical link.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    lines = [
        '<meta charset="utf-8" />',
        '<meta name="viewport" content="width=device-width, initial-scale=1" />',
        f"<title>{html.escape(metadata.title)}</title>",
    ]
    lines.extend(
        f'<meta {attribute}="{html.escape(key)}" content="{html.escape(content)}" />'
        for attribute, key, content in preview_meta_tags(metadata)
    )
    lines.append(f'<link rel="canonical" href="{html.escape(metadata.url)}" />')
    return "\n    ".join(lines)


def preview_build_content_metadata(
    app_id: str,
    data: str | None,
    shared: SharedContent | None,
    base_url: str,
    product_name: str,
    twitter_handle: str = "",
) -> PreviewMetadata:
    """Resolve preview fields for shared content, or the generic share set.

    Args:
        app_id: App id the content was shared from.
        data: Raw `data` payload, echoed into canonical and image URLs.
        shared: Decoded content, None when the payload is absent or malformed.
        base_url: Public base URL.
        product_name: Host app product name.
        twitter_handle: Optional `twitter:site` handle.

    Returns:
        PreviewMetadata: Resolved field set; `found` is False for the generic set.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    generic_description = f"Share content from {product_name} mini-apps"
    if shared is None:
        return PreviewMetadata(
            title=f"Share - {product_name}",
            description=generic_description,
            image=preview_build_content_image_url(base_url, None),
            url=preview_build_content_share_url(base_url, app_id, None),
            site_name=product_name,
            twitter_site=twitter_handle,
            found=False,
        )

    if shared.content:
        content_preview = shared.content[:CONTENT_PREVIEW_LENGTH]
        if len(shared.content) > CONTENT_PREVIEW_LENGTH:
            content_preview += "..."
    else:
        content_preview = "Shared post"
    return PreviewMetadata(
        title=f"{product_name} - {content_preview}",
        description=shared.content or generic_description,
        image=shared.image_url or preview_build_content_image_url(base_url, data),
        url=preview_build_content_share_url(base_url, app_id, data),
        site_name=product_name,
        twitter_site=twitter_handle,
    )


def preview_build_content_share_url(base_url: str, app_id: str, data: str | None) -> str:
    """Return `{base_url}/app/{app_id}/share`, carrying `data` when present."""

    share_url = f"{base_url.rstrip('/')}/app/{quote(app_id, safe='')}/share"
    if data:
        share_url += f"?{urlencode([('data', data)])}"
    return share_url


def preview_build_content_image_url(base_url: str, data: str | None) -> str:
    """Return the `.png` content image route; Slack and Discord need the extension."""

    image_url = f"{base_url.rstrip('/')}/api/og/share.png"
    if data:
        image_url += f"?{urlencode([('data', data)])}"
    return image_url
