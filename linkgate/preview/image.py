"""Preview-card PNG rendering for the app and shared-content image routes."""

from __future__ import annotations

import textwrap
from io import BytesIO
from typing import Final

from PIL import Image, ImageDraw, ImageFont

from linkgate.adapters import registry_format_app_rating
from linkgate.domain import AppMetadata

from .content import SharedContent, preview_shorten_address

PREVIEW_IMAGE_VARIANTS: Final[dict[str, tuple[int, int]]] = {
    "landscape": (1200, 630),
    "square": (630, 630),
}
DEFAULT_PREVIEW_VARIANT: Final[str] = "landscape"
POST_IMAGE_SIZE: Final[tuple[int, int]] = (1200, 1200)
CONTENT_IMAGE_SIZE: Final[tuple[int, int]] = (1200, 630)
CONTENT_IMAGE_TEXT_LIMIT: Final[int] = 150

_BACKGROUND_TOP: Final[tuple[int, int, int]] = (102, 126, 234)
_BACKGROUND_BOTTOM: Final[tuple[int, int, int]] = (118, 75, 162)
_CARD_FILL: Final[tuple[int, int, int]] = (255, 255, 255)
_TITLE_FILL: Final[tuple[int, int, int]] = (26, 32, 44)
_BODY_FILL: Final[tuple[int, int, int]] = (74, 85, 104)
_MUTED_FILL: Final[tuple[int, int, int]] = (113, 128, 150)
_ACCENT_FILL: Final[tuple[int, int, int]] = (0, 212, 170)


def preview_resolve_variant(variant: str | None) -> str:
    """Map a requested variant to a supported one.

    Args:
        variant: Requested variant name.

    Returns:
        str: Supported variant, landscape for unknown names.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    normalized_variant = (variant or "").strip().lower()
    if normalized_variant in PREVIEW_IMAGE_VARIANTS:
        return normalized_variant
    return DEFAULT_PREVIEW_VARIANT


def preview_render_image(app: AppMetadata | None, product_name: str, variant: str | None = None) -> bytes:
    """Render a preview card as PNG bytes.

    Args:
        app: Approved registry record, or None for the generic not-found card.
        product_name: Host app product name shown in the footer.
        variant: Requested size variant.

    Returns:
        bytes: PNG payload.

    Raises:
        OSError: Raised when Pillow cannot encode the image.
    """

    width, height = PREVIEW_IMAGE_VARIANTS[preview_resolve_variant(variant)]
    image = Image.new("RGB", (width, height), _BACKGROUND_TOP)
    draw = ImageDraw.Draw(image)
    _preview_draw_gradient(draw, width, height)

    margin = max(24, width // 30)
    draw.rounded_rectangle(
        (margin, margin, width - margin, height - margin * 3),
        radius=24,
        fill=_CARD_FILL,
    )

    title_size = max(28, width // 25)
    body_size = max(18, width // 50)
    title_font = _preview_font(size=title_size)
    body_font = _preview_font(size=body_size)
    inner_left = margin * 2
    cursor_y = margin * 2

    if app is None:
        draw.text((inner_left, cursor_y), "App Not Found", fill=_TITLE_FILL, font=title_font)
        cursor_y += title_size + 20
        draw.text(
            (inner_left, cursor_y),
            "The requested mini-app could not be found.",
            fill=_BODY_FILL,
            font=body_font,
        )
    else:
        badge_size = max(64, height // 6)
        draw.rounded_rectangle(
            (inner_left, cursor_y, inner_left + badge_size, cursor_y + badge_size),
            radius=16,
            fill=_ACCENT_FILL,
        )
        draw.text(
            (inner_left + badge_size // 3, cursor_y + badge_size // 4),
            (app.name[:1] or "?").upper(),
            fill=_CARD_FILL,
            font=title_font,
        )
        text_left = inner_left + badge_size + margin
        draw.text((text_left, cursor_y), app.name, fill=_TITLE_FILL, font=title_font)
        meta_line = f"{registry_format_app_rating(app)} rating  |  {app.category.value}"
        if app.verified:
            meta_line += "  |  Verified"
        draw.text((text_left, cursor_y + badge_size // 2 + 8), meta_line, fill=_MUTED_FILL, font=body_font)

        cursor_y += badge_size + margin
        wrap_width = max(20, (width - inner_left * 2) // max(10, width // 100))
        for line in textwrap.wrap(app.description, width=wrap_width)[:3]:
            draw.text((inner_left, cursor_y), line, fill=_BODY_FILL, font=body_font)
            cursor_y += body_size + 10
        if app.developer_name:
            draw.text((inner_left, cursor_y + 10), f"by {app.developer_name}", fill=_MUTED_FILL, font=body_font)

    draw.text((inner_left, height - margin * 2), product_name, fill=_CARD_FILL, font=body_font)

    buffer = BytesIO()
    image.save(buffer, format="PNG", optimize=True)
    return buffer.getvalue()


def preview_render_content_image(shared: SharedContent | None, product_name: str) -> bytes:
    """Render a shared-content card as PNG bytes.

    Posts render square at 1200x1200; other content and malformed payloads
    render 1200x630.

    Args:
        shared: Decoded content, or None for the generic share card.
        product_name: Host app product name.

    Returns:
        bytes: PNG payload.

    Raises:
        OSError: Raised when Pillow cannot encode the image.
    """

    width, height = POST_IMAGE_SIZE if shared is not None and shared.is_post else CONTENT_IMAGE_SIZE
    image = Image.new("RGB", (width, height), _BACKGROUND_TOP)
    draw = ImageDraw.Draw(image)
    _preview_draw_gradient(draw, width, height)

    margin = width // 20
    draw.rounded_rectangle(
        (margin, margin, width - margin, height - margin * 2),
        radius=32,
        fill=_CARD_FILL,
    )

    title_size = width // 25
    body_size = width // 36
    title_font = _preview_font(size=title_size)
    body_font = _preview_font(size=body_size)
    inner_left = margin * 2
    cursor_y = margin * 2

    if shared is None:
        draw.text((inner_left, cursor_y), f"Shared from {product_name}", fill=_TITLE_FILL, font=title_font)
    else:
        heading = "Social Post" if shared.is_post else "Shared Content"
        draw.text((inner_left, cursor_y), heading, fill=_TITLE_FILL, font=title_font)
        cursor_y += title_size + margin // 2
        content = (shared.content or f"Shared post from {product_name}")[:CONTENT_IMAGE_TEXT_LIMIT]
        wrap_width = max(20, (width - inner_left * 2) // max(10, body_size // 2))
        for line in textwrap.wrap(content, width=wrap_width)[:6]:
            draw.text((inner_left, cursor_y), line, fill=_BODY_FILL, font=body_font)
            cursor_y += body_size + 12
        details: list[str] = []
        if shared.author:
            details.append(f"by {preview_shorten_address(shared.author)}")
        if shared.reactions is not None:
            details.append(f"{shared.reactions} reactions")
        if details:
            draw.text((inner_left, cursor_y + 16), "  |  ".join(details), fill=_MUTED_FILL, font=body_font)

    draw.text((inner_left, height - margin - body_size), product_name, fill=_CARD_FILL, font=body_font)

    buffer = BytesIO()
    image.save(buffer, format="PNG", optimize=True)
    return buffer.getvalue()


def _preview_draw_gradient(draw: ImageDraw.ImageDraw, width: int, height: int) -> None:
    for row in range(height):
        ratio = row / max(1, height - 1)
        color = tuple(
            int(top + (bottom - top) * ratio) for top, bottom in zip(_BACKGROUND_TOP, _BACKGROUND_BOTTOM)
        )
        draw.line([(0, row), (width, row)], fill=color)


def _preview_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    return ImageFont.load_default(size=size)
