"""Social preview responder, Open Graph metadata and preview images."""

from .content import SharedContent, preview_decode_shared_content, preview_shorten_address
from .image import (
    CONTENT_IMAGE_SIZE,
    DEFAULT_PREVIEW_VARIANT,
    POST_IMAGE_SIZE,
    PREVIEW_IMAGE_VARIANTS,
    preview_render_content_image,
    preview_render_image,
    preview_resolve_variant,
)
from .metadata import (
    NOT_FOUND_DESCRIPTION,
    PreviewMetadata,
    preview_build_content_image_url,
    preview_build_content_metadata,
    preview_build_content_share_url,
    preview_build_image_url,
    preview_build_metadata,
    preview_meta_tags,
    preview_render_head,
)
from .responder import PreviewResponse, SocialPreviewResponder

__all__ = [
    "CONTENT_IMAGE_SIZE",
    "DEFAULT_PREVIEW_VARIANT",
    "NOT_FOUND_DESCRIPTION",
    "POST_IMAGE_SIZE",
    "PREVIEW_IMAGE_VARIANTS",
    "PreviewMetadata",
    "PreviewResponse",
    "SharedContent",
    "SocialPreviewResponder",
    "preview_build_content_image_url",
    "preview_build_content_metadata",
    "preview_build_content_share_url",
    "preview_build_image_url",
    "preview_build_metadata",
    "preview_decode_shared_content",
    "preview_meta_tags",
    "preview_render_content_image",
    "preview_render_head",
    "preview_render_image",
    "preview_resolve_variant",
    "preview_shorten_address",
]
