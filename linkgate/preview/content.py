"""Content shared from inside a mini-app, carried as a base64 JSON `data` payload."""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass
from typing import Any

from loguru import logger


@dataclass(frozen=True)
class SharedContent:
    """Decoded share payload.

    Attributes:
        content_type: Payload kind, e.g. `post`.
        content: Shared text, may be blank.
        image_url: Author-supplied preview image, blank when the card is generated.
        owner: On-chain owner address of the shared post.
        index: Post index under the owner.
        author: Display author address.
        reactions: Reaction count.
    """

    content_type: str
    content: str
    image_url: str = ""
    owner: str | None = None
    index: int | None = None
    author: str | None = None
    reactions: int | None = None

    @property
    def is_post(self) -> bool:
        return self.content_type == "post"

    def content_deeplink_params(self) -> list[tuple[str, str]]:
        """Return the `owner`/`index` pairs the host app needs to open the post.

        Returns:
            list[tuple[str, str]]: Present pairs in `owner`, `index` order.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        params: list[tuple[str, str]] = []
        if self.owner:
            params.append(("owner", self.owner))
        if self.index is not None:
            params.append(("index", str(self.index)))
        return params


def preview_decode_shared_content(data: str | None) -> SharedContent | None:
    """Decode a `data` query value into shared content.

    Standard and URL-safe base64 are both accepted, with or without padding.
    A `+` turned into a space by form decoding is restored.

    Args:
        data: Raw `data` query value.

    Returns:
        SharedContent | None: Decoded content, None when the value is absent or malformed.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if data is None or not data.strip():
        return None

    encoded = data.strip().replace(" ", "+")
    encoded += "=" * (-len(encoded) % 4)
    try:
        decoded_text = base64.b64decode(encoded, altchars=b"-_", validate=True).decode("utf-8")
        payload = json.loads(decoded_text)
    except ValueError as error:
        logger.debug("Shared content payload rejected: error={}", error)
        return None
    if not isinstance(payload, dict):
        return None

    post_metadata = payload.get("metadata")
    if not isinstance(post_metadata, dict):
        post_metadata = {}
    return SharedContent(
        content_type=_content_text(payload.get("type")) or "content",
        content=_content_text(payload.get("content")),
        image_url=_content_text(payload.get("image_url")),
        owner=_content_text(payload.get("owner")) or None,
        index=_content_int(payload.get("index")),
        author=_content_text(post_metadata.get("author")) or None,
        reactions=_content_int(post_metadata.get("reactions")),
    )


def preview_shorten_address(address: str) -> str:
    """Shorten `0x1234...abcd` style addresses; short values pass through."""

    if len(address) < 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


def _content_text(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def _content_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    return None
