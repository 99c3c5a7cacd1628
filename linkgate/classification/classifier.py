"""Crawler classification for share-route requests."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Final

from linkgate.domain import ClassificationVerdict

SHARE_ROUTE_PREFIXES: Final[tuple[str, ...]] = ("/app/", "/api/og/share")

# (user-agent substring, crawler family), matched case-insensitively in order.
# Telegram announces itself "like TwitterBot" and must precede it.
KNOWN_CRAWLER_USER_AGENTS: Final[tuple[tuple[str, str], ...]] = (
    ("facebookexternalhit", "facebook"),
    ("facebookcatalog", "facebook"),
    ("facebot", "facebook"),
    ("telegrambot", "telegram"),
    ("twitterbot", "twitter"),
    ("discordbot", "discord"),
    ("slackbot", "slack"),
    ("slack-imgproxy", "slack"),
    ("linkedinbot", "linkedin"),
    ("whatsapp", "whatsapp"),
    ("redditbot", "reddit"),
    ("pinterestbot", "pinterest"),
    ("pinterest/", "pinterest"),
    ("skypeuripreview", "skype"),
    ("embedly", "embedly"),
    ("iframely", "iframely"),
    ("vkshare", "vk"),
    ("mastodon", "mastodon"),
    ("bluesky cardyb", "bluesky"),
    ("googlebot", "google"),
    ("google-inspectiontool", "google"),
    ("bingbot", "bing"),
    ("applebot", "apple"),
    ("kakaotalk-scrap", "kakao"),
    ("line-poker", "line"),
)


class RequestClassifier:
    """Stateless user-agent matcher deciding crawler vs. interactive requests."""

    def __init__(
        self,
        extra_user_agents: Iterable[str] = (),
        scoped_prefixes: tuple[str, ...] = SHARE_ROUTE_PREFIXES,
    ):
        """Initialize the classifier.

        Args:
            extra_user_agents: Additional crawler substrings, family `other`.
            scoped_prefixes: Path prefixes whose requests consult the verdict.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when no scoped prefix is configured.
        """

        if not scoped_prefixes:
            raise ValueError("scoped_prefixes must not be empty")

        extra_matchers = tuple(
            (substring.strip().lower(), "other") for substring in extra_user_agents if substring.strip()
        )
        self._matchers = KNOWN_CRAWLER_USER_AGENTS + extra_matchers
        self._scoped_prefixes = scoped_prefixes

    def classifier_is_in_scope(self, path: str) -> bool:
        """Return whether the path belongs to the share route family.

        Args:
            path: Request path.

        Returns:
            bool: True when the path starts with a scoped prefix.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return path.startswith(self._scoped_prefixes)

    def classifier_classify(self, path: str, headers: Mapping[str, str]) -> ClassificationVerdict:
        """Classify one request from its path and headers.

        Args:
            path: Request path.
            headers: Request headers; names are matched case-insensitively.

        Returns:
            ClassificationVerdict: Crawler verdict, out of scope for non-share paths.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        if not self.classifier_is_in_scope(path):
            return ClassificationVerdict(is_crawler=False, crawler_family=None, in_scope=False)

        crawler_family = self.classifier_match_user_agent(_classifier_header(headers, "user-agent"))
        return ClassificationVerdict(
            is_crawler=crawler_family is not None,
            crawler_family=crawler_family,
            in_scope=True,
        )

    def classifier_match_user_agent(self, user_agent: object) -> str | None:
        """Return the crawler family matching a user-agent string.

        Args:
            user_agent: Raw header value; non-strings count as absent.

        Returns:
            str | None: Matched family, or None for humans and missing headers.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        if not isinstance(user_agent, str):
            return None
        normalized_user_agent = user_agent.strip().lower()
        if not normalized_user_agent:
            return None
        for substring, family in self._matchers:
            if substring in normalized_user_agent:
                return family
        return None


def _classifier_header(headers: Mapping[str, str], name: str) -> object:
    direct_value = headers.get(name)
    if direct_value is not None:
        return direct_value
    for header_name, header_value in headers.items():
        if header_name.lower() == name:
            return header_value
    return None
